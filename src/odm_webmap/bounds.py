"""
Bounds extraction from the ODM georeferencing report.

ODM writes `odm_georeferencing/odm_georeferenced_model.info.json`; the
EPSG:4326 bounding box lives at

    stats → bbox → EPSG:4326 → bbox → {minx, miny, maxx, maxy}

Upstream tooling emits the leaves either as JSON numbers or as numeric
strings, so each leaf is lifted into a small tagged union (NumberLeaf |
StringLeaf) and resolved by a single conversion routine.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .errors import ParseError, ReadError, SchemaError
from .models import Bounds, Center
from .utils.io import read_json
from .utils.logging_utils import get_logger

log = get_logger(__name__)

REFERENCE_SYSTEM = "EPSG:4326"
BBOX_KEY_PATH: Tuple[str, ...] = ("stats", "bbox", REFERENCE_SYSTEM, "bbox")


@dataclass(frozen=True)
class NumberLeaf:
    value: Union[int, float]


@dataclass(frozen=True)
class StringLeaf:
    text: str


NumericLeaf = Union[NumberLeaf, StringLeaf]


def leaf_from_json(value: Any, key: str = "?") -> NumericLeaf:
    """Tag a raw JSON value; anything but a number or a string is rejected."""
    # bool is an int subclass in Python but never a coordinate
    if isinstance(value, bool):
        raise SchemaError(f"bbox.{key} is a boolean, expected a number")
    if isinstance(value, (int, float)):
        return NumberLeaf(value)
    if isinstance(value, str):
        return StringLeaf(value)
    raise SchemaError(f"bbox.{key} has unsupported type {type(value).__name__}")


def leaf_to_float(leaf: NumericLeaf, key: str = "?") -> float:
    """
    Resolve a tagged leaf to a float by stringifying then parsing it.

    NumberLeaf(10) and StringLeaf("10") yield the same value.
    """
    if not isinstance(leaf, (NumberLeaf, StringLeaf)):
        raise SchemaError(f"bbox.{key} is not a numeric leaf: {leaf!r}")
    try:
        text = str(leaf.value) if isinstance(leaf, NumberLeaf) else leaf.text.strip()
        value = float(text)
    except ValueError as e:
        raise SchemaError(f"bbox.{key} is not numeric: {e}") from e
    if not math.isfinite(value):
        raise SchemaError(f"bbox.{key} is not finite: {text!r}")
    return value


def load_metadata(path: str | Path) -> Dict[str, Any]:
    """Read and parse the metadata document. Raises ReadError / ParseError."""
    p = Path(path)
    try:
        return read_json(p)
    except json.JSONDecodeError as e:
        raise ParseError(f"Metadata is not valid JSON: {e}", p) from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Metadata is not UTF-8 text: {e}", p) from e
    except ValueError as e:
        raise ParseError(f"Metadata is not parseable: {e}", p) from e
    except OSError as e:
        raise ReadError(f"Cannot read metadata: {e.strerror or e}", p) from e


def locate_bbox(document: Any) -> Dict[str, Any]:
    """Walk BBOX_KEY_PATH and return the innermost bbox mapping."""
    cur = document
    walked = []
    for key in BBOX_KEY_PATH:
        walked.append(key)
        if not isinstance(cur, dict) or key not in cur:
            raise SchemaError(f"Missing key path {' → '.join(walked)}")
        cur = cur[key]
    if not isinstance(cur, dict):
        raise SchemaError(f"{' → '.join(BBOX_KEY_PATH)} is not an object")
    return cur


def extract_bounds(document: Any) -> Bounds:
    bbox = locate_bbox(document)
    log.info("bbox %s: %s", REFERENCE_SYSTEM, json.dumps(bbox))

    values = {}
    for key in ("minx", "miny", "maxx", "maxy"):
        if key not in bbox:
            raise SchemaError(f"Missing bbox.{key}")
        values[key] = leaf_to_float(leaf_from_json(bbox[key], key), key)

    if values["minx"] > values["maxx"] or values["miny"] > values["maxy"]:
        log.warning("bbox is inverted (min > max): %s", values)

    return Bounds(
        min_x=values["minx"],
        max_x=values["maxx"],
        min_y=values["miny"],
        max_y=values["maxy"],
    )


def get_bounds(json_path: str | Path) -> Tuple[Bounds, Center]:
    """
    Get orthophoto bounds and map center from the ODM info JSON.

    Raises
    ------
    ReadError, ParseError, SchemaError
    """
    p = Path(json_path)
    try:
        bounds = extract_bounds(load_metadata(p))
    except SchemaError as e:
        if e.path is None:
            e.path = p
        raise
    return bounds, Center.from_bounds(bounds)
