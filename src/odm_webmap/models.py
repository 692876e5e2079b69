"""
Shared records for a converted package: Bounds, Center and the Summary
written to summary.json.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

from .errors import ParseError, ReadError, SchemaError, WriteError
from .utils.io import write_json


@dataclass(frozen=True)
class Bounds:
    """Geodetic bounding box in EPSG:4326 (x = longitude, y = latitude)."""
    min_x: float
    max_x: float
    min_y: float
    max_y: float


@dataclass(frozen=True)
class Center:
    lat: float
    lon: float

    @classmethod
    def from_bounds(cls, bounds: Bounds) -> "Center":
        """Midpoint of the bbox y range (lat) and x range (lon)."""
        return cls(
            lat=(bounds.max_y + bounds.min_y) / 2.0,
            lon=(bounds.max_x + bounds.min_x) / 2.0,
        )


@dataclass(frozen=True)
class Summary:
    """
    Site summary consumed by the web map.

    title and description are placeholders for future site metadata and
    default to empty strings (see config.DEFAULT_CONFIG["convert"]).
    """
    title: str
    description: str
    bounds: Bounds
    center: Center

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Summary":
        try:
            return cls(
                title=str(data["title"]),
                description=str(data["description"]),
                bounds=Bounds(**{k: float(data["bounds"][k]) for k in ("min_x", "max_x", "min_y", "max_y")}),
                center=Center(lat=float(data["center"]["lat"]), lon=float(data["center"]["lon"])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaError(f"Malformed summary record: {e}") from e


def write_summary(summary: Summary, path: str | Path) -> Path:
    """Write the summary as pretty-printed JSON. Raises WriteError."""
    try:
        return write_json(path, summary.to_dict())
    except OSError as e:
        raise WriteError(f"Cannot write summary: {e}", path) from e


def read_summary(path: str | Path) -> Summary:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ReadError(f"Cannot read summary: {e}", p) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Summary is not valid JSON: {e}", p) from e
    return Summary.from_dict(data)
