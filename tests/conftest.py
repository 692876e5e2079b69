"""
Shared pytest fixtures for odm_webmap tests.

Builds a minimal ODM output package in tmp_path:

    <tmp>/odm/odm_georeferencing/odm_georeferenced_model.info.json
    <tmp>/odm/odm_orthophoto/odm_orthophoto.png   (1000x500 RGB gradient)
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pytest
from PIL import Image


def make_info_document(minx: Any = 10.0, miny: Any = 20.0, maxx: Any = 12.0, maxy: Any = 22.0) -> Dict[str, Any]:
    """Shape of ODM's `pdal info --summary` style report, trimmed to what matters."""
    return {
        "pdal_version": "2.5.3",
        "stats": {
            "bbox": {
                "native": {
                    "bbox": {"minx": 500000.0, "miny": 2200000.0, "minz": 10.0,
                             "maxx": 500200.0, "maxy": 2200200.0, "maxz": 60.0},
                },
                "EPSG:4326": {
                    "bbox": {"minx": minx, "miny": miny, "minz": 10.0,
                             "maxx": maxx, "maxy": maxy, "maxz": 60.0},
                    "boundary": {"type": "Polygon", "coordinates": []},
                },
            },
        },
    }


def write_info_json(odm_dir: Path, document: Any, raw: Optional[str] = None) -> Path:
    p = odm_dir / "odm_georeferencing" / "odm_georeferenced_model.info.json"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(raw if raw is not None else json.dumps(document, indent=2), encoding="utf-8")
    return p


def make_rgb(width: int, height: int) -> Image.Image:
    """Deterministic RGB gradient so resampled output is non-trivial."""
    x = np.linspace(0, 255, width, dtype=np.float32)[None, :]
    y = np.linspace(0, 255, height, dtype=np.float32)[:, None]
    r = np.broadcast_to(x, (height, width))
    g = np.broadcast_to(y, (height, width))
    b = (r + g) / 2.0
    arr = np.stack([r, g, b], axis=-1).astype(np.uint8)
    return Image.fromarray(arr)


def write_orthophoto(odm_dir: Path, image: Image.Image, fmt: str = "PNG") -> Path:
    p = odm_dir / "odm_orthophoto" / "odm_orthophoto.png"
    p.parent.mkdir(parents=True, exist_ok=True)
    image.save(p, format=fmt)
    return p


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """CLI runs attach handlers to captured streams; drop them between tests."""
    yield
    root = logging.getLogger("odm_webmap")
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()


@pytest.fixture(scope="function")
def odm_dir(tmp_path: Path) -> Path:
    """A complete ODM package: bbox 10..12 x 20..22, 1000x500 RGB orthophoto."""
    root = tmp_path / "odm"
    write_info_json(root, make_info_document())
    write_orthophoto(root, make_rgb(1000, 500))
    return root


@pytest.fixture(scope="function")
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "site"


@pytest.fixture(scope="function")
def rgb_image() -> Image.Image:
    return make_rgb(101, 57)
