"""
Convert an ODM output package into a web-map package.

Input layout (ODM):
    <input>/odm_georeferencing/odm_georeferenced_model.info.json
    <input>/odm_orthophoto/odm_orthophoto.png

Output layout:
    <output>/summary.json
    <output>/odm_orthophoto.png
    <output>/odm_orthophoto.webp
"""
from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .bounds import get_bounds
from .config import ConvertSettings
from .errors import WriteError
from .models import Summary, write_summary
from .orthophoto import ORTHOPHOTO_SOURCE, process_orthophoto
from .utils.io import ensure_dir
from .utils.logging_utils import get_logger

log = get_logger(__name__)

SUMMARY_FILENAME = "summary.json"


def package_paths(input_dir: str | Path) -> Dict[str, Path]:
    """Resolve the fixed ODM locations of the metadata report and the orthophoto."""
    root = Path(input_dir)
    base = root / "odm_georeferencing" / "odm_georeferenced_model"
    return {
        # replace the suffix of the base name rather than appending to it
        "metadata": base.with_suffix(".info.json"),
        "orthophoto": root / ORTHOPHOTO_SOURCE,
    }


def convert_package(
    input_dir: str | Path,
    output_dir: str | Path,
    settings: Optional[ConvertSettings] = None,
) -> Dict[str, Any]:
    """
    Run the full conversion: bounds → summary.json → orthophoto derivatives.

    Bounds are extracted before anything is written, so a bad metadata
    report leaves the output directory untouched.

    Raises
    ------
    odm_webmap.errors.OdmWebmapError
        Any stage failure; nothing is retried.
    """
    settings = settings or ConvertSettings()
    paths = package_paths(input_dir)
    out = Path(output_dir)

    log.info("json_path: %s", paths["metadata"])
    bounds, center = get_bounds(paths["metadata"])
    log.info("Bounds: %s", bounds)
    log.info("Center: lat=%s lon=%s", center.lat, center.lon)

    try:
        ensure_dir(out)
    except OSError as e:
        raise WriteError(f"Cannot create output directory: {e.strerror or e}", out) from e

    summary = Summary(
        title=settings.title,
        description=settings.description,
        bounds=bounds,
        center=center,
    )
    summary_path = write_summary(summary, out / SUMMARY_FILENAME)
    log.info("Wrote %s", summary_path)

    images = process_orthophoto(
        input_dir,
        out,
        size_factor=settings.size_factor,
        quality=settings.quality,
        max_pixels=settings.max_pixels,
    )

    return {
        "input_dir": str(Path(input_dir)),
        "output_dir": str(out),
        "summary": str(summary_path),
        "bounds": asdict(bounds),
        "center": asdict(center),
        **images,
    }
