# FILE: src/odm_webmap/__init__.py
# =================================================================================================
# ODM WebMap — OpenDroneMap post-processing package
#
# Converts an ODM output package into a web-deployable package:
#   1) bounds     → geodetic bbox + center from odm_georeferenced_model.info.json
#   2) summary    → summary.json (title, description, bounds, center)
#   3) orthophoto → full-resolution PNG copy + downscaled RGBA WebP derivative
#
# Entry points
# ------------
#   odm-webmap convert -i <odm-output> -o <site-dir>
#   python -m odm_webmap --help
# =================================================================================================
from __future__ import annotations

__all__ = [
    "bounds",
    "orthophoto",
    "pipeline",
    "get_version",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the odm-webmap package version."""
    return __version__
