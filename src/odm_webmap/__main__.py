# FILE: src/odm_webmap/__main__.py
# =================================================================================================
# Allows `python -m odm_webmap` to invoke the Typer CLI defined in odm_webmap/cli.py
# =================================================================================================
from __future__ import annotations

from .cli import app

if __name__ == "__main__":
    app()
