# FILE: src/odm_webmap/utils/io.py
# =================================================================================================
# I/O helpers: JSON load/save and directory ensure.
# Callers translate OSError / decode errors into the odm_webmap.errors taxonomy.
# =================================================================================================
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def ensure_dir(path: str | Path) -> Path:
    """
    Ensure a directory exists (mkdir -p) and return its Path.
    """
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_json(path: str | Path) -> Any:
    """
    Read a whole JSON document into memory and parse it.

    Raises
    ------
    OSError
        If the file cannot be read.
    json.JSONDecodeError
        If the content is not valid JSON.
    """
    text = Path(path).read_text(encoding="utf-8")
    return json.loads(text)


def write_json(path: str | Path, data: Dict[str, Any]) -> Path:
    """
    Write a JSON file with UTF-8 encoding and pretty formatting.
    The parent directory is created if missing.
    """
    p = Path(path)
    ensure_dir(p.parent)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return p
