"""
Config loader & resolver

- DEFAULT_CONFIG: conversion parameters and logging defaults
- load_yaml(path): loads a YAML config into a dict
- resolve_config(path, overrides_json): defaults <- YAML <- JSON overrides
- settings_from_config(cfg): typed ConvertSettings for the pipeline
"""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "convert": {
        "size_factor": 0.2,
        "quality": 90.0,
        # Placeholders for future site metadata; the web map tolerates empty strings.
        "title": "",
        "description": "",
        # None disables the decoder size check (trusted local ODM output).
        "max_pixels": None,
    },
    "logging": {
        "level": "INFO",
        "to_file": False,
        "to_json": False,
        "dir": "logs",
    },
}


@dataclass(frozen=True)
class ConvertSettings:
    size_factor: float = 0.2
    quality: float = 90.0
    title: str = ""
    description: str = ""
    max_pixels: Optional[int] = None


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}


def deep_merge(a: Dict, b: Dict) -> Dict:
    """Recursively merge dict b into a (returns a new dict)."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def resolve_config(path: Optional[str | Path] = None, overrides_json: Optional[str] = None) -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        cfg = deep_merge(cfg, load_yaml(path))
    if overrides_json:
        # Accept a JSON string (e.g. {"convert": {"quality": 75}})
        cfg = deep_merge(cfg, json.loads(overrides_json))
    return cfg


def settings_from_config(cfg: Dict[str, Any]) -> ConvertSettings:
    c = cfg.get("convert", {}) or {}
    max_pixels = c.get("max_pixels")
    return ConvertSettings(
        size_factor=float(c.get("size_factor", 0.2)),
        quality=float(c.get("quality", 90.0)),
        title=str(c.get("title") or ""),
        description=str(c.get("description") or ""),
        max_pixels=int(max_pixels) if max_pixels is not None else None,
    )
