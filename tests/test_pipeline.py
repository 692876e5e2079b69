from __future__ import annotations

import json
from pathlib import Path

import pytest
from PIL import Image

from odm_webmap.config import ConvertSettings
from odm_webmap.errors import DecodeError, SchemaError
from odm_webmap.pipeline import convert_package, package_paths

from conftest import make_info_document, write_info_json


def test_package_paths_follow_odm_layout(tmp_path):
    paths = package_paths(tmp_path)
    assert paths["metadata"] == tmp_path / "odm_georeferencing" / "odm_georeferenced_model.info.json"
    assert paths["orthophoto"] == tmp_path / "odm_orthophoto" / "odm_orthophoto.png"


def test_convert_end_to_end(odm_dir: Path, out_dir: Path):
    art = convert_package(odm_dir, out_dir, ConvertSettings(size_factor=0.2, quality=90.0))

    summary = json.loads((out_dir / "summary.json").read_text())
    assert summary["center"] == {"lat": 21.0, "lon": 11.0}
    assert summary["bounds"] == {"min_x": 10.0, "max_x": 12.0, "min_y": 20.0, "max_y": 22.0}
    assert summary["title"] == "" and summary["description"] == ""

    with Image.open(out_dir / "odm_orthophoto.webp") as small:
        assert small.size == (200, 100)
    with Image.open(out_dir / "odm_orthophoto.png") as full:
        assert full.size == (1000, 500)

    assert art["summary"] == str(out_dir / "summary.json")
    assert art["center"] == {"lat": 21.0, "lon": 11.0}


def test_convert_defaults_and_titles(odm_dir: Path, out_dir: Path):
    art = convert_package(odm_dir, out_dir, ConvertSettings(title="Field 7", description="June flight"))
    assert art["lossy_size"] == [200, 100]
    summary = json.loads((out_dir / "summary.json").read_text())
    assert summary["title"] == "Field 7"
    assert summary["description"] == "June flight"


def test_schema_failure_writes_nothing(odm_dir: Path, out_dir: Path):
    doc = make_info_document()
    del doc["stats"]["bbox"]
    write_info_json(odm_dir, doc)
    with pytest.raises(SchemaError):
        convert_package(odm_dir, out_dir)
    assert not out_dir.exists()


def test_missing_orthophoto_is_decode_error(odm_dir: Path, out_dir: Path):
    src = odm_dir / "odm_orthophoto" / "odm_orthophoto.png"
    src.unlink()
    with pytest.raises(DecodeError) as ei:
        convert_package(odm_dir, out_dir)
    assert ei.value.path == src
    assert not (out_dir / "odm_orthophoto.webp").exists()
