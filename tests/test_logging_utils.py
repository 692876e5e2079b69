from __future__ import annotations

import json

from odm_webmap.utils.logging_utils import get_logger, init_logging


def test_file_and_json_handlers_write_records(tmp_path):
    log_dir = tmp_path / "logs"
    cfg = {"logging": {"level": "INFO", "to_file": True, "to_json": True, "dir": str(log_dir)}}
    init_logging(cfg, run_id="t1")
    get_logger("bounds").info("bbox located")

    text_log = log_dir / "odm_webmap_t1.log"
    json_log = log_dir / "odm_webmap_t1.jsonl"
    assert text_log.exists() and json_log.exists()
    assert "bbox located" in text_log.read_text(encoding="utf-8")

    entries = [json.loads(line) for line in json_log.read_text(encoding="utf-8").splitlines()]
    rec = [e for e in entries if e["msg"] == "bbox located"]
    assert rec and rec[0]["logger"] == "odm_webmap.bounds"
    assert rec[0]["level"] == "INFO"


def test_console_only_by_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = init_logging({})
    assert len(root.handlers) == 1
    assert not (tmp_path / "logs").exists()


def test_get_logger_namespacing():
    assert get_logger("cli").name == "odm_webmap.cli"
    assert get_logger("odm_webmap.orthophoto").name == "odm_webmap.orthophoto"
