# src/odm_webmap/utils/logging_utils.py
# ======================================================================================
# Logging Utilities — config-driven logging for conversion runs
# --------------------------------------------------------------------------------------
# Purpose
#   One logging setup shared by the CLI and library callers:
#     • Configurable level and destinations (console, file, JSON lines).
#     • Defaults: INFO to stderr; file logs optional.
#     • Log files named with a run id so repeated conversions do not clobber each other.
#
# Design
#   - init_logging(cfg, run_id): sets the package logger with console + optional file/JSON handlers.
#   - get_logger(name): retrieve a namespaced logger under "odm_webmap".
# ======================================================================================

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "odm_webmap"

_CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _JSONLogHandler(logging.Handler):
    """
    Writes one JSON object per record (JSONL).
    """

    def __init__(self, path: Path, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_entry = {
                "time": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                "module": record.module,
                "func": record.funcName,
                "line": record.lineno,
            }
            self._fh.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
            self._fh.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if not self._fh.closed:
                self._fh.close()
        finally:
            super().close()


def _run_tag(run_id: Optional[str]) -> str:
    return run_id or datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def init_logging(cfg: Optional[Dict[str, Any]], run_id: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger from a config dictionary.

    Parameters
    ----------
    cfg : dict
        Config dictionary (reads the "logging" section: level, to_file, to_json, dir).
    run_id : str, optional
        Run identifier used in log file names.
    """
    log_cfg = (cfg or {}).get("logging", {}) or {}
    level_str = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_str, logging.INFO)

    root = logging.getLogger(ROOT_LOGGER)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(level)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    root.addHandler(ch)

    log_dir = Path(log_cfg.get("dir", "logs"))
    if log_cfg.get("to_file", False):
        log_file = log_dir / f"odm_webmap_{_run_tag(run_id)}.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(fh)

    if log_cfg.get("to_json", False):
        root.addHandler(_JSONLogHandler(log_dir / f"odm_webmap_{_run_tag(run_id)}.jsonl", level=level))

    root.debug("Logging initialized (run_id=%s)", run_id)
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a logger namespaced under the package root logger.
    """
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
