"""
Error taxonomy for the conversion pipeline.

Every failure is fatal to a conversion run. Each exception names the stage
that failed and, where one is involved, the offending file path, so the CLI
can report both without inspecting the underlying cause.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class OdmWebmapError(Exception):
    """Base class for all conversion failures."""

    stage = "convert"

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class ReadError(OdmWebmapError):
    """A required input file is missing or unreadable."""

    stage = "read"


class ParseError(OdmWebmapError):
    """The metadata document is not valid JSON."""

    stage = "parse"


class SchemaError(OdmWebmapError):
    """The bbox key path is absent or a bbox value is not numeric."""

    stage = "schema"


class DecodeError(OdmWebmapError):
    """The orthophoto raster cannot be decoded."""

    stage = "decode"


class EncodeError(OdmWebmapError):
    """The compressed derivative cannot be produced."""

    stage = "encode"


class WriteError(OdmWebmapError):
    """An output file cannot be persisted."""

    stage = "write"
