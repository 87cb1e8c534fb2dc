"""Data models produced while scanning a device."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DocumentCategory(str, Enum):
    """How a recognized file is keyed inside a collection."""

    UNKNOWN = "unknown"
    CHECKSUM = "checksum"
    ASIN = "asin"


class Item(BaseModel):
    """A recognized e-book file and its collection key.

    Attributes:
        name: Base filename.
        path: Absolute path of the file on the mounted device.
        category: Category the key was derived for.
        key: Device key, prefixed with ``*`` (checksum) or ``#`` (ASIN).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path
    category: DocumentCategory
    key: str


class SkippedFile(BaseModel):
    """A supported file that could not be keyed.

    Attributes:
        name: Printable filename.
        path: Path of the file on the mounted device.
        reason: Why no key was derived.
    """

    name: str
    path: Path
    reason: str


class ScanReport(BaseModel):
    """Counters gathered during a single device scan."""

    files_seen: int = 0
    items_collected: int = 0
    skipped: List[SkippedFile] = Field(default_factory=list)


__all__ = ["DocumentCategory", "Item", "SkippedFile", "ScanReport"]
