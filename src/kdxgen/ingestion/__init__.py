"""Ingestion package: classification, keying and naming of device files."""

from .detectors import KeyDeriver, TypeDetector
from .errors import DeviceSignatureError, InvalidRootError, ScanError
from .models import DocumentCategory, Item, ScanReport, SkippedFile
from .naming import normalize_collection_name

__all__ = [
    "DeviceSignatureError",
    "DocumentCategory",
    "InvalidRootError",
    "Item",
    "KeyDeriver",
    "ScanError",
    "ScanReport",
    "SkippedFile",
    "TypeDetector",
    "normalize_collection_name",
]
