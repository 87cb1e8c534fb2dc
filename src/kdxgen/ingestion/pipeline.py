"""High-level collection generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from kdxgen.config.models import KdxgenConfig
from kdxgen.state.models import CollectionStore
from kdxgen.state.serializer import serialize_collections

from .detectors import KeyDeriver, TypeDetector
from .discovery import DeviceScanner
from .models import ScanReport


class GenerationResult(BaseModel):
    """Outcome of a generation run.

    Attributes:
        device_root: Device root that was scanned.
        store: Collections discovered on the device.
        payload: Serialized collections file contents.
        report: Scan counters and skipped files.
    """

    device_root: Path
    store: CollectionStore
    payload: str
    report: ScanReport


class CollectionPipeline:
    """Coordinate scanning and serialization to produce a collections file."""

    def __init__(self, scanner: DeviceScanner, *, locale: str = "en-US") -> None:
        self.scanner = scanner
        self.locale = locale

    @classmethod
    def from_config(
        cls,
        config: KdxgenConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> "CollectionPipeline":
        """Build a pipeline wired according to ``config``."""
        deriver = KeyDeriver(
            mount_prefix=config.device.mount_prefix,
            uppercase_hex=config.collections.uppercase_hex,
            logger=logger,
        )
        scanner = DeviceScanner(
            detector=TypeDetector(),
            deriver=deriver,
            max_name_length=config.collections.max_name_length,
            documents_dir=config.device.documents_dir,
            signature_dirs=config.device.signature_dirs,
            logger=logger,
        )
        return cls(scanner, locale=config.collections.locale)

    def run(self, device_root: Path) -> GenerationResult:
        """Scan ``device_root`` and serialize the collections found."""
        store = self.scanner.scan(device_root)
        return GenerationResult(
            device_root=device_root,
            store=store,
            payload=serialize_collections(store, locale=self.locale),
            report=self.scanner.report,
        )
