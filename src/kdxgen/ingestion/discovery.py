"""Device discovery: walks the documents tree and builds collections."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from kdxgen.config.models import DEFAULT_MAX_NAME_LENGTH
from kdxgen.state.models import CollectionStore

from .detectors import KeyDeriver, TypeDetector
from .errors import DeviceSignatureError, InvalidRootError
from .models import DocumentCategory, Item, ScanReport, SkippedFile
from .naming import SEPARATOR, normalize_collection_name

LOGGER = logging.getLogger(__name__)

DEFAULT_DOCUMENTS_DIR = "documents"
DEFAULT_SIGNATURE_DIRS = ("audible", "documents", "music", "system")


class DeviceScanner:
    """Build collections from the directory tree of a mounted device.

    Every directory below ``documents/`` becomes a collection named after its
    path; files placed directly in ``documents/`` belong to no collection.
    """

    def __init__(
        self,
        *,
        detector: TypeDetector | None = None,
        deriver: KeyDeriver | None = None,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
        documents_dir: str = DEFAULT_DOCUMENTS_DIR,
        signature_dirs: Iterable[str] = DEFAULT_SIGNATURE_DIRS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or LOGGER
        self.detector = detector or TypeDetector()
        self.deriver = deriver or KeyDeriver(logger=self._logger)
        self.max_name_length = max_name_length
        self.documents_dir = documents_dir
        self.signature_dirs = frozenset(signature_dirs)
        self.report = ScanReport()

        if max_name_length > DEFAULT_MAX_NAME_LENGTH:
            self._logger.warning(
                "Collection names longer than %d characters may not display properly on the device.",
                DEFAULT_MAX_NAME_LENGTH,
            )
        if documents_dir != DEFAULT_DOCUMENTS_DIR:
            self._logger.warning(
                "Documents directory '%s' may not work on the device; item checksums "
                "are calculated relative to '%s'.",
                documents_dir,
                DEFAULT_DOCUMENTS_DIR,
            )

    def scan(self, device_root: Path) -> CollectionStore:
        """Walk ``device_root`` and return the collections found under it.

        Args:
            device_root: Root directory of the mounted device.

        Returns:
            CollectionStore: Collections keyed by normalized name.

        Raises:
            InvalidRootError: If ``device_root`` is not a directory.
            DeviceSignatureError: If the expected device directories are missing.
        """
        device_root = device_root.expanduser()
        self.verify_device(device_root)

        self.report = ScanReport()
        store = CollectionStore()
        documents = device_root / self.documents_dir
        self._logger.info("Scanning %s ...", documents)

        with os.scandir(documents) as entries:
            for entry in entries:
                if entry.is_dir():
                    self._walk(Path(entry.path), printable_name(entry.name) + SEPARATOR, store)
                else:
                    self._logger.debug("Ignoring top-level file '%s'.", entry.name)

        self._logger.info(
            "Scan complete: %d collections, %d items, %d skipped.",
            len(store),
            self.report.items_collected,
            len(self.report.skipped),
        )
        return store

    def verify_device(self, device_root: Path) -> None:
        """Ensure ``device_root`` looks like the root of a reading device."""
        if not device_root.is_dir():
            self._logger.critical("'%s' is not a directory.", device_root)
            raise InvalidRootError(f"{device_root} is not a directory")

        present = {entry.name for entry in os.scandir(device_root) if entry.is_dir()}
        missing = sorted(self.signature_dirs - present)
        if missing:
            self._logger.critical(
                "'%s' is not a device root; missing %s.", device_root, ", ".join(missing)
            )
            raise DeviceSignatureError(
                f"{device_root} is not a device root directory (missing: {', '.join(missing)})"
            )

    def _walk(self, directory: Path, relative_dir: str, store: CollectionStore) -> None:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir():
                    self._walk(
                        Path(entry.path), relative_dir + printable_name(entry.name) + SEPARATOR, store
                    )
                else:
                    self._process_file(Path(entry.path), relative_dir, store)

    def _process_file(self, path: Path, relative_dir: str, store: CollectionStore) -> None:
        self.report.files_seen += 1
        filename = printable_name(path.name)
        category = self.detector.detect(filename)
        if category is DocumentCategory.UNKNOWN:
            return

        key = self.deriver.derive(filename, relative_dir, category)
        if key is None:
            self.report.skipped.append(
                SkippedFile(
                    name=filename,
                    path=path,
                    reason=f"no {category.value} key derived from filename",
                )
            )
            return

        name = normalize_collection_name(relative_dir, self.max_name_length, logger=self._logger)
        store.add(name, Item(name=filename, path=path.resolve(), category=category, key=key))
        self.report.items_collected += 1


def printable_name(name: str) -> str:
    """Return ``name`` with undecodable filename bytes replaced by U+FFFD.

    ``os.scandir`` hands back bytes that are not valid UTF-8 as lone
    surrogates, which cannot be written to the collections file.
    """
    return os.fsencode(name).decode("utf-8", "replace")


__all__ = ["DEFAULT_DOCUMENTS_DIR", "DEFAULT_SIGNATURE_DIRS", "DeviceScanner", "printable_name"]
