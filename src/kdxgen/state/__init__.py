"""Collection state and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any

from .errors import MissingStateError, StateError
from .models import Collection, CollectionStore
from .serializer import DEFAULT_LOCALE, collections_payload, serialize_collections

LOGGER = logging.getLogger(__name__)

DEFAULT_COLLECTIONS_FILE = "system/collections.json"


class CollectionRepository:
    """Write generated collections to disk or onto a mounted device."""

    def __init__(self, collections_file: str = DEFAULT_COLLECTIONS_FILE) -> None:
        """Initialize the repository.

        Args:
            collections_file: Location of the collections file relative to the
                device root.
        """
        self._collections_file = collections_file

    @property
    def collections_file(self) -> str:
        """Return the collections file location relative to a device root."""
        return self._collections_file

    def device_path(self, device_root: Path) -> Path:
        """Return the collections file path for ``device_root``."""
        return device_root / self._collections_file

    def write(self, path: Path, payload: str) -> Path:
        """Write ``payload`` to ``path``, creating parent directories.

        Args:
            path: Destination file.
            payload: Serialized collections.

        Returns:
            Path: The written file.

        Raises:
            StateError: If the payload cannot be encoded or the file written.
        """
        try:
            data = payload.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise StateError(f"Collections data cannot be encoded as UTF-8: {exc}") from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StateError(f"Failed to write collections to {path}: {exc}") from exc
        LOGGER.info("Collections written to %s", path)
        return path

    def save_to_device(self, device_root: Path, payload: str, *, backup: bool = True) -> Path | None:
        """Install ``payload`` as the device's collections file.

        The payload is written next to the target first; only then is an
        existing file renamed to ``collections.json.<millis>`` and replaced, so
        a failed write leaves the device untouched.

        Args:
            device_root: Root of the mounted device.
            payload: Serialized collections.
            backup: Whether an existing collections file is kept.

        Returns:
            Path | None: Location of the backup, if one was made.

        Raises:
            StateError: If the payload cannot be written or the existing file
                cannot be backed up.
        """
        target = self.device_path(device_root)
        staged = target.with_name(f"{target.name}.tmp")
        backup_path: Path | None = None
        try:
            self.write(staged, payload)
            if backup and target.exists():
                backup_path = target.with_name(f"{target.name}.{int(time.time() * 1000)}")
                try:
                    target.rename(backup_path)
                except OSError as exc:
                    LOGGER.warning("Failed to back up existing collection %s: %s", target, exc)
                    raise StateError(
                        f"Failed to back up existing collection {target}: {exc}"
                    ) from exc
                LOGGER.info("Existing collection backed up to %s", backup_path)
            os.replace(staged, target)
        except OSError as exc:
            if backup_path is not None and not target.exists():
                backup_path.rename(target)
            raise StateError(f"Failed to install collections at {target}: {exc}") from exc
        finally:
            staged.unlink(missing_ok=True)
        LOGGER.info("Collections installed at %s", target)
        return backup_path

    def load(self, device_root: Path) -> dict[str, Any]:
        """Load the collections currently stored on a device.

        Args:
            device_root: Root of the mounted device.

        Returns:
            dict[str, Any]: Parsed collections mapping.

        Raises:
            MissingStateError: If the device has no collections file.
            StateError: If the file cannot be parsed.
        """
        path = self.device_path(device_root)
        if not path.exists():
            raise MissingStateError(f"No collections file found at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StateError(f"Invalid collections data: {exc}") from exc

        if not isinstance(data, dict):
            raise StateError("Collections file must contain an object at the top level.")
        return data


__all__ = [
    "CollectionRepository",
    "Collection",
    "CollectionStore",
    "DEFAULT_COLLECTIONS_FILE",
    "DEFAULT_LOCALE",
    "MissingStateError",
    "StateError",
    "collections_payload",
    "serialize_collections",
]
