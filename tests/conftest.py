"""Shared fixtures for kdxgen tests."""

from __future__ import annotations

from pathlib import Path

import pytest

SIGNATURE_DIRS = ("audible", "documents", "music", "system")


@pytest.fixture
def device_root(tmp_path: Path) -> Path:
    """Return a directory laid out like the root of a mounted device."""
    root = tmp_path / "kindle"
    for name in SIGNATURE_DIRS:
        (root / name).mkdir(parents=True)
    return root
