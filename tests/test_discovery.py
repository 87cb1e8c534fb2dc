"""Tests covering device scanning and the generation pipeline."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import sys
from pathlib import Path

import pytest

from kdxgen.config import KdxgenConfig
from kdxgen.ingestion import DeviceSignatureError, DocumentCategory, InvalidRootError
from kdxgen.ingestion.discovery import DeviceScanner
from kdxgen.ingestion.pipeline import CollectionPipeline
from kdxgen.state import CollectionRepository


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def test_scan_rejects_root_without_signature(tmp_path: Path) -> None:
    for name in ("documents", "system", "music"):
        (tmp_path / name).mkdir()
    _touch(tmp_path / "documents" / "Fiction" / "book1.pdf")

    with pytest.raises(DeviceSignatureError, match="audible"):
        DeviceScanner().scan(tmp_path)


def test_signature_is_case_sensitive(tmp_path: Path) -> None:
    for name in ("Audible", "documents", "music", "system"):
        (tmp_path / name).mkdir()

    with pytest.raises(DeviceSignatureError):
        DeviceScanner().scan(tmp_path)


def test_signature_requires_directories(tmp_path: Path) -> None:
    for name in ("documents", "music", "system"):
        (tmp_path / name).mkdir()
    _touch(tmp_path / "audible")

    with pytest.raises(DeviceSignatureError):
        DeviceScanner().scan(tmp_path)


def test_scan_rejects_non_directory_root(tmp_path: Path) -> None:
    file_root = _touch(tmp_path / "not-a-device")

    with pytest.raises(InvalidRootError):
        DeviceScanner().scan(file_root)


def test_pdf_collected_under_directory_name(device_root: Path) -> None:
    _touch(device_root / "documents" / "Fiction" / "book1.pdf")

    store = DeviceScanner().scan(device_root)

    assert store.names() == ["Fiction"]
    (item,) = store["Fiction"].items
    assert item.name == "book1.pdf"
    assert item.category is DocumentCategory.CHECKSUM
    assert item.key == "*" + hashlib.sha1(b"/mnt/us/documents/Fiction/book1.pdf").hexdigest()
    assert item.path == (device_root / "documents" / "Fiction" / "book1.pdf").resolve()


def test_azw_collected_with_asin_key(device_root: Path) -> None:
    _touch(device_root / "documents" / "Fiction" / "My-Book-asin_B001XYZ-type_EBOK-v_3.azw")

    store = DeviceScanner().scan(device_root)

    assert store["Fiction"].item_keys == ["#B001XYZ^EBOK"]


def test_unsupported_book_type_leaves_no_collection(device_root: Path) -> None:
    _touch(device_root / "documents" / "Fiction" / "bad-asin_B001XYZ-type_EBSC-v_1.azw")
    scanner = DeviceScanner()

    store = scanner.scan(device_root)

    assert "Fiction" not in store
    assert len(store) == 0
    assert [skipped.path.name for skipped in scanner.report.skipped] == [
        "bad-asin_B001XYZ-type_EBSC-v_1.azw"
    ]


def test_long_paths_merge_into_one_collection(device_root: Path) -> None:
    base = device_root / "documents" / "very/long/nested/path/exceeding/forty/eight/chars"
    _touch(base / "a.pdf")
    _touch(base / "other" / "b.pdf")

    store = DeviceScanner().scan(device_root)

    assert store.names() == ["very/long/nested/path/exceeding/forty/eight/c..."]
    collection = store["very/long/nested/path/exceeding/forty/eight/c..."]
    assert sorted(item.name for item in collection.items) == ["a.pdf", "b.pdf"]
    keys = {item.name: item.key for item in collection.items}
    expected_b = b"/mnt/us/documents/very/long/nested/path/exceeding/forty/eight/chars/other/b.pdf"
    assert keys["b.pdf"] == "*" + hashlib.sha1(expected_b).hexdigest()


def test_top_level_and_unknown_files_are_ignored(device_root: Path) -> None:
    documents = device_root / "documents"
    _touch(documents / "loose.pdf")
    _touch(documents / "Notes" / "todo.txt")
    _touch(documents / "Notes" / "scan.PDF")
    _touch(device_root / "system" / "Hidden" / "elsewhere.pdf")
    scanner = DeviceScanner()

    store = scanner.scan(device_root)

    assert store.names() == ["Notes"]
    assert [item.name for item in store["Notes"].items] == ["scan.PDF"]
    assert scanner.report.files_seen == 2
    assert scanner.report.items_collected == 1
    assert scanner.report.skipped == []


def test_nested_directories_become_separate_collections(device_root: Path) -> None:
    documents = device_root / "documents"
    _touch(documents / "Fiction" / "a.pdf")
    _touch(documents / "Fiction" / "Classics" / "b.pdf")
    (documents / "Empty").mkdir()

    store = DeviceScanner().scan(device_root)

    assert store.names() == ["Fiction", "Fiction/Classics"]


def test_max_name_length_above_display_width_warns(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="kdxgen")

    scanner = DeviceScanner(max_name_length=60)

    assert scanner.max_name_length == 60
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_pipeline_serializes_scan(device_root: Path) -> None:
    documents = device_root / "documents"
    _touch(documents / "Fiction" / "book1.pdf")
    _touch(documents / "Fiction" / "My-Book-asin_B001XYZ-type_EBOK-v_3.azw")
    _touch(documents / "Fiction" / "Classics" / "Sample-asin_B00ABC-type_EBSP-v_0.azw1")
    config = KdxgenConfig.model_validate({"collections": {"uppercase_hex": True}})

    result = CollectionPipeline.from_config(config).run(device_root)

    assert result.report.items_collected == 3
    assert "Fiction\\/Classics@en-US" in result.payload
    data = json.loads(result.payload)
    assert list(data) == ["Fiction@en-US", "Fiction/Classics@en-US"]
    assert data["Fiction/Classics@en-US"]["items"] == ["#B00ABC^EBSP"]
    fiction_keys = data["Fiction@en-US"]["items"]
    assert "#B001XYZ^EBOK" in fiction_keys
    checksum = hashlib.sha1(b"/mnt/us/documents/Fiction/book1.pdf").hexdigest().upper()
    assert "*" + checksum in fiction_keys
    assert isinstance(data["Fiction@en-US"]["lastAccess"], int)


@pytest.mark.skipif(
    sys.platform in ("darwin", "win32"), reason="filesystem rejects non-UTF-8 names"
)
def test_undecodable_directory_name_is_written_with_replacement(
    tmp_path: Path, device_root: Path
) -> None:
    collection_dir = os.path.join(os.fsencode(device_root / "documents"), b"Caf\xe9")
    os.makedirs(collection_dir)
    with open(os.path.join(collection_dir, b"book.pdf"), "wb"):
        pass

    result = CollectionPipeline.from_config(KdxgenConfig()).run(device_root)

    assert result.store.names() == ["Caf\ufffd"]
    (item,) = result.store["Caf\ufffd"].items
    assert item.name == "book.pdf"
    assert item.key == "*" + hashlib.sha1(b"/mnt/us/documents/Caf?/book.pdf").hexdigest()

    output = CollectionRepository().write(tmp_path / "collections.json", result.payload)
    data = json.loads(output.read_text(encoding="utf-8"))
    assert list(data) == ["Caf\ufffd@en-US"]
