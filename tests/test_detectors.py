"""Tests for file classification and key derivation."""

from __future__ import annotations

import hashlib
import logging

import pytest

from kdxgen.ingestion.detectors import KeyDeriver, TypeDetector
from kdxgen.ingestion.models import DocumentCategory


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("book.pdf", DocumentCategory.CHECKSUM),
        ("BOOK.PDF", DocumentCategory.CHECKSUM),
        ("archive.tar.pdf", DocumentCategory.CHECKSUM),
        ("novel.azw", DocumentCategory.ASIN),
        ("novel.AZW1", DocumentCategory.ASIN),
        ("novel.azw3", DocumentCategory.UNKNOWN),
        ("notes.txt", DocumentCategory.UNKNOWN),
        ("README", DocumentCategory.UNKNOWN),
        ("trailing.", DocumentCategory.UNKNOWN),
        ("pdf", DocumentCategory.UNKNOWN),
    ],
)
def test_type_detector_uses_last_extension(filename: str, expected: DocumentCategory) -> None:
    assert TypeDetector().detect(filename) is expected


def test_checksum_key_hashes_device_path() -> None:
    deriver = KeyDeriver()

    key = deriver.derive("book1.pdf", "Fiction/", DocumentCategory.CHECKSUM)

    expected = hashlib.sha1(b"/mnt/us/documents/Fiction/book1.pdf").hexdigest()
    assert key == "*" + expected
    assert len(key) == 41
    assert deriver.derive("book1.pdf", "Fiction/", DocumentCategory.CHECKSUM) == key


def test_checksum_key_honours_uppercase_and_mount_prefix() -> None:
    deriver = KeyDeriver(mount_prefix="/media/docs/", uppercase_hex=True)

    key = deriver.derive("a.pdf", "x/", DocumentCategory.CHECKSUM)

    assert key == "*" + hashlib.sha1(b"/media/docs/x/a.pdf").hexdigest().upper()


def test_checksum_encodes_one_byte_per_character() -> None:
    deriver = KeyDeriver()

    assert deriver.checksum("café") == hashlib.sha1("café".encode("latin-1")).hexdigest()
    assert deriver.checksum("日本") == hashlib.sha1(b"??").hexdigest()
    assert deriver.checksum("") is None


def test_asin_key_parsed_from_filename() -> None:
    deriver = KeyDeriver()

    key = deriver.derive("My-Book-asin_B001XYZ-type_EBOK-v_3.azw", "Fiction/", DocumentCategory.ASIN)

    assert key == "#B001XYZ^EBOK"


def test_asin_key_accepts_ebsp_and_ignores_trailing_text() -> None:
    deriver = KeyDeriver()

    assert deriver.asin_key("Sample-asin_B00ABC-type_EBSP-v_0-v_9.azw1") == "B00ABC^EBSP"


def test_asin_key_uses_first_occurrence_of_each_delimiter() -> None:
    deriver = KeyDeriver()

    assert deriver.asin_key("x-asin_A1-asin_A2-type_EBOK-v_1.azw") == "A1-asin_A2^EBOK"


@pytest.mark.parametrize(
    ("filename", "message"),
    [
        ("plain-book.azw", "No ASIN found"),
        ("book-asin_B001.azw", "No book type found"),
        ("book-asin_B001-type_EBOK.azw", "No version found"),
        ("book-asin_", "No ASIN found"),
        ("book-asin_B001-type_EBOK-v_", "No version found"),
        ("x-asin_-asin_", "No ASIN found"),
        ("book-asin_B001-type_-type_", "No book type found"),
    ],
)
def test_asin_key_malformed_filenames_are_logged(
    filename: str, message: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="kdxgen")

    assert KeyDeriver().derive(filename, "a/", DocumentCategory.ASIN) is None
    assert message in caplog.text
    assert filename in caplog.text


def test_asin_key_rejects_unsupported_book_type_quietly(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="kdxgen")

    key = KeyDeriver().asin_key("bad-asin_B001XYZ-type_EBSC-v_1.azw")

    assert key is None
    assert not [record for record in caplog.records if record.levelno >= logging.INFO]


def test_unknown_category_has_no_key() -> None:
    assert KeyDeriver().derive("notes.txt", "a/", DocumentCategory.UNKNOWN) is None


def test_injected_logger_receives_diagnostics(caplog: pytest.LogCaptureFixture) -> None:
    sink = logging.getLogger("kdxgen.tests.sink")
    caplog.set_level(logging.INFO, logger="kdxgen.tests.sink")

    KeyDeriver(logger=sink).asin_key("nothing.azw")

    assert [record.name for record in caplog.records] == ["kdxgen.tests.sink"]
