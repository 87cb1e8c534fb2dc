"""File type detection and key derivation utilities."""

from __future__ import annotations

import hashlib
import logging

from .models import DocumentCategory

LOGGER = logging.getLogger(__name__)

DEFAULT_MOUNT_PREFIX = "/mnt/us/documents/"
ACCEPTED_BOOK_TYPES = frozenset({"EBOK", "EBSP"})

_EXTENSION_CATEGORIES = {
    "pdf": DocumentCategory.CHECKSUM,
    "azw": DocumentCategory.ASIN,
    "azw1": DocumentCategory.ASIN,
}

_KEY_PREFIXES = {
    DocumentCategory.CHECKSUM: "*",
    DocumentCategory.ASIN: "#",
}


class TypeDetector:
    """Identify the document category of a file from its extension."""

    def detect(self, filename: str) -> DocumentCategory:
        """Return the category for ``filename``; names without a dot are unknown."""
        _, dot, extension = filename.rpartition(".")
        if not dot:
            return DocumentCategory.UNKNOWN
        return _EXTENSION_CATEGORIES.get(extension.lower(), DocumentCategory.UNKNOWN)


class KeyDeriver:
    """Compute the identifying keys the device uses for collection members.

    Checksum documents are keyed by the SHA-1 of their path on the device, so
    the key depends on where the file lives rather than on its content. ASIN
    documents are keyed by the ASIN and book type embedded in the filename.
    """

    def __init__(
        self,
        *,
        mount_prefix: str = DEFAULT_MOUNT_PREFIX,
        uppercase_hex: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.mount_prefix = mount_prefix
        self.uppercase_hex = uppercase_hex
        self._logger = logger or LOGGER

    def derive(self, filename: str, relative_dir: str, category: DocumentCategory) -> str | None:
        """Return the prefixed key for a file, or None when no key can be derived.

        Args:
            filename: Base name of the file.
            relative_dir: Directory path below the documents root, with a
                trailing separator (e.g. ``Fiction/``).
            category: Category reported by :class:`TypeDetector`.

        Returns:
            str | None: Key prefixed with its category marker.
        """
        if category is DocumentCategory.CHECKSUM:
            key = self.path_checksum(relative_dir + filename)
        elif category is DocumentCategory.ASIN:
            key = self.asin_key(filename)
        else:
            return None
        if key is None:
            return None
        return _KEY_PREFIXES[category] + key

    def path_checksum(self, relative_path: str) -> str | None:
        """Return the hex SHA-1 of ``relative_path`` as mounted on the device."""
        return self.checksum(self.mount_prefix + relative_path)

    def checksum(self, text: str) -> str | None:
        """Return the hex SHA-1 of ``text`` encoded one byte per character."""
        if not text:
            return None
        digest = hashlib.sha1(text.encode("iso-8859-1", errors="replace")).hexdigest()
        return digest.upper() if self.uppercase_hex else digest

    def asin_key(self, filename: str) -> str | None:
        """Return ``ASIN^TYPE`` parsed from a ``...-asin_<A>-type_<T>-v_<V>`` filename."""
        parts = _split_once(filename, "-asin_")
        if parts is None:
            self._logger.info("No ASIN found in '%s'. Skipping file...", filename)
            return None

        parts = _split_once(parts[1], "-type_")
        if parts is None:
            self._logger.info("No book type found in '%s'. Skipping file...", filename)
            return None
        asin = parts[0]

        parts = _split_once(parts[1], "-v_")
        if parts is None:
            self._logger.info("No version found in '%s'. Skipping file...", filename)
            return None
        book_type = parts[0]

        # Periodicals and other book types are collected by the device itself.
        if book_type not in ACCEPTED_BOOK_TYPES:
            self._logger.debug("Ignoring '%s' with book type '%s'.", filename, book_type)
            return None

        return f"{asin}^{book_type}"


def _split_once(text: str, delimiter: str) -> tuple[str, str] | None:
    """Split ``text`` at the first ``delimiter``.

    The delimiter counts as missing when nothing but further delimiters follows
    it, since such a tail carries no segment.
    """
    head, found, tail = text.partition(delimiter)
    if not found or not tail.replace(delimiter, ""):
        return None
    return head, tail


__all__ = [
    "ACCEPTED_BOOK_TYPES",
    "DEFAULT_MOUNT_PREFIX",
    "KeyDeriver",
    "TypeDetector",
]
