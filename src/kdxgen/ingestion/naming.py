"""Collection name normalization."""

from __future__ import annotations

import logging

from kdxgen.config.models import DEFAULT_MAX_NAME_LENGTH

LOGGER = logging.getLogger(__name__)

ELLIPSIS = "..."
SEPARATOR = "/"


def normalize_collection_name(
    relative_dir: str,
    max_length: int = DEFAULT_MAX_NAME_LENGTH,
    *,
    logger: logging.Logger | None = None,
) -> str:
    """Turn an accumulated directory path into a collection name.

    Paths longer than ``max_length`` are cut to ``max_length - 3`` characters
    and suffixed with ``...``; shorter ones only lose one trailing separator.
    Distinct paths may therefore share a name, in which case their items end up
    in the same collection.

    Args:
        relative_dir: Directory path below the documents root, e.g. ``Fiction/``.
        max_length: Maximum number of characters in the result.
        logger: Diagnostics sink; defaults to the module logger.

    Returns:
        str: Normalized collection name.
    """
    if len(relative_dir) > max_length:
        name = relative_dir[: max_length - len(ELLIPSIS)] + ELLIPSIS
        (logger or LOGGER).info("Collection name too long. Shortening to '%s' ...", name)
        return name
    if relative_dir.endswith(SEPARATOR):
        return relative_dir[: -len(SEPARATOR)]
    return relative_dir


__all__ = ["ELLIPSIS", "SEPARATOR", "normalize_collection_name"]
