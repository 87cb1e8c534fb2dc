"""Rendering of collection stores into the device's collections format."""

from __future__ import annotations

import json
import logging
from typing import Any

from .models import CollectionStore

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"


def collections_payload(store: CollectionStore, *, locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    """Return the collections mapping keyed by ``<name>@<locale>``.

    Collections are ordered by name and empty ones are left out. Item keys keep
    the order in which the files were discovered.
    """
    payload: dict[str, Any] = {}
    for collection in store.sorted_collections():
        if not collection.items:
            LOGGER.info("Skipping empty collection '%s' ...", collection.name)
            continue
        payload[f"{collection.name}@{locale}"] = {
            "items": collection.item_keys,
            "lastAccess": collection.last_access,
        }
    return payload


def serialize_collections(store: CollectionStore, *, locale: str = DEFAULT_LOCALE) -> str:
    """Render ``store`` as compact JSON with forward slashes escaped."""
    text = json.dumps(
        collections_payload(store, locale=locale),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    # Outside strings JSON never contains "/", so this only touches string values.
    return text.replace("/", "\\/")


__all__ = ["DEFAULT_LOCALE", "collections_payload", "serialize_collections"]
