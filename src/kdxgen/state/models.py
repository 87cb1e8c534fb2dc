"""Collection data models."""

from __future__ import annotations

import time
from typing import Dict, List

from pydantic import BaseModel, Field

from kdxgen.ingestion.models import Item


class Collection(BaseModel):
    """A named, ordered group of items shown as one entry on the device.

    Attributes:
        name: Normalized collection name.
        items: Items in the order they were discovered.
        last_access: Seconds since the epoch when the collection was created.
            The device manages the real value; this is only a starting point.
    """

    name: str
    items: List[Item] = Field(default_factory=list)
    last_access: int = Field(default_factory=lambda: int(time.time()))

    def add_item(self, item: Item) -> int:
        """Append ``item`` and return the new item count."""
        self.items.append(item)
        return len(self.items)

    @property
    def item_keys(self) -> List[str]:
        """Return member keys in insertion order."""
        return [item.key for item in self.items]


class CollectionStore(BaseModel):
    """Mapping of normalized collection names to collections."""

    collections: Dict[str, Collection] = Field(default_factory=dict)

    def get_or_create(self, name: str) -> Collection:
        """Return the collection called ``name``, creating it on first use."""
        collection = self.collections.get(name)
        if collection is None:
            collection = Collection(name=name)
            self.collections[name] = collection
        return collection

    def add(self, name: str, item: Item) -> Collection:
        """Append ``item`` to the collection called ``name``."""
        collection = self.get_or_create(name)
        collection.add_item(item)
        return collection

    def names(self) -> List[str]:
        """Return collection names in lexicographic order."""
        return sorted(self.collections)

    def item_count(self) -> int:
        return sum(len(collection.items) for collection in self.collections.values())

    def __getitem__(self, name: str) -> Collection:
        return self.collections[name]

    def __contains__(self, name: object) -> bool:
        return name in self.collections

    def __len__(self) -> int:
        return len(self.collections)

    def sorted_collections(self) -> List[Collection]:
        """Return collections ordered by name."""
        return [self.collections[name] for name in self.names()]


__all__ = ["Collection", "CollectionStore"]
