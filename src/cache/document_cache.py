# src/cache/document_cache.py - v1
"""In-memory read cache kept coherent by write-path signals.

The cache never writes itself from request data: it only applies
``data-update`` / ``data-remove`` signals, which the notifier emits for
committed writes. Applying the same signal twice is a no-op.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from docwrite.events.base_event_bus import BaseEventBus

logger = logging.getLogger(__name__)


def cache_key(doc: dict[str, Any]) -> str | None:
    """Key of a document: DB id when known, else its identifier."""
    if doc.get("_id") is not None:
        return str(doc["_id"])
    identifier = doc.get("identifier")
    return str(identifier) if identifier is not None else None


class DocumentCache:
    """Per-collection cache of post-write document shapes."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._entries: dict[str, dict[str, Any]] = {}

    def attach(self, bus: BaseEventBus) -> None:
        """Subscribe to the signals that maintain this cache."""
        bus.subscribe("data-update", self.apply_update)
        bus.subscribe("data-remove", self.apply_remove)

    def apply_update(self, payload: dict[str, Any]) -> None:
        if payload.get("collection") != self.collection:
            return
        for doc in payload.get("changes", []):
            key = cache_key(doc)
            if key is None:
                logger.debug("Skipping cache update without key")
                continue
            if doc.get("isValid") is False:
                self._entries.pop(key, None)
            else:
                self._entries[key] = copy.deepcopy(doc)

    def apply_remove(self, payload: dict[str, Any]) -> None:
        if payload.get("collection") != self.collection:
            return
        for key in payload.get("changes", []):
            self._entries.pop(str(key), None)

    def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        return copy.deepcopy(entry) if entry is not None else None

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
