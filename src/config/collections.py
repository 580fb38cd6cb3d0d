# src/config/collections.py - v1
"""Declarative collection registry.

Each collection names the fields used for fallback deduplication of
records stored before identifiers existed, and the timestamp field used
by auto-pruning.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CollectionSpec:
    """Static per-collection write-path configuration."""

    name: str
    dedup_fallback_fields: tuple[str, ...] = ()
    prune_field: str = "srvCreated"


COLLECTIONS: dict[str, CollectionSpec] = {
    "entries": CollectionSpec("entries", ("date", "type"), prune_field="date"),
    "treatments": CollectionSpec("treatments", ("created_at", "eventType")),
    "devicestatus": CollectionSpec("devicestatus", ("created_at", "device")),
    "profile": CollectionSpec("profile", ("created_at",)),
    "food": CollectionSpec("food"),
    "settings": CollectionSpec("settings"),
}


def get_collection(name: str) -> CollectionSpec:
    """Return the registered spec, or a spec without fallback dedup."""
    return COLLECTIONS.get(name, CollectionSpec(name))
