# src/dedup/filters.py - v1
"""Identifying filter: the query that finds a stored equivalent of a document.

Clauses (any one matching is enough):
  1. exact ``identifier`` match
  2. legacy ``_id`` match when the identifier looks like a 24-hex ObjectId
  3. fallback: every dedup field equal AND the stored record has no
     ``identifier`` (records written before identifiers existed)
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class IdentifyingFilter(BaseModel):
    """Typed identifying filter, renderable to a Mongo query."""

    identifier: str | None = None
    legacy_id: str | None = None
    fallback: dict[str, Any] | None = None

    @classmethod
    def build(
        cls,
        identifier: str | None,
        doc: dict[str, Any] | None = None,
        fallback_fields: tuple[str, ...] | list[str] = (),
    ) -> IdentifyingFilter:
        """Build the filter for ``identifier`` with optional fallback fields.

        The fallback clause is only added when every fallback field is
        present in ``doc``.
        """
        legacy_id = identifier if identifier and _OBJECT_ID_RE.match(identifier) else None

        fallback: dict[str, Any] | None = None
        if doc and fallback_fields:
            present = {f: doc[f] for f in fallback_fields if doc.get(f) is not None}
            if len(present) == len(fallback_fields):
                fallback = present

        return cls(identifier=identifier or None, legacy_id=legacy_id, fallback=fallback)

    @property
    def is_empty(self) -> bool:
        return not (self.identifier or self.legacy_id or self.fallback)

    def best_identifier(self) -> str | None:
        """Identifier usable in error reports when no document is at hand."""
        return self.identifier or self.legacy_id

    def matches(self, stored: dict[str, Any]) -> bool:
        """Evaluate the filter against a stored record."""
        if self.identifier and stored.get("identifier") == self.identifier:
            return True
        if self.legacy_id and str(stored.get("_id")) == self.legacy_id:
            return True
        if self.fallback and stored.get("identifier") is None:
            return all(stored.get(k) == v for k, v in self.fallback.items())
        return False

    def to_mongo(self) -> dict[str, Any]:
        """Render as a Mongo ``$or`` query."""
        clauses: list[dict[str, Any]] = []
        if self.identifier:
            clauses.append({"identifier": self.identifier})
        if self.legacy_id:
            from bson import ObjectId

            clauses.append({"_id": ObjectId(self.legacy_id)})
        if self.fallback:
            items: list[dict[str, Any]] = [{k: v} for k, v in self.fallback.items()]
            items.append({"identifier": {"$exists": False}})
            clauses.append({"$and": items})
        if not clauses:
            # Matches nothing.
            return {"identifier": {"$exists": True}, "_id": {"$exists": False}}
        return {"$or": clauses}
