# src/dedup/classifier.py - v1
"""Dedup classifier: INSERT or REPLACE for one identified document.

Read-then-decide, not transactional. Two concurrent requests may both see
"not found" and both submit an insert; the unique identifier index makes
the loser fail as a per-index write error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from docwrite.dedup.filters import IdentifyingFilter

if TYPE_CHECKING:
    from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Dedup decision plus what it was based on."""

    operation: Literal["insert", "replace"]
    identifying_filter: IdentifyingFilter
    existing: dict[str, Any] | None = None


class DedupClassifier:
    """Look up a stored equivalent and classify the write."""

    def __init__(
        self,
        store: BaseDocumentStore,
        fallback_fields: tuple[str, ...] = (),
    ) -> None:
        self._store = store
        self._fallback_fields = fallback_fields

    async def classify(self, doc: dict[str, Any]) -> Classification:
        identifying_filter = IdentifyingFilter.build(
            doc.get("identifier"), doc, self._fallback_fields
        )
        existing = await self._store.find_one(identifying_filter)

        if existing is not None:
            logger.debug(
                "Dedup match for %s -> _id=%s", doc.get("identifier"), existing.get("_id")
            )
            return Classification("replace", identifying_filter, existing)

        return Classification("insert", identifying_filter)
