# src/pipeline/autoprune.py - v1
"""Auto-pruning of records older than the configured retention."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docwrite.pipeline.notifier import CacheCoherenceNotifier
    from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


class AutoPruner:
    """Hard-deletes records whose timestamp field is older than ``days``."""

    def __init__(
        self,
        store: BaseDocumentStore,
        notifier: CacheCoherenceNotifier,
        field: str,
        days: int,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._field = field
        self._days = days

    def cutoff(self, now_ms: int) -> int:
        return now_ms - self._days * DAY_MS

    async def prune(self, now_ms: int) -> int:
        """Delete expired records and announce them; return how many went."""
        ids = await self._store.delete_older_than(self._field, self.cutoff(now_ms))
        if ids:
            self._notifier.notify_removed(ids)
            logger.info("Pruned %d records older than %d days", len(ids), self._days)
        return len(ids)
