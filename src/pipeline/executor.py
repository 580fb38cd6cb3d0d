# src/pipeline/executor.py - v1
"""Bulk write executor: one unordered storage call per batch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docwrite.core.errors import InfrastructureError
from docwrite.core.models import BulkResult, InsertIntent, ReplaceIntent

if TYPE_CHECKING:
    from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class BulkWriteExecutor:
    """Submit the whole intent list in a single unordered bulk write.

    Unordered means one per-index failure does not prevent the others.
    Any failure of the call as a whole surfaces as InfrastructureError.
    """

    def __init__(self, store: BaseDocumentStore) -> None:
        self._store = store

    async def execute(self, intents: list[InsertIntent | ReplaceIntent]) -> BulkResult:
        if not intents:
            return BulkResult()

        try:
            result = await self._store.bulk_write(intents, ordered=False)
        except InfrastructureError:
            logger.error("Bulk write of %d intents failed", len(intents))
            raise
        except Exception as e:
            logger.exception("Bulk write of %d intents raised", len(intents))
            raise InfrastructureError(str(e) or type(e).__name__) from e

        stray = [i for i in result.write_error_indices() if not 0 <= i < len(intents)]
        if stray:
            logger.warning("Bulk result reports errors for unknown indices %s", stray)

        logger.info(
            "Bulk write: inserted=%d replaced=%d matched=%d upserted=%d errors=%d",
            result.inserted_count, result.replaced_count, result.matched_count,
            result.upserted_count, len(result.write_errors),
        )
        return result
