# src/pipeline/orchestrator.py - v2
"""Batch orchestrator: prepares every document concurrently.

All preparations start together and the orchestrator waits for every one
of them to settle. One failing document never cancels its siblings, and
the resulting intent list keeps input-batch order, which is the order the
bulk write sees.
"""

from __future__ import annotations

import asyncio
import logging
import time
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from docwrite.core.models import CallerContext, ItemError, PreparedBatch

if TYPE_CHECKING:
    from docwrite.pipeline.preparer import DocumentPreparer, PreparationOutcome

logger = logging.getLogger(__name__)


class BatchOrchestrator:
    """Fan out per-document preparation and assemble the intent list.

    Args:
        preparer: Per-document preparer shared by all items of a batch.
    """

    def __init__(self, preparer: DocumentPreparer) -> None:
        self._preparer = preparer

    async def prepare_batch(
        self,
        documents: list[Any],
        caller: CallerContext,
        now_ms: int | None = None,
    ) -> PreparedBatch:
        """Prepare all documents and return intents plus pre-check errors.

        Args:
            documents: Non-empty batch of raw documents.
            caller: Authenticated caller.
            now_ms: Server time stamped on every document of the batch.
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        settled = await asyncio.gather(
            *(
                self._preparer.prepare(index, raw, caller, now_ms)
                for index, raw in enumerate(documents)
            ),
            return_exceptions=True,
        )

        batch = PreparedBatch()
        for index, outcome in enumerate(settled):
            if isinstance(outcome, BaseException):
                logger.error("Preparation of item %d raised: %r", index, outcome)
                batch.errors.append(
                    ItemError(
                        original_index=index,
                        message=str(outcome) or "Preparation failed",
                        http_status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
                    )
                )
                continue
            _collect(batch, outcome)

        logger.info(
            "Prepared batch: %d documents, %d intents, %d rejected",
            len(documents), len(batch.intents), len(batch.errors),
        )
        return batch


def _collect(batch: PreparedBatch, outcome: PreparationOutcome) -> None:
    if outcome.error is not None:
        batch.errors.append(outcome.error)
        return
    if outcome.intent is None:
        return
    batch.index_map.add(outcome.original_index, outcome.existing_id)
    batch.intents.append(outcome.intent)
