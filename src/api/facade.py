# src/api/facade.py - v2
"""Public API facade: single entry point for batched document writes.

Usage:
    from docwrite.api.facade import DocumentWriteEngine
    engine = DocumentWriteEngine("entries")
    response = await engine.process_batch(caller, documents)

The engine wires the stages in order:
  1. boundary validation of the request body
  2. concurrent per-document preparation (dedup, permission, validation)
  3. one unordered bulk write
  4. reconciliation of the bulk result into committed / failed
  5. cache coherence signals for committed writes only
  6. optional auto-pruning
  7. status selection
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from docwrite.api.models import BatchResponse
from docwrite.cache.document_cache import DocumentCache
from docwrite.config.collections import get_collection
from docwrite.config.settings import Settings
from docwrite.core.constants import Msg
from docwrite.core.errors import DocWriteError, InfrastructureError
from docwrite.core.models import CallerContext
from docwrite.events.bus_factory import create_event_bus
from docwrite.logging.context import clear_context, set_request_context
from docwrite.pipeline.autoprune import AutoPruner
from docwrite.pipeline.composer import compose_failure, compose_rejection, compose_response
from docwrite.pipeline.executor import BulkWriteExecutor
from docwrite.pipeline.notifier import CacheCoherenceNotifier
from docwrite.pipeline.orchestrator import BatchOrchestrator
from docwrite.pipeline.preparer import DocumentPreparer
from docwrite.pipeline.reconciler import reconcile
from docwrite.security.authorizer import PermissionAuthorizer
from docwrite.storage.store_factory import create_document_store

if TYPE_CHECKING:
    from docwrite.events.base_event_bus import BaseEventBus
    from docwrite.security.authorizer import BaseAuthorizer
    from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class DocumentWriteEngine:
    """Deduplicating write path for one collection.

    Args:
        collection: Collection name (see docwrite.config.collections).
        store: Storage backend. Built from settings if None.
        bus: Event bus for cache signals. Built from settings if None.
        authorizer: Permission collaborator. PermissionAuthorizer if None.
        settings: Global settings. Loaded from .env if None.
    """

    def __init__(
        self,
        collection: str,
        store: BaseDocumentStore | None = None,
        bus: BaseEventBus | None = None,
        authorizer: BaseAuthorizer | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings()
        spec = get_collection(collection)

        self.collection = collection
        self.settings = settings
        self.store = store if store is not None else create_document_store(collection, settings)
        self.bus = bus if bus is not None else create_event_bus(settings)
        self.authorizer = authorizer if authorizer is not None else PermissionAuthorizer()

        self.cache: DocumentCache | None = None
        if settings.cache_enabled:
            self.cache = DocumentCache(collection)
            self.cache.attach(self.bus)

        self._orchestrator = BatchOrchestrator(
            DocumentPreparer(spec, self.store, self.authorizer, settings)
        )
        self._executor = BulkWriteExecutor(self.store)
        self._notifier = CacheCoherenceNotifier(
            collection, self.bus, cache_enabled=settings.cache_enabled
        )
        self._pruner: AutoPruner | None = None
        if settings.autoprune_days:
            self._pruner = AutoPruner(
                self.store, self._notifier, spec.prune_field, settings.autoprune_days
            )

    async def process_batch(self, caller: CallerContext, body: Any) -> BatchResponse:
        """Process one request body and return the composed response.

        Never raises for document-level or storage-level failures; those
        are reported in the response.
        """
        set_request_context(self.collection, caller.request_id)
        try:
            return await self._process(caller, body)
        finally:
            clear_context()

    async def _process(self, caller: CallerContext, body: Any) -> BatchResponse:
        documents, rejection = normalize_body(body)
        if rejection is not None:
            logger.info("Rejected request body: %s", rejection.message)
            return rejection

        now_ms = int(time.time() * 1000)
        prepared = await self._orchestrator.prepare_batch(documents, caller, now_ms)

        if not prepared.intents:
            return compose_response(prepared)

        try:
            bulk = await self._executor.execute(prepared.intents)
        except InfrastructureError as e:
            logger.error("Batch failed in storage: %s", e.message)
            return compose_failure(prepared, e)

        reconciled = reconcile(prepared.intents, prepared.index_map, bulk)
        self._notifier.notify(reconciled)

        if reconciled.committed and self._pruner is not None:
            await self._prune(now_ms)

        response = compose_response(prepared, reconciled, bulk)
        logger.info(
            "Batch done: status=%d inserted=%d replaced=%d errors=%d",
            response.status, response.inserted_count,
            response.replaced_count, len(response.errors),
        )
        return response

    async def _prune(self, now_ms: int) -> None:
        """Post-write pruning; failures never change the batch outcome (non-fatal)."""
        try:
            await self._pruner.prune(now_ms)  # type: ignore[union-attr]
        except DocWriteError:
            logger.exception("Auto-pruning failed (non-fatal)")

    def close(self) -> None:
        self.store.close()
        self.bus.close()


async def process_batch(
    engine: DocumentWriteEngine,
    caller: CallerContext,
    documents: Any,
) -> BatchResponse:
    """Module-level shortcut for ``engine.process_batch``."""
    return await engine.process_batch(caller, documents)


def normalize_body(body: Any) -> tuple[list[Any], BatchResponse | None]:
    """Turn a request body into a batch, or a 400 response.

    A single object becomes a batch of one. Missing or empty bodies and
    empty arrays are rejected before any preparation starts.
    """
    if isinstance(body, list):
        if not body:
            return [], compose_rejection(Msg.BAD_REQUEST_BODY_EMPTY_ARRAY)
        return body, None
    if isinstance(body, dict) and body:
        return [body], None
    return [], compose_rejection(Msg.BAD_REQUEST_BODY)
