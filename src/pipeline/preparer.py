# src/pipeline/preparer.py - v2
"""Per-document preparation: one input item -> one write intent or one item error.

Steps for each document:
  1. boundary typing, date normalisation, identity resolution, caller
     attribution (``subject``)
  2. dedup classification (one storage read)
  3. REPLACE: update permission on the stored record, update validation
     (read-only, immutable fields), If-Unmodified-Since check, stamping
  4. INSERT: create permission, create validation, stamping

prepare() never raises for document-level problems; they come back as an
ItemError on the outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from docwrite.core.constants import Msg
from docwrite.core.errors import (
    DocumentValidationError,
    DocWriteError,
    PreconditionFailedError,
    ReadOnlyError,
)
from docwrite.core.models import (
    CallerContext,
    Document,
    InsertIntent,
    ItemError,
    OperationType,
    ReplaceIntent,
)
from docwrite.dedup.classifier import Classification, DedupClassifier
from docwrite.identity.dates import floor_seconds, normalize_date, resolve_modified, to_epoch_ms
from docwrite.identity.resolver import resolve_identifier
from docwrite.logging.context import set_item_context
from docwrite.validation.common import ValidationFailure, ValidationLimits
from docwrite.validation.create import validate_create
from docwrite.validation.update import validate_update

if TYPE_CHECKING:
    from docwrite.config.collections import CollectionSpec
    from docwrite.config.settings import Settings
    from docwrite.security.authorizer import BaseAuthorizer
    from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


@dataclass
class PreparationOutcome:
    """Exactly one of ``intent`` / ``error`` is set."""

    original_index: int
    intent: InsertIntent | ReplaceIntent | None = None
    error: ItemError | None = None
    existing_id: Any = None


class DocumentPreparer:
    """Turns one incoming document into a write intent.

    Args:
        collection: Collection configuration (name, fallback dedup fields).
        store: Storage used for the dedup lookup.
        authorizer: Permission check collaborator.
        settings: Application settings (validation bounds, upsert flag).
    """

    def __init__(
        self,
        collection: CollectionSpec,
        store: BaseDocumentStore,
        authorizer: BaseAuthorizer,
        settings: Settings | None = None,
    ) -> None:
        self._collection = collection
        self._classifier = DedupClassifier(store, collection.dedup_fallback_fields)
        self._authorizer = authorizer
        self._limits = (
            ValidationLimits.from_settings(settings) if settings else ValidationLimits()
        )
        self._replace_upsert = settings.replace_upsert if settings else False
        self._created_at_fallback = settings.created_at_fallback if settings else False

    async def prepare(
        self,
        index: int,
        raw: Any,
        caller: CallerContext,
        now_ms: int,
    ) -> PreparationOutcome:
        """Prepare the item at ``index`` of the batch."""
        operation: OperationType = "unknown"
        identifier = raw.get("identifier") if isinstance(raw, dict) else None

        try:
            doc = Document.parse(raw)
            normalize_date(doc, self._created_at_fallback)
            identifier = resolve_identifier(doc)
            set_item_context(identifier)
            # Attribution takes part in the immutability check against the stored record.
            self._stamp_subject(doc, caller)

            classification = await self._classifier.classify(doc)

            if classification.operation == "replace":
                operation = "replace"
                intent = await self._prepare_replace(doc, classification, caller, now_ms)
                existing_id = classification.existing.get("_id")  # type: ignore[union-attr]
                return PreparationOutcome(index, intent=intent, existing_id=existing_id)

            operation = "insert"
            intent = await self._prepare_insert(doc, caller, now_ms)
            return PreparationOutcome(index, intent=intent)

        except DocWriteError as e:
            logger.info("Item %d rejected (%s, %d): %s", index, operation, e.http_status, e.message)
            return self._failed(index, identifier, e.message, e.http_status, operation)
        except Exception as e:
            logger.exception("Item %d preparation failed unexpectedly", index)
            return self._failed(
                index, identifier, str(e) or "Preparation failed",
                HTTPStatus.INTERNAL_SERVER_ERROR, operation,
            )

    # ------------------------------------------------------------------

    async def _prepare_replace(
        self,
        doc: dict[str, Any],
        classification: Classification,
        caller: CallerContext,
        now_ms: int,
    ) -> ReplaceIntent:
        stored = classification.existing or {}
        await self._authorizer.demand_permission(
            caller, self._action("update"), doc.get("identifier"), stored
        )

        failure = validate_update(doc, stored, self._limits, is_deduplication=True)
        if failure is not None:
            raise _to_error(failure)

        self._check_unmodified_since(stored, caller)

        doc["srvModified"] = now_ms
        doc["srvCreated"] = stored.get("srvCreated") or now_ms
        self._stamp_subject(doc, caller)

        return ReplaceIntent(
            identifying_filter=classification.identifying_filter,
            document=doc,
            upsert=self._replace_upsert,
        )

    async def _prepare_insert(
        self, doc: dict[str, Any], caller: CallerContext, now_ms: int
    ) -> InsertIntent:
        await self._authorizer.demand_permission(
            caller, self._action("create"), doc.get("identifier")
        )

        failure = validate_create(doc, self._limits)
        if failure is not None:
            raise _to_error(failure)

        doc["srvCreated"] = now_ms
        doc["srvModified"] = now_ms
        self._stamp_subject(doc, caller)

        return InsertIntent(document=doc)

    @staticmethod
    def _stamp_subject(doc: dict[str, Any], caller: CallerContext) -> None:
        if caller.subject:
            doc["subject"] = caller.subject

    @staticmethod
    def _check_unmodified_since(stored: dict[str, Any], caller: CallerContext) -> None:
        since = caller.if_unmodified_since
        if since is None:
            return
        modified = resolve_modified(stored)
        if modified is not None and floor_seconds(modified) > floor_seconds(to_epoch_ms(since)):
            raise PreconditionFailedError(Msg.MODIFIED_SINCE)

    def _action(self, verb: str) -> str:
        return f"api:{self._collection.name}:{verb}"

    @staticmethod
    def _failed(
        index: int,
        identifier: Any,
        message: str,
        http_status: int,
        operation: OperationType,
    ) -> PreparationOutcome:
        return PreparationOutcome(
            index,
            error=ItemError(
                original_index=index,
                identifier=identifier if isinstance(identifier, str) else None,
                message=message,
                http_status=int(http_status),
                operation_type=operation,
            ),
        )


def _to_error(failure: ValidationFailure) -> DocWriteError:
    if failure.http_status == HTTPStatus.UNPROCESSABLE_ENTITY:
        return ReadOnlyError(failure.message)
    return DocumentValidationError(failure.message, failure.http_status)
