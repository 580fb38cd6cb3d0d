# src/pipeline/reconciler.py - v1
"""Result reconciliation: bulk outcome -> committed writes and item errors.

Every intent index ends up in exactly one of the two lists. Failures are
mapped back to the input batch through the IntentIndexMap, never through
positional arithmetic.
"""

from __future__ import annotations

import copy
import logging
from http import HTTPStatus
from typing import Any

from docwrite.core.constants import DUPLICATE_KEY_CODE
from docwrite.core.errors import StorageConflictError
from docwrite.core.models import (
    BulkResult,
    CommittedWrite,
    InsertIntent,
    IntentIndexMap,
    ItemError,
    ReconciledBatch,
    ReplaceIntent,
    WriteErrorDetail,
)

logger = logging.getLogger(__name__)


def reconcile(
    intents: list[InsertIntent | ReplaceIntent],
    index_map: IntentIndexMap,
    bulk: BulkResult,
) -> ReconciledBatch:
    """Partition the submitted intents by outcome.

    Committed documents get their storage ``_id``: the inserted id for
    inserts, the upserted id for upsert-promoted replaces, otherwise the
    id of the record that was matched during deduplication.
    """
    if len(index_map) != len(intents):
        raise ValueError(
            f"Index map has {len(index_map)} slots for {len(intents)} intents"
        )

    errors_by_index: dict[int, WriteErrorDetail] = {}
    for detail in bulk.write_errors:
        errors_by_index.setdefault(detail.index, detail)

    out = ReconciledBatch()
    for i, intent in enumerate(intents):
        slot = index_map.slot(i)
        detail = errors_by_index.get(i)

        if detail is not None:
            out.failed.append(_storage_failure(i, slot.original_index, intent, detail))
            continue

        if isinstance(intent, InsertIntent):
            db_id = bulk.inserted_id_for(i)
            out.committed.append(
                CommittedWrite(
                    intent_index=i,
                    original_index=slot.original_index,
                    operation="insert",
                    document=_with_id(intent.document, db_id),
                    db_id=db_id,
                )
            )
        else:
            upserted_id = bulk.upserted_id_for(i)
            db_id = upserted_id if upserted_id is not None else slot.existing_id
            out.committed.append(
                CommittedWrite(
                    intent_index=i,
                    original_index=slot.original_index,
                    operation="replace",
                    document=_with_id(intent.document, db_id),
                    db_id=db_id,
                    upserted=upserted_id is not None,
                )
            )

    if out.failed:
        logger.warning(
            "%d of %d intents failed in storage", len(out.failed), len(intents)
        )
    return out


def _with_id(document: dict[str, Any], db_id: Any) -> dict[str, Any]:
    doc = copy.deepcopy(document)
    if db_id is not None:
        doc["_id"] = db_id
    return doc


def _storage_failure(
    intent_index: int,
    original_index: int,
    intent: InsertIntent | ReplaceIntent,
    detail: WriteErrorDetail,
) -> ItemError:
    status = (
        HTTPStatus.CONFLICT if detail.code == DUPLICATE_KEY_CODE
        else HTTPStatus.INTERNAL_SERVER_ERROR
    )
    error = StorageConflictError(detail.message or "Write failed", detail.code, status)

    identifier = intent.document.get("identifier")
    if identifier is None and isinstance(intent, ReplaceIntent):
        identifier = intent.identifying_filter.best_identifier()

    return ItemError(
        original_index=original_index,
        operation_index=intent_index,
        identifier=identifier,
        message=error.message,
        http_status=int(error.http_status),
        operation_type=intent.kind,
        code=error.code,
    )
