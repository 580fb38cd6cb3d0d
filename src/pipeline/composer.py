# src/pipeline/composer.py - v1
"""Response composer: deterministic status selection for one batch."""

from __future__ import annotations

from http import HTTPStatus

from docwrite.api.models import BatchResponse
from docwrite.core.constants import Msg
from docwrite.core.errors import InfrastructureError
from docwrite.core.models import BulkResult, ItemError, PreparedBatch, ReconciledBatch


def compose_response(
    prepared: PreparedBatch,
    reconciled: ReconciledBatch | None = None,
    bulk: BulkResult | None = None,
) -> BatchResponse:
    """Select the status for a batch whose bulk call did not fail.

    Rules, first match wins:
      - no intents, errors -> 400 with the pre-check errors
      - no intents, no errors -> 200 with an informational message
      - errors and at least one committed write -> 207
      - errors and nothing committed -> 400
      - no errors -> 200 with counts
    """
    if not prepared.intents:
        if prepared.errors:
            return BatchResponse(
                status=int(HTTPStatus.BAD_REQUEST),
                message=Msg.PRE_PROCESSING_FAILED,
                errors=list(prepared.errors),
            )
        return BatchResponse(status=int(HTTPStatus.OK), message=Msg.NO_OPERATIONS)

    reconciled = reconciled or ReconciledBatch()
    bulk = bulk or BulkResult()
    errors = list(prepared.errors) + list(reconciled.failed)

    if not errors:
        status = HTTPStatus.OK
    elif reconciled.committed:
        status = HTTPStatus.MULTI_STATUS
    else:
        status = HTTPStatus.BAD_REQUEST

    return BatchResponse(
        status=int(status),
        inserted_count=bulk.inserted_count,
        replaced_count=bulk.replaced_count,
        matched_count=bulk.matched_count,
        upserted_count=bulk.upserted_count,
        errors=errors,
    )


def compose_failure(prepared: PreparedBatch, error: InfrastructureError) -> BatchResponse:
    """500 response for a bulk call that failed as a whole.

    Pre-check errors are kept so the caller knows which documents never
    reached storage. Counts stay at zero: nothing is known to be committed.
    """
    batch_error = ItemError(
        message=f"Bulk write execution failed: {error.message}",
        http_status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
    )
    return BatchResponse(
        status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
        message=Msg.STORAGE_ERROR,
        errors=[*prepared.errors, batch_error],
    )


def compose_rejection(message: str) -> BatchResponse:
    """400 for a structurally invalid request body."""
    return BatchResponse(status=int(HTTPStatus.BAD_REQUEST), message=message)
