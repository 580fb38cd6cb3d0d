# src/core/errors.py - v1
"""Write-path error taxonomy.

Every error carries the HTTP-style status reported for the failing item.
The first four kinds are per-document and are converted to item errors by
the preparer. StorageConflictError is only known after the bulk call.
InfrastructureError is the single kind that fails a whole batch.
"""

from __future__ import annotations

from http import HTTPStatus


class DocWriteError(Exception):
    """Base class for all write-path errors."""

    http_status: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status


class DocumentValidationError(DocWriteError):
    """Malformed, missing or immutable field."""

    http_status = HTTPStatus.BAD_REQUEST


class PermissionDeniedError(DocWriteError):
    """Caller lacks the capability for the requested action."""

    http_status = HTTPStatus.FORBIDDEN


class PreconditionFailedError(DocWriteError):
    """Stored record was modified after the caller's last read."""

    http_status = HTTPStatus.PRECONDITION_FAILED


class ReadOnlyError(DocWriteError):
    """Target record is flagged read-only."""

    http_status = HTTPStatus.UNPROCESSABLE_ENTITY


class StorageConflictError(DocWriteError):
    """Per-index failure reported by the bulk write (e.g. duplicate key)."""

    http_status = HTTPStatus.CONFLICT

    def __init__(
        self, message: str, code: int | str | None = None, http_status: int | None = None
    ) -> None:
        super().__init__(message, http_status)
        self.code = code


class InfrastructureError(DocWriteError):
    """The storage call failed as a whole; nothing is known to be committed."""

    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
