# src/logging/context.py - v2
"""Contextual logging support: attach collection, request_id, identifier to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per request and per item.
_collection: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "collection", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_identifier: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "identifier", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    collection: str | None = None
    request_id: str | None = None
    identifier: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        collection=_collection.get(),
        request_id=_request_id.get(),
        identifier=_identifier.get(),
    )


def set_request_context(collection: str, request_id: str | None) -> None:
    """Set request-level context (called once per batch)."""
    _collection.set(collection)
    _request_id.set(request_id)


def set_item_context(identifier: str | None) -> None:
    """Set item-level context (called inside each preparation task)."""
    _identifier.set(identifier)


def clear_context() -> None:
    """Reset all context variables."""
    _collection.set(None)
    _request_id.set(None)
    _identifier.set(None)
