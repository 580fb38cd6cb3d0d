# src/storage/base_document_store.py - v1
"""Abstract document store interface consumed by the write path."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from docwrite.core.models import BulkResult, InsertIntent, ReplaceIntent
from docwrite.dedup.filters import IdentifyingFilter


class BaseDocumentStore(ABC):
    """Unified interface for document storage backends."""

    collection: str

    @abstractmethod
    async def find_one(self, identifying_filter: IdentifyingFilter) -> dict[str, Any] | None:
        """Return at most one stored record matching the filter."""

    @abstractmethod
    async def bulk_write(
        self,
        intents: list[InsertIntent | ReplaceIntent],
        ordered: bool = False,
    ) -> BulkResult:
        """Execute all intents in one call and report per-index outcomes.

        Raises:
            InfrastructureError: If the call failed as a whole.
        """

    @abstractmethod
    async def delete_older_than(self, field: str, cutoff: int) -> list[Any]:
        """Hard-delete records whose ``field`` is below ``cutoff``; return their ids."""

    def close(self) -> None:
        """Release backend resources."""
