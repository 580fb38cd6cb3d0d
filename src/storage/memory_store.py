# src/storage/memory_store.py - v1
"""In-process document store (STORAGE_BACKEND=memory).

Mirrors the Mongo semantics the write path relies on: a unique index on
``identifier``, ``_id`` assigned on insert, replace keeps ``_id``, replace
without a match is a no-op unless upsert is requested, and unordered bulk
writes report errors per index instead of stopping.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from bson import ObjectId

from docwrite.core.constants import DUPLICATE_KEY_CODE
from docwrite.core.models import (
    BulkResult,
    IndexedId,
    InsertIntent,
    ReplaceIntent,
    WriteErrorDetail,
)
from docwrite.dedup.filters import IdentifyingFilter
from docwrite.storage.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class _DuplicateKey(Exception):
    pass


class MemoryDocumentStore(BaseDocumentStore):
    """Dict-backed store for tests, tooling and single-process deployments."""

    def __init__(self, collection: str = "entries") -> None:
        self.collection = collection
        self._records: dict[ObjectId, dict[str, Any]] = {}

    async def find_one(self, identifying_filter: IdentifyingFilter) -> dict[str, Any] | None:
        """Return a copy of the first record matching the filter."""
        record = self._find(identifying_filter)
        return copy.deepcopy(record) if record is not None else None

    async def bulk_write(
        self,
        intents: list[InsertIntent | ReplaceIntent],
        ordered: bool = False,
    ) -> BulkResult:
        """Apply intents one by one, collecting per-index errors."""
        result = BulkResult()

        for index, intent in enumerate(intents):
            try:
                if isinstance(intent, InsertIntent):
                    _id = self._insert(intent.document)
                    result.inserted_count += 1
                    result.inserted_ids.append(IndexedId(index=index, id=_id))
                else:
                    self._replace(index, intent, result)
            except _DuplicateKey as e:
                result.write_errors.append(
                    WriteErrorDetail(index=index, code=DUPLICATE_KEY_CODE, message=str(e))
                )
                if ordered:
                    break

        logger.debug(
            "Bulk write on %s: %d inserted, %d replaced, %d upserted, %d errors",
            self.collection, result.inserted_count, result.replaced_count,
            result.upserted_count, len(result.write_errors),
        )
        return result

    async def delete_older_than(self, field: str, cutoff: int) -> list[Any]:
        """Hard-delete records whose numeric ``field`` is below ``cutoff``."""
        doomed = [
            _id for _id, rec in self._records.items()
            if isinstance(rec.get(field), (int, float)) and rec[field] < cutoff
        ]
        for _id in doomed:
            del self._records[_id]
        return doomed

    def all_documents(self) -> list[dict[str, Any]]:
        """Snapshot of every stored record."""
        return [copy.deepcopy(rec) for rec in self._records.values()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, identifying_filter: IdentifyingFilter) -> dict[str, Any] | None:
        if identifying_filter.is_empty:
            return None
        for record in self._records.values():
            if identifying_filter.matches(record):
                return record
        return None

    def _insert(self, document: dict[str, Any]) -> ObjectId:
        doc = copy.deepcopy(document)
        _id = doc.get("_id") or ObjectId()
        if _id in self._records:
            raise _DuplicateKey(self._dup_message("_id", _id))
        self._check_identifier(doc.get("identifier"), exclude=None)
        doc["_id"] = _id
        self._records[_id] = doc
        return _id

    def _replace(self, index: int, intent: ReplaceIntent, result: BulkResult) -> None:
        existing = self._find(intent.identifying_filter)
        if existing is None:
            if intent.upsert:
                _id = self._insert(intent.document)
                result.upserted_count += 1
                result.upserted_ids.append(IndexedId(index=index, id=_id))
            return

        _id = existing["_id"]
        self._check_identifier(intent.document.get("identifier"), exclude=_id)
        doc = copy.deepcopy(intent.document)
        doc["_id"] = _id
        result.matched_count += 1
        if doc != existing:
            result.replaced_count += 1
        self._records[_id] = doc

    def _check_identifier(self, identifier: Any, exclude: ObjectId | None) -> None:
        if identifier is None:
            return
        for _id, rec in self._records.items():
            if _id != exclude and rec.get("identifier") == identifier:
                raise _DuplicateKey(self._dup_message("identifier", identifier))

    def _dup_message(self, field: str, value: Any) -> str:
        return (
            f"E11000 duplicate key error collection: {self.collection} "
            f"index: {field}_1 dup key: {{ {field}: \"{value}\" }}"
        )
