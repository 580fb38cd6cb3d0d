# src/storage/mongo_store.py - v1
"""MongoDB document store (STORAGE_BACKEND=mongo).

Blocking pymongo calls run in worker threads so that concurrent dedup
lookups of one batch do not stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pymongo import ASCENDING, InsertOne, MongoClient, ReplaceOne
from pymongo.errors import BulkWriteError, PyMongoError

from docwrite.core.errors import InfrastructureError
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


class MongoDocumentStore(BaseDocumentStore):
    """pymongo-backed store with a unique sparse index on ``identifier``."""

    def __init__(
        self,
        mongo_url: str,
        database: str,
        collection: str,
        client: MongoClient | None = None,
    ) -> None:
        self.collection = collection
        self._client = client or MongoClient(mongo_url)
        self._collection = self._client[database][collection]

    async def ensure_indexes(self) -> None:
        """Create the unique identifier index the dedup race relies on."""
        try:
            await asyncio.to_thread(
                self._collection.create_index,
                [("identifier", ASCENDING)],
                unique=True,
                sparse=True,
            )
        except PyMongoError as e:
            raise InfrastructureError(f"Index creation failed: {e}") from e

    async def find_one(self, identifying_filter: IdentifyingFilter) -> dict[str, Any] | None:
        """Look up one record by its identifying filter."""
        try:
            return await asyncio.to_thread(
                self._collection.find_one, identifying_filter.to_mongo()
            )
        except PyMongoError as e:
            raise InfrastructureError(f"Lookup failed: {e}") from e

    async def bulk_write(
        self,
        intents: list[InsertIntent | ReplaceIntent],
        ordered: bool = False,
    ) -> BulkResult:
        """Submit all intents as one bulk write.

        Per-index failures arrive as BulkWriteError and are reported in the
        result; any other driver error fails the whole call.
        """
        if not intents:
            return BulkResult()

        operations: list[InsertOne | ReplaceOne] = []
        inserted_docs: dict[int, dict[str, Any]] = {}
        for index, intent in enumerate(intents):
            doc = dict(intent.document)
            if isinstance(intent, InsertIntent):
                # pymongo assigns _id on this dict before sending.
                inserted_docs[index] = doc
                operations.append(InsertOne(doc))
            else:
                operations.append(
                    ReplaceOne(
                        intent.identifying_filter.to_mongo(), doc, upsert=intent.upsert
                    )
                )

        try:
            result = await asyncio.to_thread(
                self._collection.bulk_write, operations, ordered=ordered
            )
            details = result.bulk_api_result
        except BulkWriteError as e:
            details = e.details
        except PyMongoError as e:
            raise InfrastructureError(f"Bulk write failed: {e}") from e

        return _to_bulk_result(details, inserted_docs)

    async def delete_older_than(self, field: str, cutoff: int) -> list[Any]:
        """Hard-delete records older than ``cutoff`` and return their ids."""
        query = {field: {"$lt": cutoff}}
        try:
            rows = await asyncio.to_thread(
                lambda: list(self._collection.find(query, {"_id": 1}))
            )
            ids = [row["_id"] for row in rows]
            if ids:
                await asyncio.to_thread(
                    self._collection.delete_many, {"_id": {"$in": ids}}
                )
        except PyMongoError as e:
            raise InfrastructureError(f"Prune failed: {e}") from e
        return ids

    def close(self) -> None:
        """Close the Mongo client."""
        self._client.close()


def _to_bulk_result(
    details: dict[str, Any], inserted_docs: dict[int, dict[str, Any]]
) -> BulkResult:
    """Translate a pymongo bulk API result document."""
    write_errors = [
        WriteErrorDetail(
            index=err["index"],
            code=err.get("code"),
            message=err.get("errmsg", ""),
        )
        for err in details.get("writeErrors", [])
    ]
    failed = {e.index for e in write_errors}

    inserted_ids = [
        IndexedId(index=index, id=doc["_id"])
        for index, doc in inserted_docs.items()
        if index not in failed and "_id" in doc
    ]
    upserted_ids = [
        IndexedId(index=item["index"], id=item["_id"])
        for item in details.get("upserted", [])
    ]

    return BulkResult(
        inserted_count=details.get("nInserted", 0),
        replaced_count=details.get("nModified", 0),
        matched_count=details.get("nMatched", 0),
        upserted_count=details.get("nUpserted", 0),
        write_errors=write_errors,
        inserted_ids=inserted_ids,
        upserted_ids=upserted_ids,
    )
