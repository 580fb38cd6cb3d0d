# src/storage/store_factory.py - v1
"""Factory for document store instantiation."""

from __future__ import annotations

from docwrite.config.settings import Settings
from docwrite.storage.base_document_store import BaseDocumentStore


def create_document_store(
    collection: str, settings: Settings | None = None
) -> BaseDocumentStore:
    """Instantiate the configured storage backend for one collection.

    Args:
        collection: Collection name.
        settings: Application settings. Defaults to the memory backend.

    Returns:
        Configured BaseDocumentStore implementation.
    """
    backend = "memory" if settings is None else settings.storage_backend

    if backend == "memory":
        from docwrite.storage.memory_store import MemoryDocumentStore
        return MemoryDocumentStore(collection=collection)

    if backend == "mongo":
        from docwrite.storage.mongo_store import MongoDocumentStore
        if settings is None or not settings.mongo_url:
            raise ValueError("MONGO_URL must be set when STORAGE_BACKEND=mongo")
        return MongoDocumentStore(
            mongo_url=settings.mongo_url,
            database=settings.mongo_database,
            collection=collection,
        )

    raise ValueError(f"Unsupported storage backend: {backend!r}")
