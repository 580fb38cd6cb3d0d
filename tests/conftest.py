# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides sample documents, caller contexts, in-memory collaborators and a
fully wired engine. No external dependencies: storage and events are
in-process.
"""

from __future__ import annotations

from typing import Any

import pytest

from docwrite.api.facade import DocumentWriteEngine
from docwrite.config.settings import Settings
from docwrite.core.models import CallerContext
from docwrite.events.memory_bus import MemoryEventBus
from docwrite.security.authorizer import AllowAllAuthorizer, PermissionAuthorizer
from docwrite.storage.memory_store import MemoryDocumentStore

# 2023-11-14T22:13:20Z
BASE_DATE = 1700000000000


def make_entry(offset_min: int = 0, **fields: Any) -> dict[str, Any]:
    """Valid CGM entry ``offset_min`` minutes after BASE_DATE."""
    doc: dict[str, Any] = {
        "device": "xdrip",
        "date": BASE_DATE + offset_min * 60_000,
        "utcOffset": 0,
        "app": "xdrip",
        "type": "sgv",
        "sgv": 120 + offset_min,
    }
    doc.update(fields)
    return doc


# === FIXTURES: Settings and callers ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def caller() -> CallerContext:
    return CallerContext(subject="uploader", permissions=["*"], request_id="req-1")


@pytest.fixture
def read_only_caller() -> CallerContext:
    return CallerContext(subject="viewer", permissions=["api:*:read"])


# === FIXTURES: Collaborators ===


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore(collection="entries")


@pytest.fixture
def event_bus() -> MemoryEventBus:
    return MemoryEventBus()


@pytest.fixture
def allow_all() -> AllowAllAuthorizer:
    return AllowAllAuthorizer()


@pytest.fixture
def engine(
    memory_store: MemoryDocumentStore,
    event_bus: MemoryEventBus,
    settings: Settings,
) -> DocumentWriteEngine:
    """Engine for ``entries`` wired to in-memory store and bus."""
    return DocumentWriteEngine(
        "entries",
        store=memory_store,
        bus=event_bus,
        authorizer=PermissionAuthorizer(),
        settings=settings,
    )


@pytest.fixture
def sample_entries() -> list[dict[str, Any]]:
    """Three new entries with distinct identity keys."""
    return [make_entry(i * 5) for i in range(3)]


@pytest.fixture
def entry_factory():
    """The ``make_entry`` helper, for tests that need custom entries."""
    return make_entry
