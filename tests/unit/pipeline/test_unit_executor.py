# tests/unit/pipeline/test_unit_executor.py - v1
"""Tests for pipeline/executor.py: single unordered bulk call."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from docwrite.core.errors import InfrastructureError
from docwrite.core.models import BulkResult, InsertIntent
from docwrite.pipeline.executor import BulkWriteExecutor


class TestBulkWriteExecutor:
    @pytest.mark.asyncio
    async def test_submits_unordered(self):
        store = AsyncMock()
        store.bulk_write.return_value = BulkResult(inserted_count=1)
        intents = [InsertIntent(document={"identifier": "a"})]
        result = await BulkWriteExecutor(store).execute(intents)
        assert result.inserted_count == 1
        store.bulk_write.assert_awaited_once_with(intents, ordered=False)

    @pytest.mark.asyncio
    async def test_no_intents_no_call(self):
        store = AsyncMock()
        result = await BulkWriteExecutor(store).execute([])
        assert result == BulkResult()
        store.bulk_write.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped(self):
        store = AsyncMock()
        store.bulk_write.side_effect = ConnectionError("connection reset")
        with pytest.raises(InfrastructureError) as exc:
            await BulkWriteExecutor(store).execute([InsertIntent(document={})])
        assert exc.value.message == "connection reset"
        assert isinstance(exc.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_infrastructure_error_passes_through(self):
        store = AsyncMock()
        error = InfrastructureError("Bulk write failed: timeout")
        store.bulk_write.side_effect = error
        with pytest.raises(InfrastructureError) as exc:
            await BulkWriteExecutor(store).execute([InsertIntent(document={})])
        assert exc.value is error
