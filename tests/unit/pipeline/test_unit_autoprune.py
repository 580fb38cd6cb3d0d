# tests/unit/pipeline/test_unit_autoprune.py - v1
"""Tests for pipeline/autoprune.py."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from docwrite.pipeline.autoprune import DAY_MS, AutoPruner


class TestAutoPruner:
    def test_cutoff(self):
        pruner = AutoPruner(AsyncMock(), MagicMock(), "date", days=2)
        assert pruner.cutoff(10 * DAY_MS) == 8 * DAY_MS

    @pytest.mark.asyncio
    async def test_prune_deletes_and_announces(self):
        store = AsyncMock()
        store.delete_older_than.return_value = ["a", "b"]
        notifier = MagicMock()
        pruner = AutoPruner(store, notifier, "date", days=1)
        assert await pruner.prune(5 * DAY_MS) == 2
        store.delete_older_than.assert_awaited_once_with("date", 4 * DAY_MS)
        notifier.notify_removed.assert_called_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_nothing_expired(self):
        store = AsyncMock()
        store.delete_older_than.return_value = []
        notifier = MagicMock()
        assert await AutoPruner(store, notifier, "date", days=1).prune(DAY_MS) == 0
        notifier.notify_removed.assert_not_called()
