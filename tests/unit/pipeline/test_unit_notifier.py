# tests/unit/pipeline/test_unit_notifier.py - v1
"""Tests for pipeline/notifier.py: signals for committed writes only."""

from __future__ import annotations

from docwrite.core.models import CommittedWrite, ReconciledBatch, ItemError
from docwrite.events.memory_bus import MemoryEventBus
from docwrite.pipeline.notifier import CacheCoherenceNotifier, build_signals


def _write(i: int, operation: str, **fields) -> CommittedWrite:
    doc = {"_id": f"oid-{i}", "identifier": f"id-{i}", **fields}
    return CommittedWrite(i, i, operation, doc, db_id=f"oid-{i}")  # type: ignore[arg-type]


class TestBuildSignals:
    def test_inserts_and_replaces_signalled_separately(self):
        batch = ReconciledBatch(committed=[_write(0, "insert"), _write(1, "replace"),
                                           _write(2, "insert")])
        signals = build_signals("entries", batch)
        updates = [s for s in signals if s.event == "data-update"]
        assert [(s.kind, len(s.changes)) for s in updates] == [("insert", 2), ("replace", 1)]
        assert updates[0].changes[0]["_id"] == "oid-0"

    def test_soft_deleted_becomes_removal(self):
        batch = ReconciledBatch(committed=[_write(0, "replace", isValid=False),
                                           _write(1, "replace")])
        signals = build_signals("entries", batch)
        (update,) = [s for s in signals if s.event == "data-update"]
        (remove,) = [s for s in signals if s.event == "data-remove"]
        assert [d["_id"] for d in update.changes] == ["oid-1"]
        assert remove.changes == ["oid-0"]
        assert remove.op == "remove"

    def test_batch_complete_once(self):
        batch = ReconciledBatch(committed=[_write(0, "insert"), _write(1, "insert")])
        events = [s.event for s in build_signals("entries", batch)]
        assert events.count("data-received") == 1
        assert events[-1] == "data-received"

    def test_socket_broadcasts(self):
        batch = ReconciledBatch(committed=[_write(0, "insert"), _write(1, "replace")])
        events = [s.event for s in build_signals("entries", batch)]
        assert "storage-socket-create" in events
        assert "storage-socket-update" in events

    def test_nothing_committed_nothing_signalled(self):
        batch = ReconciledBatch(
            failed=[ItemError(message="dup", http_status=409, original_index=0)]
        )
        assert build_signals("entries", batch) == []

    def test_cache_disabled_keeps_batch_signals(self):
        batch = ReconciledBatch(committed=[_write(0, "insert")])
        events = [s.event for s in build_signals("entries", batch, cache_enabled=False)]
        assert events == ["storage-socket-create", "data-received"]


class TestCacheCoherenceNotifier:
    def test_publishes_to_bus(self):
        bus = MemoryEventBus()
        notifier = CacheCoherenceNotifier("entries", bus)
        signals = notifier.notify(ReconciledBatch(committed=[_write(0, "insert")]))
        assert [name for name, _ in bus.emitted] == [s.event for s in signals]
        assert bus.events_named("data-update")[0]["kind"] == "insert"

    def test_notify_removed(self):
        bus = MemoryEventBus()
        notifier = CacheCoherenceNotifier("entries", bus)
        assert notifier.notify_removed([]) is None
        notifier.notify_removed([1, 2])
        assert bus.events_named("data-remove") == [
            {"collection": "entries", "op": "remove", "changes": ["1", "2"]}
        ]
