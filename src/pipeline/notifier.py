# src/pipeline/notifier.py - v1
"""Cache coherence notifier: committed writes -> signals on the event bus.

Only committed writes produce signals. Inserts and replaces travel in
separate batched ``data-update`` signals; a committed document with
``isValid`` false is announced as a removal instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docwrite.cache.document_cache import cache_key
from docwrite.core.models import CacheSignal, CommittedWrite, ReconciledBatch

if TYPE_CHECKING:
    from docwrite.events.base_event_bus import BaseEventBus

logger = logging.getLogger(__name__)


def build_signals(
    collection: str,
    reconciled: ReconciledBatch,
    cache_enabled: bool = True,
) -> list[CacheSignal]:
    """Signal records for one reconciled batch, in emission order."""
    inserts = reconciled.committed_inserts
    replaces = reconciled.committed_replaces
    signals: list[CacheSignal] = []

    if cache_enabled:
        removed: list[str] = []
        for kind, writes in (("insert", inserts), ("replace", replaces)):
            live, gone = _split_soft_deleted(writes)
            removed.extend(gone)
            if live:
                signals.append(
                    CacheSignal(
                        event="data-update", collection=collection,
                        op="update", kind=kind, changes=live,
                    )
                )
        if removed:
            signals.append(
                CacheSignal(
                    event="data-remove", collection=collection,
                    op="remove", changes=removed,
                )
            )

    if inserts:
        signals.append(
            CacheSignal(
                event="storage-socket-create", collection=collection,
                changes=[w.document for w in inserts],
            )
        )
    if replaces:
        signals.append(
            CacheSignal(
                event="storage-socket-update", collection=collection,
                changes=[w.document for w in replaces],
            )
        )

    if reconciled.committed:
        signals.append(CacheSignal(event="data-received", collection=collection))

    return signals


def _split_soft_deleted(
    writes: list[CommittedWrite],
) -> tuple[list[dict[str, Any]], list[str]]:
    live: list[dict[str, Any]] = []
    gone: list[str] = []
    for write in writes:
        if write.document.get("isValid") is False:
            key = cache_key(write.document)
            if key is not None:
                gone.append(key)
        else:
            live.append(write.document)
    return live, gone


class CacheCoherenceNotifier:
    """Publishes signal records to the event bus.

    The notifier is the only component of the write path that reaches the
    cache, and it does so exclusively through the bus.
    """

    def __init__(self, collection: str, bus: BaseEventBus, cache_enabled: bool = True) -> None:
        self.collection = collection
        self._bus = bus
        self._cache_enabled = cache_enabled

    def notify(self, reconciled: ReconciledBatch) -> list[CacheSignal]:
        signals = build_signals(self.collection, reconciled, self._cache_enabled)
        for signal in signals:
            self._bus.publish(signal)
        logger.debug("Published %d signals for %s", len(signals), self.collection)
        return signals

    def notify_removed(self, ids: list[Any]) -> CacheSignal | None:
        """Announce hard-deleted records (auto-pruning)."""
        if not ids:
            return None
        signal = CacheSignal(
            event="data-remove", collection=self.collection,
            op="remove", changes=[str(i) for i in ids],
        )
        self._bus.publish(signal)
        return signal
