# src/events/memory_bus.py - v2
"""In-process event bus (EVENT_BUS_BACKEND=memory)."""

from __future__ import annotations

from typing import Any

from docwrite.events.base_event_bus import BaseEventBus, EventHandler, SubscriberRegistry


class MemoryEventBus(BaseEventBus):
    """Synchronous dispatch to subscribers; keeps a log of emitted events.

    The log grows with every emit, so this bus suits tests and one-shot
    CLI runs. Long-running services should use the redis backend.
    """

    def __init__(self) -> None:
        self._subscribers = SubscriberRegistry()
        self.emitted: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self.emitted.append((event_name, payload))
        self._subscribers.dispatch(event_name, payload)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._subscribers.add(event_name, handler)

    def events_named(self, event_name: str) -> list[dict[str, Any]]:
        """Payloads emitted under ``event_name``, oldest first."""
        return [payload for name, payload in self.emitted if name == event_name]

    def clear(self) -> None:
        self.emitted.clear()
