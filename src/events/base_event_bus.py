# src/events/base_event_bus.py - v2
"""Abstract event bus interface.

Emission is fire-and-forget: no acknowledgement, and a failing subscriber
never fails the write that produced the signal.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from docwrite.core.models import CacheSignal

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]


class SubscriberRegistry:
    """In-process handlers keyed by event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def add(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def dispatch(self, event_name: str, payload: dict[str, Any]) -> None:
        """Call every handler for ``event_name``; handler errors are logged."""
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed (non-fatal)", event_name)


class BaseEventBus(ABC):
    """Unified interface for signal transports."""

    @abstractmethod
    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        """Publish one event."""

    @abstractmethod
    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Register an in-process handler for ``event_name``."""

    def publish(self, signal: CacheSignal) -> None:
        """Publish a typed signal record."""
        self.emit(signal.event, signal.payload())

    def close(self) -> None:
        """Release transport resources."""
