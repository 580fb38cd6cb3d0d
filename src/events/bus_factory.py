# src/events/bus_factory.py - v1
"""Factory for event bus instantiation."""

from __future__ import annotations

from docwrite.config.settings import Settings
from docwrite.events.base_event_bus import BaseEventBus


def create_event_bus(settings: Settings | None = None) -> BaseEventBus:
    """Instantiate the configured event bus.

    Args:
        settings: Application settings. Defaults to the in-process bus.

    Returns:
        Configured BaseEventBus implementation.
    """
    backend = "memory" if settings is None else settings.event_bus_backend

    if backend == "memory":
        from docwrite.events.memory_bus import MemoryEventBus
        return MemoryEventBus()

    if backend == "redis":
        from docwrite.events.redis_bus import RedisEventBus
        if settings is None or not settings.redis_url:
            raise ValueError("REDIS_URL must be set when EVENT_BUS_BACKEND=redis")
        return RedisEventBus(
            redis_url=settings.redis_url,
            channel_prefix=settings.redis_channel_prefix,
        )

    raise ValueError(f"Unsupported event bus backend: {backend!r}")
