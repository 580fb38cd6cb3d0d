# src/events/redis_bus.py - v2
"""Redis pub/sub event bus (EVENT_BUS_BACKEND=redis).

Signals are dispatched to in-process subscribers first, then published
as JSON on ``<prefix><event_name>`` for other instances. Nothing is kept
after publishing.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis

from docwrite.events.base_event_bus import BaseEventBus, EventHandler, SubscriberRegistry

logger = logging.getLogger(__name__)


class RedisEventBus(BaseEventBus):
    """Fan-out bus for multi-instance deployments."""

    def __init__(
        self,
        redis_url: str,
        channel_prefix: str = "docwrite:",
        client: redis.Redis | None = None,
    ) -> None:
        self._subscribers = SubscriberRegistry()
        self._client = client or redis.Redis.from_url(redis_url, decode_responses=True)
        self._prefix = channel_prefix

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        self._subscribers.dispatch(event_name, payload)
        channel = f"{self._prefix}{event_name}"
        try:
            self._client.publish(channel, json.dumps(payload, default=str))
        except redis.RedisError as e:
            logger.warning("Failed to publish %s to redis: %s", channel, e)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._subscribers.add(event_name, handler)

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
