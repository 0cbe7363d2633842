"""
backend/slotswap/services/events.py

Notification sink: pushes state-change events to a Redis list for
consumption by the realtime broadcaster.

Delivery is best-effort. The core publishes after a transaction has
committed and never depends on the push succeeding.
"""

import json
import time
import logging
from typing import Protocol

from redis import Redis

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

SWAP_UPDATED = "swapUpdated"
SLOT_UPDATED = "slotUpdated"


class EventSink(Protocol):
    def publish(self, event_type: str, payload: dict) -> None: ...


class RedisEventSink:
    """Publish events to a Redis list (`events:broadcast` by default)."""

    def __init__(self, redis: Redis, queue: str):
        self.redis = redis
        self.queue = queue

    def publish(self, event_type: str, payload: dict) -> None:
        event = {
            "type": event_type,
            **payload,
            "ts": int(time.time()),
        }
        try:
            self.redis.rpush(self.queue, json.dumps(event, default=str))
            logger.info(f"Event emitted: {event_type} → {self.queue}")
        except Exception as e:
            logger.error(f"Failed to emit event {event_type}: {e}")


_default_sink = RedisEventSink(redis_client, settings.events_queue)


# Dependency for FastAPI
def get_event_sink() -> EventSink:
    return _default_sink
