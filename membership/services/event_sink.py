"""Event sink for ledger notifications.

Committed operations publish a LedgerEvent here for external observers
(audit pipelines, mailers, dashboards).  The ledger never reads events
back, so the sink is write-mostly: ``recent()`` exists for the admin
feed and for tests.

The Redis backend pushes JSON onto one list with LPUSH, newest first,
trimmed to a fixed length so an unconsumed feed cannot grow forever.
Consumers can BRPOP from the tail for FIFO delivery.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol, runtime_checkable

from membership.db.redis import redis_pool
from membership.models.events import LedgerEvent, event_from_dict

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    async def publish(self, event: LedgerEvent) -> None: ...

    async def recent(self, limit: int = 50) -> list[LedgerEvent]:
        """Most recent events, newest first."""
        ...


class InMemoryEventSink:
    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []

    async def publish(self, event: LedgerEvent) -> None:
        self._events.append(event)
        logger.debug("Event published type=%s", event.type)

    async def recent(self, limit: int = 50) -> list[LedgerEvent]:
        if limit <= 0:
            return []
        return list(reversed(self._events[-limit:]))


class RedisEventSink:
    _KEY = "events:membership"
    _MAX_LEN = 10_000

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def publish(self, event: LedgerEvent) -> None:
        payload = json.dumps(event.to_dict())
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.lpush(self._KEY, payload)
            pipe.ltrim(self._KEY, 0, self._MAX_LEN - 1)
            await pipe.execute()

    async def recent(self, limit: int = 50) -> list[LedgerEvent]:
        if limit <= 0:
            return []
        raw = await self._redis.lrange(self._KEY, 0, limit - 1)
        return [event_from_dict(json.loads(item)) for item in raw]


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    event_sink: EventSink = RedisEventSink(redis_pool)
else:
    event_sink = InMemoryEventSink()
