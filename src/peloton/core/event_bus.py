"""In-memory async event bus for roster lifecycle notifications.

The season service publishes ``roster.archived`` and ``roster.transitioned``;
``/api/notifications/stream`` subscribes for clients. Delivery is best-effort:
with no subscribers an event is dropped, and a full queue drops the event
for that subscriber only.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)


class EventBus:
    """Async pub/sub event bus.

    Usage:
        bus = EventBus()

        async with bus.subscribe("roster.transitioned") as sub:
            event = await sub.get(timeout=1.0)

        await bus.publish("roster.transitioned", {"kind": "staff"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str | None, list[asyncio.Queue[dict[str, Any]]]] = defaultdict(
            list
        )

    async def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Deliver to typed and wildcard subscribers. Returns the delivery count."""
        envelope = {"type": event_type, "data": data}
        delivered = 0
        for queue in [*self._subscribers.get(event_type, []), *self._subscribers.get(None, [])]:
            try:
                queue.put_nowait(envelope)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("event_dropped type=%s reason=slow_subscriber", event_type)
        return delivered

    def subscribe(self, event_type: str | None = None, max_size: int = 100) -> Subscription:
        """Subscribe to one event type, or to everything when ``event_type`` is None."""
        return Subscription(self, asyncio.Queue(maxsize=max_size), event_type)

    def _register(self, queue: asyncio.Queue[dict[str, Any]], event_type: str | None) -> None:
        self._subscribers[event_type].append(queue)

    def _unregister(self, queue: asyncio.Queue[dict[str, Any]], event_type: str | None) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers[event_type].remove(queue)

    @property
    def subscriber_count(self) -> int:
        return sum(len(queues) for queues in self._subscribers.values())


class Subscription:
    """An active subscription. Use as an async context manager."""

    def __init__(
        self,
        bus: EventBus,
        queue: asyncio.Queue[dict[str, Any]],
        event_type: str | None,
    ) -> None:
        self._bus = bus
        self._queue = queue
        self._event_type = event_type

    async def __aenter__(self) -> Subscription:
        self._bus._register(self._queue, self._event_type)
        return self

    async def __aexit__(self, *args: object) -> None:
        self._bus._unregister(self._queue, self._event_type)

    async def get(self, timeout: float | None = None) -> dict[str, Any] | None:
        """Next event, or None when ``timeout`` elapses first."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None
