"""SSE stream of roster lifecycle notifications (archives and transitions)."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from peloton.core.event_bus import EventBus

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 15  # seconds

# Streams stay open until the client leaves; cap how many can be held at once.
_MAX_STREAM_CONNECTIONS = 50
_connection_semaphore = asyncio.Semaphore(_MAX_STREAM_CONNECTIONS)

# Every event type the season service publishes.
ALLOWED_EVENT_TYPES: frozenset[str] = frozenset(
    {
        "roster.archived",
        "roster.transitioned",
    }
)


def format_sse(event: dict) -> str:
    """Render a bus envelope as one SSE frame."""
    data = json.dumps(event, default=str)
    return f"event: {event['type']}\ndata: {data}\n\n"


async def event_frames(
    bus: EventBus,
    event_type: str | None,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat: float = _HEARTBEAT_INTERVAL,
) -> AsyncIterator[str]:
    """Yield SSE frames for bus events until the client disconnects.

    The first frame is a comment so proxies flush the response headers.
    A heartbeat comment goes out whenever no event arrives in time.
    """
    yield ": connected\n\n"
    async with bus.subscribe(event_type) as sub:
        while not await is_disconnected():
            event = await sub.get(timeout=heartbeat)
            if event is None:
                yield ": heartbeat\n\n"
                continue
            yield format_sse(event)


@router.get("/stream")
async def notification_stream(
    request: Request,
    event_type: str | None = None,
) -> StreamingResponse:
    """Stream roster notifications, optionally limited to one event type.

    Errors:
        400 -- unknown event_type value
        429 -- connection limit reached
    """
    if event_type is not None and event_type not in ALLOWED_EVENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Unknown event_type {event_type!r}. "
                f"Valid values: {sorted(ALLOWED_EVENT_TYPES)}"
            ),
        )
    if _connection_semaphore.locked():
        raise HTTPException(
            status_code=429,
            detail=f"Too many open notification streams (limit: {_MAX_STREAM_CONNECTIONS})",
        )

    bus: EventBus = request.app.state.event_bus

    async def generate() -> AsyncIterator[str]:
        async with _connection_semaphore:
            logger.info("notification_stream_opened event_type=%s", event_type)
            async for frame in event_frames(bus, event_type, request.is_disconnected):
                yield frame
            logger.info("notification_stream_closed event_type=%s", event_type)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
