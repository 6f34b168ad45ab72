"""
Activity events: persisted to the database, buffered in Redis and
fanned out to SSE clients through Redis Pub/Sub.

Features:
- Optional project filter per stream
- Replay from the Redis buffer after a Last-Event-ID
- Keepalive pings while the channel is quiet
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional
from uuid import UUID

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis import get_redis, redis_key
from app.models.event import Event

log = structlog.get_logger()

PUBSUB_CHANNEL = redis_key("events", "pubsub")
BUFFER_KEY = redis_key("events", "buffer")
BUFFER_SIZE = 500
BUFFER_TTL_SECONDS = 86400
HEARTBEAT_INTERVAL = 15  # seconds, sent by EventSourceResponse as ping comments


def serialize_event(event: Event) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "type": event.type,
        "actor_id": str(event.actor_id) if event.actor_id else None,
        "project_id": str(event.project_id) if event.project_id else None,
        "task_id": str(event.task_id) if event.task_id else None,
        "payload": event.payload,
        "timestamp": event.timestamp.isoformat(),
    }


async def broadcast_event(
    session: AsyncSession,
    event_type: str,
    payload: dict[str, Any],
    actor_id: UUID | None = None,
    project_id: UUID | None = None,
    task_id: UUID | None = None,
) -> Event:
    """
    Persist an event, buffer it in Redis and publish it to Pub/Sub.

    Called by the routers after the change itself has been committed.
    Redis failures are logged and do not fail the request.
    """
    event = Event(
        type=event_type,
        actor_id=actor_id,
        project_id=project_id,
        task_id=task_id,
        payload=payload,
        timestamp=datetime.now(timezone.utc),
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)

    event_json = json.dumps(serialize_event(event))
    try:
        redis = await get_redis()
        async with redis.pipeline() as pipe:
            pipe.lpush(BUFFER_KEY, event_json)
            pipe.ltrim(BUFFER_KEY, 0, BUFFER_SIZE - 1)
            pipe.expire(BUFFER_KEY, BUFFER_TTL_SECONDS)
            await pipe.execute()
        await redis.publish(PUBSUB_CHANNEL, event_json)
    except RedisError as exc:
        log.warning("events.publish_failed", event_type=event_type, error=str(exc))

    log.info("event.broadcast", event_type=event_type, event_id=str(event.id))
    return event


def matches_filter(event_data: dict, project_id: Optional[UUID]) -> bool:
    """No filter passes everything; otherwise the event must name the project."""
    if project_id is None:
        return True
    return event_data.get("project_id") == str(project_id)


async def replay_from_buffer(last_event_id: str, project_id: Optional[UUID]) -> list[dict]:
    """Buffered events newer than ``last_event_id``, oldest first.

    An id that is no longer buffered replays nothing.
    """
    redis = await get_redis()
    raw_events = await redis.lrange(BUFFER_KEY, 0, -1)
    newer: list[dict] = []
    for raw in raw_events:  # newest first
        event_data = json.loads(raw)
        if event_data["id"] == last_event_id:
            return [e for e in reversed(newer) if matches_filter(e, project_id)]
        newer.append(event_data)
    return []


def _sse(event_data: dict) -> dict:
    return {"event": event_data["type"], "id": event_data["id"], "data": json.dumps(event_data)}


async def event_generator(
    request: Request,
    project_id: Optional[UUID] = None,
    last_event_id: Optional[str] = None,
) -> AsyncGenerator[dict, None]:
    """SSE generator: optional replay, then live events until the client leaves."""
    redis = await get_redis()
    pubsub = redis.pubsub()
    await pubsub.subscribe(PUBSUB_CHANNEL)

    try:
        if last_event_id:
            for event_data in await replay_from_buffer(last_event_id, project_id):
                yield _sse(event_data)

        while True:
            if await request.is_disconnected():
                break

            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)

            if message and message["type"] == "message":
                event_data = json.loads(message["data"])
                if matches_filter(event_data, project_id):
                    yield _sse(event_data)

    except asyncio.CancelledError:
        log.info("events.stream_cancelled")
        raise
    finally:
        await pubsub.unsubscribe(PUBSUB_CHANNEL)
        await pubsub.aclose()
