"""
Activity feed endpoints.

- GET /          - Recent events, newest first, optionally for one project
- GET /stream    - Live SSE stream with replay via Last-Event-ID
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from sse_starlette.sse import EventSourceResponse

from app.core.auth import CurrentUser, require_member
from app.core.database import get_session
from app.core.events import HEARTBEAT_INTERVAL, event_generator
from app.models.event import Event
from daftar_shared.schemas.events import EventRead

router = APIRouter()


@router.get("/", response_model=List[EventRead])
async def list_events(
    project_id: Optional[uuid.UUID] = None,
    limit: int = Query(50, ge=1, le=500),
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Event)
    if project_id:
        stmt = stmt.where(Event.project_id == project_id)
    result = await session.execute(stmt.order_by(Event.timestamp.desc()).limit(limit))
    return [EventRead.model_validate(e) for e in result.scalars().all()]


@router.get("/stream")
async def stream_events(
    request: Request,
    project_id: Optional[uuid.UUID] = None,
    last_event_id: Optional[str] = Header(None, alias="Last-Event-ID"),
    current: CurrentUser = Depends(require_member),
):
    """
    Stream activity events via SSE.

    Events missed since ``Last-Event-ID`` are replayed from the Redis
    buffer first. Ping comments keep the connection alive.
    """
    return EventSourceResponse(
        event_generator(request, project_id=project_id, last_event_id=last_event_id),
        ping=HEARTBEAT_INTERVAL,
    )
