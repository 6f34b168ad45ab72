"""
Client endpoints.

Clients are the customers projects are delivered for.
"""

from __future__ import annotations

import uuid
from typing import List

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_admin, require_member
from app.core.database import get_session
from app.services import clients as client_service
from app.services.projects import enrich_projects, list_projects
from daftar_shared.schemas.clients import ClientCreate, ClientRead
from daftar_shared.schemas.projects import ProjectRead

log = structlog.get_logger()
router = APIRouter()


@router.get("/", response_model=List[ClientRead])
async def list_clients(
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    return await client_service.list_clients(session)


@router.post("/", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    body: ClientCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    client = await client_service.create_client(session, body)
    await session.commit()
    log.info("client.created", client_id=str(client.id), by=str(current.user_id))
    return await client_service.read_client(session, client)


@router.get("/{client_id}", response_model=ClientRead)
async def get_client(
    client_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    client = await client_service.get_client_or_404(session, client_id)
    return await client_service.read_client(session, client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: uuid.UUID,
    current: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    client = await client_service.get_client_or_404(session, client_id)
    await client_service.delete_client(session, client)
    await session.commit()
    log.info("client.deleted", client_id=str(client_id), by=str(current.user_id))


@router.get("/{client_id}/projects", response_model=List[ProjectRead])
async def list_client_projects(
    client_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """The client's projects, newest first."""
    await client_service.get_client_or_404(session, client_id)
    projects = await list_projects(session, client_id=client_id)
    return await enrich_projects(session, projects)
