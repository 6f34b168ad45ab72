"""Client service."""

from __future__ import annotations

import uuid

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.client import Client
from app.models.project import Project
from daftar_shared.schemas.clients import ClientCreate, ClientRead


async def get_client_or_404(session: AsyncSession, client_id: uuid.UUID) -> Client:
    client = await session.get(Client, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


async def _project_counts(session: AsyncSession) -> dict[uuid.UUID, int]:
    result = await session.execute(
        select(Project.client_id, func.count())
        .where(Project.client_id.is_not(None))
        .group_by(Project.client_id)
    )
    return {client_id: count for client_id, count in result.all()}


def _to_read(client: Client, project_count: int = 0) -> ClientRead:
    return ClientRead(
        id=client.id,
        name=client.name,
        phone=client.phone,
        description=client.description,
        project_count=project_count,
        created_at=client.created_at,
        updated_at=client.updated_at,
    )


async def list_clients(session: AsyncSession) -> list[ClientRead]:
    result = await session.execute(select(Client).order_by(Client.name))
    counts = await _project_counts(session)
    return [_to_read(c, counts.get(c.id, 0)) for c in result.scalars().all()]


async def read_client(session: AsyncSession, client: Client) -> ClientRead:
    result = await session.execute(
        select(func.count()).select_from(Project).where(Project.client_id == client.id)
    )
    return _to_read(client, result.scalar_one())


async def create_client(session: AsyncSession, body: ClientCreate) -> Client:
    client = Client(
        name=body.name.strip(),
        phone=body.phone,
        description=body.description,
    )
    session.add(client)
    await session.flush()
    return client


async def delete_client(session: AsyncSession, client: Client) -> None:
    """Delete a client; its projects are kept and detached."""
    result = await session.execute(select(Project).where(Project.client_id == client.id))
    for project in result.scalars().all():
        project.client_id = None
        session.add(project)
    await session.flush()
    await session.delete(client)
    await session.flush()
