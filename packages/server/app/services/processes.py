"""
Process builder service.

A process is a reusable template: an ordered list of stages, each with an
optional checklist template copied into tasks created in that stage.
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.process import Process, Stage, StageChecklist
from app.models.project import Project
from daftar_shared.schemas.processes import (
    ProcessCreate,
    ProcessRead,
    StageChecklistCreate,
    StageDraft,
    StageRead,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_process_or_404(session: AsyncSession, process_id: uuid.UUID) -> Process:
    process = await session.get(Process, process_id)
    if not process:
        raise HTTPException(status_code=404, detail="Process not found")
    return process


async def get_stage_or_404(session: AsyncSession, stage_id: uuid.UUID) -> Stage:
    stage = await session.get(Stage, stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Stage not found")
    return stage


async def list_stages(session: AsyncSession, process_id: uuid.UUID) -> list[Stage]:
    result = await session.execute(
        select(Stage).where(Stage.process_id == process_id).order_by(Stage.order_index)
    )
    return list(result.scalars().all())


async def enrich_process(session: AsyncSession, process: Process) -> ProcessRead:
    stages = await list_stages(session, process.id)
    return ProcessRead(
        id=process.id,
        title=process.title,
        stages=[StageRead.model_validate(s) for s in stages],
        created_at=process.created_at,
        updated_at=process.updated_at,
    )


async def enrich_processes(session: AsyncSession, processes: Sequence[Process]) -> list[ProcessRead]:
    return [await enrich_process(session, p) for p in processes]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_process(
    session: AsyncSession,
    title: str,
    stages: Sequence[StageDraft | tuple[str, str | None]],
) -> Process:
    """Create a process and its stages with order_index 1..n in the given order."""
    process = Process(title=title)
    session.add(process)
    await session.flush()

    for index, draft in enumerate(stages, start=1):
        if isinstance(draft, StageDraft):
            stage_title, role = draft.title, draft.role_responsible
        else:
            stage_title, role = draft
        session.add(
            Stage(process_id=process.id, title=stage_title, role_responsible=role, order_index=index)
        )
    await session.flush()
    log.info("process.created", process_id=str(process.id), stages=len(stages))
    return process


async def create_process_from_request(session: AsyncSession, body: ProcessCreate) -> Process:
    return await create_process(session, body.title, body.stages)


async def list_processes(session: AsyncSession) -> list[Process]:
    result = await session.execute(select(Process).order_by(Process.created_at.desc()))
    return list(result.scalars().all())


async def append_stage(session: AsyncSession, process: Process, draft: StageDraft) -> Stage:
    result = await session.execute(
        select(func.max(Stage.order_index)).where(Stage.process_id == process.id)
    )
    last = result.scalar() or 0
    stage = Stage(
        process_id=process.id,
        title=draft.title,
        role_responsible=draft.role_responsible,
        order_index=last + 1,
    )
    session.add(stage)
    await session.flush()
    return stage


async def delete_process(session: AsyncSession, process: Process) -> None:
    """Delete a process template with its stages. Refused while projects use it."""
    result = await session.execute(
        select(func.count()).select_from(Project).where(Project.process_id == process.id)
    )
    in_use = result.scalar_one()
    if in_use:
        raise HTTPException(
            status_code=409,
            detail=f"Process is used by {in_use} project(s)",
        )

    for stage in await list_stages(session, process.id):
        await _delete_stage_checklist(session, stage.id)
        await session.delete(stage)
    await session.flush()
    await session.delete(process)
    await session.flush()
    log.info("process.deleted", process_id=str(process.id))


# ---------------------------------------------------------------------------
# Stage checklist templates
# ---------------------------------------------------------------------------


async def list_stage_checklist(session: AsyncSession, stage_id: uuid.UUID) -> list[StageChecklist]:
    result = await session.execute(
        select(StageChecklist)
        .where(StageChecklist.stage_id == stage_id)
        .order_by(StageChecklist.order_index)
    )
    return list(result.scalars().all())


async def add_stage_checklist_item(
    session: AsyncSession, stage: Stage, body: StageChecklistCreate
) -> StageChecklist:
    title = body.title.strip()
    if not title:
        raise HTTPException(status_code=422, detail="Checklist item title must not be blank")

    result = await session.execute(
        select(func.max(StageChecklist.order_index)).where(StageChecklist.stage_id == stage.id)
    )
    item = StageChecklist(stage_id=stage.id, title=title, order_index=(result.scalar() or 0) + 1)
    session.add(item)
    await session.flush()
    return item


async def remove_stage_checklist_item(
    session: AsyncSession, stage: Stage, item_id: uuid.UUID
) -> None:
    item = await session.get(StageChecklist, item_id)
    if not item or item.stage_id != stage.id:
        raise HTTPException(status_code=404, detail="Checklist item not found")
    await session.delete(item)
    await session.flush()


async def _delete_stage_checklist(session: AsyncSession, stage_id: uuid.UUID) -> None:
    for item in await list_stage_checklist(session, stage_id):
        await session.delete(item)
