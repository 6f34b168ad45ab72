"""
Process builder endpoints.

A process is created together with its ordered stages. Each stage may
carry a checklist template that is copied into new tasks in that stage.
Emits events on create, stage append and delete.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_admin, require_member
from app.core.database import get_session
from app.core.events import broadcast_event
from app.services import processes as process_service
from daftar_shared.schemas.processes import (
    ProcessCreate,
    ProcessRead,
    StageChecklistCreate,
    StageChecklistRead,
    StageDraft,
    StageRead,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Processes
# ---------------------------------------------------------------------------


@router.post("/", response_model=ProcessRead, status_code=status.HTTP_201_CREATED)
async def create_process(
    body: ProcessCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Create a process with its stages stored in the submitted order."""
    process = await process_service.create_process_from_request(session, body)
    await session.commit()
    enriched = await process_service.enrich_process(session, process)

    await broadcast_event(
        session=session,
        event_type="process.created",
        payload={"process_id": str(process.id), "title": process.title, "stages": len(enriched.stages)},
        actor_id=current.user_id,
    )
    return enriched


@router.get("/", response_model=List[ProcessRead])
async def list_processes(
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    processes = await process_service.list_processes(session)
    return await process_service.enrich_processes(session, processes)


@router.get("/{process_id}", response_model=ProcessRead)
async def get_process(
    process_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    process = await process_service.get_process_or_404(session, process_id)
    return await process_service.enrich_process(session, process)


@router.post("/{process_id}/stages", response_model=StageRead, status_code=status.HTTP_201_CREATED)
async def append_stage(
    process_id: uuid.UUID,
    body: StageDraft,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Add a stage after the last one."""
    process = await process_service.get_process_or_404(session, process_id)
    stage = await process_service.append_stage(session, process, body)
    await session.commit()

    await broadcast_event(
        session=session,
        event_type="process.stage_added",
        payload={"process_id": str(process.id), "stage_id": str(stage.id), "title": stage.title},
        actor_id=current.user_id,
    )
    return StageRead.model_validate(stage)


@router.delete("/{process_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_process(
    process_id: uuid.UUID,
    current: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    process = await process_service.get_process_or_404(session, process_id)
    await process_service.delete_process(session, process)
    await session.commit()

    await broadcast_event(
        session=session,
        event_type="process.deleted",
        payload={"process_id": str(process_id)},
        actor_id=current.user_id,
    )


# ---------------------------------------------------------------------------
# Stage checklist templates
# ---------------------------------------------------------------------------
router_stages = APIRouter()


@router_stages.get("/{stage_id}/checklist", response_model=List[StageChecklistRead])
async def list_stage_checklist(
    stage_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    stage = await process_service.get_stage_or_404(session, stage_id)
    items = await process_service.list_stage_checklist(session, stage.id)
    return [StageChecklistRead.model_validate(i) for i in items]


@router_stages.post(
    "/{stage_id}/checklist",
    response_model=StageChecklistRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_stage_checklist_item(
    stage_id: uuid.UUID,
    body: StageChecklistCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    stage = await process_service.get_stage_or_404(session, stage_id)
    item = await process_service.add_stage_checklist_item(session, stage, body)
    await session.commit()
    return StageChecklistRead.model_validate(item)


@router_stages.delete("/{stage_id}/checklist/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_stage_checklist_item(
    stage_id: uuid.UUID,
    item_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    stage = await process_service.get_stage_or_404(session, stage_id)
    await process_service.remove_stage_checklist_item(session, stage, item_id)
    await session.commit()
