"""
Task endpoints: CRUD, status cycling, checklist, attachments, comments.

Status badge cycle: pending → in_progress → completed → blocked → pending
- Stage must belong to the project's process
- Due dates are Jalali ("1403/07/01" or "1403/07/01 - 1403/07/05")
- Events emitted on update, delete and comment
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_member
from app.core.database import get_session
from app.core.events import broadcast_event
from app.models.task import ProjectTask
from app.services import tasks as task_service
from daftar_shared.schemas.common import TaskStatus
from daftar_shared.schemas.tasks import (
    Attachment,
    ChecklistItem,
    ChecklistItemCreate,
    CommentCreate,
    CommentRead,
    TaskRead,
    TaskUpdate,
)

router = APIRouter()


async def _emit(
    session: AsyncSession,
    event_type: str,
    task: ProjectTask,
    current: CurrentUser,
    **payload,
) -> None:
    await broadcast_event(
        session=session,
        event_type=event_type,
        payload={"task_id": str(task.id), "title": task.title, **payload},
        actor_id=current.user_id,
        project_id=task.project_id,
        task_id=task.id,
    )


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[TaskRead])
async def list_tasks(
    assigned_to: Optional[uuid.UUID] = None,
    status: Optional[TaskStatus] = None,
    project_id: Optional[uuid.UUID] = None,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List tasks with optional filters by assignee, status and project."""
    tasks = await task_service.list_tasks(
        session, assigned_to=assigned_to, status=status, project_id=project_id
    )
    return await task_service.enrich_tasks(session, tasks)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    return await task_service.enrich_task(session, task)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Update title, description, status, stage, assignee or due date."""
    task = await task_service.get_task_or_404(session, task_id)
    task = await task_service.update_task(session, task, body)
    await session.commit()

    await _emit(
        session, "task.updated", task, current,
        changes=body.model_dump(exclude_unset=True, mode="json"),
    )
    return await task_service.enrich_task(session, task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    await task_service.delete_task(session, task)
    await session.commit()
    await _emit(session, "task.deleted", task, current)


@router.post("/{task_id}/cycle-status", response_model=TaskRead)
async def cycle_status(
    task_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Move the task to the next status in the badge cycle."""
    task = await task_service.get_task_or_404(session, task_id)
    task = await task_service.cycle_status(session, task)
    await session.commit()

    await _emit(session, "task.status_changed", task, current, status=task.status)
    return await task_service.enrich_task(session, task)


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------


@router.post("/{task_id}/checklist", response_model=ChecklistItem, status_code=status.HTTP_201_CREATED)
async def add_checklist_item(
    task_id: uuid.UUID,
    body: ChecklistItemCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    item = await task_service.add_checklist_item(session, task, body.title)
    await session.commit()
    return item


@router.post("/{task_id}/checklist/{item_id}/toggle", response_model=ChecklistItem)
async def toggle_checklist_item(
    task_id: uuid.UUID,
    item_id: int,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    item = await task_service.toggle_checklist_item(session, task, item_id)
    await session.commit()
    return item


@router.delete("/{task_id}/checklist/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_checklist_item(
    task_id: uuid.UUID,
    item_id: int,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    await task_service.remove_checklist_item(session, task, item_id)
    await session.commit()


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


@router.post("/{task_id}/attachments", response_model=Attachment, status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    task_id: uuid.UUID,
    file: UploadFile = File(...),
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Upload a file to the task-attachments bucket and attach it to the task."""
    task = await task_service.get_task_or_404(session, task_id)
    attachment = await task_service.add_attachment(session, task, file)
    await session.commit()

    await _emit(session, "task.attachment_added", task, current, name=attachment.name)
    return attachment


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@router.get("/{task_id}/comments", response_model=List[CommentRead])
async def list_comments(
    task_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    return await task_service.list_comments(session, task)


@router.post("/{task_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: uuid.UUID,
    body: CommentCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_or_404(session, task_id)
    comment = await task_service.add_comment(session, task, current.profile, body.text)
    await session.commit()

    await _emit(session, "task.commented", task, current, comment_id=str(comment.id))
    return comment
