"""
Task service layer: business logic for project tasks.

Handles:
- Task CRUD inside a project's process stages
- Status cycling (pending → in_progress → completed → blocked → pending)
- Checklist items and file attachments stored on the task row
- Comments
- Enrichment of task data for API responses (stage title, assignee name)
"""

from __future__ import annotations

import time
import uuid
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core import jalali
from app.core.config import get_settings
from app.core.storage import (
    TASK_ATTACHMENTS_BUCKET,
    file_extension,
    generate_object_name,
    get_storage,
    read_upload,
)
from app.models.process import Stage
from app.models.profile import Profile
from app.models.project import Project
from app.models.task import ProjectTask, TaskComment
from app.services.processes import list_stage_checklist
from app.services.profiles import display_name
from daftar_shared.schemas.common import (
    DEFAULT_TASK_TITLE,
    NO_STAGE_TITLE,
    TASK_STATUS_CYCLE,
    UNKNOWN_STAGE_TITLE,
    TaskStatus,
)
from daftar_shared.schemas.tasks import (
    Attachment,
    ChecklistItem,
    CommentRead,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_task_or_404(session: AsyncSession, task_id: uuid.UUID) -> ProjectTask:
    task = await session.get(ProjectTask, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


async def _stage_in_process(
    session: AsyncSession, stage_id: uuid.UUID, process_id: uuid.UUID
) -> Stage:
    stage = await session.get(Stage, stage_id)
    if not stage or stage.process_id != process_id:
        raise HTTPException(
            status_code=422,
            detail="Stage does not belong to the project's process",
        )
    return stage


def stage_title_for(
    task: ProjectTask,
    stages: dict[uuid.UUID, Stage],
    process_id: Optional[uuid.UUID] = None,
) -> str:
    """Stage title, or the "other" title when the stage is gone or foreign to ``process_id``."""
    if task.stage_id is None:
        return NO_STAGE_TITLE
    stage = stages.get(task.stage_id)
    if stage is None or (process_id is not None and stage.process_id != process_id):
        return UNKNOWN_STAGE_TITLE
    return stage.title


def to_task_read(
    task: ProjectTask,
    stages: dict[uuid.UUID, Stage],
    profiles: dict[uuid.UUID, Profile],
    process_id: Optional[uuid.UUID] = None,
) -> TaskRead:
    return TaskRead(
        id=task.id,
        project_id=task.project_id,
        stage_id=task.stage_id,
        stage_title=stage_title_for(task, stages, process_id),
        title=task.title,
        description=task.description,
        status=task.status,
        assigned_to=task.assigned_to,
        assigned_user_name=display_name(profiles.get(task.assigned_to)) if task.assigned_to else None,
        due_date=task.due_date,
        checklist=[ChecklistItem(**item) for item in task.checklist or []],
        attachments=[Attachment(**item) for item in task.attachments or []],
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def enrich_tasks(session: AsyncSession, tasks: Sequence[ProjectTask]) -> list[TaskRead]:
    """Convert tasks to TaskRead, loading projects, stages and assignees in three queries."""
    project_ids = {t.project_id for t in tasks}
    stage_ids = {t.stage_id for t in tasks if t.stage_id}
    profile_ids = {t.assigned_to for t in tasks if t.assigned_to}

    processes: dict[uuid.UUID, uuid.UUID] = {}
    if project_ids:
        result = await session.execute(
            select(Project.id, Project.process_id).where(Project.id.in_(project_ids))
        )
        processes = {project_id: process_id for project_id, process_id in result.all()}

    stages: dict[uuid.UUID, Stage] = {}
    if stage_ids:
        result = await session.execute(select(Stage).where(Stage.id.in_(stage_ids)))
        stages = {s.id: s for s in result.scalars().all()}

    profiles: dict[uuid.UUID, Profile] = {}
    if profile_ids:
        result = await session.execute(select(Profile).where(Profile.id.in_(profile_ids)))
        profiles = {p.id: p for p in result.scalars().all()}

    return [to_task_read(t, stages, profiles, processes.get(t.project_id)) for t in tasks]


async def enrich_task(session: AsyncSession, task: ProjectTask) -> TaskRead:
    return (await enrich_tasks(session, [task]))[0]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_task(
    session: AsyncSession,
    project: Project,
    task_in: TaskCreate,
) -> ProjectTask:
    """Create a pending task in one of the project's stages."""
    stage = await _stage_in_process(session, task_in.stage_id, project.process_id)
    title = (task_in.title or "").strip() or DEFAULT_TASK_TITLE

    template = await list_stage_checklist(session, stage.id)
    base_id = int(time.time() * 1000)
    checklist = [
        ChecklistItem(id=base_id + i, title=item.title).model_dump()
        for i, item in enumerate(template)
    ]

    task = ProjectTask(
        project_id=project.id,
        stage_id=stage.id,
        title=title,
        status=TaskStatus.PENDING.value,
        checklist=checklist,
        attachments=[],
    )
    session.add(task)
    await session.flush()
    log.info("task.created", task_id=str(task.id), project_id=str(project.id), stage_id=str(stage.id))
    return task


async def update_task(
    session: AsyncSession,
    task: ProjectTask,
    task_in: TaskUpdate,
) -> ProjectTask:
    data = task_in.model_dump(exclude_unset=True)

    if "title" in data:
        title = (data["title"] or "").strip()
        if not title:
            raise HTTPException(status_code=422, detail="Task title must not be blank")
        data["title"] = title

    if data.get("stage_id") is not None:
        project = await session.get(Project, task.project_id)
        await _stage_in_process(session, data["stage_id"], project.process_id)

    if data.get("assigned_to") is not None:
        if not await session.get(Profile, data["assigned_to"]):
            raise HTTPException(status_code=422, detail="Assignee does not exist")

    if data.get("due_date") is not None:
        try:
            data["due_date"] = jalali.validate_due_date(data["due_date"])
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

    if data.get("status") is not None:
        data["status"] = TaskStatus(data["status"]).value
    elif "status" in data:
        raise HTTPException(status_code=422, detail="Task status must not be null")

    for key, value in data.items():
        setattr(task, key, value)

    session.add(task)
    await session.flush()
    return task


async def delete_task(session: AsyncSession, task: ProjectTask) -> None:
    result = await session.execute(select(TaskComment).where(TaskComment.task_id == task.id))
    for comment in result.scalars().all():
        await session.delete(comment)
    await session.flush()
    await session.delete(task)
    await session.flush()


async def list_tasks(
    session: AsyncSession,
    assigned_to: Optional[uuid.UUID] = None,
    status: Optional[TaskStatus] = None,
    project_id: Optional[uuid.UUID] = None,
) -> list[ProjectTask]:
    stmt = select(ProjectTask)
    if assigned_to:
        stmt = stmt.where(ProjectTask.assigned_to == assigned_to)
    if status:
        stmt = stmt.where(ProjectTask.status == status.value)
    if project_id:
        stmt = stmt.where(ProjectTask.project_id == project_id)
    result = await session.execute(stmt.order_by(ProjectTask.created_at.desc()))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def next_status(current: str) -> TaskStatus:
    """The status after ``current`` in the badge cycle; unknown values restart it."""
    try:
        index = TASK_STATUS_CYCLE.index(TaskStatus(current))
    except ValueError:
        return TaskStatus.PENDING
    return TASK_STATUS_CYCLE[(index + 1) % len(TASK_STATUS_CYCLE)]


async def cycle_status(session: AsyncSession, task: ProjectTask) -> ProjectTask:
    old_status = task.status
    task.status = next_status(task.status).value
    session.add(task)
    await session.flush()
    log.info("task.status_cycled", task_id=str(task.id), old=old_status, new=task.status)
    return task


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------


def new_checklist_id(existing: Sequence[dict], now_ms: Optional[int] = None) -> int:
    """Millisecond timestamp, bumped past any id already on the list."""
    candidate = int(time.time() * 1000) if now_ms is None else now_ms
    taken = {item["id"] for item in existing}
    while candidate in taken:
        candidate += 1
    return candidate


def _find_item(task: ProjectTask, item_id: int) -> int:
    for index, item in enumerate(task.checklist or []):
        if item["id"] == item_id:
            return index
    raise HTTPException(status_code=404, detail="Checklist item not found")


async def add_checklist_item(session: AsyncSession, task: ProjectTask, title: str) -> ChecklistItem:
    title = title.strip()
    if not title:
        raise HTTPException(status_code=422, detail="Checklist item title must not be blank")

    checklist = list(task.checklist or [])
    item = ChecklistItem(id=new_checklist_id(checklist), title=title)
    # JSON columns only persist on reassignment
    task.checklist = checklist + [item.model_dump()]
    session.add(task)
    await session.flush()
    return item


async def toggle_checklist_item(session: AsyncSession, task: ProjectTask, item_id: int) -> ChecklistItem:
    index = _find_item(task, item_id)
    checklist = [dict(item) for item in task.checklist]
    checklist[index]["is_checked"] = not checklist[index].get("is_checked", False)
    task.checklist = checklist
    session.add(task)
    await session.flush()
    return ChecklistItem(**checklist[index])


async def remove_checklist_item(session: AsyncSession, task: ProjectTask, item_id: int) -> None:
    index = _find_item(task, item_id)
    task.checklist = [item for i, item in enumerate(task.checklist) if i != index]
    session.add(task)
    await session.flush()


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


async def add_attachment(session: AsyncSession, task: ProjectTask, upload: UploadFile) -> Attachment:
    """Upload a file to the task-attachments bucket and record it on the task."""
    data = await read_upload(upload, get_settings().max_upload_bytes)
    object_name = generate_object_name(upload.filename)
    url = await get_storage().upload(TASK_ATTACHMENTS_BUCKET, object_name, data)

    attachment = Attachment(
        name=upload.filename or object_name,
        url=url,
        type=file_extension(upload.filename) or "file",
    )
    task.attachments = list(task.attachments or []) + [attachment.model_dump()]
    session.add(task)
    await session.flush()
    log.info("task.attachment_added", task_id=str(task.id), object_name=object_name, size=len(data))
    return attachment


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def list_comments(session: AsyncSession, task: ProjectTask) -> list[CommentRead]:
    result = await session.execute(
        select(TaskComment, Profile)
        .join(Profile, Profile.id == TaskComment.author_id)
        .where(TaskComment.task_id == task.id)
        .order_by(TaskComment.created_at)
    )
    return [
        CommentRead(
            id=comment.id,
            task_id=comment.task_id,
            author_id=comment.author_id,
            author_name=display_name(author),
            text=comment.text,
            created_at=comment.created_at,
        )
        for comment, author in result.all()
    ]


async def add_comment(
    session: AsyncSession, task: ProjectTask, author: Profile, text: str
) -> CommentRead:
    comment = TaskComment(task_id=task.id, author_id=author.id, text=text.strip())
    if not comment.text:
        raise HTTPException(status_code=422, detail="Comment must not be blank")
    session.add(comment)
    await session.flush()
    return CommentRead(
        id=comment.id,
        task_id=comment.task_id,
        author_id=comment.author_id,
        author_name=display_name(author),
        text=comment.text,
        created_at=comment.created_at,
    )
