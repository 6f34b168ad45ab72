"""
Project service: CRUD, search and the Kanban board.
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.client import Client
from app.models.project import Project
from app.models.task import ProjectTask
from app.services import tasks as task_service
from app.services.processes import create_process, get_process_or_404, list_stages
from daftar_shared.schemas.common import (
    DEFAULT_STAGE_TITLES,
    NO_STAGE_TITLE,
    UNKNOWN_STAGE_TITLE,
    ProjectStatus,
    TaskStatus,
)
from daftar_shared.schemas.projects import (
    BoardColumn,
    ProjectBoard,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_project_or_404(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def _check_client(session: AsyncSession, client_id: Optional[uuid.UUID]) -> None:
    if client_id is not None and not await session.get(Client, client_id):
        raise HTTPException(status_code=422, detail="Client does not exist")


async def _task_counts(
    session: AsyncSession, project_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, tuple[int, int]]:
    """project_id -> (task_count, completed_count)."""
    if not project_ids:
        return {}
    completed = func.sum(case((ProjectTask.status == TaskStatus.COMPLETED.value, 1), else_=0))
    result = await session.execute(
        select(ProjectTask.project_id, func.count(), completed)
        .where(ProjectTask.project_id.in_(project_ids))
        .group_by(ProjectTask.project_id)
    )
    return {pid: (total, done or 0) for pid, total, done in result.all()}


def _to_read(project: Project, counts: tuple[int, int] = (0, 0)) -> ProjectRead:
    return ProjectRead(
        id=project.id,
        title=project.title,
        description=project.description,
        category=project.category,
        client_id=project.client_id,
        process_id=project.process_id,
        status=project.status,
        task_count=counts[0],
        completed_count=counts[1],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


async def enrich_projects(session: AsyncSession, projects: Sequence[Project]) -> list[ProjectRead]:
    counts = await _task_counts(session, [p.id for p in projects])
    return [_to_read(p, counts.get(p.id, (0, 0))) for p in projects]


async def enrich_project(session: AsyncSession, project: Project) -> ProjectRead:
    return (await enrich_projects(session, [project]))[0]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_project(session: AsyncSession, body: ProjectCreate) -> Project:
    """Create an active project; without a process_id it gets its own default stages."""
    await _check_client(session, body.client_id)

    if body.process_id is not None:
        process = await get_process_or_404(session, body.process_id)
    else:
        process = await create_process(
            session, body.title, [(title, None) for title in DEFAULT_STAGE_TITLES]
        )

    project = Project(
        title=body.title,
        description=body.description,
        category=body.category.value,
        client_id=body.client_id,
        process_id=process.id,
        status=ProjectStatus.ACTIVE.value,
    )
    session.add(project)
    await session.flush()
    log.info("project.created", project_id=str(project.id), process_id=str(process.id))
    return project


async def list_projects(
    session: AsyncSession,
    q: Optional[str] = None,
    client_id: Optional[uuid.UUID] = None,
) -> list[Project]:
    """Newest first, optionally filtered by a case-insensitive title substring."""
    stmt = select(Project)
    if q and q.strip():
        stmt = stmt.where(func.lower(Project.title).contains(q.strip().lower()))
    if client_id:
        stmt = stmt.where(Project.client_id == client_id)
    result = await session.execute(stmt.order_by(Project.created_at.desc()))
    return list(result.scalars().all())


async def update_project(session: AsyncSession, project: Project, body: ProjectUpdate) -> Project:
    data = body.model_dump(exclude_unset=True)

    if "title" in data:
        title = (data["title"] or "").strip()
        if not title:
            raise HTTPException(status_code=422, detail="Project title must not be blank")
        data["title"] = title
    if "client_id" in data:
        await _check_client(session, data["client_id"])
    for key in ("status", "category"):
        if key in data:
            if data[key] is None:
                raise HTTPException(status_code=422, detail=f"Project {key} must not be null")
            data[key] = data[key].value

    for key, value in data.items():
        setattr(project, key, value)

    session.add(project)
    await session.flush()
    return project


async def delete_project(session: AsyncSession, project: Project) -> None:
    """Delete a project with its tasks and their comments."""
    for task in await task_service.list_tasks(session, project_id=project.id):
        await task_service.delete_task(session, task)
    await session.delete(project)
    await session.flush()
    log.info("project.deleted", project_id=str(project.id))


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


async def build_board(session: AsyncSession, project: Project) -> ProjectBoard:
    """
    Group the project's tasks into Kanban columns.

    One column per process stage in order_index order, then a trailing
    column for tasks whose stage no longer exists and one for tasks that
    have no stage at all. The trailing columns appear only when non-empty.
    """
    stages = await list_stages(session, project.process_id)
    result = await session.execute(
        select(ProjectTask)
        .where(ProjectTask.project_id == project.id)
        .order_by(ProjectTask.created_at)
    )
    tasks = await task_service.enrich_tasks(session, result.scalars().all())

    columns = {
        stage.id: BoardColumn(
            stage_id=stage.id,
            title=stage.title,
            role_responsible=stage.role_responsible,
            order_index=stage.order_index,
        )
        for stage in stages
    }
    unknown = BoardColumn(title=UNKNOWN_STAGE_TITLE)
    unstaged = BoardColumn(title=NO_STAGE_TITLE)

    for task in tasks:
        if task.stage_id is None:
            unstaged.tasks.append(task)
        elif task.stage_id in columns:
            columns[task.stage_id].tasks.append(task)
        else:
            unknown.tasks.append(task)

    board_columns = list(columns.values())
    board_columns.extend(col for col in (unknown, unstaged) if col.tasks)
    return ProjectBoard(project=await enrich_project(session, project), columns=board_columns)
