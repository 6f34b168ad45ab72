"""
Project endpoints: CRUD, search and the Kanban board.

- A project without a process_id gets its own process with default stages
- The board groups tasks by process stage in order_index order
- Emits events on create, update and delete
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_admin, require_member
from app.core.database import get_session
from app.core.events import broadcast_event
from app.services import projects as project_service
from app.services import tasks as task_service
from daftar_shared.schemas.projects import ProjectBoard, ProjectCreate, ProjectRead, ProjectUpdate
from daftar_shared.schemas.tasks import TaskCreate, TaskRead

router = APIRouter()


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[ProjectRead])
async def list_projects(
    q: Optional[str] = Query(None, max_length=200, description="Case-insensitive title search"),
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List projects, newest first."""
    projects = await project_service.list_projects(session, q=q)
    return await project_service.enrich_projects(session, projects)


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.create_project(session, body)
    await session.commit()

    await broadcast_event(
        session=session,
        event_type="project.created",
        payload={"project_id": str(project.id), "title": project.title, "category": project.category},
        actor_id=current.user_id,
        project_id=project.id,
    )
    return await project_service.enrich_project(session, project)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.get_project_or_404(session, project_id)
    return await project_service.enrich_project(session, project)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.get_project_or_404(session, project_id)
    changes = body.model_dump(exclude_unset=True, mode="json")
    project = await project_service.update_project(session, project, body)
    await session.commit()

    await broadcast_event(
        session=session,
        event_type="project.updated",
        payload={"project_id": str(project.id), "changes": changes},
        actor_id=current.user_id,
        project_id=project.id,
    )
    return await project_service.enrich_project(session, project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: uuid.UUID,
    current: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Delete a project together with its tasks and comments."""
    project = await project_service.get_project_or_404(session, project_id)
    title = project.title
    await project_service.delete_project(session, project)
    await session.commit()

    await broadcast_event(
        session=session,
        event_type="project.deleted",
        payload={"project_id": str(project_id), "title": title},
        actor_id=current.user_id,
        project_id=project_id,
    )


# ---------------------------------------------------------------------------
# Board and tasks
# ---------------------------------------------------------------------------


@router.get("/{project_id}/board", response_model=ProjectBoard)
async def get_board(
    project_id: uuid.UUID,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.get_project_or_404(session, project_id)
    return await project_service.build_board(session, project)


@router.post("/{project_id}/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: uuid.UUID,
    body: TaskCreate,
    current: CurrentUser = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Create a task in one of the project's stages."""
    project = await project_service.get_project_or_404(session, project_id)
    task = await task_service.create_task(session, project, body)
    await session.commit()
    enriched = await task_service.enrich_task(session, task)

    await broadcast_event(
        session=session,
        event_type="task.created",
        payload={
            "task_id": str(task.id),
            "title": task.title,
            "stage_id": str(task.stage_id),
            "stage_title": enriched.stage_title,
        },
        actor_id=current.user_id,
        project_id=project.id,
        task_id=task.id,
    )
    return enriched
