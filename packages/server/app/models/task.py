"""Project task and task comment models."""

from typing import List, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, TimestampMixin, UUIDMixin


class ProjectTask(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "project_tasks"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    stage_id: Optional[uuid.UUID] = Field(default=None, foreign_key="stages.id", index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="pending")  # pending | in_progress | completed | blocked
    assigned_to: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id", index=True)
    due_date: Optional[str] = None  # Jalali "YYYY/MM/DD" or "YYYY/MM/DD - YYYY/MM/DD"
    checklist: List[dict] = Field(default_factory=list, sa_type=sa.JSON, nullable=False)
    attachments: List[dict] = Field(default_factory=list, sa_type=sa.JSON, nullable=False)


class TaskComment(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "task_comments"

    task_id: uuid.UUID = Field(foreign_key="project_tasks.id", nullable=False, index=True)
    author_id: uuid.UUID = Field(foreign_key="profiles.id", nullable=False)
    text: str = Field(nullable=False)
