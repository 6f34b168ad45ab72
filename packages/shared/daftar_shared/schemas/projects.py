from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from .common import ProjectCategory, ProjectStatus
from .tasks import TaskRead


class ProjectBase(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    category: ProjectCategory = ProjectCategory.WEB
    client_id: Optional[UUID] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project title must not be blank")
        return value


class ProjectCreate(ProjectBase):
    # Reuse an existing process template; a fresh one is created when omitted
    process_id: Optional[UUID] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    category: Optional[ProjectCategory] = None
    client_id: Optional[UUID] = None


class ProjectRead(ProjectBase):
    id: UUID
    process_id: UUID
    status: ProjectStatus
    task_count: int = 0
    completed_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BoardColumn(BaseModel):
    """One Kanban column. stage_id is None for the synthetic columns."""
    stage_id: Optional[UUID] = None
    title: str
    role_responsible: Optional[str] = None
    order_index: Optional[int] = None
    tasks: List[TaskRead] = Field(default_factory=list)


class ProjectBoard(BaseModel):
    project: ProjectRead
    columns: List[BoardColumn]
