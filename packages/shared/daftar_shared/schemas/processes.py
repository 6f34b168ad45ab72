"""Process builder schemas: processes, their ordered stages and stage checklist templates."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import UUID4


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

class StageDraft(BaseModel):
    """One row of the builder form. Both fields are required."""
    title: str
    role_responsible: str

    @field_validator("title", "role_responsible")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("لطفاً تمام فیلدهای مراحل را پر کنید")
        return value


class StageRead(BaseModel):
    id: UUID4
    process_id: UUID4
    title: str
    role_responsible: Optional[str] = None
    order_index: int

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Stage checklist templates
# ---------------------------------------------------------------------------

class StageChecklistCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)


class StageChecklistRead(BaseModel):
    id: UUID4
    stage_id: UUID4
    title: str
    order_index: int

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Processes
# ---------------------------------------------------------------------------

class ProcessCreate(BaseModel):
    """Request body for POST /processes."""
    title: str
    stages: List[StageDraft] = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("لطفاً نام فرآیند را بنویسید")
        return value


class ProcessRead(BaseModel):
    id: UUID4
    title: str
    stages: List[StageRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
