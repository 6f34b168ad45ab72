"""Process templates, their ordered stages and per-stage checklist templates."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Process(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "processes"

    title: str = Field(nullable=False)


class Stage(UUIDMixin, SQLModel, table=True):
    __tablename__ = "stages"

    process_id: uuid.UUID = Field(foreign_key="processes.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    role_responsible: Optional[str] = None
    order_index: int = Field(nullable=False, default=1)  # 1-based


class StageChecklist(UUIDMixin, SQLModel, table=True):
    __tablename__ = "stage_checklists"

    stage_id: uuid.UUID = Field(foreign_key="stages.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    order_index: int = Field(nullable=False, default=1)
