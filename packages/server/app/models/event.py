"""Activity event model (append-only)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    type: str = Field(nullable=False, index=True)  # e.g. task.created, project.deleted
    actor_id: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id")
    # No foreign keys: events outlive the rows they describe
    project_id: Optional[uuid.UUID] = Field(default=None, index=True)
    task_id: Optional[uuid.UUID] = Field(default=None)
    payload: dict = Field(default_factory=dict, sa_type=sa.JSON, nullable=False)
    timestamp: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        index=True,
        sa_type=sa.DateTime(timezone=True),
    )
