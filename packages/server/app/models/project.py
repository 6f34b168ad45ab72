"""Project model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"

    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(default="active", nullable=False)  # active | archived
    category: str = Field(default="web", nullable=False)  # web | instagram | youtube | other
    client_id: Optional[uuid.UUID] = Field(default=None, foreign_key="clients.id", index=True)
    process_id: uuid.UUID = Field(foreign_key="processes.id", nullable=False)
