"""Client model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Client(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "clients"

    name: str = Field(nullable=False, index=True)
    phone: Optional[str] = None
    description: Optional[str] = None
