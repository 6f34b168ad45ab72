"""Profile model: a team member and their login."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Profile(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "profiles"

    email: str = Field(unique=True, index=True, nullable=False)
    full_name: Optional[str] = None
    role: str = Field(default="member", nullable=False)  # admin | member
    avatar_url: Optional[str] = None
    password_hash: Optional[str] = Field(default=None)  # bcrypt
