"""Profile and team schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, UUID4, field_validator

from .common import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ProfileUpdateRequest(BaseModel):
    """Update the caller's own profile."""
    full_name: str = Field(min_length=1, max_length=200)

    @field_validator("full_name")
    @classmethod
    def _strip_full_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class RoleUpdateRequest(BaseModel):
    """Change a team member's role (admin only)."""
    role: Role


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProfileResponse(BaseModel):
    id: UUID4
    email: str
    full_name: Optional[str] = None
    role: Role
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TeamListResponse(BaseModel):
    """Every profile in the workspace."""
    data: List[ProfileResponse]
