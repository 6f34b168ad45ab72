"""Task-related Pydantic schemas for the project board, checklist, attachments and comments."""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import UUID4

from .common import TaskStatus

_DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")
_DATE_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
RANGE_SEPARATOR = " - "


def normalize_digits(value: str) -> str:
    """Replace Persian and Arabic-Indic digits with ASCII ones."""
    return value.translate(_DIGITS)


def normalize_due_date(value: str) -> str:
    """Normalise a Jalali due date string.

    Accepts ``YYYY/MM/DD`` or ``YYYY/MM/DD - YYYY/MM/DD`` written with
    ASCII, Persian or Arabic-Indic digits and returns the ASCII form with
    zero-padded month and day. Raises ValueError on anything else.
    """
    parts = [p.strip() for p in normalize_digits(value).split("-")]
    if not 1 <= len(parts) <= 2:
        raise ValueError(f"Invalid due date: {value!r}")
    normalized = []
    for part in parts:
        match = _DATE_RE.match(part)
        if not match:
            raise ValueError(f"Invalid due date: {value!r}")
        year, month, day = (int(g) for g in match.groups())
        if not (1 <= month <= 12 and 1 <= day <= 31):
            raise ValueError(f"Invalid due date: {value!r}")
        normalized.append(f"{year:04d}/{month:02d}/{day:02d}")
    if len(normalized) == 2 and normalized[1] < normalized[0]:
        raise ValueError("Due date range ends before it starts")
    return RANGE_SEPARATOR.join(normalized)


# ---------------------------------------------------------------------------
# Checklist / attachments
# ---------------------------------------------------------------------------

class ChecklistItem(BaseModel):
    id: int
    title: str
    is_checked: bool = False


class ChecklistItemCreate(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Checklist item title must not be blank")
        return value


class Attachment(BaseModel):
    name: str
    url: str
    type: str


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

class TaskCreate(BaseModel):
    """Request body for POST /projects/{projectId}/tasks."""
    stage_id: UUID4
    title: Optional[str] = Field(default=None, max_length=300)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    stage_id: Optional[UUID4] = None
    assigned_to: Optional[UUID4] = None
    due_date: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def _normalize_due_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return normalize_due_date(value)


class TaskRead(BaseModel):
    id: UUID4
    project_id: UUID4
    stage_id: Optional[UUID4] = None
    stage_title: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    assigned_to: Optional[UUID4] = None
    assigned_user_name: Optional[str] = None
    due_date: Optional[str] = None
    checklist: List[ChecklistItem] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=5000)


class CommentRead(BaseModel):
    id: UUID4
    task_id: UUID4
    author_id: UUID4
    author_name: str
    text: str
    created_at: datetime
