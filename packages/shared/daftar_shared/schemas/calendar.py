from typing import List, Optional
from pydantic import BaseModel, Field
from uuid import UUID

from .common import TaskStatus


class CalendarTask(BaseModel):
    id: UUID
    title: str
    status: TaskStatus
    due_date: str
    project_id: UUID
    project_title: Optional[str] = None
    assigned_to: Optional[UUID] = None


class CalendarDay(BaseModel):
    """A grid cell. Leading blank cells have day == None."""
    day: Optional[int] = None
    full_date: Optional[str] = None
    is_today: bool = False
    tasks: List[CalendarTask] = Field(default_factory=list)


class MonthRef(BaseModel):
    year: int
    month: int


class CalendarMonth(BaseModel):
    year: int
    month: int
    month_name: str
    weekdays: List[str]
    days: List[CalendarDay]
    prev: MonthRef
    next: MonthRef
