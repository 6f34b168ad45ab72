"""Jalali month calendar with the tasks due on each day."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core import jalali
from app.models.project import Project
from app.models.task import ProjectTask
from daftar_shared.schemas.calendar import CalendarDay, CalendarMonth, CalendarTask, MonthRef


async def _tasks_in_month(
    session: AsyncSession, year: int, month: int
) -> list[tuple[ProjectTask, str]]:
    """Dated tasks whose due span touches the month, with their project title."""
    first = f"{year:04d}/{month:02d}/01"
    last = f"{year:04d}/{month:02d}/{jalali.days_in_month(year, month):02d}"

    result = await session.execute(
        select(ProjectTask, Project.title)
        .join(Project, Project.id == ProjectTask.project_id)
        .where(ProjectTask.due_date.is_not(None))
        .order_by(ProjectTask.created_at)
    )
    rows = []
    for task, project_title in result.all():
        span = jalali.parse_due_date(task.due_date)
        if span and span[0] <= last and span[1] >= first:
            rows.append((task, project_title))
    return rows


async def build_month(
    session: AsyncSession,
    year: Optional[int] = None,
    month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> CalendarMonth:
    today = jalali.today(now)
    year = year or today.year
    month = month or today.month
    if not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail="Month must be between 1 and 12")

    today_str = jalali.format_date(today)
    tasks = await _tasks_in_month(session, year, month)

    days = []
    for cell in jalali.month_grid(year, month):
        if cell is None:
            days.append(CalendarDay())
            continue
        full_date = jalali.format_date(cell)
        days.append(
            CalendarDay(
                day=cell.day,
                full_date=full_date,
                is_today=full_date == today_str,
                tasks=[
                    CalendarTask(
                        id=task.id,
                        title=task.title,
                        status=task.status,
                        due_date=task.due_date,
                        project_id=task.project_id,
                        project_title=project_title,
                        assigned_to=task.assigned_to,
                    )
                    for task, project_title in tasks
                    if jalali.is_due_on(task.due_date, full_date)
                ],
            )
        )

    prev_year, prev_month = jalali.shift_month(year, month, -1)
    next_year, next_month = jalali.shift_month(year, month, 1)
    return CalendarMonth(
        year=year,
        month=month,
        month_name=jalali.PERSIAN_MONTHS[month - 1],
        weekdays=list(jalali.PERSIAN_WEEKDAYS),
        days=days,
        prev=MonthRef(year=prev_year, month=prev_month),
        next=MonthRef(year=next_year, month=next_month),
    )
