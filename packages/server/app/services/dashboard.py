"""Dashboard statistics for the signed-in user's assigned tasks."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import jalali
from app.models.profile import Profile
from app.models.task import ProjectTask
from app.services.tasks import list_tasks
from daftar_shared.schemas.common import TaskStatus
from daftar_shared.schemas.dashboard import DashboardResponse, DashboardStats


def compute_stats(tasks: Iterable[ProjectTask], today: str) -> DashboardStats:
    """Count tasks for the summary cards. ``today`` is a ``YYYY/MM/DD`` string."""
    stats = DashboardStats()
    for task in tasks:
        stats.total_tasks += 1
        if task.status == TaskStatus.COMPLETED.value:
            stats.done_tasks += 1
            continue
        if task.status == TaskStatus.IN_PROGRESS.value:
            stats.in_progress_tasks += 1
        if jalali.is_due_on(task.due_date, today):
            stats.today_tasks += 1
        if jalali.is_overdue(task.due_date, today):
            stats.delayed_tasks += 1
    return stats


async def build_dashboard(
    session: AsyncSession,
    profile: Profile,
    now: Optional[datetime] = None,
) -> DashboardResponse:
    now = now or jalali.local_now()
    today = jalali.today(now)
    today_str = jalali.format_date(today)

    tasks = await list_tasks(session, assigned_to=profile.id)
    stats = compute_stats(tasks, today_str)

    return DashboardResponse(
        full_name=profile.full_name,
        greeting=jalali.greeting(now.hour),
        today=today_str,
        today_label=jalali.format_long(today),
        today_tasks=stats.today_tasks,
        delayed_tasks=stats.delayed_tasks,
        in_progress_tasks=stats.in_progress_tasks,
        done_tasks=stats.done_tasks,
        todo_tasks=stats.todo_tasks,
        total_tasks=stats.total_tasks,
        completion_percent=stats.completion_percent,
    )
