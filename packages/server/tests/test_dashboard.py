"""
Dashboard: summary counts for the caller's assigned tasks.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from app.core import jalali
from app.models.process import Process
from app.models.profile import Profile
from app.models.project import Project
from app.models.task import ProjectTask
from app.services.dashboard import build_dashboard, compute_stats

TODAY = "1403/07/10"
# 2024-10-01 is 1403/07/10, a Tuesday
EVENING = datetime(2024, 10, 1, 20, 30, tzinfo=ZoneInfo("Asia/Tehran"))


def _task(status="pending", due_date=None):
    return ProjectTask(title="t", status=status, due_date=due_date)


class TestComputeStats:
    def test_empty(self):
        stats = compute_stats([], TODAY)
        assert stats.total_tasks == 0
        assert stats.completion_percent == 0.0

    def test_counts(self):
        tasks = [
            _task("completed", TODAY),
            _task("in_progress", TODAY),
            _task("pending", "1403/07/01"),
            _task("pending", "1403/07/05 - 1403/07/15"),
            _task("pending"),
            _task("blocked", "1403/07/01 - 1403/07/09"),
        ]
        stats = compute_stats(tasks, TODAY)
        assert stats.total_tasks == 6
        assert stats.done_tasks == 1
        assert stats.in_progress_tasks == 1
        assert stats.today_tasks == 2
        assert stats.delayed_tasks == 3
        assert stats.todo_tasks == 4
        assert stats.completion_percent == 16.7

    def test_running_range_counts_as_today_and_delayed(self):
        stats = compute_stats([_task("pending", "1403/07/01 - 1403/07/05")], "1403/07/03")
        assert stats.today_tasks == 1
        assert stats.delayed_tasks == 1

    def test_range_starting_today_is_not_delayed(self):
        stats = compute_stats([_task("pending", f"{TODAY} - 1403/07/20")], TODAY)
        assert (stats.today_tasks, stats.delayed_tasks) == (1, 0)

    def test_completed_tasks_are_never_late(self):
        stats = compute_stats([_task("completed", "1400/01/01")], TODAY)
        assert stats.delayed_tasks == 0
        assert stats.completion_percent == 100.0

    def test_malformed_due_date_is_ignored(self):
        stats = compute_stats([_task("pending", "not a date")], TODAY)
        assert (stats.today_tasks, stats.delayed_tasks) == (0, 0)


class TestBuildDashboard:
    @pytest.mark.asyncio
    async def test_fixed_clock(self, session):
        profile = Profile(email="a@example.com", full_name="سارا")
        process = Process(title="p")
        session.add_all([profile, process])
        await session.flush()
        project = Project(title="x", process_id=process.id)
        session.add(project)
        await session.flush()
        session.add_all([
            ProjectTask(project_id=project.id, title="a", assigned_to=profile.id, due_date=TODAY),
            ProjectTask(project_id=project.id, title="b", assigned_to=profile.id, status="completed"),
            # not assigned to the profile
            ProjectTask(project_id=project.id, title="c", due_date=TODAY),
        ])
        await session.commit()

        dashboard = await build_dashboard(session, profile, now=EVENING)
        assert dashboard.full_name == "سارا"
        assert dashboard.greeting == "شب بخیر"
        assert dashboard.today == TODAY
        assert dashboard.today_label == "سه‌شنبه ۱۰ مهر ۱۴۰۳"
        assert dashboard.total_tasks == 2
        assert dashboard.today_tasks == 1
        assert dashboard.done_tasks == 1
        assert dashboard.completion_percent == 50.0


class TestDashboardEndpoint:
    @pytest.mark.asyncio
    async def test_requires_login(self, anon_client):
        assert (await anon_client.get("/api/v1/dashboard")).status_code == 401

    @pytest.mark.asyncio
    async def test_counts_assigned_tasks(self, member_client):
        project = (await member_client.post("/api/v1/projects/", json={"title": "x"})).json()
        board = (await member_client.get(f"/api/v1/projects/{project['id']}/board")).json()
        task = (await member_client.post(
            f"/api/v1/projects/{project['id']}/tasks",
            json={"stage_id": board["columns"][0]["stage_id"]},
        )).json()
        today = jalali.format_date(jalali.today())
        await member_client.patch(
            f"/api/v1/tasks/{task['id']}",
            json={"assigned_to": member_client.user["user_id"], "due_date": today},
        )

        resp = await member_client.get("/api/v1/dashboard")
        assert resp.status_code == 200
        data = resp.json()
        assert data["full_name"] == "عضو"
        assert data["today"] == today
        assert data["total_tasks"] == 1
        assert data["today_tasks"] == 1
        assert data["todo_tasks"] == 1
