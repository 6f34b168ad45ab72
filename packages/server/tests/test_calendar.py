"""
Calendar: Jalali month grid with the tasks due on each day.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException

from app.models.process import Process
from app.models.project import Project
from app.models.task import ProjectTask
from app.services.calendar import build_month

# 2024-09-22 is 1403/07/01, a Sunday
MEHR_FIRST = datetime(2024, 9, 22, 9, 0, tzinfo=ZoneInfo("Asia/Tehran"))


async def _seed(session, *due_dates):
    process = Process(title="p")
    session.add(process)
    await session.flush()
    project = Project(title="کمپین پاییز", process_id=process.id)
    session.add(project)
    await session.flush()
    for i, due_date in enumerate(due_dates):
        session.add(ProjectTask(project_id=project.id, title=f"task {i}", due_date=due_date))
    await session.commit()
    return project


def _titles(day):
    return [t.title for t in day.tasks]


class TestBuildMonth:
    @pytest.mark.asyncio
    async def test_grid_and_navigation(self, session):
        month = await build_month(session, 1403, 7, now=MEHR_FIRST)
        assert month.month_name == "مهر"
        assert month.weekdays[0] == "شنبه"
        assert month.days[0].day is None
        assert month.days[1].day == 1
        assert month.days[1].full_date == "1403/07/01"
        assert len([d for d in month.days if d.day]) == 30
        assert (month.prev.year, month.prev.month) == (1403, 6)
        assert (month.next.year, month.next.month) == (1403, 8)

    @pytest.mark.asyncio
    async def test_today_flag(self, session):
        month = await build_month(session, 1403, 7, now=MEHR_FIRST)
        assert [d.full_date for d in month.days if d.is_today] == ["1403/07/01"]

        other = await build_month(session, 1403, 8, now=MEHR_FIRST)
        assert not any(d.is_today for d in other.days)

    @pytest.mark.asyncio
    async def test_defaults_to_current_month(self, session):
        month = await build_month(session, now=MEHR_FIRST)
        assert (month.year, month.month) == (1403, 7)

    @pytest.mark.asyncio
    async def test_year_wraps(self, session):
        month = await build_month(session, 1403, 12, now=MEHR_FIRST)
        assert (month.next.year, month.next.month) == (1404, 1)
        assert len([d for d in month.days if d.day]) == 30

    @pytest.mark.asyncio
    async def test_tasks_placed_on_their_days(self, session):
        await _seed(session, "1403/07/03", "1403/06/30 - 1403/07/02", "1403/08/01", None)
        month = await build_month(session, 1403, 7, now=MEHR_FIRST)
        by_date = {d.full_date: d for d in month.days if d.day}

        assert _titles(by_date["1403/07/01"]) == ["task 1"]
        assert _titles(by_date["1403/07/02"]) == ["task 1"]
        assert _titles(by_date["1403/07/03"]) == ["task 0"]
        assert all(not by_date[f"1403/07/{d:02d}"].tasks for d in range(4, 31))
        assert by_date["1403/07/03"].tasks[0].project_title == "کمپین پاییز"

        shahrivar = await build_month(session, 1403, 6, now=MEHR_FIRST)
        last = [d for d in shahrivar.days if d.day][-1]
        assert _titles(last) == ["task 1"]

    @pytest.mark.asyncio
    async def test_invalid_month(self, session):
        with pytest.raises(HTTPException) as exc_info:
            await build_month(session, 1403, 13, now=MEHR_FIRST)
        assert exc_info.value.status_code == 422


class TestCalendarEndpoint:
    @pytest.mark.asyncio
    async def test_month_query(self, member_client):
        resp = await member_client.get("/api/v1/calendar", params={"year": 1403, "month": 1})
        assert resp.status_code == 200
        data = resp.json()
        assert data["month_name"] == "فروردین"
        # 1403/01/01 is a Wednesday
        assert [d["day"] for d in data["days"][:5]] == [None, None, None, None, 1]

    @pytest.mark.asyncio
    async def test_bad_month(self, member_client):
        resp = await member_client.get("/api/v1/calendar", params={"year": 1403, "month": 0})
        assert resp.status_code == 422
