"""
Pomodoro timer: countdown rules, Redis persistence and the endpoints.
"""

import json
import uuid

import pytest

from app.services import pomodoro
from app.services.pomodoro import PomodoroTimer, format_time
from daftar_shared.schemas.pomodoro import PomodoroMode


class TestFormatTime:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(1500, "25:00"), (59, "00:59"), (0, "00:00"), (-5, "00:00"), (6000, "100:00")],
    )
    def test_format(self, seconds, expected):
        assert format_time(seconds) == expected


class TestTimer:
    def test_starts_with_full_work_period(self):
        timer = PomodoroTimer()
        assert timer.mode == PomodoroMode.WORK
        assert timer.time_left == 1500
        assert not timer.is_active

    def test_tick_only_when_active(self):
        timer = PomodoroTimer()
        assert timer.tick() is False
        assert timer.time_left == 1500
        timer.toggle()
        timer.tick()
        assert timer.time_left == 1499

    def test_work_period_rolls_into_break(self):
        timer = PomodoroTimer(work_seconds=2, break_seconds=1)
        timer.toggle()
        assert timer.tick() is False
        assert timer.tick() is True
        assert timer.mode == PomodoroMode.BREAK
        assert timer.time_left == 1
        assert not timer.is_active

    def test_break_rolls_back_into_work(self):
        timer = PomodoroTimer(work_seconds=10, break_seconds=1, mode=PomodoroMode.BREAK)
        timer.toggle()
        assert timer.tick() is True
        assert timer.mode == PomodoroMode.WORK
        assert timer.time_left == 10

    def test_toggle_pauses(self):
        timer = PomodoroTimer()
        assert timer.toggle() is True
        timer.tick()
        assert timer.toggle() is False
        timer.tick()
        assert timer.time_left == 1499

    def test_reset_keeps_mode(self):
        timer = PomodoroTimer(mode=PomodoroMode.BREAK, time_left=12)
        timer.toggle()
        timer.reset()
        assert timer.mode == PomodoroMode.BREAK
        assert timer.time_left == 300
        assert not timer.is_active

    def test_advance(self):
        timer = PomodoroTimer()
        assert timer.advance(100) is False
        assert timer.time_left == 1500
        timer.toggle()
        assert timer.advance(100) is False
        assert timer.time_left == 1400
        assert timer.advance(5000) is True
        assert timer.mode == PomodoroMode.BREAK
        assert timer.time_left == 300

    def test_state(self):
        state = PomodoroTimer(time_left=61).to_state()
        assert state.display == "01:01"
        assert state.label == "تمرکز"


class TestPersistence:
    @pytest.mark.asyncio
    async def test_fresh_user_gets_default_timer(self, redis_mock):
        timer = await pomodoro.load_timer(uuid.uuid4(), now=1000.0)
        assert timer.time_left == 1500
        assert not timer.is_active

    @pytest.mark.asyncio
    async def test_saved_with_ttl(self, redis_mock):
        user_id = uuid.uuid4()
        await pomodoro.save_timer(user_id, PomodoroTimer(), now=1000.0)
        key = f"dt:pomodoro:{user_id}"
        assert redis_mock.ttls[key] == pomodoro.STATE_TTL_SECONDS
        data = json.loads(redis_mock.strings[key])
        assert data["mode"] == "work"
        assert data["saved_at"] == 1000.0

    @pytest.mark.asyncio
    async def test_elapsed_time_applied_while_running(self, redis_mock):
        user_id = uuid.uuid4()
        timer = PomodoroTimer()
        timer.toggle()
        await pomodoro.save_timer(user_id, timer, now=1000.0)

        loaded = await pomodoro.load_timer(user_id, now=1010.0)
        assert loaded.time_left == 1490
        assert loaded.is_active

        finished = await pomodoro.load_timer(user_id, now=1000.0 + 1500)
        assert finished.mode == PomodoroMode.BREAK
        assert finished.time_left == 300
        assert not finished.is_active

    @pytest.mark.asyncio
    async def test_sub_second_polling_keeps_counting(self, redis_mock):
        user_id = uuid.uuid4()
        timer = PomodoroTimer()
        timer.toggle()
        await pomodoro.save_timer(user_id, timer, now=1000.0)

        now = 1000.0
        for _ in range(12):
            now += 0.75
            loaded = await pomodoro.load_timer(user_id, now=now)
            await pomodoro.save_timer(user_id, loaded, now=now)

        # 9 seconds of wall clock
        assert loaded.time_left == 1491
        data = json.loads(redis_mock.strings[f"dt:pomodoro:{user_id}"])
        assert data["saved_at"] == 1009.0
        assert "synced_at" not in data

    @pytest.mark.asyncio
    async def test_pause_saves_current_time(self, redis_mock):
        user_id = uuid.uuid4()
        timer = PomodoroTimer()
        timer.toggle()
        await pomodoro.save_timer(user_id, timer, now=1000.0)

        loaded = await pomodoro.load_timer(user_id, now=1010.5)
        loaded.toggle()
        await pomodoro.save_timer(user_id, loaded, now=1010.5)

        data = json.loads(redis_mock.strings[f"dt:pomodoro:{user_id}"])
        assert data["saved_at"] == 1010.5
        assert data["time_left"] == 1490
        assert not data["is_active"]

    @pytest.mark.asyncio
    async def test_paused_timer_does_not_move(self, redis_mock):
        user_id = uuid.uuid4()
        await pomodoro.save_timer(user_id, PomodoroTimer(time_left=700), now=1000.0)
        loaded = await pomodoro.load_timer(user_id, now=5000.0)
        assert loaded.time_left == 700


class TestPomodoroEndpoints:
    @pytest.mark.asyncio
    async def test_toggle_and_reset(self, member_client):
        state = (await member_client.get("/api/v1/pomodoro")).json()
        assert state == {
            "mode": "work",
            "label": "تمرکز",
            "time_left": 1500,
            "display": "25:00",
            "is_active": False,
        }

        state = (await member_client.post("/api/v1/pomodoro/toggle")).json()
        assert state["is_active"] is True

        state = (await member_client.post("/api/v1/pomodoro/reset")).json()
        assert state["is_active"] is False
        assert state["time_left"] == 1500

    @pytest.mark.asyncio
    async def test_timers_are_per_user(self, admin_client, member_client):
        await member_client.post("/api/v1/pomodoro/toggle")
        state = (await admin_client.get("/api/v1/pomodoro")).json()
        assert state["is_active"] is False

    @pytest.mark.asyncio
    async def test_requires_csrf_for_toggle(self, member_client):
        del member_client.headers["X-CSRF-Token"]
        resp = await member_client.post("/api/v1/pomodoro/toggle")
        assert resp.status_code == 403


class TestTerminalTimer:
    @pytest.mark.asyncio
    async def test_runs_requested_cycles(self, capsys):
        from app.scripts.pomodoro import run_timer

        timer = PomodoroTimer(work_seconds=2, break_seconds=1)
        assert await run_timer(timer, cycles=2, tick=0) == 2
        assert timer.mode == PomodoroMode.WORK
        assert not timer.is_active
        assert "تمرکز 00:02" in capsys.readouterr().out
