"""
Pomodoro focus timer.

A work/break countdown driven by a one-second tick. When a period runs
out the timer stops, switches mode and loads the next period's length;
the user starts the next period explicitly.

The per-user state lives in Redis. Instead of ticking on the server,
each read applies the wall-clock seconds elapsed since the last save.
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Optional

import structlog

from app.core.config import get_settings
from app.core.redis import get_redis, redis_key
from daftar_shared.schemas.pomodoro import POMODORO_MODE_LABELS, PomodoroMode, PomodoroState

log = structlog.get_logger()

STATE_TTL_SECONDS = 7 * 86400


def format_time(seconds: int) -> str:
    """MM:SS, minutes zero-padded (and allowed past 99)."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class PomodoroTimer:
    work_seconds: int = 25 * 60
    break_seconds: int = 5 * 60
    mode: PomodoroMode = PomodoroMode.WORK
    time_left: int = field(default=-1)
    is_active: bool = False
    # wall-clock instant the countdown is caught up to; not persisted as-is
    synced_at: Optional[float] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.mode = PomodoroMode(self.mode)
        if self.time_left < 0:
            self.time_left = self.duration(self.mode)

    def duration(self, mode: PomodoroMode) -> int:
        return self.work_seconds if mode == PomodoroMode.WORK else self.break_seconds

    def toggle(self) -> bool:
        """Start or pause. Returns the new active flag."""
        self.is_active = not self.is_active
        return self.is_active

    def reset(self) -> None:
        """Stop and reload the current mode's full duration."""
        self.is_active = False
        self.time_left = self.duration(self.mode)

    def _finish_period(self) -> None:
        self.is_active = False
        self.mode = PomodoroMode.BREAK if self.mode == PomodoroMode.WORK else PomodoroMode.WORK
        self.time_left = self.duration(self.mode)

    def tick(self) -> bool:
        """Advance one second. Returns True when this tick finished a period."""
        if not self.is_active:
            return False
        if self.time_left > 0:
            self.time_left -= 1
        if self.time_left == 0:
            self._finish_period()
            return True
        return False

    def advance(self, seconds: int) -> bool:
        """Apply ``seconds`` ticks at once; stops at the first finished period."""
        if not self.is_active or seconds <= 0:
            return False
        if seconds < self.time_left:
            self.time_left -= seconds
            return False
        self._finish_period()
        return True

    def format_time(self) -> str:
        return format_time(self.time_left)

    def to_state(self) -> PomodoroState:
        return PomodoroState(
            mode=self.mode,
            label=POMODORO_MODE_LABELS[self.mode],
            time_left=self.time_left,
            display=self.format_time(),
            is_active=self.is_active,
        )


def new_timer() -> PomodoroTimer:
    settings = get_settings()
    return PomodoroTimer(
        work_seconds=settings.pomodoro_work_seconds,
        break_seconds=settings.pomodoro_break_seconds,
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def _key(user_id: uuid.UUID) -> str:
    return redis_key("pomodoro", user_id)


async def load_timer(user_id: uuid.UUID, now: Optional[float] = None) -> PomodoroTimer:
    """Load the user's timer and catch it up to ``now`` (epoch seconds)."""
    now = time.time() if now is None else now
    redis = await get_redis()
    raw = await redis.get(_key(user_id))
    if not raw:
        return new_timer()

    data = json.loads(raw)
    saved_at = data.pop("saved_at", now)
    timer = PomodoroTimer(**data)
    elapsed = max(int(now - saved_at), 0)
    # the unapplied fraction of a second carries over to the next read
    timer.synced_at = saved_at + elapsed if timer.is_active else now
    if timer.advance(elapsed):
        log.info("pomodoro.period_finished", user_id=str(user_id), next_mode=timer.mode.value)
    return timer


async def save_timer(user_id: uuid.UUID, timer: PomodoroTimer, now: Optional[float] = None) -> None:
    now = time.time() if now is None else now
    data = asdict(timer)
    data.pop("synced_at")
    data["mode"] = timer.mode.value
    if timer.is_active and timer.synced_at is not None:
        data["saved_at"] = timer.synced_at
    else:
        data["saved_at"] = now
    redis = await get_redis()
    await redis.setex(_key(user_id), STATE_TTL_SECONDS, json.dumps(data))


async def get_state(user_id: uuid.UUID) -> PomodoroState:
    now = time.time()
    timer = await load_timer(user_id, now)
    await save_timer(user_id, timer, now)
    return timer.to_state()


async def toggle(user_id: uuid.UUID) -> PomodoroState:
    now = time.time()
    timer = await load_timer(user_id, now)
    timer.toggle()
    await save_timer(user_id, timer, now)
    log.info("pomodoro.toggled", user_id=str(user_id), active=timer.is_active, mode=timer.mode.value)
    return timer.to_state()


async def reset(user_id: uuid.UUID) -> PomodoroState:
    now = time.time()
    timer = await load_timer(user_id, now)
    timer.reset()
    await save_timer(user_id, timer, now)
    return timer.to_state()
