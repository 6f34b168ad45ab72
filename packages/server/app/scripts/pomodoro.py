"""
Terminal Pomodoro timer.

Runs the same work/break countdown as the dashboard widget, ticking once
per second. Ctrl+C stops it.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from app.core.logging import configure_logging
from app.services.pomodoro import PomodoroTimer
from daftar_shared.schemas.pomodoro import POMODORO_MODE_LABELS

log = structlog.get_logger()

TICK_SECONDS = 1.0


async def run_timer(timer: PomodoroTimer, cycles: int, tick: float = TICK_SECONDS) -> int:
    """Count down ``cycles`` periods, auto-starting each one. Returns periods finished."""
    finished = 0
    timer.toggle()
    while finished < cycles:
        label = POMODORO_MODE_LABELS[timer.mode]
        sys.stdout.write(f"\r{label} {timer.format_time()} ")
        sys.stdout.flush()
        await asyncio.sleep(tick)
        if timer.tick():
            finished += 1
            sys.stdout.write("\a\n")
            log.info("pomodoro.period_finished", next_mode=timer.mode.value, finished=finished)
            if finished < cycles:
                timer.toggle()
    return finished


def main() -> None:
    parser = argparse.ArgumentParser(description="Pomodoro focus timer")
    parser.add_argument("--work", type=int, default=25, help="Work period in minutes (default: 25)")
    parser.add_argument("--break", dest="break_", type=int, default=5, help="Break period in minutes (default: 5)")
    parser.add_argument("--cycles", type=int, default=2, help="Periods to run, work and break alternating (default: 2)")
    parser.add_argument("--log-format", choices=["json", "text"], default="text")
    args = parser.parse_args()

    if args.work <= 0 or args.break_ <= 0 or args.cycles <= 0:
        parser.error("--work, --break and --cycles must be positive")

    configure_logging("info", args.log_format)
    timer = PomodoroTimer(work_seconds=args.work * 60, break_seconds=args.break_ * 60)
    try:
        asyncio.run(run_timer(timer, args.cycles))
    except KeyboardInterrupt:
        sys.stdout.write("\n")


if __name__ == "__main__":
    main()
