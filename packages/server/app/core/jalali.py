"""
Jalali (Solar Hijri) calendar helpers built on jdatetime.

Due dates are stored as normalised strings (``YYYY/MM/DD`` or
``YYYY/MM/DD - YYYY/MM/DD``), so lexicographic order equals date order
and filters compare strings directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import jdatetime
import structlog

from app.core.config import get_settings
from daftar_shared.schemas.tasks import RANGE_SEPARATOR, normalize_due_date

log = structlog.get_logger()

# jdatetime.date.weekday(): 0 = Saturday
PERSIAN_WEEKDAYS = ("شنبه", "یکشنبه", "دوشنبه", "سه‌شنبه", "چهارشنبه", "پنج‌شنبه", "جمعه")
PERSIAN_MONTHS = (
    "فروردین", "اردیبهشت", "خرداد", "تیر", "مرداد", "شهریور",
    "مهر", "آبان", "آذر", "دی", "بهمن", "اسفند",
)

_TO_PERSIAN = str.maketrans("0123456789", "۰۱۲۳۴۵۶۷۸۹")


def to_persian_digits(value: object) -> str:
    return str(value).translate(_TO_PERSIAN)


def local_now(tz: Optional[str] = None) -> datetime:
    """Current wall-clock time in the configured (or given) timezone."""
    return datetime.now(ZoneInfo(tz or get_settings().timezone))


def today(now: Optional[datetime] = None) -> jdatetime.date:
    now = now or local_now()
    return jdatetime.date.fromgregorian(date=now.date())


def format_date(day: jdatetime.date) -> str:
    return f"{day.year:04d}/{day.month:02d}/{day.day:02d}"


def parse_date(value: str) -> jdatetime.date:
    """Parse a single ``YYYY/MM/DD``; raises ValueError for impossible dates."""
    normalized = normalize_due_date(value)
    if RANGE_SEPARATOR in normalized:
        raise ValueError(f"Expected a single date, got a range: {value!r}")
    year, month, day = (int(p) for p in normalized.split("/"))
    if day > days_in_month(year, month):
        raise ValueError(f"Invalid Jalali date: {value!r}")
    return jdatetime.date(year, month, day)


def validate_due_date(value: str) -> str:
    """Normalise a due date and check every endpoint exists on the calendar."""
    normalized = normalize_due_date(value)
    for part in normalized.split(RANGE_SEPARATOR):
        parse_date(part)
    return normalized


def parse_due_date(due_date: Optional[str]) -> Optional[tuple[str, str]]:
    """(start, end) of a stored due date; None when absent or malformed."""
    if not due_date:
        return None
    try:
        parts = normalize_due_date(due_date).split(RANGE_SEPARATOR)
    except ValueError:
        log.debug("jalali.malformed_due_date", due_date=due_date)
        return None
    return parts[0], parts[-1]


def is_due_on(due_date: Optional[str], day: str) -> bool:
    """True when ``day`` (YYYY/MM/DD) falls inside the due date or range."""
    span = parse_due_date(due_date)
    return span is not None and span[0] <= day <= span[1]


def is_overdue(due_date: Optional[str], day: str) -> bool:
    """True when the due date (the start of a range) is before ``day``."""
    span = parse_due_date(due_date)
    return span is not None and span[0] < day


def is_leap(year: int) -> bool:
    return jdatetime.date(year, 1, 1).isleap()


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    if month <= 6:
        return 31
    if month <= 11:
        return 30
    return 30 if is_leap(year) else 29


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_grid(year: int, month: int) -> list[Optional[jdatetime.date]]:
    """Saturday-first grid: blank (None) cells, then every day of the month."""
    first = jdatetime.date(year, month, 1)
    cells: list[Optional[jdatetime.date]] = [None] * first.weekday()
    cells.extend(jdatetime.date(year, month, d) for d in range(1, days_in_month(year, month) + 1))
    return cells


def format_long(day: jdatetime.date) -> str:
    """e.g. "شنبه ۰۱ مهر ۱۴۰۳"."""
    return " ".join([
        PERSIAN_WEEKDAYS[day.weekday()],
        to_persian_digits(f"{day.day:02d}"),
        PERSIAN_MONTHS[day.month - 1],
        to_persian_digits(day.year),
    ])


def greeting(hour: int) -> str:
    if hour < 12:
        return "صبح بخیر"
    if hour < 18:
        return "ظهر بخیر"
    return "شب بخیر"
