"""
Clock abstraction — analytics code asks a Clock for "now" instead of reading
the system time, so time-of-day bucketing and look-back windows are testable.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current local wall-clock time (naive)."""
    return datetime.now()


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock frozen at *moment*."""
    def _now() -> datetime:
        return moment
    return _now


def to_local(moment: datetime) -> datetime:
    """Aware datetimes → naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


# Sunday-first, matching how weekdays are reported to the UI
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def weekday_index(day: date) -> int:
    """0 = Sunday … 6 = Saturday."""
    return (day.weekday() + 1) % 7


def weekday_name(day: date) -> str:
    return DAY_NAMES[weekday_index(day)]
