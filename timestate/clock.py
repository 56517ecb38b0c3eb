"""
timestate.clock
===============

Injectable source of "now".  Every reading is an aware UTC datetime.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

from .arithmetic import add_months


class ClockSource(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock, normalized to UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock:
    """
    Clock pinned to a fixed instant; advanced explicitly by tests.

    Example
    -------
    >>> clock = FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
    >>> clock.increment(timedelta(hours=1))
    >>> clock.now().hour
    1
    """

    def __init__(self, now: datetime) -> None:
        if now.tzinfo is None:
            raise ValueError("FakeClock needs an aware datetime")
        self._now = now.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def increment(self, duration: timedelta) -> None:
        self._now = self._now + duration

    def increment_date(self, years: int = 0, months: int = 0, days: int = 0) -> None:
        self._now = add_months(self._now, 12 * years + months) + timedelta(days=days)
