"""
timestate.arithmetic
====================

Calendar-aware offset addition.

Years and months are added on the calendar and day-of-month overflow rolls
forward into the following month, so ``Jan 31 + 1 month`` lands on March 2nd
(or 3rd outside leap years) and ``Feb 29 + 1 year`` on March 1st.  Nothing is
clamped to the last valid day.  Days are whole calendar days; hours, minutes
and seconds are fixed durations.  All arithmetic happens in UTC, so the two
notions of "day" coincide.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone  # noqa: F401 (timezone used in doctest)

from .errors import ConfigurationError
from .models import OffsetUnit

_FIXED = {
    OffsetUnit.HOURS: timedelta(hours=1),
    OffsetUnit.MINUTES: timedelta(minutes=1),
    OffsetUnit.SECONDS: timedelta(seconds=1),
}


def add_months(base: datetime, months: int) -> datetime:
    """Add *months* calendar months, rolling an overflowing day forward."""
    index = base.year * 12 + (base.month - 1) + months
    year, month0 = divmod(index, 12)
    try:
        first = base.replace(year=year, month=month0 + 1, day=1)
        return first + timedelta(days=base.day - 1)
    except (ValueError, OverflowError) as e:
        raise ConfigurationError(f"offset of {months} months from {base.isoformat()} is out of range") from e


def add_offset(base: datetime, unit: OffsetUnit, magnitude: int) -> datetime:
    """
    Return *base* shifted by *magnitude* units.

    Examples
    --------
    >>> add_offset(datetime(2024, 1, 31, tzinfo=timezone.utc), OffsetUnit.MONTHS, 1)
    datetime.datetime(2024, 3, 2, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if unit is OffsetUnit.YEARS:
        return add_months(base, 12 * magnitude)
    if unit is OffsetUnit.MONTHS:
        return add_months(base, magnitude)

    step = timedelta(days=1) if unit is OffsetUnit.DAYS else _FIXED[unit]
    try:
        return base + magnitude * step
    except OverflowError as e:
        raise ConfigurationError(f"offset of {magnitude} {unit} from {base.isoformat()} is out of range") from e
