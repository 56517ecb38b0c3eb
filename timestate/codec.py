"""
timestate.codec
===============

Canonical timestamp text handling.

Every timestamp that enters or leaves the engine goes through this module.
Only one profile is accepted on input::

    YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)

and output is always the zero-offset form ``YYYY-MM-DDTHH:MM:SSZ``.  The
module also hosts the two decomposition helpers (:pyfunc:`rfc3339_parse`,
:pyfunc:`unix_timestamp_parse`) and the delay duration parser.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from .errors import FormatError

logger = logging.getLogger(__name__)

_RFC3339 = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$"
)

_DURATION = re.compile(r"^(?P<value>[0-9]+(?:\.[0-9]+)?)(?P<unit>ms|s|m|h)$")

_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}

# Sunday is day zero.
_WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def parse_rfc3339(text: str) -> datetime:
    """
    Parse *text* and return an aware UTC :class:`datetime`.

    Raises :class:`FormatError` for anything outside the canonical profile,
    including syntactically valid text with out-of-range fields
    (``2024-02-30T00:00:00Z``, offsets beyond 23:59).
    """
    if not isinstance(text, str):
        raise FormatError(f"timestamp must be a string, got {type(text).__name__}")

    match = _RFC3339.match(text)
    if match is None:
        logger.debug(f"rejecting non-RFC3339 timestamp {text!r}")
        raise FormatError(f"{text!r} is not a valid RFC3339 timestamp")

    offset = match["offset"]
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise FormatError(f"{text!r} has an out-of-range UTC offset")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    fraction = match["fraction"] or ""
    microsecond = int((fraction + "000000")[:6])

    try:
        parsed = datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
            microsecond,
            tzinfo=tz,
        )
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise FormatError(f"{text!r} is not a valid RFC3339 timestamp: {e}") from e


def format_rfc3339(instant: datetime) -> str:
    """Return the canonical ``...Z`` text for *instant* at second precision."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise FormatError("naive datetimes have no defined instant; attach a timezone")
    utc = instant.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}Z"
    )


def is_rfc3339(text: Any) -> bool:
    """Validator helper: ``True`` when *text* parses."""
    try:
        parse_rfc3339(text)
    except FormatError:
        return False
    return True


def ensure_instant(value: datetime | str) -> datetime:
    """Accept either canonical text or an aware datetime; return UTC datetime."""
    if isinstance(value, str):
        return parse_rfc3339(value)
    if value.tzinfo is None or value.utcoffset() is None:
        raise FormatError("naive datetimes have no defined instant; attach a timezone")
    return value.astimezone(timezone.utc)


def parse_duration(text: str) -> timedelta:
    """
    Parse a delay duration such as ``30s``, ``5m``, ``1.5h`` or ``250ms``.

    A single number immediately followed by one unit; no signs, no spaces,
    no compound forms.
    """
    match = _DURATION.match(text or "")
    if match is None:
        raise FormatError(
            f"{text!r} must be a number immediately followed by ms, s, m or h (e.g. \"30s\")"
        )
    try:
        return float(match["value"]) * _DURATION_UNITS[match["unit"]]
    except OverflowError as e:
        raise FormatError(f"{text!r} is outside the supported duration range") from e


def format_duration(duration: timedelta) -> str:
    """Render *duration* in the shortest form :pyfunc:`parse_duration` reads back exactly."""
    micro = duration // timedelta(microseconds=1)
    ms, rest = divmod(micro, 1000)
    if rest:
        return f"{ms}.{rest:03d}".rstrip("0") + "ms"
    for unit, size in (("h", 3_600_000), ("m", 60_000), ("s", 1_000)):
        if ms and ms % size == 0:
            return f"{ms // size}{unit}"
    return f"{ms}ms"


# ---------------------------------------------------------------------
# Decomposition helpers
# ---------------------------------------------------------------------
def _breakdown(instant: datetime) -> Dict[str, Any]:
    iso_year, iso_week, _ = instant.isocalendar()
    return {
        "year": instant.year,
        "year_day": instant.timetuple().tm_yday,
        "day": instant.day,
        "month": instant.month,
        "month_name": calendar.month_name[instant.month],
        "weekday": instant.isoweekday() % 7,
        "weekday_name": _WEEKDAY_NAMES[instant.isoweekday() % 7],
        "hour": instant.hour,
        "minute": instant.minute,
        "second": instant.second,
        "iso_year": iso_year,
        "iso_week": iso_week,
    }


def rfc3339_parse(text: str) -> Dict[str, Any]:
    """
    Break a canonical timestamp into calendar components.

    Components are those of the timestamp in its own offset, matching what a
    reader of the text would expect; ``unix`` is offset independent.
    """
    if not isinstance(text, str) or _RFC3339.match(text) is None:
        raise FormatError(f"{text!r} is not a valid RFC3339 timestamp")
    utc = parse_rfc3339(text)
    offset = text[-6:] if not text.endswith("Z") else "+00:00"
    sign = -1 if offset[0] == "-" else 1
    local = utc.astimezone(timezone(sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6]))))
    out = _breakdown(local)
    out["unix"] = calendar.timegm(utc.utctimetuple())
    return out


def unix_timestamp_parse(seconds: int) -> Dict[str, Any]:
    """Break an epoch-seconds value into UTC calendar components."""
    try:
        instant = datetime.fromtimestamp(int(seconds), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise FormatError(f"{seconds!r} is outside the supported timestamp range") from e
    out = _breakdown(instant)
    out["rfc3339"] = format_rfc3339(instant)
    return out
