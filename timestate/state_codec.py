"""
timestate.state_codec
=====================

Comma-delimited import identifiers for rotation and delay records.

Static identifiers are the base timestamp alone.

Rotation identifiers::

    BASE,TARGET                                   absolute target
    BASE,YEARS,MONTHS,DAYS,HOURS,MINUTES          rotating form without seconds
    BASE,YEARS,MONTHS,DAYS,HOURS,MINUTES,SECONDS  full form (what encode emits)

Unset magnitudes are empty (``0`` is read as unset too).  Decoding always
recomputes the target from base and offsets; nothing cached in the text is
trusted.

Delay identifiers::

    BEFORE,AFTER        e.g. ``30s,`` or ``,5m``
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .codec import format_duration, format_rfc3339, parse_duration, parse_rfc3339
from .errors import FormatError
from .models import WIRE_ORDER, AbsoluteTarget, DelaySpec, OffsetSpec, RotationRecord, StaticBase
from .offsets import resolve

logger = logging.getLogger(__name__)

ABSOLUTE_ARITY = 2
ROTATING_ARITY = 6
FULL_ARITY = 7

_EXPECTED = (
    "BASETIMESTAMP,YEARS,MONTHS,DAYS,HOURS,MINUTES,SECONDS, "
    "BASETIMESTAMP,YEARS,MONTHS,DAYS,HOURS,MINUTES or BASETIMESTAMP,ROTATIONTIMESTAMP"
)


def encode(record: RotationRecord) -> str:
    """Identifier that :pyfunc:`decode` (:pyfunc:`decode_static` for static records) turns back into an equivalent record."""
    base = format_rfc3339(record.base)
    if isinstance(record.spec, StaticBase):
        return base
    if isinstance(record.spec, AbsoluteTarget):
        return f"{base},{format_rfc3339(record.target)}"
    fields = ["" if m is None else str(m) for m in record.spec.magnitudes()]
    return ",".join([base, *fields])


def _magnitude(text: str, identifier: str) -> Optional[int]:
    if text == "":
        return None
    try:
        return int(text)
    except ValueError as e:
        raise FormatError(f"unexpected offset value {text!r} in ID {identifier!r}") from e


def decode(identifier: str, rotating: bool = True, triggers: Optional[Dict[str, str]] = None) -> RotationRecord:
    """
    Parse *identifier* into a :class:`RotationRecord`.

    Raises :class:`FormatError` for an unsupported field count, a missing
    base, all-empty offsets, or unparsable values, and
    :class:`~timestate.errors.ConfigurationError` when every offset is zero.
    """
    parts: List[str] = identifier.split(",")

    if len(parts) not in (ABSOLUTE_ARITY, ROTATING_ARITY, FULL_ARITY):
        logger.debug(f"rejecting import ID {identifier!r} with {len(parts)} fields")
        raise FormatError(f"unexpected format of ID ({identifier!r}), expected {_EXPECTED}")

    base_text, rest = parts[0], parts[1:]
    if base_text == "" or all(p == "" for p in rest):
        raise FormatError(
            f"unexpected format of ID ({identifier!r}), expected a base timestamp "
            f"and at least one non-empty rotation value"
        )

    base = parse_rfc3339(base_text)

    if len(parts) == ABSOLUTE_ARITY:
        target = parse_rfc3339(rest[0])
        spec = AbsoluteTarget(target)
        return RotationRecord(base, resolve(base, spec), spec, dict(triggers or {}), rotating)

    values = dict(zip(WIRE_ORDER, (_magnitude(p, identifier) for p in rest)))
    spec = OffsetSpec({unit: m for unit, m in values.items() if m})
    return RotationRecord(base, resolve(base, spec), spec, dict(triggers or {}), rotating)


def decode_static(identifier: str, triggers: Optional[Dict[str, str]] = None) -> RotationRecord:
    """A static identifier is the base timestamp alone."""
    if "," in identifier:
        raise FormatError(f"unexpected format of ID ({identifier!r}), expected BASETIMESTAMP")
    base = parse_rfc3339(identifier)
    return RotationRecord(base, base, StaticBase(), dict(triggers or {}), rotating=False)


def encode_delay(spec: DelaySpec) -> str:
    before = "" if spec.before is None else format_duration(spec.before)
    after = "" if spec.after is None else format_duration(spec.after)
    return f"{before},{after}"


def decode_delay(identifier: str) -> DelaySpec:
    parts = identifier.split(",")
    if len(parts) != 2 or (parts[0] == "" and parts[1] == ""):
        raise FormatError(
            f"unexpected format of ID ({identifier!r}), expected BEFORE,AFTER where at least one value is non-empty"
        )
    before, after = (parse_duration(p) if p else None for p in parts)
    return DelaySpec(before=before, after=after)
