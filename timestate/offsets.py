"""
timestate.offsets
=================

Resolve the single effective target instant for a base and a rotation spec.

When more than one unit is populated the units are *not* composed.  They are
visited in :class:`~timestate.models.OffsetUnit` order (days, hours, minutes,
months, seconds, years), each is applied to the original base, and the last
one visited is kept.  Callers normally populate exactly one unit.
"""

from __future__ import annotations

from datetime import datetime

from .arithmetic import add_offset
from .codec import ensure_instant
from .errors import ConfigurationError
from .models import AbsoluteTarget, OffsetSpec, RotationSpec, StaticBase


def resolve(base: datetime, spec: RotationSpec) -> datetime:
    """
    Return the target instant for *base* under *spec*.

    Raises :class:`~timestate.errors.ConfigurationError` for an empty
    :class:`OffsetSpec` before any arithmetic runs.
    """
    if isinstance(spec, AbsoluteTarget):
        return ensure_instant(spec.target)
    if isinstance(spec, StaticBase):
        return ensure_instant(base)

    spec.validate()
    base = ensure_instant(base)
    target = base
    for unit, magnitude in spec.populated():
        target = add_offset(base, unit, magnitude)
    return target


def resolve_text(base_text: str, spec: RotationSpec) -> datetime:
    """Same as :pyfunc:`resolve` with the base given as canonical text."""
    return resolve(ensure_instant(base_text), spec)


def offset_spec_from_fields(fields: dict) -> OffsetSpec:
    """Build an :class:`OffsetSpec` from ``{"days": 7, ...}`` style input."""
    known = ("years", "months", "days", "hours", "minutes", "seconds")
    unknown = set(fields) - set(known)
    if unknown:
        raise ConfigurationError(f"unknown offset fields: {', '.join(sorted(unknown))}")
    return OffsetSpec.of(**{k: fields.get(k) for k in known})
