"""
timestate.models
================

Dataclasses and enums describing pinned time state: offset specifications,
rotation records, delay specifications and the calendar projection handed
back to callers.  Like the rest of the core these objects only depend on the
standard library.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import Dict, Iterator, Optional, Tuple, Union

from .codec import format_rfc3339
from .errors import ConfigurationError


class OffsetUnit(Enum):
    """
    Calendar and duration units an offset can be expressed in.

    Declaration order is the resolution order used when several units are
    populated at once: the last populated unit in this order wins.
    """
    DAYS = auto()
    HOURS = auto()
    MINUTES = auto()
    MONTHS = auto()
    SECONDS = auto()
    YEARS = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_calendar(self) -> bool:
        return self in (OffsetUnit.YEARS, OffsetUnit.MONTHS, OffsetUnit.DAYS)


# Field order used by import identifiers and the flat persisted layout.
WIRE_ORDER: Tuple[OffsetUnit, ...] = (
    OffsetUnit.YEARS,
    OffsetUnit.MONTHS,
    OffsetUnit.DAYS,
    OffsetUnit.HOURS,
    OffsetUnit.MINUTES,
    OffsetUnit.SECONDS,
)


@dataclass(frozen=True)
class OffsetSpec:
    """
    Sparse offset configuration.

    Parameters
    ----------
    units : dict[OffsetUnit, int]
        Populated units only.  Zero magnitudes are treated as unset and
        dropped by :pymeth:`of`.

    Example
    -------
    >>> OffsetSpec.of(days=7)
    OffsetSpec(units={<OffsetUnit.DAYS: 1>: 7})
    """
    units: Dict[OffsetUnit, int] = field(default_factory=dict)

    @classmethod
    def of(
        cls,
        years: Optional[int] = None,
        months: Optional[int] = None,
        days: Optional[int] = None,
        hours: Optional[int] = None,
        minutes: Optional[int] = None,
        seconds: Optional[int] = None,
    ) -> "OffsetSpec":
        raw = {
            OffsetUnit.YEARS: years,
            OffsetUnit.MONTHS: months,
            OffsetUnit.DAYS: days,
            OffsetUnit.HOURS: hours,
            OffsetUnit.MINUTES: minutes,
            OffsetUnit.SECONDS: seconds,
        }
        return cls({unit: int(value) for unit, value in raw.items() if value})

    def get(self, unit: OffsetUnit) -> Optional[int]:
        return self.units.get(unit)

    def populated(self) -> Iterator[Tuple[OffsetUnit, int]]:
        """Yield populated ``(unit, magnitude)`` pairs in resolution order."""
        for unit in OffsetUnit:
            magnitude = self.units.get(unit)
            if magnitude:
                yield unit, magnitude

    def magnitudes(self) -> Tuple[Optional[int], ...]:
        """The six magnitudes in wire order, ``None`` where unset."""
        return tuple(self.units.get(unit) or None for unit in WIRE_ORDER)

    def validate(self) -> None:
        if not any(True for _ in self.populated()):
            raise ConfigurationError(
                "at least one of years, months, days, hours, minutes or seconds must be configured"
            )

    def __bool__(self) -> bool:
        return any(True for _ in self.populated())

    def __hash__(self) -> int:
        return hash(tuple(sorted((u.value, m) for u, m in self.populated())))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OffsetSpec):
            return NotImplemented
        return dict(self.populated()) == dict(other.populated())


@dataclass(frozen=True)
class AbsoluteTarget:
    """Explicit target instant supplied by the caller instead of an offset."""
    target: datetime


@dataclass(frozen=True)
class StaticBase:
    """
    No target at all: the record only pins its base.  It never expires and is
    replaced only when its base or triggers change.
    """


RotationSpec = Union[OffsetSpec, AbsoluteTarget, StaticBase]


class RotationState(Enum):
    """States of the expiry/replacement state machine."""
    FRESH = auto()
    EXPIRED = auto()
    REPLACING = auto()

    def __str__(self) -> str:
        return self.name


class PlanAction(Enum):
    NO_CHANGE = auto()
    RECOMPUTE = auto()
    FORCE_REPLACE = auto()

    def __str__(self) -> str:
        return self.name


class Projection(Enum):
    """Which persisted instant a read decomposes."""
    BASE = "base"
    TARGET = "target"


@dataclass(frozen=True)
class RotationRecord:
    """
    Persisted time state for one record.

    Parameters
    ----------
    base : datetime
        Pinned base instant (UTC).  Immutable; changing it means replacement.
    target : datetime
        Derived instant, fully determined by *base* and *spec* unless *spec*
        is an :class:`AbsoluteTarget`.  Equal to *base* for a
        :class:`StaticBase` record.
    spec : OffsetSpec | AbsoluteTarget | StaticBase
        How *target* was obtained.
    triggers : dict[str, str]
        Opaque caller mapping; any change forces a new base.
    rotating : bool, default=True
        Whether the record expires once *target* has passed.  Plain offset
        records keep their target forever.
    """
    base: datetime
    target: datetime
    spec: RotationSpec
    triggers: Dict[str, str] = field(default_factory=dict)
    rotating: bool = True

    @property
    def id(self) -> str:
        return format_rfc3339(self.base)

    @property
    def is_absolute(self) -> bool:
        return isinstance(self.spec, AbsoluteTarget)

    @property
    def is_static(self) -> bool:
        return isinstance(self.spec, StaticBase)

    def __hash__(self) -> int:
        return hash((self.base, self.target, self.spec, tuple(sorted(self.triggers.items())), self.rotating))


@dataclass(frozen=True)
class PlanDecision:
    """Outcome of a plan/diff evaluation."""
    action: PlanAction
    target: Optional[datetime] = None
    reason: str = ""

    @property
    def requires_replace(self) -> bool:
        return self.action is PlanAction.FORCE_REPLACE


@dataclass(frozen=True)
class DelaySpec:
    """
    Durations to wait before creation and after destruction of a record.

    At least one phase must be present and neither may be negative.
    """
    before: Optional[timedelta] = None
    after: Optional[timedelta] = None

    def __post_init__(self):
        if self.before is None and self.after is None:
            raise ConfigurationError("at least one of before or after must be configured")
        for name, value in (("before", self.before), ("after", self.after)):
            if value is not None and value < timedelta(0):
                raise ConfigurationError(f"{name} delay cannot be negative")


@dataclass(frozen=True)
class DecomposedTime:
    """Calendar projection of an instant in UTC."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    unix: int

    @classmethod
    def from_instant(cls, instant: datetime) -> "DecomposedTime":
        return cls(
            year=instant.year,
            month=instant.month,
            day=instant.day,
            hour=instant.hour,
            minute=instant.minute,
            second=instant.second,
            unix=calendar.timegm(instant.utctimetuple()),
        )
