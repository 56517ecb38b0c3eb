"""
tests/test_models.py
====================

Unit tests for the dataclasses and enums defined in timestate.models.

Run:  pytest -q
"""

from datetime import datetime, timedelta, timezone

import pytest

from timestate.errors import ConfigurationError
from timestate.models import (
    DecomposedTime,
    DelaySpec,
    OffsetSpec,
    OffsetUnit,
    PlanAction,
    PlanDecision,
    RotationRecord,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_str_on_enums():
    """Enum __str__ gives the short names used on the wire and in logs."""
    assert str(OffsetUnit.DAYS) == "days"
    assert str(PlanAction.FORCE_REPLACE) == "FORCE_REPLACE"


def test_offset_spec_drops_zero_and_none():
    spec = OffsetSpec.of(days=0, hours=None, minutes=5)
    assert spec.units == {OffsetUnit.MINUTES: 5}
    assert bool(spec)
    assert not OffsetSpec.of(days=0)


def test_offset_spec_equality_ignores_explicit_zero():
    assert OffsetSpec({OffsetUnit.DAYS: 3, OffsetUnit.HOURS: 0}) == OffsetSpec.of(days=3)
    assert hash(OffsetSpec({OffsetUnit.DAYS: 3, OffsetUnit.HOURS: 0})) == hash(OffsetSpec.of(days=3))


def test_magnitudes_in_wire_order():
    spec = OffsetSpec.of(seconds=9, years=1)
    assert spec.magnitudes() == (1, None, None, None, None, 9)


def test_validate_empty_spec_raises():
    with pytest.raises(ConfigurationError):
        OffsetSpec.of().validate()


def test_calendar_units():
    assert {u for u in OffsetUnit if u.is_calendar} == {OffsetUnit.YEARS, OffsetUnit.MONTHS, OffsetUnit.DAYS}


def test_record_id_is_canonical_base():
    rec = RotationRecord(utc(2024, 1, 1), utc(2024, 1, 8), OffsetSpec.of(days=7))
    assert rec.id == "2024-01-01T00:00:00Z"
    assert rec.triggers == {}
    assert rec.rotating is True
    assert not rec.is_absolute


def test_records_are_hashable():
    a = RotationRecord(utc(2024, 1, 1), utc(2024, 1, 8), OffsetSpec.of(days=7), {"k": "v"})
    b = RotationRecord(utc(2024, 1, 1), utc(2024, 1, 8), OffsetSpec.of(days=7), {"k": "v"})
    assert a == b
    assert len({a, b}) == 1


def test_plan_decision_requires_replace():
    assert PlanDecision(PlanAction.FORCE_REPLACE).requires_replace
    assert not PlanDecision(PlanAction.RECOMPUTE).requires_replace


def test_delay_spec_needs_a_phase():
    with pytest.raises(ConfigurationError):
        DelaySpec()


def test_delay_spec_rejects_negative():
    with pytest.raises(ConfigurationError):
        DelaySpec(before=timedelta(seconds=-1))


def test_decomposed_time():
    out = DecomposedTime.from_instant(utc(2024, 2, 29, 12, 30, 15))
    assert (out.year, out.month, out.day, out.hour, out.minute, out.second) == (2024, 2, 29, 12, 30, 15)
    assert out.unix == 1709209815


def test_offset_spec_repr():
    assert repr(OffsetSpec.of(days=7)) == "OffsetSpec(units={<OffsetUnit.DAYS: 1>: 7})"
