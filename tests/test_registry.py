"""
tests/test_registry.py
======================

Unit tests for timestate.registry.RecordRegistry
"""

from datetime import datetime, timezone

import pytest

from timestate.errors import DuplicateRecordError
from timestate.models import OffsetSpec, RotationRecord
from timestate.offsets import resolve
from timestate.registry import RecordRegistry


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _record(base, spec, rotating=True):
    return RotationRecord(base, resolve(base, spec), spec, rotating=rotating)


def _demo_registry():
    reg = RecordRegistry()
    reg.add(_record(utc(2024, 1, 1), OffsetSpec.of(days=1)))
    reg.add(_record(utc(2024, 1, 1), OffsetSpec.of(days=30)), key="monthly")
    reg.add(_record(utc(2023, 1, 1), OffsetSpec.of(days=1), rotating=False), key="static")
    return reg


def test_add_and_get_by_base_id():
    reg = RecordRegistry()
    rec = _record(utc(2024, 4, 1), OffsetSpec.of(hours=1))
    key = reg.add(rec)
    assert key == "2024-04-01T00:00:00Z"
    assert reg.get(key) is rec


def test_find_expired():
    reg = _demo_registry()
    assert reg.find_expired(utc(2024, 1, 5)) == ["2024-01-01T00:00:00Z"]
    assert reg.find_expired(utc(2024, 1, 2)) == []


def test_remove():
    reg = _demo_registry()
    reg.remove("monthly")
    assert "monthly" not in reg
    with pytest.raises(KeyError):
        reg.get("monthly")


def test_len_and_iter():
    reg = _demo_registry()
    assert len(reg) == 3
    assert {r.spec for r in reg} == {OffsetSpec.of(days=1), OffsetSpec.of(days=30)}


def test_add_existing_key_raises():
    reg = _demo_registry()
    first = reg.get("monthly")
    with pytest.raises(DuplicateRecordError):
        reg.add(_record(utc(2024, 1, 1), OffsetSpec.of(days=2)), key="monthly")
    assert reg.get("monthly") is first


def test_same_base_twice_without_key_raises():
    reg = RecordRegistry()
    reg.add(_record(utc(2024, 1, 1), OffsetSpec.of(days=1)))
    with pytest.raises(DuplicateRecordError):
        reg.add(_record(utc(2024, 1, 1), OffsetSpec.of(days=2)))
    assert len(reg) == 1


def test_overwrite_replaces():
    reg = _demo_registry()
    new = _record(utc(2024, 2, 1), OffsetSpec.of(days=30))
    reg.add(new, key="monthly", overwrite=True)
    assert reg.get("monthly") is new
