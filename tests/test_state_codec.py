"""
tests/test_state_codec.py
=========================

Unit tests for timestate.state_codec (import identifiers)
"""

from datetime import datetime, timedelta, timezone

import pytest

from timestate.errors import ConfigurationError, FormatError
from timestate.models import AbsoluteTarget, DelaySpec, OffsetSpec, OffsetUnit, RotationRecord
from timestate.state_codec import decode, decode_delay, decode_static, encode, encode_delay


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_decode_six_field_form():
    rec = decode("2024-01-01T00:00:00Z,0,0,7,0,0")
    assert rec.base == utc(2024, 1, 1)
    assert rec.spec == OffsetSpec.of(days=7)
    assert rec.target == utc(2024, 1, 8)
    assert rec.rotating


def test_decode_empty_fields_are_unset():
    rec = decode("2024-01-01T00:00:00Z,,,,3,")
    assert rec.spec.units == {OffsetUnit.HOURS: 3}
    assert rec.target == utc(2024, 1, 1, 3)


def test_decode_seven_field_form():
    rec = decode("2024-01-01T00:00:00Z,,,,,,90")
    assert rec.target == utc(2024, 1, 1, 0, 1, 30)


def test_decode_recomputes_target():
    """Same base and offsets always give the same target, whatever was persisted before."""
    assert decode("2024-01-31T00:00:00Z,0,1,0,0,0").target == utc(2024, 3, 2)


def test_decode_absolute_form():
    rec = decode("2024-01-01T00:00:00Z,2024-06-01T12:00:00+02:00", rotating=False)
    assert isinstance(rec.spec, AbsoluteTarget)
    assert rec.target == utc(2024, 6, 1, 10)
    assert not rec.rotating


@pytest.mark.parametrize(
    "identifier",
    [
        "2024-01-01T00:00:00Z",
        "2024-01-01T00:00:00Z,1,2,3",
        "2024-01-01T00:00:00Z,1,2,3,4,5,6,7",
        ",,,,,",
        ",0,0,7,0,0",
        "2024-01-01T00:00:00Z,",
        "yesterday,0,0,7,0,0",
        "2024-01-01T00:00:00Z,0,0,seven,0,0",
        "2024-01-01T00:00:00Z,soon",
    ],
)
def test_decode_rejects_malformed(identifier):
    with pytest.raises(FormatError):
        decode(identifier)


def test_decode_all_zero_is_configuration_error():
    with pytest.raises(ConfigurationError):
        decode("2024-01-01T00:00:00Z,0,0,0,0,0")


def test_encode_full_form():
    rec = RotationRecord(utc(2024, 1, 1), utc(2024, 1, 8), OffsetSpec.of(days=7))
    assert encode(rec) == "2024-01-01T00:00:00Z,,,7,,,"


def test_encode_absolute_form():
    target = utc(2024, 2, 1)
    rec = RotationRecord(utc(2024, 1, 1), target, AbsoluteTarget(target))
    assert encode(rec) == "2024-01-01T00:00:00Z,2024-02-01T00:00:00Z"


def test_encode_then_decode_keeps_record():
    rec = RotationRecord(utc(2024, 5, 5, 5), utc(2025, 5, 5, 5), OffsetSpec.of(years=1, minutes=10))
    back = decode(encode(rec))
    assert back.spec == rec.spec
    assert back.target == rec.target


def test_delay_identifiers():
    assert decode_delay("30s,") == DelaySpec(before=timedelta(seconds=30))
    assert decode_delay(",5m") == DelaySpec(after=timedelta(minutes=5))
    assert encode_delay(DelaySpec(before=timedelta(hours=1), after=timedelta(milliseconds=500))) == "1h,500ms"


@pytest.mark.parametrize("identifier", [",", "30s", "30s,1m,2m", "soon,"])
def test_delay_identifier_rejects(identifier):
    with pytest.raises(FormatError):
        decode_delay(identifier)


def test_delay_identifier_out_of_range():
    with pytest.raises(FormatError):
        decode_delay("99999999999999h,")


def test_delay_identifier_sub_millisecond():
    spec = DelaySpec(after=timedelta(microseconds=500))
    assert encode_delay(spec) == ",0.5ms"
    assert decode_delay(encode_delay(spec)) == spec


def test_static_identifier():
    rec = decode_static("2024-03-01T10:00:00+01:00")
    assert rec.base == rec.target == utc(2024, 3, 1, 9)
    assert rec.is_static
    assert not rec.rotating
    assert encode(rec) == "2024-03-01T09:00:00Z"


@pytest.mark.parametrize("identifier", ["", "2024-03-01T09:00:00Z,", "2024-03-01"])
def test_static_identifier_rejects(identifier):
    with pytest.raises(FormatError):
        decode_static(identifier)
