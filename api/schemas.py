"""
api.schemas
===========

Request / response models shared by the routers, plus the converters
between them and :pymod:`timestate.models`.
"""

from dataclasses import asdict
from typing import Dict, Optional

from pydantic import BaseModel, Field

from timestate.codec import format_rfc3339, parse_rfc3339
from timestate.models import AbsoluteTarget, OffsetSpec, Projection, RotationRecord, RotationSpec, StaticBase, WIRE_ORDER
from timestate.offsets import offset_spec_from_fields
from timestate.engine import TimeStateEngine
from timestate.state_codec import encode


class OffsetFields(BaseModel):
    """Offset magnitudes; normally exactly one is set."""
    years: Optional[int] = None
    months: Optional[int] = None
    days: Optional[int] = None
    hours: Optional[int] = None
    minutes: Optional[int] = None
    seconds: Optional[int] = None


class SpecFields(BaseModel):
    """Offsets, an absolute ``target`` timestamp, or ``static`` for a base with no target."""
    offset: Optional[OffsetFields] = None
    target: Optional[str] = Field(None, description="Absolute target in RFC3339")
    static: bool = Field(False, description="Pin the base only; never expires")

    def to_spec(self) -> RotationSpec:
        if self.static:
            return StaticBase()
        if self.target:
            return AbsoluteTarget(parse_rfc3339(self.target))
        return offset_spec_from_fields(self.offset.model_dump() if self.offset else {})


class CreateRecordRequest(SpecFields):
    base: Optional[str] = Field(None, description="Base timestamp; defaults to now")
    triggers: Dict[str, str] = Field(default_factory=dict)
    rotating: bool = True
    key: Optional[str] = Field(None, description="Registry key; defaults to the base timestamp")


class PlanRequest(SpecFields):
    base: Optional[str] = None
    triggers: Dict[str, str] = Field(default_factory=dict)


class ImportRequest(BaseModel):
    id: str = Field(..., description="BASE,YEARS,MONTHS,DAYS,HOURS,MINUTES[,SECONDS], BASE,TARGET or BASE")
    key: Optional[str] = None
    rotating: bool = True
    static: bool = Field(False, description="Identifier is a lone base timestamp")


class SleepRequest(BaseModel):
    duration: str = Field(..., description="e.g. 30s, 5m, 1.5h, 250ms")
    timeout: Optional[float] = Field(None, ge=0, description="Seconds before the delay is abandoned")


def record_to_dict(key: str, rec: RotationRecord, projection: Projection = Projection.TARGET) -> dict:
    offsets = {}
    if isinstance(rec.spec, OffsetSpec):
        offsets = {str(u): m for u, m in zip(WIRE_ORDER, rec.spec.magnitudes()) if m is not None}
    return {
        "key": key,
        "id": rec.id,
        "base": format_rfc3339(rec.base),
        "target": None if rec.is_static else format_rfc3339(rec.target),
        "offsets": offsets,
        "triggers": rec.triggers,
        "rotating": rec.rotating,
        "static": rec.is_static,
        "import_id": encode(rec),
        "fields": asdict(TimeStateEngine.read(rec, projection)),
    }
