"""
api.records
===========

FastAPI router exposing the record lifecycle: create, read, plan (and
optionally apply), import and delete with an optional after-delay.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from timestate.codec import format_rfc3339
from timestate.engine import TimeStateEngine
from timestate.models import PlanAction, Projection
from timestate.registry import RecordRegistry
from timestate.sleep import CancelToken, delay_async
from .deps import get_engine, get_registry, get_settings
from .schemas import CreateRecordRequest, ImportRequest, PlanRequest, record_to_dict

# Create router
router = APIRouter(prefix="/records", tags=["records"])

# Configure logging
logger = logging.getLogger(__name__)


def _load(registry: RecordRegistry, key: str):
    try:
        return registry.get(key)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Record {key!r} not found")


@router.post("", status_code=201, response_model=Dict[str, Any])
def create_record(
    req: CreateRecordRequest,
    registry: RecordRegistry = Depends(get_registry),
    engine: TimeStateEngine = Depends(get_engine),
):
    """
    Pin a base timestamp and derive its target.

    - ``base`` defaults to the current time
    - exactly one of ``offset`` / ``target`` / ``static`` is expected
    - an existing key answers 409
    """
    rec = engine.create(req.to_spec(), base=req.base, triggers=req.triggers, rotating=req.rotating)
    key = registry.add(rec, req.key)
    logger.info(f"Stored record {key}")
    return record_to_dict(key, rec)


@router.post("/import", status_code=201, response_model=Dict[str, Any])
def import_record(
    req: ImportRequest,
    registry: RecordRegistry = Depends(get_registry),
    engine: TimeStateEngine = Depends(get_engine),
):
    """Decode an import identifier; the target is recomputed, never trusted."""
    if req.static:
        rec = engine.import_static(req.id)
    else:
        rec = engine.import_record(req.id, rotating=req.rotating)
    key = registry.add(rec, req.key)
    return record_to_dict(key, rec)


@router.get("/{key}", response_model=Dict[str, Any])
def read_record(
    key: str,
    projection: Optional[Projection] = Query(None, description="Decompose the base or the target"),
    registry: RecordRegistry = Depends(get_registry),
    engine: TimeStateEngine = Depends(get_engine),
    settings=Depends(get_settings),
):
    """
    Return a record with its calendar fields.

    An expired rotating record is removed and reported as 404 so the caller
    recreates it.
    """
    rec = _load(registry, key)
    if engine.refresh(rec) is None:
        registry.remove(key)
        raise HTTPException(status_code=404, detail=f"Record {key!r} expired and was removed")
    return record_to_dict(key, rec, projection or settings.default_projection)


@router.post("/{key}/plan", response_model=Dict[str, Any])
def plan_record(
    key: str,
    req: PlanRequest,
    apply: bool = Query(False, description="Persist the planned state"),
    registry: RecordRegistry = Depends(get_registry),
    engine: TimeStateEngine = Depends(get_engine),
):
    """Diff the proposed configuration against the stored record."""
    rec = _load(registry, key)
    spec = req.to_spec()
    now = engine.clock.now()
    decision = engine.plan(rec, spec, proposed_base=req.base, proposed_triggers=req.triggers, now=now)
    planned = engine.apply(rec, decision, spec, req.triggers, proposed_base=req.base, now=now)
    body: Dict[str, Any] = {
        "action": decision.action.name,
        "reason": decision.reason,
        "target": None if planned.is_static else format_rfc3339(planned.target),
    }
    if apply and decision.action is not PlanAction.NO_CHANGE:
        registry.add(planned, key, overwrite=True)
        body["record"] = record_to_dict(key, planned)
    return body


@router.delete("/{key}", response_model=Dict[str, Any])
async def delete_record(
    key: str,
    after: Optional[str] = Query(None, description="Delay after destruction, e.g. 30s"),
    timeout: Optional[float] = Query(None, ge=0, description="Seconds before the delay is abandoned"),
    registry: RecordRegistry = Depends(get_registry),
):
    """Wait out an optional destroy delay, then remove the record.

    A cancelled delay leaves the record in place.
    """
    _load(registry, key)
    if after:
        token = CancelToken.with_timeout(timeout) if timeout is not None else CancelToken()
        (await delay_async(after, token)).raise_if_cancelled("destroy delay")
    registry.remove(key)
    return {"deleted": key}
