"""
timestate.engine
================

Lifecycle entry points used by a host framework: create, plan, apply,
refresh, read, import and the two delay boundaries.

The engine owns no records.  Callers pass persisted state in and get the
next state back, and :class:`TimeStateEngine` only holds the clock.  Each
call that needs "now" reads it exactly once.

Usage:
------
engine = TimeStateEngine()
rec = engine.create(OffsetSpec.of(days=30))
decision = engine.plan(rec, OffsetSpec.of(days=30))
if decision.requires_replace:
    rec = engine.apply(rec, decision, OffsetSpec.of(days=30))
"""

from __future__ import annotations

import logging
from dataclasses import replace as _with
from datetime import datetime
from typing import Dict, Optional, Union

from . import lifecycle, state_codec
from .clock import ClockSource, SystemClock
from .codec import ensure_instant, format_rfc3339
from .models import (
    DecomposedTime,
    DelaySpec,
    OffsetSpec,
    PlanAction,
    PlanDecision,
    Projection,
    RotationRecord,
    RotationSpec,
    RotationState,
    StaticBase,
)
from .offsets import resolve
from .sleep import CancelToken, DelayOutcome, delay

logger = logging.getLogger(__name__)

Triggers = Optional[Dict[str, str]]


class TimeStateEngine:
    """
    Stateless facade over the temporal core, bound to a clock.

    Parameters
    ----------
    clock : ClockSource, optional
        Defaults to :class:`~timestate.clock.SystemClock`.
    """

    def __init__(self, clock: Optional[ClockSource] = None) -> None:
        self.clock: ClockSource = clock or SystemClock()

    # ------------------------------------------------------------------
    # Create / import
    # ------------------------------------------------------------------
    def create(
        self,
        spec: RotationSpec,
        base: Union[datetime, str, None] = None,
        triggers: Triggers = None,
        rotating: bool = True,
    ) -> RotationRecord:
        """
        Pin a base (explicit or the clock's now) and derive the target.

        *spec* is validated before any arithmetic; a malformed explicit
        base raises :class:`~timestate.errors.FormatError`.  A
        :class:`~timestate.models.StaticBase` record is never rotating.
        """
        if isinstance(spec, OffsetSpec):
            spec.validate()
        if isinstance(spec, StaticBase):
            rotating = False
        pinned = ensure_instant(base) if base is not None else self.clock.now()
        record = RotationRecord(
            base=pinned,
            target=resolve(pinned, spec),
            spec=spec,
            triggers=dict(triggers or {}),
            rotating=rotating,
        )
        logger.info(f"Created record {record.id} with target {format_rfc3339(record.target)}")
        return record

    def create_static(self, base: Union[datetime, str, None] = None, triggers: Triggers = None) -> RotationRecord:
        """Pin a base with no target; only a base or trigger change replaces it."""
        return self.create(StaticBase(), base=base, triggers=triggers, rotating=False)

    def import_record(self, identifier: str, rotating: bool = True) -> RotationRecord:
        return state_codec.decode(identifier, rotating=rotating)

    def import_static(self, identifier: str) -> RotationRecord:
        return state_codec.decode_static(identifier)

    # ------------------------------------------------------------------
    # Plan / apply
    # ------------------------------------------------------------------
    def plan(
        self,
        persisted: RotationRecord,
        proposed_spec: RotationSpec,
        proposed_base: Union[datetime, str, None] = None,
        proposed_triggers: Triggers = None,
        now: Optional[datetime] = None,
        is_new: bool = False,
    ) -> PlanDecision:
        """
        Decide what the next apply must do with *persisted*.

        ``FORCE_REPLACE`` when the base or triggers differ, or the record is
        rotating and expired at *now*; ``RECOMPUTE`` when only the offsets
        changed; ``NO_CHANGE`` otherwise.  *proposed_triggers* of ``None``
        means "no triggers configured".
        """
        now = now if now is not None else self.clock.now()

        if proposed_base is not None and ensure_instant(proposed_base) != persisted.base:
            return PlanDecision(PlanAction.FORCE_REPLACE, reason="base changed")

        if dict(proposed_triggers or {}) != persisted.triggers:
            return PlanDecision(PlanAction.FORCE_REPLACE, reason="triggers changed")

        if lifecycle.may_check_expiry(persisted, is_new):
            if lifecycle.evaluate(now, persisted.target) is RotationState.EXPIRED:
                logger.info(
                    f"Rotation timestamp {format_rfc3339(persisted.target)} has passed "
                    f"(now {format_rfc3339(now)}), forcing replacement"
                )
                return PlanDecision(PlanAction.FORCE_REPLACE, reason="expired")

        if proposed_spec != persisted.spec:
            return PlanDecision(
                PlanAction.RECOMPUTE,
                target=resolve(persisted.base, proposed_spec),
                reason="spec changed",
            )

        return PlanDecision(PlanAction.NO_CHANGE)

    def apply(
        self,
        persisted: RotationRecord,
        decision: PlanDecision,
        proposed_spec: RotationSpec,
        proposed_triggers: Triggers = None,
        proposed_base: Union[datetime, str, None] = None,
        now: Optional[datetime] = None,
    ) -> RotationRecord:
        """Turn *decision* into the next persisted record."""
        if decision.action is PlanAction.NO_CHANGE:
            return persisted

        if decision.action is PlanAction.RECOMPUTE:
            return _with(persisted, spec=proposed_spec, target=decision.target)

        if proposed_base is not None:
            return self.create(proposed_spec, proposed_base, proposed_triggers, persisted.rotating)

        now = now if now is not None else self.clock.now()
        # Replacement is evaluated against the proposed configuration.
        proposed = _with(persisted, spec=proposed_spec, triggers=dict(proposed_triggers or {}))
        return lifecycle.replace(proposed, now)

    def refresh(self, persisted: RotationRecord, now: Optional[datetime] = None) -> Optional[RotationRecord]:
        """
        Read-time check: an expired rotating record is dropped so the host
        recreates it.  Returns the record unchanged otherwise.
        """
        now = now if now is not None else self.clock.now()
        if lifecycle.state_of(persisted, now) is RotationState.EXPIRED:
            logger.info(
                f"Expiration timestamp ({format_rfc3339(persisted.target)}) is before current "
                f"timestamp ({format_rfc3339(now)}), removing record {persisted.id}"
            )
            return None
        return persisted

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    @staticmethod
    def read(record: RotationRecord, projection: Projection = Projection.TARGET) -> DecomposedTime:
        """Decompose the base (static-style) or target (derived-style) in UTC."""
        instant = record.base if projection is Projection.BASE else record.target
        return DecomposedTime.from_instant(instant)

    # ------------------------------------------------------------------
    # Delays
    # ------------------------------------------------------------------
    @staticmethod
    def delay_before(spec: DelaySpec, token: Optional[CancelToken] = None) -> Optional[DelayOutcome]:
        """Creation boundary; raises :class:`~timestate.errors.Cancelled` if interrupted."""
        if spec.before is None:
            return None
        return delay(spec.before, token).raise_if_cancelled("create delay")

    @staticmethod
    def delay_after(spec: DelaySpec, token: Optional[CancelToken] = None) -> Optional[DelayOutcome]:
        """Destruction boundary; raises :class:`~timestate.errors.Cancelled` if interrupted."""
        if spec.after is None:
            return None
        return delay(spec.after, token).raise_if_cancelled("destroy delay")

    @staticmethod
    def update_delay(persisted: DelaySpec, proposed: DelaySpec) -> DelaySpec:
        """Changing durations alone never sleeps; the new values are simply kept."""
        return proposed
