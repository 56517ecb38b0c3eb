"""
timestate.lifecycle
===================

Expiry / forced-replacement state machine for a
:class:`timestate.models.RotationRecord`.

A tiny finite-state-machine describes which rotation states are legal
successors of each other.  :pyfunc:`evaluate` decides between ``FRESH`` and
``EXPIRED`` for a given "now"; :pyfunc:`replace` walks a record through
``REPLACING`` back to ``FRESH`` with a new base.

All functions take "now" explicitly.  A single evaluation reads the clock
once and passes the value down.
"""

from __future__ import annotations

import logging
from dataclasses import replace as _with
from datetime import datetime
from typing import Optional

from .codec import format_rfc3339
from .errors import TransitionError
from .models import RotationRecord, RotationState
from .offsets import resolve

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Allowed transitions: source state → set[valid target states]
# ---------------------------------------------------------------------
RULES = {
    RotationState.FRESH:     {RotationState.EXPIRED, RotationState.REPLACING},
    RotationState.EXPIRED:   {RotationState.REPLACING},
    RotationState.REPLACING: {RotationState.FRESH},
}


def advance_state(current: RotationState, new_state: RotationState) -> RotationState:
    """
    Return *new_state* if the transition is legal, otherwise raise
    :class:`~timestate.errors.TransitionError`.

    Examples
    --------
    >>> advance_state(RotationState.EXPIRED, RotationState.REPLACING)
    <RotationState.REPLACING: 3>
    >>> advance_state(RotationState.EXPIRED, RotationState.FRESH)
    Traceback (most recent call last):
        ...
    timestate.errors.TransitionError: illegal transition EXPIRED → FRESH
    """
    if new_state not in RULES.get(current, set()):
        raise TransitionError(f"illegal transition {current.name} → {new_state.name}")
    return new_state


def evaluate(now: datetime, target: Optional[datetime]) -> RotationState:
    """``EXPIRED`` iff *now* is strictly after *target*; a missing target is ``FRESH``."""
    if target is None:
        return RotationState.FRESH
    return RotationState.EXPIRED if now > target else RotationState.FRESH


def state_of(record: RotationRecord, now: datetime) -> RotationState:
    """Rotation state of *record*; non-rotating records never expire."""
    if not record.rotating:
        return RotationState.FRESH
    return evaluate(now, record.target)


def may_check_expiry(persisted: Optional[RotationRecord], is_new: bool = False) -> bool:
    """
    Expiry is never checked in the pass that creates a record, so a
    degenerate offset cannot loop into immediate replacement.
    """
    return persisted is not None and not is_new and persisted.rotating


def replace(record: RotationRecord, now: datetime) -> RotationRecord:
    """
    Replace *record* as observed at *now*.

    The new base is *now* itself, not the missed target, so the gap between
    due time and observation becomes part of the next cycle.  In absolute
    mode the target is the configured instant: unless the caller supplied a
    new one, the replaced record expires again on its next evaluation.
    """
    state = state_of(record, now)
    advance_state(state, RotationState.REPLACING)

    # resolve() is the identity for an AbsoluteTarget, so no drift is added there.
    new = _with(record, base=now, target=resolve(now, record.spec))

    advance_state(RotationState.REPLACING, RotationState.FRESH)
    logger.info(
        f"Replaced record {record.id}: target {format_rfc3339(record.target)} → "
        f"{format_rfc3339(new.target)} (observed {format_rfc3339(now)})"
    )
    return new
