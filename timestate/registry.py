"""
timestate.registry
==================

An in-memory registry that stores :class:`timestate.models.RotationRecord`
objects keyed by their id (the canonical base timestamp text, optionally
namespaced by the caller).

This module is intentionally simple (standard library only) so that it can
be unit-tested without a database.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterator, List, Optional

from .errors import DuplicateRecordError
from .lifecycle import state_of
from .models import RotationRecord, RotationState


class RecordRegistry:
    """
    Dictionary-backed registry of rotation records.

    Example
    -------
    >>> from timestate.engine import TimeStateEngine
    >>> from timestate.models import OffsetSpec
    >>> reg = RecordRegistry()
    >>> key = reg.add(TimeStateEngine().create(OffsetSpec.of(days=1)))
    >>> len(reg)
    1
    """

    def __init__(self) -> None:
        self._records: Dict[str, RotationRecord] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, record: RotationRecord, key: Optional[str] = None, overwrite: bool = False) -> str:
        """
        Insert a record; returns the key used.

        An existing key raises :class:`~timestate.errors.DuplicateRecordError`
        unless *overwrite* is set.
        """
        key = key or record.id
        if not overwrite and key in self._records:
            raise DuplicateRecordError(f"record {key!r} already exists")
        self._records[key] = record
        return key

    def get(self, key: str) -> RotationRecord:
        """Retrieve by key (raise KeyError if not present)."""
        return self._records[key]

    def remove(self, key: str) -> RotationRecord:
        """Delete and return a record (raise KeyError if not present)."""
        return self._records.pop(key)

    def find_expired(self, now: datetime) -> List[str]:
        """Keys of all rotating records whose target has passed at *now*."""
        return [k for k, r in self._records.items() if state_of(r, now) is RotationState.EXPIRED]

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __contains__(self, key: str) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[RotationRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)
