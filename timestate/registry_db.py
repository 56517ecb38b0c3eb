"""
timestate.registry_db
=====================

SQLite-backed implementation of the RecordRegistry public surface.

This adapter wraps the CRUD helpers in :pymod:`timestate.db` so that any
code expecting the in-memory RecordRegistry can switch to a persistent
store without changing its API calls.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, List, Optional

from sqlmodel import Session

from timestate.db import SessionLocal, all_records, delete_record, get_record, upsert_record
from timestate.lifecycle import state_of
from timestate.models import RotationRecord, RotationState


class DBRecordRegistry:
    """
    Drop-in replacement backed by SQLite.

    Methods mirror the in-memory RecordRegistry:
    * add(record, key=None, overwrite=False)
    * get(key) / remove(key)
    * find_expired(now)
    * iteration / len() / ``in``
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    # ------------------------------------------------------------------ CRUD
    def add(self, record: RotationRecord, key: Optional[str] = None, overwrite: bool = False) -> str:
        return upsert_record(self._session, record, key, overwrite=overwrite)

    def get(self, key: str) -> RotationRecord:
        rec = get_record(self._session, key)
        if rec is None:
            raise KeyError(key)
        return rec

    def remove(self, key: str) -> RotationRecord:
        rec = self.get(key)
        delete_record(self._session, key)
        return rec

    def find_expired(self, now: datetime) -> List[str]:
        return [k for k, r in all_records(self._session) if state_of(r, now) is RotationState.EXPIRED]

    # ------------------------------------------------------ dunder helpers
    def __contains__(self, key: str) -> bool:
        return get_record(self._session, key) is not None

    def __iter__(self) -> Iterator[RotationRecord]:
        yield from (r for _, r in all_records(self._session))

    def __len__(self) -> int:
        return len(all_records(self._session))

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBRecordRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
