"""
timestate.db
============

SQLite persistence layer for rotation records.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at ``settings.DB_URL``
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run

Only flat fields are stored: the canonical base and target texts, the six
offset magnitudes, the trigger mapping and the rotating flag.  Everything
else (calendar fields, epoch seconds) is re-derived on read.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Session, SQLModel, create_engine, select

from timestate.codec import format_rfc3339, parse_rfc3339
from timestate.errors import DuplicateRecordError
from timestate.models import WIRE_ORDER, AbsoluteTarget, OffsetSpec, RotationRecord, StaticBase
from timestate.settings import DB_ECHO, DB_URL

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


# ---------------------------------------------------------------------------
# ORM model that mirrors timestate.models.RotationRecord
# ---------------------------------------------------------------------------
class RotationRecordDB(SQLModel, table=True):
    """
    SQLite-backed representation of a :class:`timestate.models.RotationRecord`.

    The primary key is the registry key (by default the canonical base text).
    ``target_rfc3339`` together with all-empty offsets marks absolute mode;
    an empty ``target_rfc3339`` marks a static record.
    """

    key: str = Field(primary_key=True, index=True)
    base_rfc3339: str
    target_rfc3339: str = ""
    offset_years: Optional[int] = None
    offset_months: Optional[int] = None
    offset_days: Optional[int] = None
    offset_hours: Optional[int] = None
    offset_minutes: Optional[int] = None
    offset_seconds: Optional[int] = None
    triggers: Dict[str, str] = Field(default_factory=dict, sa_column=Column(JSON))
    rotating: bool = True

    # ---------------------------------------------------------------------
    # Converters
    # ---------------------------------------------------------------------
    @classmethod
    def from_record(cls, rec: RotationRecord, key: Optional[str] = None) -> "RotationRecordDB":
        """Create a DB row from an in-memory record."""
        if isinstance(rec.spec, OffsetSpec):
            magnitudes = rec.spec.magnitudes()
        else:
            magnitudes = (None,) * len(WIRE_ORDER)
        years, months, days, hours, minutes, seconds = magnitudes
        return cls(
            key=key or rec.id,
            base_rfc3339=format_rfc3339(rec.base),
            target_rfc3339="" if rec.is_static else format_rfc3339(rec.target),
            offset_years=years,
            offset_months=months,
            offset_days=days,
            offset_hours=hours,
            offset_minutes=minutes,
            offset_seconds=seconds,
            triggers=dict(rec.triggers),
            rotating=rec.rotating,
        )

    def to_record(self) -> RotationRecord:
        """Convert the DB row back into a plain RotationRecord."""
        spec = OffsetSpec.of(
            years=self.offset_years,
            months=self.offset_months,
            days=self.offset_days,
            hours=self.offset_hours,
            minutes=self.offset_minutes,
            seconds=self.offset_seconds,
        )
        base = parse_rfc3339(self.base_rfc3339)
        if not self.target_rfc3339:
            return RotationRecord(base, base, StaticBase(), dict(self.triggers or {}), rotating=False)
        target = parse_rfc3339(self.target_rfc3339)
        return RotationRecord(
            base=base,
            target=target,
            spec=spec if spec else AbsoluteTarget(target),
            triggers=dict(self.triggers or {}),
            rotating=self.rotating,
        )


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_record(s: Session, rec: RotationRecord, key: Optional[str] = None, overwrite: bool = True) -> str:
    """
    Insert or update a record row; returns its key.

    With ``overwrite=False`` an existing row raises
    :class:`~timestate.errors.DuplicateRecordError` instead.
    """
    row = RotationRecordDB.from_record(rec, key)
    if not overwrite and s.get(RotationRecordDB, row.key) is not None:
        raise DuplicateRecordError(f"record {row.key!r} already exists")
    s.merge(row)
    s.commit()
    return row.key


def get_record(s: Session, key: str) -> RotationRecord | None:
    """Return a record by key or *None* if missing."""
    db_row = s.get(RotationRecordDB, key)
    return db_row.to_record() if db_row else None


def delete_record(s: Session, key: str) -> bool:
    """Delete a row; ``False`` if it did not exist."""
    db_row = s.get(RotationRecordDB, key)
    if db_row is None:
        return False
    s.delete(db_row)
    s.commit()
    return True


def all_records(s: Session) -> list[tuple[str, RotationRecord]]:
    """Return every ``(key, record)`` pair in the database."""
    rows: List[RotationRecordDB] = s.exec(select(RotationRecordDB)).all()
    return [(row.key, row.to_record()) for row in rows]


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind=None) -> None:
    """Create all tables for imported SQLModel subclasses, including RotationRecordDB."""
    SQLModel.metadata.create_all(bind or engine)


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m timestate.db --create        # first-time table creation
    """
    import argparse

    parser = argparse.ArgumentParser(prog="python -m timestate.db", description="timestate DB utilities")
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.create:
        create_all()
        print("✅ timestate schema initialised")
