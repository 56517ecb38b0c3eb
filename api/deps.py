"""
api.deps
========

FastAPI dependency providers.

`get_registry` returns a **DBRecordRegistry** so every request talks to the
persistent SQLite store.  `get_engine` returns the engine bound to the wall
clock; tests override both through ``app.dependency_overrides``.
"""

from functools import lru_cache

from timestate.db import create_all
from timestate.engine import TimeStateEngine
from timestate.registry_db import DBRecordRegistry
from timestate.settings import settings


@lru_cache
def get_registry() -> DBRecordRegistry:
    """Singleton DB-backed registry (persists across requests)."""
    create_all()
    return DBRecordRegistry()


@lru_cache
def get_engine() -> TimeStateEngine:
    """Singleton engine reading the system clock."""
    return TimeStateEngine()


@lru_cache
def get_settings():
    """Return application settings."""
    return settings
