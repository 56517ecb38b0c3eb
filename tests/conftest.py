"""
Pytest configuration: make sure `import timestate` works regardless of
where pytest is invoked, and provide shared fixtures.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from timestate.clock import FakeClock  # noqa: E402
from timestate.engine import TimeStateEngine  # noqa: E402


def utc(*args) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FakeClock(utc(2024, 1, 1))


@pytest.fixture
def engine(clock):
    return TimeStateEngine(clock)
