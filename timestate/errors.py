"""
timestate.errors
================

Exception taxonomy shared by every part of the engine.

Nothing here is retried: the engine performs no I/O beyond reading the clock
and sleeping, so every failure is deterministic for its inputs.
"""

from __future__ import annotations


class TimeStateError(Exception):
    """Base class for all errors raised by :pymod:`timestate`."""


class FormatError(TimeStateError, ValueError):
    """Malformed timestamp, duration or import identifier text."""


class ConfigurationError(TimeStateError, ValueError):
    """No offset/target configured, or a configured offset is unusable."""


class TransitionError(TimeStateError, ValueError):
    """Illegal rotation state transition."""


class Cancelled(TimeStateError):
    """A delay was interrupted by its cancellation signal."""

    def __init__(self, message: str = "delay cancelled", elapsed: float = 0.0) -> None:
        super().__init__(message)
        self.elapsed = elapsed


class DuplicateRecordError(TimeStateError, KeyError):
    """A registry key is already taken and overwriting was not requested."""

    def __str__(self) -> str:
        return Exception.__str__(self)
