"""
timestate.sleep
===============

Cancellable delays for the two lifecycle boundaries (before creation, after
destruction).

A delay waits on its own :class:`CancelToken` and nothing else.  The token
carries an optional deadline, which is the operation's time budget.  No
transport or keepalive timeout is involved, so a two-hour delay is as
reliable as a two-second one.  Both a blocking and an ``asyncio`` flavour
are provided with the same contract.

Usage:
------
token = CancelToken.with_timeout(3600)
outcome = delay(timedelta(minutes=30), token)   # another thread may call token.cancel()
if not outcome.completed:
    ...
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, List, Optional, Union

from .codec import parse_duration
from .errors import Cancelled, ConfigurationError

logger = logging.getLogger(__name__)

DurationLike = Union[timedelta, float, int, str]


class CancelToken:
    """
    Cancellation signal with an optional monotonic deadline.

    ``cancel()`` may be called from any thread.  Once cancelled a token stays
    cancelled.
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline
        self._reason = ""
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        """Token whose deadline is *seconds* from now."""
        return cls(deadline=time.monotonic() + seconds)

    # ------------------------------------------------------------------
    # Signalling
    # ------------------------------------------------------------------
    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* on cancellation (immediately if already cancelled); return a remover."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return self._reason
        return "deadline exceeded" if self.cancelled else ""

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return self._deadline - time.monotonic()

    def wait(self, timeout: float) -> bool:
        """Block up to *timeout* seconds; ``True`` if cancelled meanwhile."""
        return self._event.wait(min(timeout, threading.TIMEOUT_MAX))


@dataclass(frozen=True)
class DelayOutcome:
    """Result of one delay: either it ran to completion or it was cut short."""
    completed: bool
    requested: timedelta
    elapsed: timedelta
    reason: str = ""

    def raise_if_cancelled(self, phase: str = "delay") -> "DelayOutcome":
        if not self.completed:
            raise Cancelled(
                f"{phase} cancelled after {self.elapsed.total_seconds():.3f}s: {self.reason}",
                elapsed=self.elapsed.total_seconds(),
            )
        return self


def to_timedelta(duration: DurationLike) -> timedelta:
    """Accept ``timedelta``, seconds, or duration text like ``"30s"``."""
    if isinstance(duration, str):
        duration = parse_duration(duration)
    elif not isinstance(duration, timedelta):
        duration = timedelta(seconds=duration)
    if duration < timedelta(0):
        raise ConfigurationError("delay duration cannot be negative")
    return duration


def _next_wait(requested: float, started: float, token: CancelToken) -> Optional[float]:
    """Seconds to wait next, ``0`` when done, ``None`` when the deadline has passed."""
    left = requested - (time.monotonic() - started)
    if left <= 0:
        return 0.0
    budget = token.remaining()
    if budget is not None:
        if budget <= 0:
            return None
        left = min(left, budget)
    return left


def _outcome(requested: timedelta, started: float, token: CancelToken) -> DelayOutcome:
    elapsed = timedelta(seconds=time.monotonic() - started)
    if token.cancelled and elapsed < requested:
        logger.warning(f"Delay of {requested} cancelled after {elapsed}: {token.reason}")
        return DelayOutcome(False, requested, elapsed, token.reason)
    logger.info(f"Delay of {requested} completed")
    return DelayOutcome(True, requested, elapsed)


def delay(duration: DurationLike, token: Optional[CancelToken] = None) -> DelayOutcome:
    """
    Block for *duration* unless *token* fires first.

    Returns immediately with ``completed=False`` once the token is cancelled
    or its deadline passes.
    """
    requested = to_timedelta(duration)
    token = token or CancelToken()
    seconds = requested.total_seconds()
    started = time.monotonic()
    logger.info(f"Delaying for {requested}")

    while not token.cancelled:
        wait = _next_wait(seconds, started, token)
        if not wait:
            break
        if token.wait(wait):
            break
    return _outcome(requested, started, token)


async def delay_async(duration: DurationLike, token: Optional[CancelToken] = None) -> DelayOutcome:
    """
    ``asyncio`` flavour of :pyfunc:`delay`.

    Cancellation of the awaiting task itself propagates as
    :class:`asyncio.CancelledError`.
    """
    requested = to_timedelta(duration)
    token = token or CancelToken()
    seconds = requested.total_seconds()
    started = time.monotonic()
    logger.info(f"Delaying for {requested}")

    loop = asyncio.get_running_loop()
    fired = asyncio.Event()
    remove = token.add_callback(lambda: loop.call_soon_threadsafe(fired.set))
    try:
        while not token.cancelled:
            wait = _next_wait(seconds, started, token)
            if not wait:
                break
            try:
                await asyncio.wait_for(fired.wait(), timeout=wait)
                break
            except asyncio.TimeoutError:
                continue
    finally:
        remove()
    return _outcome(requested, started, token)
