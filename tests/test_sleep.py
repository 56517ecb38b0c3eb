"""
tests/test_sleep.py
===================

Unit tests for timestate.sleep (cancellable delays).

Long delays are always cut short by a token so the suite stays fast.
"""

import asyncio
import threading
import time
from datetime import timedelta

import pytest

from timestate.errors import Cancelled, ConfigurationError, FormatError
from timestate.sleep import CancelToken, DelayOutcome, delay, delay_async, to_timedelta


def test_short_delay_completes():
    outcome = delay(timedelta(milliseconds=20))
    assert outcome.completed
    assert outcome.elapsed >= timedelta(milliseconds=20)


def test_zero_delay_completes_immediately():
    assert delay(0).completed


def test_long_delay_cancelled_from_another_thread():
    token = CancelToken()
    timer = threading.Timer(0.05, token.cancel, kwargs={"reason": "shutdown"})
    timer.start()
    started = time.monotonic()
    try:
        outcome = delay("30m", token)
    finally:
        timer.cancel()
    assert time.monotonic() - started < 5
    assert not outcome.completed
    assert outcome.reason == "shutdown"
    assert outcome.requested == timedelta(minutes=30)


def test_deadline_cuts_delay_short():
    token = CancelToken.with_timeout(0.05)
    outcome = delay(timedelta(hours=2), token)
    assert not outcome.completed
    assert outcome.reason == "deadline exceeded"
    assert outcome.elapsed < timedelta(seconds=5)


def test_already_cancelled_token_returns_at_once():
    token = CancelToken()
    token.cancel()
    assert not delay("1h", token).completed


def test_raise_if_cancelled():
    outcome = DelayOutcome(False, timedelta(minutes=1), timedelta(seconds=2), "stop")
    with pytest.raises(Cancelled) as info:
        outcome.raise_if_cancelled("destroy delay")
    assert info.value.elapsed == 2.0
    assert "destroy delay" in str(info.value)


def test_completed_outcome_passes_through():
    outcome = DelayOutcome(True, timedelta(0), timedelta(0))
    assert outcome.raise_if_cancelled() is outcome


def test_callbacks_run_once_and_can_be_removed():
    token = CancelToken()
    calls = []
    remove = token.add_callback(lambda: calls.append("a"))
    token.add_callback(lambda: calls.append("b"))
    remove()
    token.cancel()
    token.cancel()
    assert calls == ["b"]
    token.add_callback(lambda: calls.append("late"))
    assert calls == ["b", "late"]


@pytest.mark.parametrize(
    "value, expected",
    [(timedelta(seconds=3), timedelta(seconds=3)), (1.5, timedelta(seconds=1.5)), ("2m", timedelta(minutes=2))],
)
def test_to_timedelta(value, expected):
    assert to_timedelta(value) == expected


def test_to_timedelta_rejects_bad_input():
    with pytest.raises(ConfigurationError):
        to_timedelta(-1)
    with pytest.raises(FormatError):
        to_timedelta("forever")


def test_async_delay_completes():
    outcome = asyncio.run(delay_async(timedelta(milliseconds=20)))
    assert outcome.completed


def test_async_delay_cancelled_by_token():
    async def scenario():
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        return await delay_async("30m", token)

    started = time.monotonic()
    outcome = asyncio.run(scenario())
    assert not outcome.completed
    assert time.monotonic() - started < 5


def test_async_delay_deadline():
    outcome = asyncio.run(delay_async("1h", CancelToken.with_timeout(0.05)))
    assert not outcome.completed
    assert outcome.reason == "deadline exceeded"
