"""
api.sleep
=========

Standalone cancellable delay.

The wait is bounded only by the request's own ``timeout`` and by
``settings.max_delay_seconds``; it runs on the event loop, so a long delay
does not tie up a worker thread.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from timestate.sleep import CancelToken, delay_async, to_timedelta
from .deps import get_settings
from .schemas import SleepRequest

router = APIRouter(tags=["sleep"])

logger = logging.getLogger(__name__)


@router.post("/sleep")
async def sleep(req: SleepRequest, settings=Depends(get_settings)):
    requested = to_timedelta(req.duration)
    if requested.total_seconds() > settings.max_delay_seconds:
        raise HTTPException(
            status_code=422,
            detail=f"duration {req.duration} exceeds the {settings.max_delay_seconds:g}s limit",
        )
    token = CancelToken.with_timeout(req.timeout) if req.timeout is not None else CancelToken()
    outcome = (await delay_async(requested, token)).raise_if_cancelled("sleep")
    return {"completed": outcome.completed, "elapsed_seconds": outcome.elapsed.total_seconds()}
