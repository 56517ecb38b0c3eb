"""
api.functions
=============

Stateless timestamp decomposition endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter

from timestate.codec import rfc3339_parse, unix_timestamp_parse

router = APIRouter(prefix="/functions", tags=["functions"])


@router.get("/rfc3339/{timestamp}", response_model=Dict[str, Any])
def parse_rfc3339_endpoint(timestamp: str):
    """Calendar components of an RFC3339 timestamp, in its own offset."""
    return rfc3339_parse(timestamp)


@router.get("/unix/{seconds}", response_model=Dict[str, Any])
def parse_unix_endpoint(seconds: int):
    """UTC calendar components of an epoch-seconds value."""
    return unix_timestamp_parse(seconds)
