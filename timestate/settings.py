"""
timestate.settings
==================

Configuration settings for timestate.

This module provides centralized configuration options that can be used
across the package, the CLI and the HTTP layer.  Defaults can be overridden
via ``TIMESTATE_*`` environment variables or a ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Projection

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("TIMESTATE_DB_FILE", BASE_DIR / "timestate.db")
DB_URL = os.environ.get("TIMESTATE_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("TIMESTATE_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("TIMESTATE_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("TIMESTATE_API_PORT", "8000"))
API_DEBUG = os.environ.get("TIMESTATE_API_DEBUG", "False").lower() == "true"


# ---------------------------------------------------------------------------
# Pydantic settings model
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for engine settings, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TIMESTATE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field("INFO", description="Root log level used by the CLI and API")
    log_format: str = Field(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.basicConfig format string",
    )
    default_projection: Projection = Field(
        Projection.TARGET, description="Instant decomposed by read operations when none is given"
    )
    # Guard for the HTTP surface only; library delays are unbounded.
    max_delay_seconds: float = Field(
        6 * 3600.0, ge=0, description="Largest delay the HTTP layer accepts"
    )


# Initialize settings
settings = Settings()
