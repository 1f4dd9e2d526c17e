# lingua_relay/core/config.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Configuration
----------------------------
Central configuration for the relay server, including:

- app metadata
- API host/port
- upstream OpenAI Responses API credentials and model
- default generation parameters (temperature / max output tokens)
- CORS origins for browser front-ends

"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

# This file is: <root>/lingua_relay/core/config.py
PACKAGE_DIR: Path = Path(__file__).resolve().parents[1]   # .../lingua_relay
ROOT_DIR: Path = PACKAGE_DIR.parent                       # .../<root>


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """
    Global configuration for the relay server.

    Instantiated once at import time as `settings`. Every field can be
    overridden from the environment or from a `.env` file at the repo root.
    """

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App / server basics -----------------------------------------------
    app_name: str = "Lingua Relay"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # --- Upstream: OpenAI Responses API ------------------------------------

    # ENV: OPENAI_API_KEY=sk-...
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the upstream completion API (env: OPENAI_API_KEY).",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Optional override of the API base URL (env: OPENAI_BASE_URL).",
    )
    openai_model: str = "gpt-4o-mini"

    # Timeout (seconds) handed to the SDK client; the relay itself sets none.
    openai_timeout_s: float = 30.0

    # Ask the upstream to keep responses so previous_response_id can chain them.
    store_responses: bool = True

    # --- Generation defaults -----------------------------------------------
    default_temperature: float = 0.3
    default_max_tokens: int = 128

    # --- CORS ---------------------------------------------------------------
    cors_allow_origins: list[str] = ["*"]


# Single global settings instance used by the rest of the app.
settings = Settings()
