"""Runtime configuration for the studio.

Values come from environment variables and are collected into a single
``Settings`` object at startup and passed to whatever needs it; only the
development server entry point in ``main.py`` reads its host and port itself.

Environment variables:
    API_KEY: Google Gen AI API key (``GEMINI_API_KEY`` is accepted as a
        fallback). Required.
    PIKA_DATA_DIR: Directory holding the gallery file (default './data').
    PIKA_TEXT_MODEL: Text model used for prompt refinement and translation
        (default 'gemini-2.5-flash').
    PIKA_CLEAR_PROMPT_ON_SUCCESS: 'true' (default) or 'false'.
    PIKA_COUNTDOWN_INTERVAL: Seconds between countdown ticks (default 1.0).
    PIKA_IMAGEN_SAFETY_FILTER: Safety filter level sent with Imagen 4 requests
        (default 'BLOCK_NONE'). Set it empty to omit the field and use the
        service default, e.g. where the API only accepts
        'BLOCK_LOW_AND_ABOVE'.
    LOG_LEVEL: Logging level name (default 'INFO').
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from library.errors import ConfigurationError

DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGEN_SAFETY_FILTER = "BLOCK_NONE"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Application settings."""

    api_key: str = Field(min_length=1)
    data_dir: str = "./data"
    text_model: str = DEFAULT_TEXT_MODEL
    clear_prompt_on_success: bool = True
    countdown_interval: float = Field(default=1.0, gt=0)
    imagen_safety_filter: Optional[str] = DEFAULT_IMAGEN_SAFETY_FILTER
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the process environment.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        env = os.environ if environ is None else environ
        api_key = (env.get("API_KEY") or env.get("GEMINI_API_KEY") or "").strip()
        if not api_key:
            raise ConfigurationError("API_KEY environment variable not set")
        return cls(
            api_key=api_key,
            data_dir=env.get("PIKA_DATA_DIR", "./data"),
            text_model=env.get("PIKA_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            clear_prompt_on_success=_as_bool(env.get("PIKA_CLEAR_PROMPT_ON_SUCCESS"), True),
            countdown_interval=float(env.get("PIKA_COUNTDOWN_INTERVAL", "1.0")),
            imagen_safety_filter=env.get("PIKA_IMAGEN_SAFETY_FILTER", DEFAULT_IMAGEN_SAFETY_FILTER).strip().upper()
            or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
