"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .utils import getenv_flag, getenv_float

DEFAULT_OUTPUT_PREFIX = "lumen"
DEFAULT_POLL_INTERVAL_S = 5.0
DEFAULT_SERVICE = "gemini"
API_KEY_ENV_VARS = ("LUMEN_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class LumenSettings:
    output_prefix: str = DEFAULT_OUTPUT_PREFIX
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    service: str = DEFAULT_SERVICE
    debug_events: bool = False

    @classmethod
    def from_env(cls) -> "LumenSettings":
        prefix = (os.getenv("LUMEN_OUTPUT_PREFIX") or "").strip() or DEFAULT_OUTPUT_PREFIX
        interval = getenv_float("LUMEN_POLL_INTERVAL_S", DEFAULT_POLL_INTERVAL_S)
        if interval < 0:
            interval = DEFAULT_POLL_INTERVAL_S
        service = (os.getenv("LUMEN_SERVICE") or "").strip().lower() or DEFAULT_SERVICE
        return cls(
            output_prefix=prefix,
            poll_interval_s=interval,
            service=service,
            debug_events=getenv_flag("LUMEN_DEBUG_EVENTS", False),
        )


def api_key_from_env() -> str | None:
    for name in API_KEY_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None
