"""Service registry."""

from __future__ import annotations

from .base import ServiceRegistry
from .dryrun import DryRunService
from .gemini import GeminiService


def default_registry() -> ServiceRegistry:
    return ServiceRegistry(
        [
            DryRunService(),
            GeminiService(),
        ]
    )
