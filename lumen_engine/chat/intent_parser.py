"""Parse studio input lines into intents."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field
from typing import Any

from .command_registry import COMMAND_MAP

_SLASH_PATTERN = re.compile(r"^/(\w+)(?:\s+(.*))?$")


@dataclass
class Intent:
    action: str
    raw: str
    prompt: str | None = None
    command_args: dict[str, Any] = field(default_factory=dict)


def _parse_single_path(arg: str) -> str | None:
    """Parse one path arg, allowing quotes: /ref "/path/with spaces/a.png"."""
    if not arg:
        return None
    try:
        parts = shlex.split(arg)
    except ValueError:
        parts = arg.split()
    return parts[0] if parts else None


def parse_intent(text: str) -> Intent:
    raw = text
    stripped = text.strip()
    if not stripped:
        return Intent(action="blur", raw=raw)
    match = _SLASH_PATTERN.match(stripped)
    if not match:
        return Intent(action="draft", raw=raw, prompt=stripped)

    command = match.group(1).lower()
    arg = (match.group(2) or "").strip()
    spec = COMMAND_MAP.get(command)
    if spec is None:
        return Intent(action="unknown", raw=raw, command_args={"command": command})
    if spec.arg_kind == "single_path":
        return Intent(action=spec.action, raw=raw, command_args={"path": _parse_single_path(arg)})
    if spec.arg_kind == "raw":
        return Intent(action=spec.action, raw=raw, command_args={"arg": arg})
    return Intent(action=spec.action, raw=raw)
