"""Shared slash-command metadata for parse + chat handling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    command: str
    action: str
    arg_kind: str
    help: str


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("prompt", "set_prompt", "raw", "Replace the prompt and commit it"),
    CommandSpec("ratio", "set_ratio", "raw", "Aspect ratio: 1:1 16:9 9:16 3:4 4:3"),
    CommandSpec("quality", "set_quality", "raw", "Tier: fast/standard/hd/uhd (image), fast/standard/quality/pro (video)"),
    CommandSpec("kind", "set_kind", "raw", "Output kind: create, edit, video"),
    CommandSpec("ref", "set_reference", "single_path", "Attach a reference image"),
    CommandSpec("clear_ref", "clear_reference", "none", "Remove the reference image"),
    CommandSpec("undo", "undo", "none", "Step back in history"),
    CommandSpec("redo", "redo", "none", "Step forward in history"),
    CommandSpec("generate", "generate", "none", "Generate with the current settings"),
    CommandSpec("show", "show", "none", "Show the current snapshot"),
    CommandSpec("history", "history", "none", "List history entries"),
    CommandSpec("save", "save", "raw", "Copy the current result to a directory or file"),
    CommandSpec("help", "help", "none", "Show help"),
    CommandSpec("quit", "quit", "none", "Leave the studio"),
)

COMMAND_MAP: dict[str, CommandSpec] = {spec.command: spec for spec in COMMANDS}
