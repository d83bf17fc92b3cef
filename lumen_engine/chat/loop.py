"""Interactive studio loop."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from ..cli_progress import StatusTicker
from ..engine import StudioEngine
from ..history.snapshot import AspectRatio, OutputKind, Snapshot, parse_quality
from ..models.tiers import image_tier, video_tier
from .command_registry import COMMANDS
from .intent_parser import parse_intent


def describe_snapshot(snapshot: Snapshot, kind: OutputKind) -> str:
    if kind is OutputKind.VIDEO:
        tier = video_tier(snapshot.quality_mode)
        tier_text = f"{tier.quality.value} ({tier.model} @ {tier.resolution})"
    else:
        tier = image_tier(snapshot.quality_mode)
        tier_text = f"{tier.quality.value} ({tier.model}" + (f" @ {tier.image_size})" if tier.image_size else ")")
    lines = [
        f"kind: {kind.value}",
        f"prompt: {snapshot.prompt or '(empty)'}",
        f"ratio: {snapshot.aspect_ratio.value}",
        f"quality: {tier_text}",
        f"reference: {snapshot.reference_file or '-'}",
        f"result: {snapshot.result_artifact.path if snapshot.result_artifact else '-'}",
    ]
    return "\n".join(lines)


class StudioLoop:
    def __init__(self, engine: StudioEngine, input_fn: Callable[[str], str] = input) -> None:
        self.engine = engine
        self.session = engine.session
        self.input_fn = input_fn

    def run(self) -> None:
        print("Lumen studio started. Type /help for commands.")
        while True:
            try:
                line = self.input_fn("> ")
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle(line):
                break

    def handle(self, line: str) -> bool:
        intent = parse_intent(line)
        session = self.session
        if intent.action == "quit":
            return False
        if intent.action == "help":
            for spec in COMMANDS:
                print(f"/{spec.command:<10} {spec.help}")
            print("Plain text edits the prompt draft; an empty line commits it.")
            return True
        if intent.action == "unknown":
            print(f"Unknown command /{intent.command_args.get('command')}. Type /help.")
            return True
        if intent.action == "draft":
            session.edit_prompt(intent.prompt or "")
            return True
        if intent.action == "blur":
            if session.commit_prompt():
                print("Prompt committed.")
            return True
        if intent.action == "set_prompt":
            session.edit_prompt(intent.command_args.get("arg") or "")
            session.commit_prompt()
            return True
        if intent.action == "set_ratio":
            raw = intent.command_args.get("arg") or ""
            try:
                session.set_aspect_ratio(AspectRatio(raw))
            except ValueError:
                choices = " ".join(r.value for r in AspectRatio)
                print(f"Unsupported ratio '{raw}'. Choose one of: {choices}")
                return True
            print(f"Aspect ratio set to {raw}")
            return True
        if intent.action == "set_quality":
            raw = intent.command_args.get("arg") or ""
            try:
                quality = parse_quality(session.output_kind, raw)
            except ValueError:
                print(f"Unsupported quality '{raw}' for {session.output_kind.value}.")
                return True
            session.set_quality(quality)
            print(f"Quality set to {quality.value}")
            return True
        if intent.action == "set_kind":
            raw = (intent.command_args.get("arg") or "").lower()
            try:
                kind = OutputKind(raw)
            except ValueError:
                print(f"Unknown kind '{raw}'. Choose create, edit or video.")
                return True
            session.switch_output_kind(kind)
            print(f"Output kind: {kind.value}")
            return True
        if intent.action == "set_reference":
            path = intent.command_args.get("path")
            if not path:
                print("/ref requires a path")
                return True
            session.set_reference_file(path)
            print(f"Reference set to {path}")
            return True
        if intent.action == "clear_reference":
            session.set_reference_file(None)
            return True
        if intent.action == "undo":
            if not session.undo():
                print("Nothing to undo.")
            return True
        if intent.action == "redo":
            if not session.redo():
                print("Nothing to redo.")
            return True
        if intent.action == "show":
            print(describe_snapshot(session.current, session.output_kind))
            if session.draft_prompt != session.current.prompt:
                print(f"draft: {session.draft_prompt}")
            return True
        if intent.action == "history":
            history = session.history
            for idx, entry in enumerate(history.entries):
                marker = "*" if idx == history.cursor else " "
                result = entry.result_artifact.download_name if entry.result_artifact else "-"
                print(f"{marker} {idx:>3} {entry.aspect_ratio.value:<5} {entry.quality_mode.value:<8} {result} {entry.prompt[:40]}")
            return True
        if intent.action == "save":
            artifact = session.current.result_artifact
            if artifact is None:
                print("No result to save.")
                return True
            destination = Path(intent.command_args.get("arg") or ".")
            saved = self.engine.media.export(artifact, destination)
            print(f"Saved {saved}")
            return True
        if intent.action == "generate":
            self._generate()
            return True
        return True

    def _generate(self) -> None:
        label = "Generating video" if self.session.output_kind is OutputKind.VIDEO else "Generating image"
        ticker = StatusTicker(label, lambda: self.session.live_status)
        ticker.start()
        try:
            outcome = asyncio.run(self.session.generate())
        finally:
            ticker.stop()
        print(outcome.message)
