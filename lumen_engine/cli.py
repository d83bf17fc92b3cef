"""Lumen CLI entrypoints."""

from __future__ import annotations

import argparse
import asyncio
import getpass
from dataclasses import replace
from pathlib import Path

from .chat.loop import StudioLoop
from .cli_progress import StatusTicker
from .config import LumenSettings
from .credentials import default_credential_store
from .engine import StudioEngine
from .history.snapshot import AspectRatio, OutputKind, parse_quality
from .utils import load_dotenv


def _prompt_for_api_key() -> str | None:
    try:
        return getpass.getpass("API key for elevated tiers (empty to cancel): ")
    except (EOFError, KeyboardInterrupt):
        return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lumen", description="Lumen image and video studio")
    sub = parser.add_subparsers(dest="command")

    studio = sub.add_parser("studio", help="Interactive studio session")
    studio.add_argument("--out", required=True, help="Run output directory")
    studio.add_argument("--events", help="Path to events.jsonl")
    studio.add_argument("--service", help="Generation service (gemini, dryrun)")

    run = sub.add_parser("run", help="Single generation")
    run.add_argument("--prompt", required=True)
    run.add_argument("--out", required=True)
    run.add_argument("--events")
    run.add_argument("--service")
    run.add_argument("--kind", choices=[k.value for k in OutputKind], default=OutputKind.CREATE.value)
    run.add_argument("--quality")
    run.add_argument("--ratio", choices=[r.value for r in AspectRatio], default=AspectRatio.SQUARE.value)
    run.add_argument("--reference", help="Reference image for edit/video")

    return parser


def _make_engine(args: argparse.Namespace) -> StudioEngine:
    run_dir = Path(args.out)
    events_path = Path(args.events) if args.events else run_dir / "events.jsonl"
    settings = LumenSettings.from_env()
    if args.service:
        settings = replace(settings, service=args.service.strip().lower())
    store = default_credential_store()
    if store.selector is None:
        store.selector = _prompt_for_api_key
    return StudioEngine(run_dir, events_path, settings=settings, credential_store=store)


def _handle_studio(args: argparse.Namespace) -> int:
    engine = _make_engine(args)
    try:
        StudioLoop(engine).run()
    finally:
        engine.finish()
    return 0


def _handle_run(args: argparse.Namespace) -> int:
    kind = OutputKind(args.kind)
    quality = None
    if args.quality:
        try:
            quality = parse_quality(kind, args.quality)
        except ValueError:
            print(f"Unsupported quality '{args.quality}' for {kind.value}.")
            return 2
    engine = _make_engine(args)
    session = engine.session
    session.switch_output_kind(kind)
    session.set_aspect_ratio(AspectRatio(args.ratio))
    if quality is not None:
        session.set_quality(quality)
    if args.reference:
        session.set_reference_file(args.reference)
    session.edit_prompt(args.prompt)

    label = "Generating video" if kind is OutputKind.VIDEO else "Generating image"
    ticker = StatusTicker(label, lambda: session.live_status)
    ticker.start()
    try:
        outcome = asyncio.run(session.generate())
    finally:
        ticker.stop()
    engine.finish()
    print(outcome.message)
    return 0 if outcome.ok else 1


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    if args.command == "studio":
        raise SystemExit(_handle_studio(args))
    if args.command == "run":
        raise SystemExit(_handle_run(args))
    parser.print_help()
    raise SystemExit(1)


if __name__ == "__main__":
    main()
