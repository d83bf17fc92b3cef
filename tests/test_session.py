from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from lumen_engine.config import LumenSettings
from lumen_engine.credentials import CredentialStore
from lumen_engine.engine import StudioEngine
from lumen_engine.errors import GenerationInProgressError
from lumen_engine.history.snapshot import AspectRatio, ImageQuality, OutputKind, VideoQuality
from lumen_engine.services.dryrun import DryRunService


async def _no_sleep(seconds: float) -> None:
    return None


def _engine(tmp_path: Path) -> StudioEngine:
    store = CredentialStore(use_env=False)
    store.set("test-key")
    return StudioEngine(
        tmp_path / "run",
        tmp_path / "run" / "events.jsonl",
        settings=LumenSettings(service="dryrun", poll_interval_s=0.0),
        service=DryRunService(video_polls=1),
        credential_store=store,
        sleep=_no_sleep,
    )


def _event_types(engine: StudioEngine) -> list[str]:
    lines = engine.events.path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line)["type"] for line in lines]


def test_typing_does_not_commit_until_blur(tmp_path: Path) -> None:
    session = _engine(tmp_path).session
    session.edit_prompt("a")
    session.edit_prompt("a cat")
    assert len(session.history) == 1
    assert session.current.prompt == ""

    assert session.commit_prompt()
    assert len(session.history) == 2
    assert session.current.prompt == "a cat"
    assert not session.commit_prompt()


def test_field_edits_commit_immediately(tmp_path: Path) -> None:
    session = _engine(tmp_path).session
    assert session.set_aspect_ratio("9:16")
    assert session.set_quality(ImageQuality.HD)
    assert not session.set_quality(ImageQuality.HD)
    assert session.set_reference_file(tmp_path / "ref.png")
    assert session.set_reference_file(None)
    assert len(session.history) == 5
    assert session.current.aspect_ratio is AspectRatio.PORTRAIT
    assert session.current.reference_file is None


def test_undo_resyncs_draft_with_restored_prompt(tmp_path: Path) -> None:
    session = _engine(tmp_path).session
    session.edit_prompt("first")
    session.commit_prompt()
    session.edit_prompt("second")
    session.commit_prompt()
    session.edit_prompt("unsaved")

    assert session.undo()
    assert session.draft_prompt == "first"
    assert session.redo()
    assert session.draft_prompt == "second"


def test_switching_kind_resets_quality_and_is_undoable(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    session = engine.session
    session.set_quality(ImageQuality.UHD)

    assert session.switch_output_kind(OutputKind.VIDEO)
    assert session.current.quality_mode is VideoQuality.STANDARD
    assert not session.switch_output_kind("video")

    session.undo()
    assert session.current.quality_mode is ImageQuality.UHD
    assert "output_kind_changed" in _event_types(engine)


def test_generate_commits_draft_then_records_result(tmp_path: Path) -> None:
    engine = _engine(tmp_path)
    session = engine.session
    session.edit_prompt("harbor at night")

    outcome = asyncio.run(session.generate())

    assert outcome.status == "succeeded"
    prompts = [entry.prompt for entry in session.history.entries]
    assert prompts == ["", "harbor at night", "harbor at night"]
    assert session.history.entries[1].result_artifact is None
    assert session.current.result_artifact == outcome.artifact
    assert outcome.artifact.mime_type == "image/png"
    assert (outcome.artifact.width, outcome.artifact.height) == (512, 512)
    assert not session.loading
    assert session.status_message == outcome.message

    session.undo()
    assert session.current.result_artifact is None


def test_generate_video_with_dryrun_service(tmp_path: Path) -> None:
    session = _engine(tmp_path).session
    session.switch_output_kind(OutputKind.VIDEO)
    session.set_aspect_ratio(AspectRatio.PORTRAIT)
    session.edit_prompt("waves rolling in")

    outcome = asyncio.run(session.generate())

    assert outcome.status == "succeeded"
    assert outcome.artifact.mime_type == "image/gif"
    assert outcome.artifact.download_name.endswith(".gif")


def test_generate_refuses_while_loading(tmp_path: Path) -> None:
    session = _engine(tmp_path).session
    session.orchestrator.loading = True
    session.edit_prompt("ignored")
    with pytest.raises(GenerationInProgressError):
        asyncio.run(session.generate())
    assert len(session.history) == 1


def test_live_status_reports_progress_only_while_running(tmp_path: Path) -> None:
    seen: list[str] = []
    store = CredentialStore(use_env=False)
    store.set("test-key")

    async def record_sleep(seconds: float) -> None:
        seen.append(engine.session.live_status)

    engine = StudioEngine(
        tmp_path / "run",
        tmp_path / "run" / "events.jsonl",
        settings=LumenSettings(service="dryrun"),
        service=DryRunService(video_polls=2),
        credential_store=store,
        sleep=record_sleep,
    )
    session = engine.session
    session.switch_output_kind(OutputKind.VIDEO)
    session.edit_prompt("clouds")

    outcome = asyncio.run(session.generate())

    assert seen == ["Rendering video (poll 1)", "Rendering video (poll 2)"]
    assert session.live_status == ""
    assert session.status_message == outcome.message
