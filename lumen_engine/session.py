"""Editing session: committed history plus an uncommitted prompt draft."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .errors import GenerationInProgressError
from .history.snapshot import AspectRatio, OutputKind, QualityMode, Snapshot, default_quality
from .history.store import HistoryStore
from .orchestrator import GenerationOrchestrator, GenerationOutcome
from .runs.events import EventWriter


class StudioSession:
    """All edits enter here.

    Typed prompt text stays in ``draft_prompt`` until ``commit_prompt`` (blur)
    or ``generate``; every other field is committed as soon as it changes.
    ``undo``/``redo`` are the only cursor moves and re-sync the draft.
    """

    def __init__(
        self,
        history: HistoryStore,
        orchestrator: GenerationOrchestrator,
        events: EventWriter,
        output_kind: OutputKind = OutputKind.CREATE,
    ) -> None:
        self.history = history
        self.orchestrator = orchestrator
        self.events = events
        self.output_kind = output_kind
        self.draft_prompt = history.current().prompt

    @property
    def current(self) -> Snapshot:
        return self.history.current()

    @property
    def loading(self) -> bool:
        return self.orchestrator.loading

    @property
    def status_message(self) -> str:
        return self.orchestrator.status_message

    @property
    def live_status(self) -> str:
        """Progress text of the running attempt, empty when idle."""
        return self.status_message if self.loading else ""

    def edit_prompt(self, text: str) -> None:
        self.draft_prompt = text

    def commit_prompt(self) -> bool:
        return self._commit("prompt", prompt=self.draft_prompt)

    def set_aspect_ratio(self, ratio: AspectRatio | str) -> bool:
        return self._commit("aspect_ratio", aspect_ratio=AspectRatio(ratio))

    def set_quality(self, quality: QualityMode) -> bool:
        return self._commit("quality_mode", quality_mode=quality)

    def set_reference_file(self, path: Path | str | None) -> bool:
        reference = Path(path).expanduser() if path is not None else None
        return self._commit("reference_file", reference_file=reference)

    def switch_output_kind(self, kind: OutputKind | str) -> bool:
        target = OutputKind(kind)
        if target is self.output_kind:
            return False
        previous = self.output_kind
        self.output_kind = target
        self.events.emit("output_kind_changed", previous=previous, output_kind=target)
        self._commit("output_kind", quality_mode=default_quality(target), result_artifact=None)
        return True

    def undo(self) -> bool:
        moved = self.history.undo()
        self._after_move("history_undo", moved)
        return moved

    def redo(self) -> bool:
        moved = self.history.redo()
        self._after_move("history_redo", moved)
        return moved

    async def generate(self) -> GenerationOutcome:
        if self.loading:
            raise GenerationInProgressError("A generation is already running.")
        if self.draft_prompt != self.current.prompt:
            self.commit_prompt()
        return await self.orchestrator.generate(self.output_kind, self.draft_prompt)

    def _commit(self, reason: str, **changes: Any) -> bool:
        committed = self.history.commit(**changes)
        if committed:
            self.events.emit(
                "history_commit",
                reason=reason,
                fields=sorted(changes),
                cursor=self.history.cursor,
                entries=len(self.history),
            )
        return committed

    def _after_move(self, event_type: str, moved: bool) -> None:
        self.draft_prompt = self.current.prompt
        if moved:
            self.events.emit(event_type, cursor=self.history.cursor, entries=len(self.history))
