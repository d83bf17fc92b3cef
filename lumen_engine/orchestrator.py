"""Generation orchestration: snapshot in, committed artifact out."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from .credentials import CredentialGate
from .errors import (
    CredentialError,
    CredentialRejectedError,
    GenerationInProgressError,
    MediaReadError,
    ServiceError,
    is_not_found,
)
from .history.snapshot import OutputKind, Snapshot
from .history.store import HistoryStore
from .media.adapter import MaterializedArtifact, MediaAdapter
from .models.tiers import image_tier, video_aspect_ratio, video_tier
from .runs.events import EventWriter
from .runs.receipts import build_receipt, receipt_path_for, write_receipt
from .services.base import GenerationService, ImageRequest, VideoOperation, VideoRequest

DEFAULT_VIDEO_MIME_TYPE = "video/mp4"

Sleep = Callable[[float], Awaitable[Any]]


@dataclass
class GenerationOutcome:
    status: str
    output_kind: OutputKind
    message: str
    artifact: MaterializedArtifact | None = None
    receipt_path: Path | None = None
    error: Exception | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class GenerationOrchestrator:
    """Runs one generation attempt at a time against the current snapshot.

    Every failure is turned into a ``GenerationOutcome`` here; nothing past this
    boundary sees service or credential exceptions. The history store is only
    touched on success.
    """

    def __init__(
        self,
        history: HistoryStore,
        service: GenerationService,
        gate: CredentialGate,
        media: MediaAdapter,
        events: EventWriter,
        *,
        poll_interval_s: float = 5.0,
        sleep: Sleep | None = None,
        debug_events: bool = False,
    ) -> None:
        self.history = history
        self.service = service
        self.gate = gate
        self.media = media
        self.events = events
        self.poll_interval_s = poll_interval_s
        self._sleep = sleep or asyncio.sleep
        self.debug_events = debug_events
        self.loading = False
        self.status_message = ""

    async def generate(self, kind: OutputKind, draft_prompt: str) -> GenerationOutcome:
        if self.loading:
            raise GenerationInProgressError("A generation is already running.")
        self.loading = True
        self.status_message = "Starting generation"
        try:
            snapshot = self.history.current()
            self.events.emit(
                "generation_started",
                output_kind=kind,
                quality_mode=snapshot.quality_mode,
                aspect_ratio=snapshot.aspect_ratio,
                has_reference=snapshot.reference_file is not None,
                cursor=self.history.cursor,
            )
            if kind.is_image:
                outcome = await self._generate_image(kind, snapshot, draft_prompt)
            else:
                outcome = await self._generate_video(snapshot, draft_prompt)
        except MediaReadError as exc:
            outcome = self._failed(kind, f"Could not read the reference image: {exc.reason}", exc)
        except CredentialError as exc:
            outcome = self._failed(kind, str(exc), exc)
        except CredentialRejectedError as exc:
            outcome = await self._credential_rejected(kind, exc)
        except ServiceError as exc:
            outcome = self._failed(kind, f"Generation failed: {exc}", exc)
        except Exception as exc:
            outcome = self._failed(kind, f"Generation failed: {exc}", exc)
        finally:
            self.loading = False
        self.status_message = outcome.message
        return outcome

    async def _generate_image(self, kind: OutputKind, snapshot: Snapshot, draft_prompt: str) -> GenerationOutcome:
        tier = image_tier(snapshot.quality_mode)
        if tier.requires_credential:
            api_key = await self.gate.ensure()
        else:
            api_key = self.gate.store.current()
        reference = None
        if kind is OutputKind.EDIT and snapshot.reference_file is not None:
            reference = await self.media.encode(snapshot.reference_file)
        request = ImageRequest(
            model=tier.model,
            prompt=draft_prompt,
            aspect_ratio=snapshot.aspect_ratio.value,
            image_size=tier.image_size,
            reference=reference,
        )
        self.events.emit("request_built", output_kind=kind, tier=tier, request=request)
        self.status_message = "Generating image"
        response = await self.service.generate_image(request, api_key=api_key)
        if self.debug_events:
            self.events.emit("service_response", output_kind=kind, response=response.raw)

        part = response.first_binary()
        if part is None or part.data is None:
            text = response.text()
            return self._no_artifact(kind, text or "The service returned no image.")
        artifact = self.media.materialize(part.data, part.mime_type)
        return self._commit_result(
            kind,
            artifact,
            draft_prompt,
            tier=tier,
            request=request,
            response=response.raw,
            warnings=response.warnings,
        )

    async def _generate_video(self, snapshot: Snapshot, draft_prompt: str) -> GenerationOutcome:
        kind = OutputKind.VIDEO
        tier = video_tier(snapshot.quality_mode)
        api_key = await self.gate.ensure()
        image = None
        if snapshot.reference_file is not None:
            image = await self.media.encode(snapshot.reference_file)
        request = VideoRequest(
            model=tier.model,
            prompt=draft_prompt,
            resolution=tier.resolution,
            aspect_ratio=video_aspect_ratio(snapshot.aspect_ratio).value,
            image=image,
        )
        self.events.emit("request_built", output_kind=kind, tier=tier, request=request)
        self.status_message = "Submitting video job"
        operation = await self.service.submit_video(request, api_key=api_key)
        self.events.emit("video_submitted", operation=operation.name, done=operation.done)
        operation = await self._await_operation(operation, api_key)

        if operation.error:
            if is_not_found(None, operation.error):
                raise CredentialRejectedError(operation.error, service=self.service.name)
            raise ServiceError(operation.error, service=self.service.name)
        if operation.video_bytes:
            data = operation.video_bytes
            mime_type = operation.video_mime_type or DEFAULT_VIDEO_MIME_TYPE
        elif operation.video_uri:
            self.status_message = "Downloading video"
            data = await self.service.fetch_video(operation.video_uri, api_key=api_key)
            mime_type = operation.video_mime_type or DEFAULT_VIDEO_MIME_TYPE
        else:
            return self._no_artifact(kind, "The video job finished without a video.")
        artifact = self.media.materialize(data, mime_type)
        return self._commit_result(
            kind,
            artifact,
            draft_prompt,
            tier=tier,
            request=request,
            response={"operation": operation.name, "video_uri": operation.video_uri},
            warnings=[],
        )

    async def _await_operation(self, operation: VideoOperation, api_key: str | None) -> VideoOperation:
        # Unbounded and not cancellable; a cancellation token would go here.
        polls = 0
        while not operation.done:
            self.status_message = f"Rendering video (poll {polls + 1})"
            await self._sleep(self.poll_interval_s)
            operation = await self.service.poll_video(operation, api_key=api_key)
            polls += 1
            self.events.emit("video_poll", operation=operation.name, poll=polls, done=operation.done)
        return operation

    def _commit_result(
        self,
        kind: OutputKind,
        artifact: MaterializedArtifact,
        draft_prompt: str,
        *,
        tier: Any,
        request: Any,
        response: Mapping[str, Any],
        warnings: list[str],
    ) -> GenerationOutcome:
        # Receipt and event come first; the history commit is the last step.
        receipt_path = receipt_path_for(artifact)
        receipt = build_receipt(
            output_kind=kind.value,
            tier=tier,
            service=self.service.name,
            service_request=request,
            service_response=response,
            warnings=warnings,
            artifact=artifact,
            receipt_path=receipt_path,
        )
        write_receipt(receipt_path, receipt)
        self.events.emit(
            "artifact_created",
            output_kind=kind,
            path=artifact.path,
            mime_type=artifact.mime_type,
            byte_count=artifact.byte_count,
            receipt_path=receipt_path,
            parent_cursor=self.history.cursor,
        )
        self.history.commit(result_artifact=artifact, prompt=draft_prompt)
        label = "Video" if kind is OutputKind.VIDEO else "Image"
        return GenerationOutcome(
            status="succeeded",
            output_kind=kind,
            message=f"{label} ready: {artifact.download_name}",
            artifact=artifact,
            receipt_path=receipt_path,
        )

    def _no_artifact(self, kind: OutputKind, message: str) -> GenerationOutcome:
        self.events.emit("generation_no_artifact", output_kind=kind, message=message)
        return GenerationOutcome(status="no_artifact", output_kind=kind, message=message)

    async def _credential_rejected(self, kind: OutputKind, exc: CredentialRejectedError) -> GenerationOutcome:
        self.events.emit("credential_rejected", output_kind=kind, code=exc.code, error=str(exc))
        message = "The API key was rejected. Select a key again, then retry."
        try:
            await self.gate.reselect()
        except CredentialError as reselect_exc:
            message = f"The API key was rejected and no new key was selected ({reselect_exc})."
        return self._failed(kind, message, exc)

    def _failed(self, kind: OutputKind, message: str, exc: Exception) -> GenerationOutcome:
        self.events.emit(
            "generation_failed",
            output_kind=kind,
            error=str(exc),
            error_type=type(exc).__name__,
            service=self.service.name,
        )
        return GenerationOutcome(status="failed", output_kind=kind, message=message, error=exc)
