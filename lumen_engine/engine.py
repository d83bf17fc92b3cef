"""Core Lumen engine wiring."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from .config import LumenSettings
from .credentials import CredentialGate, CredentialStore, default_credential_store
from .history.store import HistoryStore
from .media.adapter import MediaAdapter
from .orchestrator import GenerationOrchestrator, Sleep
from .runs.events import EventWriter
from .runs.summary import RunSummary, write_summary
from .services import default_registry
from .services.base import GenerationService, ServiceRegistry
from .session import StudioSession
from .utils import now_utc_iso


class StudioEngine:
    def __init__(
        self,
        run_dir: Path,
        events_path: Path,
        *,
        settings: LumenSettings | None = None,
        service: GenerationService | None = None,
        service_registry: ServiceRegistry | None = None,
        credential_store: CredentialStore | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.run_dir = run_dir
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = run_dir.name or str(uuid.uuid4())
        self.settings = settings or LumenSettings.from_env()
        self.events = EventWriter(events_path, self.run_id)
        self.summary_path = run_dir / "summary.json"
        self.services = service_registry or default_registry()
        self.service = service or self._resolve_service(self.settings.service)
        self.credentials = credential_store or default_credential_store()
        self.gate = CredentialGate(self.credentials, self.events)
        self.media = MediaAdapter(run_dir, prefix=self.settings.output_prefix)
        self.history = HistoryStore()
        self.orchestrator = GenerationOrchestrator(
            self.history,
            self.service,
            self.gate,
            self.media,
            self.events,
            poll_interval_s=self.settings.poll_interval_s,
            sleep=sleep,
            debug_events=self.settings.debug_events,
        )
        self.session = StudioSession(self.history, self.orchestrator, self.events)
        self.started_at = now_utc_iso()
        self.events.emit("run_started", out_dir=str(self.run_dir), service=self.service.name)

    def _resolve_service(self, name: str) -> GenerationService:
        service = self.services.get(name)
        if service is None:
            available = ", ".join(self.services.list())
            raise RuntimeError(f"Unknown service '{name}'. Available: {available}")
        return service

    def finish(self) -> None:
        artifacts: list[dict[str, Any]] = []
        seen: set[Path] = set()
        for entry in self.history.entries:
            artifact = entry.result_artifact
            if artifact is None or artifact.path in seen:
                continue
            seen.add(artifact.path)
            artifacts.append({"path": str(artifact.path), "mime_type": artifact.mime_type, "prompt": entry.prompt})
        summary = RunSummary(
            run_id=self.run_id,
            started_at=self.started_at,
            finished_at=now_utc_iso(),
            total_entries=len(self.history),
            cursor=self.history.cursor,
            total_artifacts=len(artifacts),
            artifacts=artifacts,
        )
        write_summary(self.summary_path, summary, extra={"service": self.service.name})
        self.events.emit("run_finished", summary_path=str(self.summary_path))
