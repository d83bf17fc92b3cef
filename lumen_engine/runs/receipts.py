"""Receipt builder and writer."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from ..media.adapter import MaterializedArtifact
from ..utils import sanitize_payload, serialize, write_json


RECEIPT_SCHEMA_VERSION = 1


def receipt_path_for(artifact: MaterializedArtifact) -> Path:
    return artifact.path.with_name(f"receipt-{artifact.path.stem}.json")


def build_receipt(
    *,
    output_kind: str,
    tier: Any,
    service: str,
    service_request: Any,
    service_response: Mapping[str, Any],
    warnings: list[str],
    artifact: MaterializedArtifact,
    receipt_path: Path,
) -> dict[str, Any]:
    return {
        "schema_version": RECEIPT_SCHEMA_VERSION,
        "output_kind": output_kind,
        "service": service,
        "tier": serialize(tier),
        "service_request": sanitize_payload(service_request),
        "service_response": sanitize_payload(service_response),
        "warnings": warnings,
        "artifacts": {
            "path": str(artifact.path),
            "mime_type": artifact.mime_type,
            "byte_count": artifact.byte_count,
            "width": artifact.width,
            "height": artifact.height,
            "receipt_path": str(receipt_path),
        },
    }


def write_receipt(path: Path, payload: Mapping[str, Any]) -> None:
    write_json(path, payload)
