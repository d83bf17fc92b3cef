"""Immutable request configuration snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from ..media.adapter import MaterializedArtifact


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"


class OutputKind(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    VIDEO = "video"

    @property
    def is_image(self) -> bool:
        return self is not OutputKind.VIDEO


class ImageQuality(str, Enum):
    FAST = "fast"
    STANDARD = "standard"
    HD = "hd"
    UHD = "uhd"


class VideoQuality(str, Enum):
    FAST = "fast"
    STANDARD = "standard"
    QUALITY = "quality"
    PRO = "pro"


QualityMode = Union[ImageQuality, VideoQuality]

DEFAULT_IMAGE_QUALITY = ImageQuality.FAST
DEFAULT_VIDEO_QUALITY = VideoQuality.STANDARD


def default_quality(kind: OutputKind) -> QualityMode:
    if kind is OutputKind.VIDEO:
        return DEFAULT_VIDEO_QUALITY
    return DEFAULT_IMAGE_QUALITY


def parse_quality(kind: OutputKind, raw: str) -> QualityMode:
    """Parse a tier name in the family of ``kind``; raises ValueError."""
    value = str(raw or "").strip().lower()
    if kind is OutputKind.VIDEO:
        return VideoQuality(value)
    return ImageQuality(value)


@dataclass(frozen=True)
class Snapshot:
    prompt: str = ""
    aspect_ratio: AspectRatio = AspectRatio.SQUARE
    quality_mode: QualityMode = DEFAULT_IMAGE_QUALITY
    reference_file: Path | None = None
    result_artifact: MaterializedArtifact | None = None


def seed_snapshot() -> Snapshot:
    return Snapshot()
