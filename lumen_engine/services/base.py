"""Generation service contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol

from ..media.adapter import EncodedMedia


@dataclass
class ImageRequest:
    model: str
    prompt: str
    aspect_ratio: str
    image_size: str | None = None
    reference: EncodedMedia | None = None


@dataclass
class ContentPart:
    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @property
    def is_binary(self) -> bool:
        return self.data is not None


@dataclass
class ImageResponse:
    parts: list[ContentPart]
    raw: Mapping[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def first_binary(self) -> ContentPart | None:
        for part in self.parts:
            if part.is_binary:
                return part
        return None

    def text(self) -> str:
        return "\n".join(part.text for part in self.parts if part.text).strip()


@dataclass
class VideoRequest:
    model: str
    prompt: str
    resolution: str
    aspect_ratio: str
    number_of_videos: int = 1
    image: EncodedMedia | None = None


@dataclass
class VideoOperation:
    name: str
    done: bool
    video_uri: str | None = None
    video_bytes: bytes | None = None
    video_mime_type: str | None = None
    error: str | None = None
    handle: Any = field(default=None, repr=False)


class GenerationService(Protocol):
    name: str

    async def generate_image(self, request: ImageRequest, *, api_key: str | None) -> ImageResponse:
        ...

    async def submit_video(self, request: VideoRequest, *, api_key: str | None) -> VideoOperation:
        ...

    async def poll_video(self, operation: VideoOperation, *, api_key: str | None) -> VideoOperation:
        ...

    async def fetch_video(self, uri: str, *, api_key: str | None) -> bytes:
        ...


class ServiceRegistry:
    def __init__(self, services: Iterable[GenerationService]) -> None:
        self._services = {service.name: service for service in services}

    def get(self, name: str) -> GenerationService | None:
        return self._services.get(name)

    def list(self) -> list[str]:
        return sorted(self._services.keys())
