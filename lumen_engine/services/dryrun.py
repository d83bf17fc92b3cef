"""Dry-run generation service (offline)."""

from __future__ import annotations

import hashlib
import io
import uuid
from typing import Any

from PIL import Image, ImageDraw, ImageFont

from ..errors import ServiceError
from .base import ContentPart, ImageRequest, ImageResponse, VideoOperation, VideoRequest

_IMAGE_SIZES = {"1K": 1024, "2K": 2048, "4K": 4096}
_VIDEO_HEIGHTS = {"720p": 720, "1080p": 1080}
_PREVIEW_EDGE = 512
DRYRUN_VIDEO_MIME_TYPE = "image/gif"


class DryRunService:
    """Renders placeholder images; videos finish after ``video_polls`` polls."""

    name = "dryrun"

    def __init__(self, video_polls: int = 2) -> None:
        self.video_polls = max(0, video_polls)
        self._pending: dict[str, dict[str, Any]] = {}
        self._font = None

    async def generate_image(self, request: ImageRequest, *, api_key: str | None) -> ImageResponse:
        width, height = _resolve_image_size(request.aspect_ratio, request.image_size)
        image = self._render(request.prompt, width, height, label=request.model)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return ImageResponse(
            parts=[ContentPart(data=buffer.getvalue(), mime_type="image/png")],
            raw={"model": request.model, "dryrun": True, "width": width, "height": height},
        )

    async def submit_video(self, request: VideoRequest, *, api_key: str | None) -> VideoOperation:
        name = f"operations/dryrun-{uuid.uuid4().hex[:12]}"
        self._pending[name] = {"request": request, "polls": 0}
        if self.video_polls == 0:
            return self._complete(name)
        return VideoOperation(name=name, done=False)

    async def poll_video(self, operation: VideoOperation, *, api_key: str | None) -> VideoOperation:
        state = self._pending.get(operation.name)
        if state is None:
            return VideoOperation(name=operation.name, done=True, error="unknown operation")
        state["polls"] += 1
        if state["polls"] < self.video_polls:
            return VideoOperation(name=operation.name, done=False)
        return self._complete(operation.name)

    async def fetch_video(self, uri: str, *, api_key: str | None) -> bytes:
        raise ServiceError("dryrun videos are returned inline", service=self.name)

    def _complete(self, name: str) -> VideoOperation:
        request: VideoRequest = self._pending.pop(name)["request"]
        width, height = _resolve_video_size(request.aspect_ratio, request.resolution)
        frames = [
            self._render(request.prompt, width, height, label=request.model, shift=idx)
            for idx in range(4)
        ]
        buffer = io.BytesIO()
        frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:], duration=250, loop=0)
        return VideoOperation(
            name=name,
            done=True,
            video_bytes=buffer.getvalue(),
            video_mime_type=DRYRUN_VIDEO_MIME_TYPE,
        )

    def _render(self, prompt: str, width: int, height: int, *, label: str, shift: int = 0) -> Image.Image:
        # Placeholders are drawn at preview size.
        scale = min(1.0, _PREVIEW_EDGE / max(width, height))
        size = (max(1, int(width * scale)), max(1, int(height * scale)))
        image = Image.new("RGB", size, _color_from_prompt(prompt, shift))
        draw = ImageDraw.Draw(image)
        font = self._font or ImageFont.load_default()
        draw.text((12, 12), f"dryrun {label}\n{prompt[:60]}", fill=(255, 255, 255), font=font)
        return image


def _ratio_parts(aspect_ratio: str) -> tuple[int, int]:
    try:
        left, right = aspect_ratio.split(":", 1)
        w, h = int(left), int(right)
    except ValueError:
        return 1, 1
    if w <= 0 or h <= 0:
        return 1, 1
    return w, h


def _resolve_image_size(aspect_ratio: str, image_size: str | None) -> tuple[int, int]:
    longest = _IMAGE_SIZES.get(str(image_size or "").upper(), 1024)
    w, h = _ratio_parts(aspect_ratio)
    if w >= h:
        return longest, max(1, round(longest * h / w))
    return max(1, round(longest * w / h)), longest


def _resolve_video_size(aspect_ratio: str, resolution: str) -> tuple[int, int]:
    short = _VIDEO_HEIGHTS.get(resolution, 720)
    w, h = _ratio_parts(aspect_ratio)
    if w >= h:
        return max(1, round(short * w / h)), short
    return short, max(1, round(short * h / w))


def _color_from_prompt(prompt: str, shift: int) -> tuple[int, int, int]:
    digest = hashlib.sha256(f"{prompt}:{shift}".encode("utf-8")).digest()
    return digest[0], digest[1], digest[2]
