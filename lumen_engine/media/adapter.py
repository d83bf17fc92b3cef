"""Reference-file encoding and artifact materialization."""

from __future__ import annotations

import asyncio
import io
import mimetypes
import shutil
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..errors import MediaReadError
from ..utils import now_utc_iso, timestamp_ms

DEFAULT_MIME_TYPE = "application/octet-stream"

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
}


@dataclass(frozen=True)
class EncodedMedia:
    data: bytes
    mime_type: str

    @property
    def byte_count(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class MaterializedArtifact:
    path: Path
    mime_type: str
    byte_count: int
    width: int | None = None
    height: int | None = None
    created_at: str | None = None

    @property
    def download_name(self) -> str:
        return self.path.name

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


def mime_type_for_path(path: Path) -> str | None:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed


def sniff_image_mime_type(data: bytes) -> str | None:
    try:
        with Image.open(io.BytesIO(data)) as image:
            fmt = image.format
    except OSError:
        return None
    if not fmt:
        return None
    return Image.MIME.get(fmt.upper())


def extension_for_mime_type(mime_type: str | None) -> str:
    normalized = str(mime_type or "").split(";", 1)[0].strip().lower()
    if normalized in _EXTENSIONS:
        return _EXTENSIONS[normalized]
    if normalized.startswith("video/"):
        return "mp4"
    return "png"


class MediaAdapter:
    def __init__(self, output_dir: Path, prefix: str = "lumen") -> None:
        self.output_dir = output_dir
        self.prefix = prefix

    async def encode(self, path: Path | str) -> EncodedMedia:
        source = Path(path).expanduser()
        try:
            data = await asyncio.to_thread(source.read_bytes)
        except OSError as exc:
            raise MediaReadError(source, exc.strerror or str(exc)) from exc
        mime_type = mime_type_for_path(source) or sniff_image_mime_type(data) or DEFAULT_MIME_TYPE
        return EncodedMedia(data=data, mime_type=mime_type)

    def materialize(self, data: bytes, mime_type: str | None) -> MaterializedArtifact:
        resolved_mime = str(mime_type or "").strip() or sniff_image_mime_type(data) or "image/png"
        path = self._build_path(extension_for_mime_type(resolved_mime))
        path.write_bytes(data)
        width, height = _image_dimensions(data) if resolved_mime.startswith("image/") else (None, None)
        return MaterializedArtifact(
            path=path,
            mime_type=resolved_mime,
            byte_count=len(data),
            width=width,
            height=height,
            created_at=now_utc_iso(),
        )

    def export(self, artifact: MaterializedArtifact, destination: Path | str) -> Path:
        target = Path(destination).expanduser()
        if target.is_dir():
            target = target / artifact.download_name
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(artifact.path, target)
        return target

    def _build_path(self, ext: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{self.prefix}-{timestamp_ms()}"
        path = self.output_dir / f"{stem}.{ext}"
        idx = 1
        while path.exists():
            path = self.output_dir / f"{stem}-{idx}.{ext}"
            idx += 1
        return path


def _image_dimensions(data: bytes) -> tuple[int | None, int | None]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except OSError:
        return None, None
