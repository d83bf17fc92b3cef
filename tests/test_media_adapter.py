from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pytest
from PIL import Image

from lumen_engine.errors import MediaReadError
from lumen_engine.media.adapter import MediaAdapter, extension_for_mime_type


def _png_bytes(size: tuple[int, int] = (32, 16)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (10, 20, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_encode_uses_declared_type(tmp_path: Path) -> None:
    path = tmp_path / "ref.png"
    data = _png_bytes()
    path.write_bytes(data)
    encoded = asyncio.run(MediaAdapter(tmp_path).encode(path))
    assert encoded.data == data
    assert encoded.mime_type == "image/png"
    assert encoded.byte_count == len(data)


def test_encode_sniffs_type_when_name_has_no_extension(tmp_path: Path) -> None:
    path = tmp_path / "reference"
    path.write_bytes(_png_bytes())
    encoded = asyncio.run(MediaAdapter(tmp_path).encode(path))
    assert encoded.mime_type == "image/png"


def test_encode_missing_file_raises_media_read_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope.png"
    with pytest.raises(MediaReadError) as excinfo:
        asyncio.run(MediaAdapter(tmp_path).encode(missing))
    assert excinfo.value.path == missing
    assert isinstance(excinfo.value, OSError)


def test_materialize_names_file_with_prefix_and_extension(tmp_path: Path) -> None:
    adapter = MediaAdapter(tmp_path / "out", prefix="studio")
    artifact = adapter.materialize(_png_bytes((40, 20)), "image/png")
    assert artifact.path.parent == tmp_path / "out"
    assert artifact.download_name.startswith("studio-")
    assert artifact.download_name.endswith(".png")
    assert artifact.path.read_bytes() == _png_bytes((40, 20))
    assert (artifact.width, artifact.height) == (40, 20)
    assert not artifact.is_video


def test_materialize_video_has_mp4_name_and_no_dimensions(tmp_path: Path) -> None:
    artifact = MediaAdapter(tmp_path).materialize(b"\x00\x00\x00\x18ftypmp42", "video/mp4")
    assert artifact.download_name.endswith(".mp4")
    assert artifact.is_video
    assert artifact.width is None
    assert artifact.byte_count == 12


def test_materialize_never_overwrites(tmp_path: Path, monkeypatch) -> None:
    import lumen_engine.media.adapter as adapter_module

    monkeypatch.setattr(adapter_module, "timestamp_ms", lambda: 1700000000000)
    adapter = MediaAdapter(tmp_path)
    first = adapter.materialize(_png_bytes(), "image/png")
    second = adapter.materialize(_png_bytes(), "image/png")
    assert first.download_name == "lumen-1700000000000.png"
    assert second.download_name == "lumen-1700000000000-1.png"


def test_export_into_directory_keeps_download_name(tmp_path: Path) -> None:
    adapter = MediaAdapter(tmp_path / "out")
    artifact = adapter.materialize(_png_bytes(), "image/png")
    target_dir = tmp_path / "saved"
    target_dir.mkdir()
    saved = adapter.export(artifact, target_dir)
    assert saved == target_dir / artifact.download_name
    assert saved.read_bytes() == artifact.path.read_bytes()


def test_extension_for_mime_type() -> None:
    assert extension_for_mime_type("image/jpeg") == "jpg"
    assert extension_for_mime_type("video/webm") == "mp4"
    assert extension_for_mime_type("image/gif") == "gif"
    assert extension_for_mime_type(None) == "png"
