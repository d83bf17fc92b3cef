"""Gemini image and Veo video service."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse
from urllib.request import Request, urlopen

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import api_key_from_env
from ..errors import CredentialRejectedError, ServiceError, is_not_found
from .base import ContentPart, ImageRequest, ImageResponse, VideoOperation, VideoRequest

FETCH_TIMEOUT_S = 300


class GeminiService:
    name = "gemini"

    async def generate_image(self, request: ImageRequest, *, api_key: str | None) -> ImageResponse:
        client = _client(api_key)
        config = _build_content_config(request)
        contents = types.Content(role="user", parts=_build_message_parts(request))
        try:
            response = await client.aio.models.generate_content(
                model=request.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            raise _service_error(exc) from exc

        candidates = getattr(response, "candidates", None) or []
        raw: dict[str, Any] = {"model": request.model, "candidates": len(candidates)}
        usage = _extract_usage_summary(response)
        if usage:
            raw["usage"] = usage
        return ImageResponse(parts=_extract_parts(candidates), raw=raw)

    async def submit_video(self, request: VideoRequest, *, api_key: str | None) -> VideoOperation:
        client = _client(api_key)
        config = types.GenerateVideosConfig(
            number_of_videos=request.number_of_videos,
            resolution=request.resolution,
            aspect_ratio=request.aspect_ratio,
        )
        kwargs: dict[str, Any] = {"model": request.model, "prompt": request.prompt, "config": config}
        if request.image is not None:
            kwargs["image"] = types.Image(image_bytes=request.image.data, mime_type=request.image.mime_type)
        try:
            operation = await client.aio.models.generate_videos(**kwargs)
        except genai_errors.APIError as exc:
            raise _service_error(exc) from exc
        return _to_video_operation(operation)

    async def poll_video(self, operation: VideoOperation, *, api_key: str | None) -> VideoOperation:
        client = _client(api_key)
        try:
            refreshed = await client.aio.operations.get(operation.handle)
        except genai_errors.APIError as exc:
            raise _service_error(exc) from exc
        return _to_video_operation(refreshed)

    async def fetch_video(self, uri: str, *, api_key: str | None) -> bytes:
        key = api_key or api_key_from_env()
        url = with_key_param(uri, key) if key else uri
        return await asyncio.to_thread(_download, url)


def _client(api_key: str | None) -> genai.Client:
    key = api_key or api_key_from_env()
    if not key:
        raise ServiceError("GEMINI_API_KEY or GOOGLE_API_KEY not set.", service="gemini")
    return genai.Client(api_key=key)


def _build_content_config(request: ImageRequest) -> types.GenerateContentConfig:
    image_config: dict[str, Any] = {"aspect_ratio": request.aspect_ratio}
    if request.image_size:
        image_config["image_size"] = request.image_size
    return types.GenerateContentConfig(
        response_modalities=["IMAGE", "TEXT"],
        image_config=types.ImageConfig(**image_config),
    )


def _build_message_parts(request: ImageRequest) -> list[types.Part]:
    parts: list[types.Part] = []
    if request.reference is not None:
        parts.append(
            types.Part(
                inline_data=types.Blob(
                    data=request.reference.data,
                    mime_type=request.reference.mime_type,
                )
            )
        )
    parts.append(types.Part(text=request.prompt))
    return parts


def _extract_parts(candidates: Sequence[Any]) -> list[ContentPart]:
    extracted: list[ContentPart] = []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data else None
            if isinstance(data, str):
                data = data.encode("latin1")
            if isinstance(data, (bytes, bytearray)):
                extracted.append(
                    ContentPart(data=bytes(data), mime_type=getattr(inline_data, "mime_type", None))
                )
                continue
            text = getattr(part, "text", None)
            if text:
                extracted.append(ContentPart(text=str(text)))
    return extracted


def _to_video_operation(operation: Any) -> VideoOperation:
    done = bool(getattr(operation, "done", False))
    result = VideoOperation(
        name=str(getattr(operation, "name", "") or ""),
        done=done,
        handle=operation,
    )
    error = getattr(operation, "error", None)
    if error:
        result.error = str(error.get("message") or error) if isinstance(error, Mapping) else str(error)
    if not done:
        return result
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if videos:
        video = getattr(videos[0], "video", None)
        if video is not None:
            result.video_uri = getattr(video, "uri", None)
            result.video_bytes = getattr(video, "video_bytes", None)
            result.video_mime_type = getattr(video, "mime_type", None)
    return result


def with_key_param(uri: str, api_key: str) -> str:
    parsed = urlparse(uri)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != "key"]
    query.append(("key", api_key))
    return urlunparse(parsed._replace(query=urlencode(query)))


def _download(url: str) -> bytes:
    req = Request(url, method="GET")
    try:
        with urlopen(req, timeout=FETCH_TIMEOUT_S) as response:
            return response.read()
    except HTTPError as exc:
        raise ServiceError(f"Video download failed ({exc.code}).", code=exc.code, service="gemini") from exc
    except URLError as exc:
        raise ServiceError(f"Video download failed: {exc.reason}", service="gemini") from exc


def _service_error(exc: genai_errors.APIError) -> ServiceError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    if is_not_found(code, message):
        return CredentialRejectedError(message, code=code, service="gemini")
    return ServiceError(message, code=code, service="gemini")


def _to_dict(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dict(v) for v in value]
    if hasattr(value, "model_dump"):
        return _to_dict(value.model_dump(exclude_none=True))
    return str(value)


def _extract_usage_summary(response: Any) -> Mapping[str, Any] | None:
    raw = getattr(response, "usage_metadata", None)
    mapped = _to_dict(raw)
    if isinstance(mapped, Mapping) and mapped:
        return dict(mapped)
    return None
