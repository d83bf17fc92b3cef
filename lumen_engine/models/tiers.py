"""Quality tier tables for image and video generation."""

from __future__ import annotations

from dataclasses import dataclass

from ..history.snapshot import (
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_VIDEO_QUALITY,
    AspectRatio,
    ImageQuality,
    QualityMode,
    VideoQuality,
)

IMAGE_BASE_MODEL = "gemini-2.5-flash-image"
IMAGE_ELEVATED_MODEL = "gemini-3-pro-image-preview"
VIDEO_FAST_MODEL = "veo-3.1-fast-generate-preview"
VIDEO_BASE_MODEL = "veo-3.1-generate-preview"


@dataclass(frozen=True)
class ImageTier:
    quality: ImageQuality
    model: str
    image_size: str | None
    requires_credential: bool


@dataclass(frozen=True)
class VideoTier:
    quality: VideoQuality
    model: str
    resolution: str
    requires_credential: bool = True


IMAGE_TIERS: dict[ImageQuality, ImageTier] = {
    ImageQuality.FAST: ImageTier(ImageQuality.FAST, IMAGE_BASE_MODEL, None, False),
    ImageQuality.STANDARD: ImageTier(ImageQuality.STANDARD, IMAGE_ELEVATED_MODEL, "1K", True),
    ImageQuality.HD: ImageTier(ImageQuality.HD, IMAGE_ELEVATED_MODEL, "2K", True),
    ImageQuality.UHD: ImageTier(ImageQuality.UHD, IMAGE_ELEVATED_MODEL, "4K", True),
}

VIDEO_TIERS: dict[VideoQuality, VideoTier] = {
    VideoQuality.FAST: VideoTier(VideoQuality.FAST, VIDEO_FAST_MODEL, "720p"),
    VideoQuality.STANDARD: VideoTier(VideoQuality.STANDARD, VIDEO_FAST_MODEL, "1080p"),
    VideoQuality.QUALITY: VideoTier(VideoQuality.QUALITY, VIDEO_BASE_MODEL, "720p"),
    VideoQuality.PRO: VideoTier(VideoQuality.PRO, VIDEO_BASE_MODEL, "1080p"),
}


def image_quality_for(mode: QualityMode) -> ImageQuality:
    # A video tier left over from another tab keeps its name when the image
    # family has one (fast, standard).
    if isinstance(mode, ImageQuality):
        return mode
    try:
        return ImageQuality(mode.value)
    except ValueError:
        return DEFAULT_IMAGE_QUALITY


def video_quality_for(mode: QualityMode) -> VideoQuality:
    if isinstance(mode, VideoQuality):
        return mode
    try:
        return VideoQuality(mode.value)
    except ValueError:
        return DEFAULT_VIDEO_QUALITY


def image_tier(mode: QualityMode) -> ImageTier:
    return IMAGE_TIERS[image_quality_for(mode)]


def video_tier(mode: QualityMode) -> VideoTier:
    return VIDEO_TIERS[video_quality_for(mode)]


def video_aspect_ratio(ratio: AspectRatio) -> AspectRatio:
    """Video backends have no square output; 1:1 is sent as 16:9."""
    if ratio is AspectRatio.SQUARE:
        return AspectRatio.LANDSCAPE
    return ratio
