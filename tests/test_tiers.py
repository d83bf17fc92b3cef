from __future__ import annotations

import pytest

from lumen_engine.history.snapshot import (
    AspectRatio,
    ImageQuality,
    OutputKind,
    VideoQuality,
    default_quality,
    parse_quality,
)
from lumen_engine.models.tiers import (
    IMAGE_BASE_MODEL,
    IMAGE_ELEVATED_MODEL,
    VIDEO_BASE_MODEL,
    VIDEO_FAST_MODEL,
    image_tier,
    video_aspect_ratio,
    video_tier,
)


@pytest.mark.parametrize(
    ("quality", "model", "image_size", "requires_credential"),
    [
        (ImageQuality.FAST, IMAGE_BASE_MODEL, None, False),
        (ImageQuality.STANDARD, IMAGE_ELEVATED_MODEL, "1K", True),
        (ImageQuality.HD, IMAGE_ELEVATED_MODEL, "2K", True),
        (ImageQuality.UHD, IMAGE_ELEVATED_MODEL, "4K", True),
    ],
)
def test_image_tier_table(quality, model, image_size, requires_credential) -> None:
    tier = image_tier(quality)
    assert tier.model == model
    assert tier.image_size == image_size
    assert tier.requires_credential is requires_credential


@pytest.mark.parametrize(
    ("quality", "model", "resolution"),
    [
        (VideoQuality.FAST, VIDEO_FAST_MODEL, "720p"),
        (VideoQuality.STANDARD, VIDEO_FAST_MODEL, "1080p"),
        (VideoQuality.QUALITY, VIDEO_BASE_MODEL, "720p"),
        (VideoQuality.PRO, VIDEO_BASE_MODEL, "1080p"),
    ],
)
def test_video_tier_table(quality, model, resolution) -> None:
    tier = video_tier(quality)
    assert tier.model == model
    assert tier.resolution == resolution
    assert tier.requires_credential


def test_tiers_from_the_other_family_are_reinterpreted_by_name() -> None:
    assert image_tier(VideoQuality.STANDARD).quality is ImageQuality.STANDARD
    assert image_tier(VideoQuality.PRO).quality is ImageQuality.FAST
    assert video_tier(ImageQuality.FAST).quality is VideoQuality.FAST
    assert video_tier(ImageQuality.UHD).quality is VideoQuality.STANDARD


def test_square_video_is_sent_as_landscape() -> None:
    assert video_aspect_ratio(AspectRatio.SQUARE) is AspectRatio.LANDSCAPE
    assert video_aspect_ratio(AspectRatio.PORTRAIT) is AspectRatio.PORTRAIT
    assert video_aspect_ratio(AspectRatio.LANDSCAPE) is AspectRatio.LANDSCAPE


def test_defaults_and_parsing() -> None:
    assert default_quality(OutputKind.CREATE) is ImageQuality.FAST
    assert default_quality(OutputKind.EDIT) is ImageQuality.FAST
    assert default_quality(OutputKind.VIDEO) is VideoQuality.STANDARD
    assert parse_quality(OutputKind.VIDEO, " Pro ") is VideoQuality.PRO
    with pytest.raises(ValueError):
        parse_quality(OutputKind.CREATE, "pro")
