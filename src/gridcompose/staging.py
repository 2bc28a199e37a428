"""Input staging for the video path.

Turns every slot into a StagedClip: a temporary mp4 at exactly that
slot's size and the request's target duration, so the clips can be
stacked frame for frame.

  video slot  → re-encoded at slot size and fixed fps, hard-trimmed or
                last-frame-held to the target duration; audio
                re-encoded to AAC when the source has any
  image slot  → normalized to JPEG if needed, then held as a single
                frame for the target duration (never has audio)
  empty slot  → background-colored silent filler

All staged files and intermediates are reserved through the request
context, so they are deleted with it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import ExifTags, Image, ImageOps

from .common import ffmpeg_color, is_baseline_image
from .context import RequestContext
from .errors import ConversionError
from .layout import SlotGeometry, slot_geometry
from .raster import flatten
from .request import CompositionRequest, ImageSource, VideoSource
from .settings import ComposerSettings
from .tools import MediaTool, ProbeResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedClip:
    path: Path
    slot: int
    width: int
    height: int
    duration_seconds: float
    has_audio: bool = False
    audio_donor: bool = False


# ── ffmpeg argument helpers ───────────────────────────────────────


def _video_filter(rect: SlotGeometry, settings: ComposerSettings, hold: float | None = None) -> str:
    w, h = rect.width, rect.height
    if settings.video_fit == "cover":
        scale = f"scale={w}:{h}:force_original_aspect_ratio=increase,crop={w}:{h}"
    else:
        scale = f"scale={w}:{h}"
    vf = f"{scale},setsar=1,fps={settings.fps}"
    if hold is not None:
        # Clone the last frame so short sources still fill -t.
        vf += f",tpad=stop_mode=clone:stop_duration={hold:.3f}"
    return vf


def _video_codec_args(settings: ComposerSettings) -> list[str]:
    return [
        "-c:v", "libx264",
        "-preset", settings.stage_preset,
        "-crf", str(settings.crf),
        "-pix_fmt", "yuv420p",
    ]


def audio_codec_args(settings: ComposerSettings) -> list[str]:
    """AAC-LC stereo settings shared by staging and the final encode."""
    return [
        "-c:a", "aac",
        "-b:a", settings.audio_bitrate,
        "-ar", str(settings.audio_sample_rate),
        "-ac", str(settings.audio_channels),
        "-profile:a", settings.audio_profile,
    ]


# ── Per-slot staging ──────────────────────────────────────────────


def stage_video(
    ctx: RequestContext,
    tool: MediaTool,
    slot: int,
    source: VideoSource,
    rect: SlotGeometry,
    duration: float,
    has_audio: bool,
    settings: ComposerSettings,
) -> StagedClip:
    """Scale a video source to its slot and fit it to duration.

    Longer sources are hard-trimmed. Shorter ones hold their last frame
    until duration, whatever the layout.
    """
    out = ctx.temp_path(f"scaled-video-{slot}", ".mp4")
    args = [
        "-i", source.path,
        "-t", f"{duration:.3f}",
        "-vf", _video_filter(rect, settings, hold=duration),
        *_video_codec_args(settings),
    ]
    if has_audio:
        args += audio_codec_args(settings)
    else:
        args += ["-an"]
    tool.transcode(args, out, timeout=ctx.remaining())
    logger.info("Slot %d: scaled video %s → %s", slot, source.path, out.name)
    return StagedClip(out, slot, rect.width, rect.height, duration, has_audio=has_audio)


def _exif_rotated(path: str) -> bool:
    with Image.open(path) as src:
        return src.getexif().get(ExifTags.Base.Orientation, 1) != 1


def normalize_image(
    ctx: RequestContext,
    slot: int,
    source: ImageSource,
    settings: ComposerSettings,
) -> Path:
    """Return an upright JPEG version of an image source.

    Baseline JPEG sources are used directly unless their EXIF tag asks
    for a rotation, since ffmpeg ignores it. Anything else (PNG, WebP,
    AVIF...) is re-encoded by Pillow into the scratch namespace.

    Raises:
        ConversionError: The image cannot be read or written.
    """
    try:
        if is_baseline_image(source.path) and not _exif_rotated(source.path):
            return Path(source.path)

        out = ctx.temp_path(f"converted-{slot}", ".jpg")
        with Image.open(source.path) as src:
            img = flatten(ImageOps.exif_transpose(src), settings.background)
            img.save(out, format="JPEG", quality=settings.normalize_quality)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ConversionError(f"Slot {slot}: cannot convert {source.path} to JPEG: {exc}") from exc
    logger.info("Slot %d: converted %s → %s", slot, source.path, out.name)
    return out


def stage_image(
    ctx: RequestContext,
    tool: MediaTool,
    slot: int,
    source: ImageSource,
    rect: SlotGeometry,
    duration: float,
    settings: ComposerSettings,
) -> StagedClip:
    """Hold a still image for duration at the slot's size."""
    image_path = normalize_image(ctx, slot, source, settings)
    out = ctx.temp_path(f"image-video-{slot}", ".mp4")
    args = [
        "-loop", "1",
        "-t", f"{duration:.3f}",
        "-i", str(image_path),
        "-vf", _video_filter(rect, settings),
        *_video_codec_args(settings),
        "-t", f"{duration:.3f}",
        "-an",
    ]
    tool.transcode(args, out, timeout=ctx.remaining())
    logger.info("Slot %d: image %s held for %.2fs → %s", slot, source.path, duration, out.name)
    return StagedClip(out, slot, rect.width, rect.height, duration)


def stage_filler(
    ctx: RequestContext,
    tool: MediaTool,
    slot: int,
    rect: SlotGeometry,
    duration: float,
    settings: ComposerSettings,
) -> StagedClip:
    """Synthesize a silent background-colored clip for an empty slot."""
    out = ctx.temp_path(f"filler-{slot}", ".mp4")
    color = ffmpeg_color(settings.background)
    args = [
        "-f", "lavfi",
        "-i", f"color=c={color}:s={rect.width}x{rect.height}:r={settings.fps}:d={duration:.3f}",
        *_video_codec_args(settings),
        "-t", f"{duration:.3f}",
        "-an",
    ]
    tool.transcode(args, out, timeout=ctx.remaining())
    logger.info("Slot %d: empty, filled with background → %s", slot, out.name)
    return StagedClip(out, slot, rect.width, rect.height, duration)


# ── All slots ─────────────────────────────────────────────────────


def stage_inputs(
    ctx: RequestContext,
    tool: MediaTool,
    request: CompositionRequest,
    duration: float,
    probes: dict[int, ProbeResult],
    audio_donor: int | None,
    settings: ComposerSettings,
) -> list[StagedClip]:
    """Stage every slot of the layout, in ascending slot order.

    The clip for slot audio_donor is marked as the output's audio
    source. Empty slots get a filler clip, so the returned list always
    has one clip per layout slot.

    Raises:
        ConversionError: Any scale, conversion or synthesis failure.
    """
    geometry = slot_geometry(request.layout, request.width, request.height)
    staged = []

    for slot, rect in enumerate(geometry):
        source = request.slots.get(slot)
        if isinstance(source, VideoSource):
            has_audio = probes[slot].has_audio
            clip = stage_video(ctx, tool, slot, source, rect, duration, has_audio, settings)
            if slot == audio_donor:
                clip = StagedClip(
                    clip.path, slot, clip.width, clip.height, duration,
                    has_audio=True, audio_donor=True,
                )
                logger.info("Slot %d selected as audio source (input %d)", slot, len(staged))
        elif isinstance(source, ImageSource):
            clip = stage_image(ctx, tool, slot, source, rect, duration, settings)
        else:
            clip = stage_filler(ctx, tool, slot, rect, duration, settings)
        staged.append(clip)

    return staged
