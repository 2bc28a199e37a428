"""Entry point for grid composition.

compose() takes a validated CompositionRequest and routes it: any video
slot sends it down the timeline path, otherwise it is composited as a
still image. Either way the caller receives a CompositeResult and takes
ownership of the file it names.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .common import MediaKind, unique_name
from .errors import CompositorError
from .raster import compose_image
from .request import CompositeResult, CompositionRequest
from .settings import ComposerSettings
from .timeline import compose_video
from .tools import FFmpegTool, MediaTool

logger = logging.getLogger(__name__)


def output_path_for(request: CompositionRequest, settings: ComposerSettings) -> Path:
    """Fresh, unique output path for a request's composite."""
    suffix = ".mp4" if request.has_video else ".jpg"
    return settings.output_dir / unique_name("composite", suffix)


def compose(
    request: CompositionRequest,
    settings: ComposerSettings | None = None,
    tool: MediaTool | None = None,
) -> CompositeResult:
    """Compose one request into a single image or video file.

    Args:
        request: The layout, slot sources and canvas size.
        settings: Encoder and directory settings; defaults apply if None.
        tool: External media tool; a local FFmpegTool if None. Only the
            video path uses it.

    Raises:
        InvalidLayoutError: The request is invalid (checked before any I/O).
        ProbeError: A video source could not be inspected.
        ConversionError: Resizing, staging or encoding failed.
    """
    settings = settings or ComposerSettings()
    request.validate()

    settings.output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_path_for(request, settings)

    if request.has_video:
        logger.info("Video composite: %s, %d slot(s)", request.layout, len(request.slots))
        return compose_video(request, output_path, tool or FFmpegTool(), settings)

    logger.info("Image composite: %s, %d slot(s)", request.layout, len(request.slots))
    compose_image(
        request, output_path,
        background=settings.background,
        quality=settings.jpeg_quality,
    )
    size = output_path.stat().st_size
    logger.info("Composite written: %s (%d bytes)", output_path.name, size)
    return CompositeResult(
        path=str(output_path),
        name=output_path.name,
        size_bytes=size,
        kind=MediaKind.IMAGE,
    )


def compose_many(
    requests: list[CompositionRequest],
    settings: ComposerSettings | None = None,
    tool: MediaTool | None = None,
    workers: int = 1,
) -> list[CompositeResult | CompositorError]:
    """Compose independent requests, optionally in parallel threads.

    Each request gets its own scratch namespace, so they never collide.
    Results come back in input order; a failed request yields its
    exception in its position instead of a result.
    """
    settings = settings or ComposerSettings()

    def _run(request):
        try:
            return compose(request, settings, tool)
        except CompositorError as exc:
            logger.error("Composition failed: %s", exc)
            return exc

    if workers <= 1 or len(requests) <= 1:
        return [_run(r) for r in requests]

    with ThreadPoolExecutor(max_workers=min(workers, len(requests))) as pool:
        return list(pool.map(_run, requests))
