"""Video composition — the timeline path.

Strictly sequential phases, each consuming the previous one's output:

  1. duration   probe every video slot, resolve the target duration
  2. staging    one StagedClip per layout slot, audio donor picked
  3. graph      build the stacking filter graph
  4. encode     one ffmpeg run over all staged clips
  5. publish    stat the output, build the CompositeResult

Staged clips are deleted on every exit path. On failure the partial
output is deleted too and the first error propagates unchanged.
"""

import logging
from pathlib import Path

from .common import MediaKind
from .context import RequestContext, discard_output
from .filtergraph import OUTPUT_LABEL, build_filter_graph
from .probe import find_audio_donor, probe_video_slots, resolve_target_duration
from .request import CompositeResult, CompositionRequest
from .settings import ComposerSettings
from .staging import StagedClip, audio_codec_args, stage_inputs
from .tools import MediaTool

logger = logging.getLogger(__name__)


def build_encode_args(
    staged: list[StagedClip],
    filter_graph: str,
    duration: float,
    settings: ComposerSettings,
) -> list[str]:
    """ffmpeg arguments for the final encode (output path excluded)."""
    args = []
    for clip in staged:
        args += ["-i", str(clip.path)]
    args += ["-filter_complex", filter_graph, "-map", OUTPUT_LABEL]

    donor = next((i for i, clip in enumerate(staged) if clip.audio_donor), None)
    if donor is not None:
        args += ["-map", f"{donor}:a", *audio_codec_args(settings)]
    else:
        args += ["-an"]

    args += [
        "-c:v", "libx264",
        "-preset", settings.final_preset,
        "-crf", str(settings.crf),
        "-pix_fmt", "yuv420p",
        "-t", f"{duration:.3f}",
        "-movflags", "+faststart",
    ]
    return args


def compose_video(
    request: CompositionRequest,
    output_path: str | Path,
    tool: MediaTool,
    settings: ComposerSettings,
) -> CompositeResult:
    """Run the full video path for one request.

    Raises:
        ProbeError: A video source could not be inspected.
        ConversionError: Staging or the final encode failed, or the
            request ran past its deadline.
    """
    output_path = Path(output_path)
    ctx = RequestContext(settings.scratch_root, timeout=settings.timeout)
    encode_started = False
    logger.info("Request %s: %s video composite %dx%d",
                ctx.request_id, request.layout, request.width, request.height)

    try:
        ctx.remaining()
        probes = probe_video_slots(request, tool)
        duration = resolve_target_duration(
            request.forced_duration, probes, settings.default_duration,
        )
        logger.info("Target duration: %.2fs", duration)
        donor = find_audio_donor(probes)
        logger.info("Audio source: %s", "none" if donor is None else f"slot {donor}")

        staged = stage_inputs(ctx, tool, request, duration, probes, donor, settings)

        filter_graph = build_filter_graph(
            request.layout, request.width, request.height, len(staged),
        )
        logger.debug("Filter graph: %s", filter_graph)

        args = build_encode_args(staged, filter_graph, duration, settings)
        encode_started = True
        tool.transcode(args, output_path, timeout=ctx.remaining())

        size = output_path.stat().st_size
        logger.info("Composite written: %s (%.2f MB)", output_path.name, size / 1024 / 1024)
        return CompositeResult(
            path=str(output_path),
            name=output_path.name,
            size_bytes=size,
            kind=MediaKind.VIDEO,
            duration_seconds=duration,
        )
    except Exception:
        if encode_started:
            discard_output(output_path)
        raise
    finally:
        ctx.cleanup()
