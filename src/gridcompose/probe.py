"""Media probing and target-duration resolution for the video path."""

import logging

from .request import CompositionRequest
from .tools import MediaTool, ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 5.0


def probe_video_slots(
    request: CompositionRequest, tool: MediaTool,
) -> dict[int, ProbeResult]:
    """Probe every video-typed slot, in ascending slot order.

    Raises:
        ProbeError: The first source that cannot be inspected.
    """
    results = {}
    for slot, source in request.video_slots():
        result = tool.probe(source.path)
        logger.info(
            "Slot %d video: %s s, audio=%s",
            slot,
            "?" if result.duration_seconds is None else f"{result.duration_seconds:.2f}",
            result.has_audio,
        )
        results[slot] = result
    return results


def resolve_target_duration(
    forced_duration: float | None,
    probes: dict[int, ProbeResult],
    default: float = DEFAULT_DURATION,
) -> float:
    """Pick the output duration.

    A truthy forced duration wins. Otherwise the longest probed video
    duration. With no video (or no video reporting a duration) the
    default applies.
    """
    if forced_duration:
        return float(forced_duration)
    durations = [p.duration_seconds for p in probes.values() if p.duration_seconds]
    if durations:
        return max(durations)
    return float(default)


def find_audio_donor(probes: dict[int, ProbeResult]) -> int | None:
    """Lowest slot index whose probe reported an audio stream."""
    for slot in sorted(probes):
        if probes[slot].has_audio:
            return slot
    return None
