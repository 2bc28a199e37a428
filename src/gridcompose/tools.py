"""External media tool boundary.

Everything that spawns a decoder/encoder process goes through a
MediaTool: probe(path) to inspect a file and transcode(args, output) to
run one ffmpeg invocation. FFmpegTool is the real implementation; tests
substitute a fake that records the argument lists.

Uses the ffmpeg binary bundled with imageio-ffmpeg. imageio-ffmpeg does
NOT bundle ffprobe, so probing goes through moviepy's ffmpeg info
parser, which reads `ffmpeg -i` output with the same binary.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import imageio_ffmpeg
from moviepy.video.io.ffmpeg_reader import ffmpeg_parse_infos

from .errors import ConversionError, ProbeError

logger = logging.getLogger(__name__)

_STDERR_TAIL_LINES = 20


@dataclass(frozen=True)
class ProbeResult:
    duration_seconds: float | None
    has_audio: bool


class MediaTool(Protocol):
    def probe(self, path: str) -> ProbeResult:
        ...

    def transcode(self, args: list[str], output: str | Path, timeout: float | None = None) -> Path:
        ...


def _stderr_tail(stderr) -> str | None:
    if not stderr:
        return None
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    lines = stderr.strip().splitlines()
    return "\n".join(lines[-_STDERR_TAIL_LINES:])


class FFmpegTool:
    """MediaTool backed by a local ffmpeg binary."""

    def __init__(self, ffmpeg_exe: str | None = None):
        self.ffmpeg_exe = ffmpeg_exe or imageio_ffmpeg.get_ffmpeg_exe()

    def probe(self, path: str) -> ProbeResult:
        """Read duration and audio presence for a media file.

        Raises:
            ProbeError: Missing file, or ffmpeg cannot parse it.
        """
        if not Path(path).is_file():
            raise ProbeError(f"Media file not found: {path}")
        try:
            infos = ffmpeg_parse_infos(str(path))
        except (OSError, IndexError, KeyError, ValueError) as exc:
            raise ProbeError(f"Cannot read media file {path}: {exc}") from exc

        if not infos.get("video_found") and not infos.get("audio_found"):
            raise ProbeError(f"No decodable streams in {path}")

        duration = infos.get("duration")
        return ProbeResult(
            duration_seconds=float(duration) if duration else None,
            has_audio=bool(infos.get("audio_found")),
        )

    def transcode(self, args: list[str], output: str | Path, timeout: float | None = None) -> Path:
        """Run `ffmpeg -y <args> <output>` and wait for it to exit.

        Args:
            args: Everything between the overwrite flag and the output path.
            output: Output file path.
            timeout: Seconds before the process is killed; None waits forever.

        Returns:
            The output path.

        Raises:
            ConversionError: Non-zero exit, timeout, or missing binary.
        """
        output = Path(output)
        cmd = [self.ffmpeg_exe, "-y", "-hide_banner", *args, str(output)]
        logger.debug("ffmpeg command: %s", subprocess.list2cmdline(cmd))
        try:
            subprocess.run(cmd, check=True, capture_output=True, timeout=timeout)
        except subprocess.CalledProcessError as exc:
            raise ConversionError(
                f"ffmpeg exited with status {exc.returncode} writing {output.name}",
                stderr=_stderr_tail(exc.stderr),
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ConversionError(
                f"ffmpeg timed out after {timeout:.1f}s writing {output.name}",
                stderr=_stderr_tail(exc.stderr),
            ) from exc
        except OSError as exc:
            raise ConversionError(f"Cannot run ffmpeg ({self.ffmpeg_exe}): {exc}") from exc
        return output
