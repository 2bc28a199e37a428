"""Shared test fixtures for gridcompose tests."""

import subprocess
from pathlib import Path

import pytest
import imageio_ffmpeg
from PIL import Image

from gridcompose.errors import ConversionError, ProbeError
from gridcompose.settings import ComposerSettings

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


def _make_video(out: Path, seconds: float, color: str, audio: bool, size="320x240") -> Path:
    cmd = [_FFMPEG, "-y", "-f", "lavfi", "-i", f"color=c={color}:s={size}:d={seconds}:r=10"]
    if audio:
        cmd += ["-f", "lavfi", "-i", "sine=frequency=440:sample_rate=44100", "-shortest"]
    cmd += ["-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p"]
    if audio:
        cmd += ["-c:a", "aac", "-b:a", "32k"]
    cmd += ["-t", str(seconds), str(out)]
    subprocess.run(cmd, check=True, capture_output=True)
    return out


@pytest.fixture
def video_with_audio(tmp_path):
    """A 5-second 320x240 blue clip with a sine tone."""
    return _make_video(tmp_path / "with-audio.mp4", 5, "blue", audio=True)


@pytest.fixture
def short_video_with_audio(tmp_path):
    """A 3-second 320x240 green clip with a sine tone."""
    return _make_video(tmp_path / "short-audio.mp4", 3, "green", audio=True)


@pytest.fixture
def silent_video(tmp_path):
    """A 2-second 320x240 red clip with no audio stream."""
    return _make_video(tmp_path / "silent.mp4", 2, "red", audio=False)


@pytest.fixture
def make_image(tmp_path):
    """Factory: write a solid-color image and return its path."""
    def _make(name, color=(200, 30, 30), size=(400, 300), mode="RGB"):
        path = tmp_path / name
        Image.new(mode, size, color).save(path)
        return path
    return _make


@pytest.fixture
def settings(tmp_path):
    return ComposerSettings(output_dir=tmp_path / "out", scratch_dir=tmp_path / "scratch")


class FakeTool:
    """MediaTool stand-in that records calls instead of spawning ffmpeg.

    probes maps a source path to its ProbeResult; unknown paths raise
    ProbeError. transcode writes a small placeholder file unless the
    output name contains one of fail_on.
    """

    def __init__(self, probes=None, fail_on=()):
        self.probes = {str(k): v for k, v in (probes or {}).items()}
        self.fail_on = tuple(fail_on)
        self.probe_calls = []
        self.calls = []

    def probe(self, path):
        self.probe_calls.append(str(path))
        if str(path) not in self.probes:
            raise ProbeError(f"Cannot read media file {path}")
        return self.probes[str(path)]

    def transcode(self, args, output, timeout=None):
        output = Path(output)
        self.calls.append({"args": list(args), "output": output, "timeout": timeout})
        if any(token in output.name for token in self.fail_on):
            output.write_bytes(b"partial")
            raise ConversionError(f"ffmpeg exited with status 1 writing {output.name}")
        output.write_bytes(b"fake media " + output.name.encode())
        return output


@pytest.fixture
def fake_tool_factory():
    return FakeTool
