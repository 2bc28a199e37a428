"""Composer settings and their YAML loader.

Settings file schema (every key optional):
  output_dir: "uploads"
  scratch_dir: "uploads/temp"     # defaults to <output_dir>/temp
  fps: 30
  crf: 23
  stage_preset: ultrafast
  final_preset: medium
  jpeg_quality: 90
  normalize_quality: 95
  background: "#FFFFFF"
  default_duration: 5
  audio_bitrate: 192k
  audio_sample_rate: 48000
  audio_channels: 2
  audio_profile: aac_low
  video_fit: stretch               # or: cover
  timeout: null                    # seconds per request, null = unbounded
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from .common import parse_hex_color


VALID_VIDEO_FITS = {"stretch", "cover"}


@dataclass(frozen=True)
class ComposerSettings:
    output_dir: Path = Path("uploads")
    scratch_dir: Path | None = None
    fps: int = 30
    crf: int = 23
    stage_preset: str = "ultrafast"
    final_preset: str = "medium"
    jpeg_quality: int = 90
    normalize_quality: int = 95
    background: tuple[int, int, int] = (255, 255, 255)
    default_duration: float = 5.0
    audio_bitrate: str = "192k"
    audio_sample_rate: int = 48000
    audio_channels: int = 2
    audio_profile: str = "aac_low"
    video_fit: str = "stretch"
    timeout: float | None = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        if self.scratch_dir is not None:
            object.__setattr__(self, "scratch_dir", Path(self.scratch_dir))
        if self.video_fit not in VALID_VIDEO_FITS:
            raise ValueError(
                f"Invalid video_fit '{self.video_fit}'. Valid: {sorted(VALID_VIDEO_FITS)}"
            )
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.default_duration <= 0:
            raise ValueError(f"default_duration must be positive, got {self.default_duration}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def scratch_root(self) -> Path:
        """Directory holding per-request scratch namespaces."""
        if self.scratch_dir is not None:
            return self.scratch_dir
        return self.output_dir / "temp"

    def with_overrides(self, **overrides) -> "ComposerSettings":
        return replace(self, **overrides)


def load_settings(settings_path: str | Path, **overrides) -> ComposerSettings:
    """Load ComposerSettings from a YAML file.

    Keyword overrides (e.g. output_dir from the command line) are applied
    on top of the file's values.

    Raises:
        ValueError: Unknown key or invalid value.
        FileNotFoundError: Missing settings file.
    """
    with open(settings_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file {settings_path}: expected a mapping")

    known = {f.name for f in fields(ComposerSettings)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(
            f"Settings file {settings_path}: unknown key(s) {sorted(unknown)}. "
            f"Valid: {sorted(known)}"
        )

    if "background" in raw:
        raw["background"] = parse_hex_color(str(raw["background"]))

    raw.update({k: v for k, v in overrides.items() if v is not None})
    return ComposerSettings(**raw)
