"""Request and result records.

A composition request is validated and its sources are classified as
image or video once, when it is built. Every later stage dispatches on
the source type instead of looking at file names again.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path

from .common import MediaKind, sniff_media_kind
from .errors import InvalidLayoutError
from .layout import VALID_LAYOUTS, required_slot_count, slot_geometry


# ── Sources ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ImageSource:
    path: str
    kind = MediaKind.IMAGE


@dataclass(frozen=True)
class VideoSource:
    path: str
    kind = MediaKind.VIDEO


MediaSource = ImageSource | VideoSource


def source_for_path(path: str | Path, kind: str | MediaKind | None = None) -> MediaSource:
    """Classify a source file as an ImageSource or VideoSource.

    An explicit kind wins. Otherwise the file name decides.

    Raises:
        InvalidLayoutError: Unknown kind, or a file name that is neither a
            known image nor a known video format.
    """
    if kind is not None:
        try:
            kind = MediaKind(kind)
        except ValueError:
            raise InvalidLayoutError(
                f"Unknown media kind '{kind}' for {path}. "
                f"Valid: {sorted(k.value for k in MediaKind)}"
            ) from None
    else:
        kind = sniff_media_kind(path)
        if kind is None:
            raise InvalidLayoutError(f"Cannot tell whether {path} is an image or a video")

    if kind is MediaKind.VIDEO:
        return VideoSource(str(path))
    return ImageSource(str(path))


# ── Request ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CompositionRequest:
    layout: str
    slots: dict[int, MediaSource]
    width: int
    height: int
    forced_duration: float | None = None

    @property
    def has_video(self) -> bool:
        return any(isinstance(s, VideoSource) for s in self.slots.values())

    @property
    def slot_count(self) -> int:
        return required_slot_count(self.layout)

    def sorted_slots(self) -> list[tuple[int, MediaSource]]:
        """Populated slots in ascending index order."""
        return sorted(self.slots.items())

    def video_slots(self) -> list[tuple[int, VideoSource]]:
        return [(i, s) for i, s in self.sorted_slots() if isinstance(s, VideoSource)]

    def validate(self) -> None:
        """Check layout, canvas, slot indices and forced duration.

        Requests with video also need even slot sizes, which the H.264
        yuv420p encode requires.

        Raises:
            InvalidLayoutError: On the first problem found.
        """
        if self.layout not in VALID_LAYOUTS:
            raise InvalidLayoutError(
                f"Unknown layout '{self.layout}'. Valid: {sorted(VALID_LAYOUTS)}"
            )
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidLayoutError(f"Canvas {name} must be a positive integer, got {value!r}")

        count = self.slot_count
        for index, source in self.slots.items():
            if isinstance(index, bool) or not isinstance(index, int):
                raise InvalidLayoutError(f"Slot index must be an integer, got {index!r}")
            if not 0 <= index < count:
                raise InvalidLayoutError(
                    f"Slot {index} out of range for layout '{self.layout}' "
                    f"(valid: 0-{count - 1})"
                )
            if not isinstance(source, (ImageSource, VideoSource)):
                raise InvalidLayoutError(f"Slot {index}: unsupported source {source!r}")

        if self.forced_duration is not None:
            d = self.forced_duration
            if isinstance(d, bool) or not isinstance(d, (int, float)) or not math.isfinite(d) or d < 0:
                raise InvalidLayoutError(
                    f"Forced duration must be a non-negative number of seconds, got {d!r}"
                )

        if self.has_video:
            for index, rect in enumerate(slot_geometry(self.layout, self.width, self.height)):
                if rect.width % 2 or rect.height % 2:
                    raise InvalidLayoutError(
                        f"Slot {index} of '{self.layout}' on a {self.width}x{self.height} "
                        f"canvas is {rect.width}x{rect.height}; video slots need even "
                        f"width and height"
                    )


def _parse_slot_index(key) -> int:
    if isinstance(key, bool):
        raise InvalidLayoutError(f"Invalid slot index {key!r}")
    if isinstance(key, int):
        return key
    if isinstance(key, str) and key.strip().isdigit():
        return int(key.strip())
    raise InvalidLayoutError(f"Invalid slot index {key!r}")


def build_request(
    layout: str,
    slots: dict,
    width: int,
    height: int,
    duration: float | None = None,
) -> CompositionRequest:
    """Build and validate a CompositionRequest from loosely-typed input.

    Slot keys may be ints or digit strings. Slot values may be a source
    object, a path, or a mapping with 'path' and optional 'kind'.

    Raises:
        InvalidLayoutError: Any invalid field. No file is touched.
    """
    parsed = {}
    for key, value in slots.items():
        index = _parse_slot_index(key)
        if index in parsed:
            raise InvalidLayoutError(f"Slot {index} given more than once")
        if isinstance(value, (ImageSource, VideoSource)):
            parsed[index] = value
        elif isinstance(value, (str, Path)):
            parsed[index] = source_for_path(value)
        elif isinstance(value, dict):
            if "path" not in value:
                raise InvalidLayoutError(f"Slot {index}: missing required field 'path'")
            parsed[index] = source_for_path(value["path"], value.get("kind"))
        else:
            raise InvalidLayoutError(f"Slot {index}: unsupported source {value!r}")

    request = CompositionRequest(
        layout=layout,
        slots=parsed,
        width=width,
        height=height,
        forced_duration=duration,
    )
    request.validate()
    return request


# ── Result ─────────────────────────────────────────────────────────

_MIME_TYPES = {
    MediaKind.IMAGE: "image/jpeg",
    MediaKind.VIDEO: "video/mp4",
}


@dataclass(frozen=True)
class CompositeResult:
    """The finished composite, handed to the caller who then owns the file."""

    path: str
    name: str
    size_bytes: int
    kind: MediaKind
    duration_seconds: float | None = field(default=None)

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.kind]

    def to_dict(self) -> dict:
        d = {
            "path": self.path,
            "name": self.name,
            "size": self.size_bytes,
            "kind": self.kind.value,
            "mime_type": self.mime_type,
        }
        if self.duration_seconds is not None:
            d["duration"] = self.duration_seconds
        return d
