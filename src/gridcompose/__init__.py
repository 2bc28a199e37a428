"""gridcompose — grid layouts of images and videos composed into one asset.

Still images are composited with Pillow; anything with a video slot is
staged and stacked with ffmpeg into a single mp4 with one audio track.
"""

from .compositor import compose, compose_many
from .errors import (
    CompositorError,
    ConversionError,
    InvalidLayoutError,
    ProbeError,
    ResourceCleanupWarning,
)
from .layout import SlotGeometry, required_slot_count, slot_geometry
from .request import (
    CompositeResult,
    CompositionRequest,
    ImageSource,
    VideoSource,
    build_request,
)
from .settings import ComposerSettings, load_settings

__all__ = [
    "compose",
    "compose_many",
    "build_request",
    "CompositionRequest",
    "CompositeResult",
    "ImageSource",
    "VideoSource",
    "ComposerSettings",
    "load_settings",
    "SlotGeometry",
    "slot_geometry",
    "required_slot_count",
    "CompositorError",
    "InvalidLayoutError",
    "ProbeError",
    "ConversionError",
    "ResourceCleanupWarning",
]
