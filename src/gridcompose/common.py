"""gridcompose.common — shared helpers.

Contains: color parsing, ${var} path resolution, media-kind sniffing
from file names, and unique file naming.
"""

import mimetypes
import re
import uuid
from enum import Enum
from pathlib import Path


# ── Media kinds ────────────────────────────────────────────────────

class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


IMAGE_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp",
    ".tif", ".tiff", ".avif", ".heic", ".heif",
}

VIDEO_EXTENSIONS = {
    ".mp4", ".m4v", ".mov", ".mkv", ".webm", ".avi", ".mpeg", ".mpg", ".ts",
}

# Sources in these formats are fed to the image-to-video step as-is;
# anything else is first normalized to JPEG.
BASELINE_IMAGE_EXTENSIONS = {".jpg", ".jpeg"}


def sniff_media_kind(path: str | Path) -> MediaKind | None:
    """Guess image vs video from the file name.

    Extension lookup first, then the mimetypes table. Returns None when
    neither gives an answer.
    """
    suffix = Path(path).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if suffix in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    mime, _ = mimetypes.guess_type(str(path))
    if mime:
        major = mime.split("/", 1)[0]
        if major == "image":
            return MediaKind.IMAGE
        if major == "video":
            return MediaKind.VIDEO
    return None


def is_baseline_image(path: str | Path) -> bool:
    return Path(path).suffix.lower() in BASELINE_IMAGE_EXTENSIONS


# ── Color utilities ────────────────────────────────────────────────

def parse_hex_color(hex_str: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' string to (R, G, B) tuple."""
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_str):
        raise ValueError(f"Invalid hex color: '#{hex_str}'")
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


def ffmpeg_color(rgb: tuple[int, int, int]) -> str:
    """Format an RGB tuple the way ffmpeg's color option expects (0xRRGGBB)."""
    return "0x{:02X}{:02X}{:02X}".format(*rgb)


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


def unique_name(prefix: str, suffix: str) -> str:
    """Return '<prefix>-<uuid4><suffix>', unique across processes."""
    return f"{prefix}-{uuid.uuid4()}{suffix}"
