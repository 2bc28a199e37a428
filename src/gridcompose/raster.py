"""Still-image compositing with Pillow.

Used when every populated slot is an image. Each source is cover-fitted
to its slot (aspect preserved, overflow cropped from the center, never
letterboxed) and pasted onto a background canvas. Slots without a
source stay background.
"""

import logging
from pathlib import Path

from PIL import Image, ImageOps

from .context import discard_output
from .errors import ConversionError
from .layout import SlotGeometry, slot_geometry
from .request import CompositionRequest, ImageSource

logger = logging.getLogger(__name__)


def flatten(img: Image.Image, background: tuple[int, int, int]) -> Image.Image:
    """Return an RGB image, compositing any transparency over background."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        base = Image.new("RGB", img.size, background)
        base.paste(img, mask=img.getchannel("A"))
        return base
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def cover_fit(
    path: str | Path,
    size: tuple[int, int],
    background: tuple[int, int, int] = (255, 255, 255),
) -> Image.Image:
    """Load an image and cover-fit it to exactly `size`.

    Raises:
        OSError: Unreadable or unsupported image.
    """
    with Image.open(path) as src:
        img = ImageOps.exif_transpose(src)
        img = flatten(img, background)
        return ImageOps.fit(img, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))


def render_grid_image(
    request: CompositionRequest,
    background: tuple[int, int, int] = (255, 255, 255),
) -> Image.Image:
    """Paint every populated slot onto a fresh canvas and return it.

    Raises:
        ConversionError: A source could not be read or resized.
    """
    canvas = Image.new("RGB", (request.width, request.height), background)
    geometry = slot_geometry(request.layout, request.width, request.height)

    for slot, source in request.sorted_slots():
        if not isinstance(source, ImageSource):
            raise ConversionError(f"Slot {slot}: raster path cannot place {source.path}")
        rect: SlotGeometry = geometry[slot]
        if rect.width <= 0 or rect.height <= 0:
            continue
        try:
            tile = cover_fit(source.path, rect.size, background)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ConversionError(f"Slot {slot}: cannot resize {source.path}: {exc}") from exc
        canvas.paste(tile, rect.box)
        logger.debug("Slot %d: %s → %dx%d at (%d, %d)",
                     slot, source.path, rect.width, rect.height, rect.x, rect.y)
    return canvas


def compose_image(
    request: CompositionRequest,
    output_path: str | Path,
    background: tuple[int, int, int] = (255, 255, 255),
    quality: int = 90,
) -> Path:
    """Render the grid and encode it as a JPEG at output_path.

    No partial file is left behind on failure.

    Raises:
        ConversionError: Resize or encode failure.
    """
    output_path = Path(output_path)
    canvas = render_grid_image(request, background)
    try:
        canvas.save(output_path, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        discard_output(output_path)
        raise ConversionError(f"Cannot encode composite {output_path.name}: {exc}") from exc
    return output_path
