"""Slot geometry for the fixed family of grid layouts.

  split-horizontal     triple          quad          fullscreen
  ┌──────────┐      ┌──────────┐   ┌─────┬─────┐   ┌──────────┐
  │    0     │      │    0     │   │  0  │  1  │   │          │
  ├──────────┤      ├──────────┤   ├─────┼─────┤   │    0     │
  │    1     │      │    1     │   │  2  │  3  │   │          │
  └──────────┘      ├──────────┤   └─────┴─────┘   └──────────┘
                    │    2     │
                    └──────────┘

Slot sizes are floor-divided. When the canvas does not divide evenly,
the remainder strip along the right/bottom edge belongs to no slot and
is left as background.
"""

from dataclasses import dataclass

from .errors import InvalidLayoutError


SPLIT_HORIZONTAL = "split-horizontal"
TRIPLE = "triple"
QUAD = "quad"
FULLSCREEN = "fullscreen"

# Layout name → (columns, rows). Slots are numbered row-major.
LAYOUT_GRIDS = {
    SPLIT_HORIZONTAL: (1, 2),
    TRIPLE: (1, 3),
    QUAD: (2, 2),
    FULLSCREEN: (1, 1),
}

VALID_LAYOUTS = set(LAYOUT_GRIDS)


@dataclass(frozen=True)
class SlotGeometry:
    x: int
    y: int
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) as Pillow crop/paste boxes expect."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def _grid(layout: str) -> tuple[int, int]:
    try:
        return LAYOUT_GRIDS[layout]
    except (KeyError, TypeError):
        raise InvalidLayoutError(
            f"Unknown layout '{layout}'. Valid: {sorted(VALID_LAYOUTS)}"
        ) from None


def required_slot_count(layout: str) -> int:
    """Number of slots the layout defines (2, 3, 4 or 1)."""
    cols, rows = _grid(layout)
    return cols * rows


def slot_size(layout: str, width: int, height: int) -> tuple[int, int]:
    """Size shared by every slot of the layout on a width x height canvas."""
    cols, rows = _grid(layout)
    return (width // cols, height // rows)


def slot_geometry(layout: str, width: int, height: int) -> list[SlotGeometry]:
    """Ordered per-slot rectangles for a layout on a width x height canvas.

    Raises:
        InvalidLayoutError: Unknown layout identifier.
    """
    cols, rows = _grid(layout)
    slot_w, slot_h = width // cols, height // rows
    return [
        SlotGeometry(x=col * slot_w, y=row * slot_h, width=slot_w, height=slot_h)
        for row in range(rows)
        for col in range(cols)
    ]
