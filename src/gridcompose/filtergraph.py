"""ffmpeg filter graphs that stack staged clips into one frame stream.

Inputs are the staged clips in ascending slot order, one per layout
slot, each already at its slot size. The graph's final output pad is
labelled [v] for mapping.

  split-horizontal / triple: vstack of the 2 or 3 full-width rows
  quad:       each tile scaled to half size, two hstack rows, one vstack
  fullscreen: the single input scaled to the canvas
"""

from .errors import InvalidLayoutError
from .layout import FULLSCREEN, QUAD, SPLIT_HORIZONTAL, TRIPLE, required_slot_count, slot_size

OUTPUT_LABEL = "[v]"


def _vstack_filter(n: int) -> str:
    parts = [f"[{i}:v]setsar=1[s{i}]" for i in range(n)]
    stacked = "".join(f"[s{i}]" for i in range(n))
    parts.append(f"{stacked}vstack=inputs={n}{OUTPUT_LABEL}")
    return ";".join(parts)


def _quad_filter(width: int, height: int) -> str:
    half_w, half_h = slot_size(QUAD, width, height)
    names = ["tl", "tr", "bl", "br"]
    parts = [
        f"[{i}:v]scale={half_w}:{half_h},setsar=1[{name}]"
        for i, name in enumerate(names)
    ]
    parts.append("[tl][tr]hstack=inputs=2[top]")
    parts.append("[bl][br]hstack=inputs=2[bottom]")
    parts.append(f"[top][bottom]vstack=inputs=2{OUTPUT_LABEL}")
    return ";".join(parts)


def _fullscreen_filter(width: int, height: int) -> str:
    return f"[0:v]scale={width}:{height},setsar=1{OUTPUT_LABEL}"


def build_filter_graph(layout: str, width: int, height: int, input_count: int) -> str:
    """Return the -filter_complex expression for a layout.

    Raises:
        InvalidLayoutError: Unknown layout, or input_count differs from
            the layout's slot count.
    """
    expected = required_slot_count(layout)
    if input_count != expected:
        raise InvalidLayoutError(
            f"Layout '{layout}' needs exactly {expected} inputs, got {input_count}"
        )

    if layout == SPLIT_HORIZONTAL:
        return _vstack_filter(2)
    if layout == TRIPLE:
        return _vstack_filter(3)
    if layout == QUAD:
        return _quad_filter(width, height)
    if layout == FULLSCREEN:
        return _fullscreen_filter(width, height)
    raise InvalidLayoutError(f"Unknown layout '{layout}'")
