"""CLIs for inspecting inputs: media probe results and layout geometry.

Usage:
    gridcompose probe clip.mp4
    gridcompose layout quad 1920 1080
"""

import argparse
import sys

from .errors import CompositorError
from .layout import VALID_LAYOUTS, slot_geometry
from .tools import FFmpegTool


def probe_main(args=None):
    parser = argparse.ArgumentParser(
        description="Print duration and audio presence of media files.",
    )
    parser.add_argument("files", nargs="+", help="Media files to probe")
    parsed = parser.parse_args(args)

    tool = FFmpegTool()
    failed = False
    for path in parsed.files:
        try:
            result = tool.probe(path)
        except CompositorError as exc:
            print(f"  ERROR  {path}: {exc}", file=sys.stderr)
            failed = True
            continue
        duration = "unknown" if result.duration_seconds is None else f"{result.duration_seconds:.2f}s"
        audio = "audio" if result.has_audio else "no audio"
        print(f"  {path}: {duration}, {audio}")
    if failed:
        sys.exit(1)


def layout_main(args=None):
    parser = argparse.ArgumentParser(
        description="Print slot rectangles for a layout on a canvas.",
    )
    parser.add_argument("layout", choices=sorted(VALID_LAYOUTS))
    parser.add_argument("width", type=int)
    parser.add_argument("height", type=int)
    parsed = parser.parse_args(args)

    if parsed.width <= 0 or parsed.height <= 0:
        parser.error("width and height must be positive")

    geometry = slot_geometry(parsed.layout, parsed.width, parsed.height)
    print(f"{parsed.layout} on {parsed.width}x{parsed.height}: {len(geometry)} slot(s)")
    for i, rect in enumerate(geometry):
        print(f"  {i}: {rect.width}x{rect.height} at ({rect.x}, {rect.y})")

    covered_w = max(r.x + r.width for r in geometry)
    covered_h = max(r.y + r.height for r in geometry)
    if covered_w < parsed.width or covered_h < parsed.height:
        print(f"  uncovered: {parsed.width - covered_w}px right, {parsed.height - covered_h}px bottom")


if __name__ == "__main__":
    probe_main()
