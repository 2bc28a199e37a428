"""Subcommand dispatcher for gridcompose.

Usage:
    gridcompose compose --manifest ... --output-dir ...
    gridcompose probe   clip.mp4
    gridcompose layout  quad 1920 1080
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="gridcompose",
        description="Grid composition of images and videos into one asset.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("compose", help="Build composites from YAML manifests")
    subparsers.add_parser("probe", help="Show duration and audio presence of media files")
    subparsers.add_parser("layout", help="Show slot rectangles for a layout")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "compose":
        from .cli import main as compose_main
        compose_main(remaining)
    elif parsed.command == "probe":
        from .inspect_cli import probe_main
        probe_main(remaining)
    elif parsed.command == "layout":
        from .inspect_cli import layout_main
        layout_main(remaining)


if __name__ == "__main__":
    main()
