"""CLI for grid composition.

Reads one or more YAML composition manifests, validates their media
paths, and writes one composite per manifest into the output directory.

Usage:
    # One composite
    python -m gridcompose.cli \
        --manifest quad.yaml --output-dir /tmp/composites

    # Several composites, 4 at a time, with a settings file
    python -m gridcompose.cli \
        --manifest a.yaml --manifest b.yaml --output-dir out/ \
        --settings settings.yaml --workers 4

    # Validate only (no rendering)
    python -m gridcompose.cli --manifest quad.yaml --validate
"""

import argparse
import json
import logging
import sys
import time

from .compositor import compose_many
from .errors import CompositorError
from .layout import required_slot_count
from .manifest import load_manifest, validate_paths
from .settings import ComposerSettings, load_settings


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _describe(request) -> str:
    kind = "video" if request.has_video else "image"
    filled = len(request.slots)
    total = required_slot_count(request.layout)
    return (
        f"{request.layout} {request.width}x{request.height} "
        f"({kind}, {filled}/{total} slots)"
    )


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Compose grid layouts of images and videos into one file.",
    )
    parser.add_argument(
        "--manifest", action="append", required=True,
        help="Path to YAML composition manifest (repeatable)",
    )
    parser.add_argument(
        "--output-dir",
        help="Directory for finished composites (required unless --validate)",
    )
    parser.add_argument(
        "--settings", default=None,
        help="Path to YAML settings file",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Number of composites to build concurrently (default: 1)",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Per-composite deadline in seconds",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifests only — check paths, don't render",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log every phase and ffmpeg command",
    )
    parsed = parser.parse_args(args)
    _configure_logging(parsed.verbose)

    requests = []
    for path in parsed.manifest:
        request = load_manifest(path)
        validate_paths(request)
        requests.append(request)

    if parsed.validate:
        for path, request in zip(parsed.manifest, requests):
            print(f"  {path}: {_describe(request)}")
        print("All paths verified.")
        return

    if not parsed.output_dir:
        parser.error("--output-dir is required (unless using --validate)")

    overrides = {"output_dir": parsed.output_dir, "timeout": parsed.timeout}
    if parsed.settings:
        settings = load_settings(parsed.settings, **overrides)
    else:
        settings = ComposerSettings(**{k: v for k, v in overrides.items() if v is not None})

    print(f"Composing {len(requests)} composite(s) into {settings.output_dir}/\n")
    t0 = time.monotonic()
    results = compose_many(requests, settings, workers=parsed.workers)

    failures = 0
    for path, result in zip(parsed.manifest, results):
        if isinstance(result, CompositorError):
            failures += 1
            print(f"  FAIL   {path}: {result}", file=sys.stderr)
        else:
            print(f"  DONE   {path} → {json.dumps(result.to_dict())}")

    elapsed = time.monotonic() - t0
    print(f"\nDone: {len(results) - failures}/{len(results)} composites ({elapsed:.1f}s total)")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
