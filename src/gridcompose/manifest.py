"""Composition manifest loader.

Parses a YAML manifest describing one grid composite and turns it into
a validated CompositionRequest.

Manifest schema:
  layout: quad                     # split-horizontal | triple | quad | fullscreen
  canvas: [1280, 720]              # width, height
  duration: 10                     # optional, seconds (video output only)
  paths:
    media: "/data/uploads"
  slots:
    0: "${media}/intro.mp4"
    1: "${media}/logo.png"
    2:
      path: "${media}/frame-0042"  # extension-less: give the kind
      kind: image
"""

from pathlib import Path

import yaml

from .common import resolve_path_vars
from .request import CompositionRequest, build_request


def _resolve_slot(value, paths: dict, index) -> str | dict:
    if isinstance(value, str):
        return resolve_path_vars(value, paths)
    if isinstance(value, dict):
        if "path" not in value:
            raise ValueError(f"Slot {index}: missing required field 'path'")
        resolved = dict(value)
        resolved["path"] = resolve_path_vars(str(value["path"]), paths)
        return resolved
    raise ValueError(f"Slot {index}: expected a path or a mapping, got {value!r}")


def load_manifest(manifest_path: str | Path) -> CompositionRequest:
    """Load and validate a composition manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Check required fields (layout, canvas, slots).
      3. Resolve ${path} variables in slot paths.
      4. Build the request (classifies sources, validates slots).

    Raises:
        ValueError: Missing or malformed field. InvalidLayoutError (a
            ValueError) for layout and slot problems.
        FileNotFoundError: Missing manifest file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Manifest {manifest_path}: expected a mapping")
    for key in ("layout", "canvas", "slots"):
        if key not in raw:
            raise ValueError(f"Manifest {manifest_path}: missing required field '{key}'")

    canvas = raw["canvas"]
    if not isinstance(canvas, (list, tuple)) or len(canvas) != 2:
        raise ValueError(f"Manifest {manifest_path}: 'canvas' must be [width, height]")

    slots = raw["slots"] or {}
    if not isinstance(slots, dict):
        raise ValueError(f"Manifest {manifest_path}: 'slots' must be a mapping")

    paths = raw.get("paths") or {}
    resolved = {k: _resolve_slot(v, paths, k) for k, v in slots.items()}

    return build_request(
        layout=raw["layout"],
        slots=resolved,
        width=canvas[0],
        height=canvas[1],
        duration=raw.get("duration"),
    )


def validate_paths(request: CompositionRequest) -> None:
    """Check that every slot source exists on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = [
        f"slot {i}: {s.path}"
        for i, s in request.sorted_slots()
        if not Path(s.path).is_file()
    ]
    if missing:
        msg = f"Missing {len(missing)} file(s):\n"
        msg += "\n".join(f"  {m}" for m in missing)
        raise FileNotFoundError(msg)
