#!/usr/bin/env python3
"""Generate demo media and manifests for the gridcompose layouts.

Creates labelled still images (JPEG, PNG with transparency, WebP) and
short clips with and without a tone in examples/demo-media/, plus one
manifest per scenario in examples/demo-manifests/.

Usage:
    python examples/generate_demo_media.py
    # Then render:
    gridcompose compose \
        --manifest examples/demo-manifests/quad-mixed.yaml \
        --output-dir examples/demo-renders/
"""

from pathlib import Path

import numpy as np
import yaml
from moviepy import AudioClip, ColorClip, CompositeVideoClip, ImageClip
from PIL import Image, ImageDraw, ImageFont

ROOT = Path(__file__).resolve().parent
MEDIA_DIR = ROOT / "demo-media"
MANIFEST_DIR = ROOT / "demo-manifests"
SIZE = (640, 360)
FPS = 30

IMAGES = [
    ("photo-a.jpg", (180, 60, 60)),
    ("photo-b.png", (60, 60, 180)),
    ("photo-c.webp", (60, 160, 60)),
]

# (name, color, duration, tone)
CLIPS = [
    ("clip-tone-3s.mp4", (200, 130, 40), 3.0, True),
    ("clip-silent-4s.mp4", (130, 60, 180), 4.0, False),
]

MANIFESTS = {
    "split-images": {
        "layout": "split-horizontal",
        "canvas": [1920, 1080],
        "slots": {0: "${media}/photo-a.jpg", 1: "${media}/photo-b.png"},
    },
    "quad-sparse": {
        "layout": "quad",
        "canvas": [800, 600],
        "slots": {0: "${media}/photo-a.jpg", 1: "${media}/photo-b.png", 2: "${media}/photo-c.webp"},
    },
    "fullscreen-video": {
        "layout": "fullscreen",
        "canvas": [1280, 720],
        "slots": {0: "${media}/clip-tone-3s.mp4"},
    },
    "quad-mixed": {
        "layout": "quad",
        "canvas": [1280, 720],
        "slots": {
            0: "${media}/photo-a.jpg",
            1: "${media}/clip-tone-3s.mp4",
            2: "${media}/photo-c.webp",
            3: "${media}/clip-silent-4s.mp4",
        },
    },
    "triple-forced": {
        "layout": "triple",
        "canvas": [1080, 1920],
        "duration": 6,
        "slots": {0: "${media}/clip-silent-4s.mp4", 2: "${media}/photo-b.png"},
    },
}


def _font(size: int):
    try:
        return ImageFont.truetype("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", size)
    except OSError:
        return ImageFont.load_default()


def _labelled(text: str, color: tuple[int, int, int], mode: str = "RGB") -> Image.Image:
    """Solid color card with centered white text."""
    fill = (*color, 200) if mode == "RGBA" else color
    img = Image.new(mode, SIZE, fill)
    draw = ImageDraw.Draw(img)
    font = _font(56)
    bbox = draw.textbbox((0, 0), text, font=font)
    tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
    draw.text(((SIZE[0] - tw) / 2, (SIZE[1] - th) / 2), text, fill="white", font=font)
    return img


def _write_clip(out: Path, color, duration: float, tone: bool) -> None:
    body = ColorClip(size=SIZE, color=color, duration=duration)
    label = ImageClip(np.array(_labelled(out.stem, color)), duration=duration)
    final = CompositeVideoClip([body, label], size=SIZE)
    if tone:
        audio = AudioClip(lambda t: 0.2 * np.sin(440 * 2 * np.pi * t), duration=duration, fps=44100)
        final = final.with_audio(audio)
    final.write_videofile(
        str(out), fps=FPS, codec="libx264",
        audio=tone, audio_codec="aac", logger=None,
    )


def main():
    MEDIA_DIR.mkdir(parents=True, exist_ok=True)
    MANIFEST_DIR.mkdir(parents=True, exist_ok=True)

    for name, color in IMAGES:
        out = MEDIA_DIR / name
        mode = "RGBA" if out.suffix == ".png" else "RGB"
        _labelled(Path(name).stem, color, mode).save(out)
        print(f"  wrote {name}")

    for name, color, duration, tone in CLIPS:
        out = MEDIA_DIR / name
        if out.exists():
            print(f"  skip {name} (exists)")
            continue
        _write_clip(out, color, duration, tone)
        print(f"  wrote {name} ({duration}s{', tone' if tone else ''})")

    for name, manifest in MANIFESTS.items():
        content = {"paths": {"media": str(MEDIA_DIR)}, **manifest}
        with open(MANIFEST_DIR / f"{name}.yaml", "w") as f:
            yaml.safe_dump(content, f, sort_keys=False)
        print(f"  wrote manifest {name}.yaml")

    print(f"\nDone. Media in {MEDIA_DIR}, manifests in {MANIFEST_DIR}")


if __name__ == "__main__":
    main()
