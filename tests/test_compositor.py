"""End-to-end tests for compose().

Image requests run through Pillow; video requests run the real bundled
ffmpeg on small fixture clips and are checked with moviepy.
"""

import numpy as np
import pytest
from moviepy import VideoFileClip
from PIL import Image

from gridcompose.common import MediaKind
from gridcompose.compositor import compose, compose_many
from gridcompose.errors import InvalidLayoutError, ProbeError
from gridcompose.request import CompositionRequest, ImageSource, build_request
from gridcompose.tools import ProbeResult


def _scratch_files(settings):
    root = settings.scratch_root
    return list(root.rglob("*")) if root.exists() else []


class TestImageRouting:
    def test_images_only_produce_jpeg(self, settings, make_image):
        a = make_image("a.jpg", (200, 0, 0))
        b = make_image("b.png", (0, 0, 200))
        req = build_request("split-horizontal", {0: str(a), 1: str(b)}, 320, 240)

        result = compose(req, settings)

        assert result.kind is MediaKind.IMAGE
        assert result.duration_seconds is None
        assert result.name.startswith("composite-") and result.name.endswith(".jpg")
        assert result.path.startswith(str(settings.output_dir))
        with Image.open(result.path) as img:
            assert img.size == (320, 240)
        assert _scratch_files(settings) == []

    def test_quad_missing_slot_stays_white(self, settings, make_image):
        a = make_image("a.jpg", (200, 0, 0))
        req = build_request("quad", {0: str(a), 1: str(a), 2: str(a)}, 800, 600)
        result = compose(req, settings)
        with Image.open(result.path) as img:
            # Interior only: JPEG chroma subsampling bleeds the red neighbours
            # into the tile edges.
            tile = np.asarray(img)[308:592, 408:792]
        assert tile.min() >= 245

    def test_each_call_gets_a_fresh_output(self, settings, make_image):
        a = make_image("a.jpg")
        req = build_request("fullscreen", {0: str(a)}, 64, 64)
        assert compose(req, settings).path != compose(req, settings).path

    def test_invalid_request_rejected_before_io(self, settings):
        req = CompositionRequest("quad", {9: ImageSource("a.jpg")}, 800, 600)
        with pytest.raises(InvalidLayoutError):
            compose(req, settings)
        assert not settings.output_dir.exists()


class TestVideoComposition:
    def test_scenario_c_fullscreen_video_with_audio(self, settings, video_with_audio):
        req = build_request("fullscreen", {0: str(video_with_audio)}, 320, 240)

        result = compose(req, settings)

        assert result.kind is MediaKind.VIDEO
        assert result.duration_seconds == pytest.approx(5.0, abs=0.2)
        assert result.name.endswith(".mp4")
        with VideoFileClip(result.path) as clip:
            assert tuple(clip.size) == (320, 240)
            assert clip.audio is not None
            assert 4.5 < clip.duration < 5.5
        assert _scratch_files(settings) == []

    def test_scenario_d_quad_one_video_three_images(self, settings, short_video_with_audio, make_image):
        imgs = [str(make_image(f"{i}.png", (40 * i, 100, 100))) for i in range(3)]
        req = build_request(
            "quad",
            {0: imgs[0], 1: str(short_video_with_audio), 2: imgs[1], 3: imgs[2]},
            320, 240,
        )

        result = compose(req, settings)

        assert result.duration_seconds == pytest.approx(3.0, abs=0.2)
        with VideoFileClip(result.path) as clip:
            assert tuple(clip.size) == (320, 240)
            assert clip.audio is not None
            assert 2.5 < clip.duration < 3.5
        assert _scratch_files(settings) == []

    def test_silent_sources_give_silent_output(self, settings, silent_video, make_image):
        img = str(make_image("a.jpg"))
        req = build_request("split-horizontal", {0: str(silent_video), 1: img}, 320, 240)
        result = compose(req, settings)
        with VideoFileClip(result.path) as clip:
            assert clip.audio is None
            assert 1.5 < clip.duration < 2.5

    def test_sparse_video_request_fills_background(self, settings, silent_video):
        req = build_request("split-horizontal", {0: str(silent_video)}, 320, 240)
        result = compose(req, settings)
        with VideoFileClip(result.path) as clip:
            frame = clip.get_frame(1.0)
        assert frame.shape[:2] == (240, 320)
        assert frame[180:, :].mean() > 235  # bottom slot is white filler
        assert frame[:120, :, 0].mean() > 150  # top slot is the red clip

    def test_forced_duration(self, settings, silent_video):
        req = build_request("fullscreen", {0: str(silent_video)}, 320, 240, duration=1)
        result = compose(req, settings)
        assert result.duration_seconds == 1.0
        with VideoFileClip(result.path) as clip:
            assert clip.duration < 1.5

    @pytest.mark.parametrize("layout", ["fullscreen", "split-horizontal"])
    def test_forced_duration_longer_than_source_holds_last_frame(self, settings, silent_video, layout):
        req = build_request(layout, {0: str(silent_video)}, 320, 240, duration=6)
        result = compose(req, settings)
        assert result.duration_seconds == 6.0
        with VideoFileClip(result.path) as clip:
            assert 5.5 < clip.duration < 6.5
            frame = clip.get_frame(5.0)
        assert frame[:120, :, 0].mean() > 150  # still the red clip, not black

    def test_corrupt_video_fails_and_cleans_up(self, settings, tmp_path):
        bad = tmp_path / "bad.mp4"
        bad.write_bytes(b"\x00" * 2048)
        req = build_request("fullscreen", {0: str(bad)}, 320, 240)
        with pytest.raises(ProbeError):
            compose(req, settings)
        assert list(settings.output_dir.iterdir()) == []
        assert _scratch_files(settings) == []


class TestComposeMany:
    def test_results_in_order_with_failures_in_place(self, settings, fake_tool_factory):
        tool = fake_tool_factory(probes={"ok.mp4": ProbeResult(2.0, True)})
        requests = [
            build_request("fullscreen", {0: "ok.mp4"}, 320, 240),
            build_request("fullscreen", {0: "broken.mp4"}, 320, 240),
            build_request("split-horizontal", {0: "ok.mp4"}, 320, 240),
        ]
        results = compose_many(requests, settings, tool=tool, workers=3)
        assert results[0].kind is MediaKind.VIDEO
        assert isinstance(results[1], ProbeError)
        assert results[2].duration_seconds == 2.0
        assert _scratch_files(settings) == []

    def test_sequential_when_one_worker(self, settings, make_image):
        a = str(make_image("a.jpg"))
        requests = [build_request("fullscreen", {0: a}, 32, 32) for _ in range(2)]
        results = compose_many(requests, settings)
        assert [r.kind for r in results] == [MediaKind.IMAGE, MediaKind.IMAGE]
