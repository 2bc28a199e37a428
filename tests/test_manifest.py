"""Tests for the composition manifest loader."""

import tempfile

import pytest
import yaml

from gridcompose.errors import InvalidLayoutError
from gridcompose.manifest import load_manifest, validate_paths
from gridcompose.request import ImageSource, VideoSource


def _write_manifest(content: dict) -> str:
    """Write a manifest dict to a temp YAML file, return path."""
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    yaml.dump(content, f)
    f.close()
    return f.name


def _minimal_manifest(**overrides):
    m = {
        "layout": "split-horizontal",
        "canvas": [1920, 1080],
        "slots": {0: "/data/a.jpg", 1: "/data/b.mp4"},
    }
    m.update(overrides)
    return m


class TestLoadManifest:
    def test_builds_request(self):
        req = load_manifest(_write_manifest(_minimal_manifest()))
        assert req.layout == "split-horizontal"
        assert (req.width, req.height) == (1920, 1080)
        assert req.slots == {0: ImageSource("/data/a.jpg"), 1: VideoSource("/data/b.mp4")}
        assert req.forced_duration is None

    def test_duration(self):
        req = load_manifest(_write_manifest(_minimal_manifest(duration=12.5)))
        assert req.forced_duration == 12.5

    def test_resolves_path_variables(self):
        m = _minimal_manifest(
            paths={"media": "/srv/uploads"},
            slots={"0": "${media}/a.jpg", "1": {"path": "${media}/raw", "kind": "video"}},
        )
        req = load_manifest(_write_manifest(m))
        assert req.slots[0] == ImageSource("/srv/uploads/a.jpg")
        assert req.slots[1] == VideoSource("/srv/uploads/raw")

    def test_empty_slots_allowed(self):
        req = load_manifest(_write_manifest(_minimal_manifest(slots=None)))
        assert req.slots == {}

    @pytest.mark.parametrize("field", ["layout", "canvas", "slots"])
    def test_missing_required_field(self, field):
        m = _minimal_manifest()
        del m[field]
        with pytest.raises(ValueError, match=f"'{field}'"):
            load_manifest(_write_manifest(m))

    def test_bad_canvas(self):
        with pytest.raises(ValueError, match="canvas"):
            load_manifest(_write_manifest(_minimal_manifest(canvas=[1920])))

    def test_slot_out_of_range(self):
        m = _minimal_manifest(slots={5: "/data/a.jpg"})
        with pytest.raises(InvalidLayoutError, match="out of range"):
            load_manifest(_write_manifest(m))

    def test_unknown_path_var(self):
        m = _minimal_manifest(slots={0: "${nope}/a.jpg"})
        with pytest.raises(ValueError, match="Unknown path variable"):
            load_manifest(_write_manifest(m))

    def test_empty_paths_section(self):
        m = _minimal_manifest(paths=None, slots={0: "${media}/a.jpg"})
        with pytest.raises(ValueError, match="Unknown path variable"):
            load_manifest(_write_manifest(m))

    def test_slot_mapping_without_path(self):
        m = _minimal_manifest(slots={0: {"kind": "image"}})
        with pytest.raises(ValueError, match="'path'"):
            load_manifest(_write_manifest(m))


class TestValidatePaths:
    def test_all_present(self, make_image):
        a = make_image("a.jpg")
        req = load_manifest(_write_manifest(_minimal_manifest(slots={0: str(a)})))
        validate_paths(req)

    def test_reports_every_missing_file(self):
        req = load_manifest(_write_manifest(_minimal_manifest()))
        with pytest.raises(FileNotFoundError, match="Missing 2 file"):
            validate_paths(req)
