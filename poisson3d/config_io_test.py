"""Tests for parameter file loading and saving."""

from pathlib import Path

import poisson3d
from poisson3d.config_io import (
    example_config_path,
    load_params,
    load_params_dict,
    save_params,
)
from poisson3d.rig import default_params
from poisson3d.sampler import generate


class TestExampleConfigs:
    def test_bundled_configs_live_inside_the_package(self):
        package_dir = Path(poisson3d.__file__).parent
        for name in ("two_camera_rig", "small_box"):
            path = example_config_path(name)
            assert path.parent == package_dir / "configs"
            assert path.is_file()

    def test_two_camera_rig_matches_defaults(self):
        params = load_params(example_config_path("two_camera_rig"))
        expected = default_params(seed=7)
        assert params == expected
        assert params.to_dict() == expected.to_dict()

    def test_small_box(self):
        params = load_params(example_config_path("small_box"))
        assert [c.name for c in params.cameras] == ["front", "side"]
        assert not params.cameras[1].enabled
        params.max_points = 20
        result = generate(params)
        assert len(result.points) == 20
        assert result.camera_names == ["front"]

    def test_raw_dict(self):
        d = load_params_dict(example_config_path("small_box"))
        assert d["seed"] == 1
        assert d["cameras"][1]["enabled"] is False


class TestSave:
    def test_round_trip(self, tmp_path):
        params = default_params(seed=3)
        params.max_points = 50
        path = tmp_path / "nested" / "params.json"
        save_params(params, path)
        assert path.read_text().endswith("\n")
        assert load_params(path) == params
