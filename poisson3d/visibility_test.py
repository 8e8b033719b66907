"""Tests for the multi-camera visibility oracle."""

import dataclasses

import numpy as np
import pytest

from poisson3d.camera import CameraModel
from poisson3d.prng import PCG32
from poisson3d.types import CameraPose, ConfigurationError, FisheyeIntrinsics
from poisson3d.visibility import (
    VisibilityOracle,
    is_fully_visible,
    is_visible_to_camera,
    offset_pattern,
    select_active,
)

# r_dist = tan(theta / 2): easy to reason about viewport positions.
HALF_ANGLE_LENS = FisheyeIntrinsics(xi=0.0, lam=0.0, alpha=0.5)


def _axis_camera(name="axis", enabled=True):
    """Camera at the origin looking down -z with a 90 degree FOV."""
    return CameraModel(
        name=name,
        pose=CameraPose(position=(0.0, 0.0, 0.0)),
        intrinsics=HALF_ANGLE_LENS,
        fov_deg=90.0,
        enabled=enabled,
    )


def _facing_origin(name, position):
    return CameraModel.look_at(name, position, (0.0, 0.0, 0.0), fov_deg=120.0)


class TestOffsetPattern:
    def test_shape_and_radius(self):
        cam = _facing_origin("c", (1.0, 2.0, 3.0))
        offsets = offset_pattern(cam, 0.05)
        assert offsets.shape == (9, 3)
        np.testing.assert_allclose(offsets[0], 0.0)
        np.testing.assert_allclose(
            np.linalg.norm(offsets[1:], axis=1), 0.05, rtol=1e-12
        )

    def test_lies_in_camera_tangent_plane(self):
        cam = _facing_origin("c", (1.0, 2.0, 3.0))
        offsets = offset_pattern(cam, 0.3)
        np.testing.assert_allclose(
            offsets @ np.array(cam.pose.forward), 0.0, atol=1e-12
        )

    def test_axis_camera_pattern(self):
        offsets = offset_pattern(_axis_camera(), 1.0)
        expected_first_five = [
            (0, 0, 0),
            (1, 0, 0),
            (-1, 0, 0),
            (0, 1, 0),
            (0, -1, 0),
        ]
        np.testing.assert_allclose(offsets[:5], expected_first_five)
        s = 0.5**0.5
        np.testing.assert_allclose(offsets[5], (s, s, 0.0))
        np.testing.assert_allclose(offsets[8], (-s, -s, 0.0))

    def test_zero_radius_collapses_to_center(self):
        np.testing.assert_allclose(offset_pattern(_axis_camera(), 0.0), 0.0)


class TestSingleCamera:
    def test_centered_point_is_visible(self):
        cam = _axis_camera()
        assert is_visible_to_camera((0.0, 0.0, -1.0), 0.05, cam, 0.05)

    def test_behind_camera_fails(self):
        cam = _axis_camera()
        assert not is_visible_to_camera((0.0, 0.0, 1.0), 0.0, cam, 0.0)

    def test_ring_pushes_object_past_padding(self):
        """Center inside the padded window, but the +-right samples are not.

        At (0, 0, -1) with radius 0.9 the side samples sit at
        theta = atan(0.9), so u = 0.5 + 0.5 * tan(theta / 2) ~= 0.692.
        """
        cam = _axis_camera()
        p = (0.0, 0.0, -1.0)
        assert is_visible_to_camera(p, 0.0, cam, 0.35)
        assert not is_visible_to_camera(p, 0.9, cam, 0.35)
        assert is_visible_to_camera(p, 0.9, cam, 0.30)

    def test_padding_window_is_inclusive(self):
        cam = _axis_camera()
        p = (0.0, 0.0, -1.0)
        uv = cam.project(p)
        assert uv == (0.5, 0.5)
        # Padding just below 0.5 leaves a tiny window around the center.
        assert is_visible_to_camera(p, 0.0, cam, 0.4999999)


class TestAllCameras:
    def test_empty_camera_set_rejects(self):
        assert not is_fully_visible((0.0, 0.0, 0.0), 0.0, [], 0.0)

    def test_requires_every_camera(self):
        front = _facing_origin("front", (0.0, 0.0, 4.0))
        back = _facing_origin("back", (0.0, 0.0, -4.0))
        p = (0.0, 0.0, 0.5)
        assert is_fully_visible(p, 0.05, [front], 0.05)
        assert is_fully_visible(p, 0.05, [back], 0.05)
        assert is_fully_visible(p, 0.05, [front, back], 0.05)
        # Behind the back camera, still in front of the front one.
        q = (0.0, 0.0, -4.5)
        assert is_fully_visible(q, 0.05, [front], 0.05)
        assert not is_fully_visible(q, 0.05, [front, back], 0.05)

    def test_select_active(self):
        a = _axis_camera("a")
        b = _axis_camera("b", enabled=False)
        c = _axis_camera("c")
        assert [cam.name for cam in select_active([a, b, c])] == ["a", "c"]
        assert select_active([b]) == []


class TestOracle:
    def test_validates_inputs(self):
        cams = [_axis_camera()]
        with pytest.raises(ConfigurationError):
            VisibilityOracle(cams, -0.1, 0.05)
        with pytest.raises(ConfigurationError):
            VisibilityOracle(cams, 0.05, 0.5)
        with pytest.raises(ConfigurationError):
            VisibilityOracle(cams, 0.05, -0.01)

    def test_empty_oracle_rejects(self):
        oracle = VisibilityOracle([], 0.05, 0.05)
        assert len(oracle) == 0
        assert not oracle.accepts((0.0, 0.0, 0.0))

    def test_matches_free_function(self):
        cams = [
            _facing_origin("front", (0.0, 0.5, 3.0)),
            _facing_origin("side", (3.0, 0.5, 0.0)),
        ]
        oracle = VisibilityOracle(cams, 0.2, 0.3)
        rng = PCG32(seed=11)
        outcomes = set()
        for _ in range(300):
            p = tuple(rng.uniform(-3.0, 3.0) for _ in range(3))
            expected = is_fully_visible(p, 0.2, cams, 0.3)
            assert oracle.accepts(p) == expected
            assert oracle(p) == expected
            outcomes.add(expected)
        assert outcomes == {True, False}

    def test_viewport_samples(self):
        cams = [_axis_camera("a"), _axis_camera("b")]
        oracle = VisibilityOracle(cams, 0.1, 0.05)
        samples = oracle.viewport_samples((0.0, 0.0, -1.0))
        assert set(samples) == {"a", "b"}
        assert samples["a"].shape == (9, 2)
        np.testing.assert_allclose(samples["a"][0], (0.5, 0.5))

    def test_cameras_are_not_mutated(self):
        cam = _axis_camera()
        before = dataclasses.asdict(cam.pose)
        VisibilityOracle([cam], 0.1, 0.05).accepts((0.0, 0.0, -1.0))
        assert dataclasses.asdict(cam.pose) == before
