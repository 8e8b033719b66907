"""The reference capture rig and its default sampling parameters.

Two fisheye cameras sit slightly above and behind the origin, a little to
either side, and both look at the origin where the subject stands. Each
renders a 170 degree pinhole image that the lens post-process bends with
intrinsics ``(xi, lambda, alpha) = (0.3, 0.3, 0.4)``. The tracked object is
a ball of 0.1 m diameter.
"""

from __future__ import annotations

from .camera import CameraModel
from .sampler import SamplerParams
from .types import FisheyeIntrinsics, GenerationBounds

RIG_INTRINSICS = FisheyeIntrinsics(xi=0.3, lam=0.3, alpha=0.4)
RIG_FOV_DEG = 170.0
RIG_NEAR = 0.01

CAMERA_POSITIONS = {
    "cam1": (-0.3, 0.3, -0.3),
    "cam2": (0.3, 0.3, -0.3),
}

BALL_RADIUS = 0.05
VIEWPORT_PADDING = 0.05
MIN_DISTANCE = 0.1
BOUNDS = GenerationBounds(10.0, 10.0, 10.0)


def rig_camera(name: str, enabled: bool = True) -> CameraModel:
    return CameraModel.look_at(
        name,
        CAMERA_POSITIONS[name],
        (0.0, 0.0, 0.0),
        intrinsics=RIG_INTRINSICS,
        fov_deg=RIG_FOV_DEG,
        near=RIG_NEAR,
        enabled=enabled,
    )


def default_rig() -> list[CameraModel]:
    return [rig_camera(name) for name in CAMERA_POSITIONS]


def default_params(seed: int = 0) -> SamplerParams:
    return SamplerParams(
        seed=seed,
        min_distance=MIN_DISTANCE,
        bounds=BOUNDS,
        cameras=default_rig(),
        object_radius=BALL_RADIUS,
        viewport_padding=VIEWPORT_PADDING,
    )
