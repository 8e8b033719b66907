"""Multi-camera visibility test for candidate placements.

A candidate is only useful for the dataset if the whole object is on screen
in every active camera, not just its center. For each camera we approximate
the object's silhouette with nine sample points in the camera's own
right/up plane (the plane facing the lens):

    center, +-right, +-up, and the four diagonals

with every offset scaled to ``object_radius`` (diagonals are normalized
first, so they sit on the same circle). All nine must project, through the
camera's fisheye model, inside ``[padding, 1 - padding]`` on both viewport
axes. A sample behind the camera fails outright.

The candidate passes only if every active camera accepts it. An empty
camera set rejects everything: a placement nobody can see is never valid.

``VisibilityOracle`` precomputes each camera's offset pattern once per run,
so the sampler's inner loop is one vectorized ``project_many`` call per
camera per candidate.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from .camera import CameraModel
from .types import ConfigurationError, Point3D

_SQRT_HALF = 0.5 ** 0.5

# Unit offsets in (right, up) coordinates.
_RING_UNITS = np.array(
    [
        (0.0, 0.0),
        (1.0, 0.0),
        (-1.0, 0.0),
        (0.0, 1.0),
        (0.0, -1.0),
        (_SQRT_HALF, _SQRT_HALF),
        (_SQRT_HALF, -_SQRT_HALF),
        (-_SQRT_HALF, _SQRT_HALF),
        (-_SQRT_HALF, -_SQRT_HALF),
    ]
)


def select_active(cameras: Iterable[CameraModel]) -> list[CameraModel]:
    """Cameras whose ``enabled`` flag is set, in input order."""
    return [cam for cam in cameras if cam.enabled]


def offset_pattern(camera: CameraModel, object_radius: float) -> np.ndarray:
    """The nine (9, 3) world-space offsets for ``camera``."""
    basis = np.stack([camera.right, camera.up])  # (2, 3)
    return (_RING_UNITS @ basis) * object_radius


def _inside_padding(uv: np.ndarray, padding: float) -> bool:
    if not np.all(np.isfinite(uv)):
        return False
    lo = padding
    hi = 1.0 - padding
    return bool(np.all((uv >= lo) & (uv <= hi)))


def is_visible_to_camera(
    point: Point3D,
    object_radius: float,
    camera: CameraModel,
    padding: float,
    offsets: np.ndarray | None = None,
) -> bool:
    """True if all nine samples around ``point`` land inside the padding."""
    if offsets is None:
        offsets = offset_pattern(camera, object_radius)
    samples = np.asarray(point, dtype=np.float64) + offsets
    return _inside_padding(camera.project_many(samples), padding)


def is_fully_visible(
    point: Point3D,
    object_radius: float,
    active_cameras: Sequence[CameraModel],
    padding: float,
) -> bool:
    """True if ``point`` is fully visible to every camera (and there is one)."""
    if not active_cameras:
        return False
    return all(
        is_visible_to_camera(point, object_radius, cam, padding)
        for cam in active_cameras
    )


class VisibilityOracle:
    """Accept/reject test bound to a fixed camera set, radius and padding."""

    def __init__(
        self,
        cameras: Sequence[CameraModel],
        object_radius: float,
        padding: float,
    ) -> None:
        if not object_radius >= 0.0:
            raise ConfigurationError(
                f"object_radius must be non-negative, got {object_radius}"
            )
        if not 0.0 <= padding < 0.5:
            raise ConfigurationError(
                f"viewport padding must lie in [0, 0.5), got {padding}"
            )
        self.cameras = list(cameras)
        self.object_radius = object_radius
        self.padding = padding
        self._offsets = [
            offset_pattern(cam, object_radius) for cam in self.cameras
        ]

    def __len__(self) -> int:
        return len(self.cameras)

    def accepts(self, point: Point3D) -> bool:
        if not self.cameras:
            return False
        for cam, offsets in zip(self.cameras, self._offsets):
            if not is_visible_to_camera(
                point, self.object_radius, cam, self.padding, offsets
            ):
                return False
        return True

    __call__ = accepts

    def viewport_samples(self, point: Point3D) -> dict[str, np.ndarray]:
        """Per-camera (9, 2) viewport coordinates of the sample pattern."""
        base = np.asarray(point, dtype=np.float64)
        return {
            cam.name: cam.project_many(base + offsets)
            for cam, offsets in zip(self.cameras, self._offsets)
        }
