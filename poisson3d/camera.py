"""Fisheye camera model: pose, intrinsics, forward and inverse projection.

A camera renders with an ordinary perspective projection, and a screen-space
post-process then bends the image with a triple-sphere-style lens model.
The sampler has to predict where a world point ends up *after* that bend, so
this module provides both directions over one ``CameraModel`` value:

  * ``project`` / ``project_many``: forward model used by the visibility
    test. World point -> camera space -> pinhole NDC, scaled by the radial
    distortion factor, then mapped to viewport ``[0, 1]``.
  * ``undistort_viewport``: the mapping the post-process evaluates per
    output pixel: given a distorted viewport coordinate, find the pinhole
    coordinate to sample. ``r_dist(theta)`` has no closed-form inverse, so
    theta is recovered by bisection.
  * ``distort_viewport``: the forward bend applied to a pinhole viewport
    coordinate, i.e. the exact inverse of ``undistort_viewport``.

The distortion factor depends only on the incidence angle theta and the lens
parameters ``(xi, lam, alpha)``, never on the projection matrix, so the
field of view and clip planes can change without touching the lens math.

Camera space follows the OpenGL convention: x right, y up, the camera looks
down -z. A point with camera-space ``z >= 0`` is behind (or on) the camera
plane and has no viewport coordinate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .types import (
    CameraPose,
    ConfigurationError,
    FisheyeIntrinsics,
    Point3D,
)

# Below this undistorted radius the factor r_dist / r_undist is 0/0 in the
# limit; the optical axis is left undistorted.
R_UNDIST_FLOOR = 1e-4

_BISECT_ITERATIONS = 64
_PEAK_SAMPLES = 4097
_WORLD_UP = (0.0, 1.0, 0.0)
_FALLBACK_UP = (0.0, 0.0, 1.0)

Viewport = tuple[float, float]


def distorted_radius(theta, intrinsics: FisheyeIntrinsics):
    """Lens image radius for incidence angle ``theta`` (scalar or array)."""
    xi = intrinsics.xi
    lam = intrinsics.lam
    d = intrinsics.displacement
    sin_t = np.sin(theta)
    cos_t = np.cos(theta)
    t2 = xi * cos_t + np.sqrt(1.0 - xi * xi * sin_t * sin_t)
    t3 = lam * cos_t + np.sqrt(1.0 - lam * lam * sin_t * sin_t)
    return (t2 * t3 * sin_t) / (t2 * t3 * cos_t + d)


def distortion_factor(theta, intrinsics: FisheyeIntrinsics):
    """Ratio of distorted to undistorted radius at ``theta``.

    Returns 1.0 where ``tan(theta)`` is at or below ``R_UNDIST_FLOOR``.
    Accepts a scalar or a numpy array; returns the same kind.
    """
    theta_arr = np.asarray(theta, dtype=np.float64)
    r_dist = distorted_radius(theta_arr, intrinsics)
    r_undist = np.tan(theta_arr)
    above = r_undist > R_UNDIST_FLOOR
    safe_undist = np.where(above, r_undist, 1.0)
    factor = np.where(above, r_dist / safe_undist, 1.0)
    if factor.ndim == 0:
        return float(factor)
    return factor


def _normalize(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n < 1e-12:
        raise ConfigurationError("cannot normalize a zero-length vector")
    return v / n


@dataclass(frozen=True)
class CameraModel:
    name: str
    pose: CameraPose
    intrinsics: FisheyeIntrinsics = field(default_factory=FisheyeIntrinsics)
    fov_deg: float = 170.0
    aspect: float = 1.0
    near: float = 0.01
    far: float = 1000.0
    enabled: bool = True
    _view: np.ndarray = field(init=False, repr=False, compare=False)
    _proj: np.ndarray = field(init=False, repr=False, compare=False)
    _peak: tuple[float, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 < self.fov_deg < 180.0:
            raise ConfigurationError(
                f"{self.name}: fov_deg must lie in (0, 180), got {self.fov_deg}"
            )
        if not self.aspect > 0.0:
            raise ConfigurationError(
                f"{self.name}: aspect must be positive, got {self.aspect}"
            )
        if not 0.0 < self.near < self.far:
            raise ConfigurationError(
                f"{self.name}: need 0 < near < far, got near={self.near},"
                f" far={self.far}"
            )
        object.__setattr__(self, "_view", self._build_view())
        object.__setattr__(self, "_proj", self._build_projection())
        object.__setattr__(self, "_peak", self._find_peak())

    def _build_view(self) -> np.ndarray:
        pos = np.array(self.pose.position)
        right = np.array(self.pose.right)
        up = np.array(self.pose.up)
        forward = np.array(self.pose.forward)
        view = np.eye(4)
        view[0, :3] = right
        view[1, :3] = up
        view[2, :3] = -forward
        view[0, 3] = -right @ pos
        view[1, 3] = -up @ pos
        view[2, 3] = forward @ pos
        view.setflags(write=False)
        return view

    def _build_projection(self) -> np.ndarray:
        f = 1.0 / math.tan(math.radians(self.fov_deg) / 2.0)
        n, fa = self.near, self.far
        proj = np.zeros((4, 4))
        proj[0, 0] = f / self.aspect
        proj[1, 1] = f
        proj[2, 2] = (fa + n) / (n - fa)
        proj[2, 3] = 2.0 * fa * n / (n - fa)
        proj[3, 2] = -1.0
        proj.setflags(write=False)
        return proj

    def _find_peak(self) -> tuple[float, float]:
        """Incidence angle where ``r_dist`` peaks on [0, pi/2], and the peak.

        For strong shifts the radius turns over before the horizon.
        """
        thetas = np.linspace(0.0, math.pi / 2.0, _PEAK_SAMPLES)
        radii = distorted_radius(thetas, self.intrinsics)
        i = int(np.argmax(radii))
        return float(thetas[i]), float(radii[i])

    @property
    def view_matrix(self) -> np.ndarray:
        """World-to-camera transform (4x4, read-only)."""
        return self._view

    @property
    def projection_matrix(self) -> np.ndarray:
        """OpenGL-style perspective projection (4x4, read-only)."""
        return self._proj

    @property
    def right(self) -> np.ndarray:
        return np.array(self.pose.right)

    @property
    def up(self) -> np.ndarray:
        return np.array(self.pose.up)

    def world_to_camera(self, points) -> np.ndarray:
        """Transform an (N, 3) array (or one point) to camera space."""
        pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
        return pts @ self._view[:3, :3].T + self._view[:3, 3]

    def project_many(self, points, distort: bool = True) -> np.ndarray:
        """Viewport coordinates for an (N, 3) array of world points.

        Rows for points behind the camera are NaN. With ``distort=False``
        the plain pinhole viewport coordinate is returned.
        """
        cam = self.world_to_camera(points)
        x, y, z = cam[:, 0], cam[:, 1], cam[:, 2]
        behind = z >= 0.0

        clip = cam @ self._proj[:, :3].T + self._proj[:, 3]
        w = clip[:, 3]
        safe_w = np.where(behind, 1.0, w)
        ndc = clip[:, :2] / safe_w[:, None]

        if distort:
            theta = np.arctan2(np.hypot(x, y), -z)
            theta = np.where(behind, 0.0, theta)
            factor = distortion_factor(theta, self.intrinsics)
            ndc = ndc * np.reshape(factor, (-1, 1))

        uv = ndc * 0.5 + 0.5
        uv[behind] = np.nan
        return uv

    def project(self, point: Point3D) -> Viewport | None:
        """Distorted viewport coordinate of one world point.

        Returns None when the point is behind or on the camera plane.
        """
        uv = self.project_many([point])[0]
        if not np.all(np.isfinite(uv)):
            return None
        return (float(uv[0]), float(uv[1]))

    def _lens_plane(self, uv: Viewport) -> tuple[float, float]:
        """Viewport coordinate -> NDC divided by the projection's focal terms."""
        u, v = uv
        return (
            (2.0 * u - 1.0) / self._proj[0, 0],
            (2.0 * v - 1.0) / self._proj[1, 1],
        )

    def _from_lens_plane(self, qx: float, qy: float) -> Viewport:
        return (
            qx * self._proj[0, 0] * 0.5 + 0.5,
            qy * self._proj[1, 1] * 0.5 + 0.5,
        )

    def distort_viewport(self, uv: Viewport) -> Viewport:
        """Apply the lens bend to a pinhole viewport coordinate."""
        qx, qy = self._lens_plane(uv)
        r_undist = math.hypot(qx, qy)
        factor = distortion_factor(math.atan(r_undist), self.intrinsics)
        return self._from_lens_plane(qx * factor, qy * factor)

    def image_circle_radius(self) -> float:
        """Largest ``r_dist`` reachable from the forward hemisphere."""
        return self._peak[1]

    def undistort_viewport(self, uv: Viewport) -> Viewport | None:
        """Pinhole viewport coordinate whose distortion lands on ``uv``.

        Returns None for coordinates outside the lens image circle, which
        the post-process renders as background. Only the rising branch of
        ``r_dist`` (axis up to the rim of the image circle) is searched.
        """
        qx, qy = self._lens_plane(uv)
        rho = math.hypot(qx, qy)
        theta_floor = math.atan(R_UNDIST_FLOOR)
        rho_floor = float(distorted_radius(theta_floor, self.intrinsics))
        if rho <= rho_floor:
            # Near the axis the forward model is the identity.
            return uv
        if rho >= self.image_circle_radius():
            return None

        lo, hi = theta_floor, self._peak[0]
        for _ in range(_BISECT_ITERATIONS):
            mid = 0.5 * (lo + hi)
            if distorted_radius(mid, self.intrinsics) < rho:
                lo = mid
            else:
                hi = mid
        scale = math.tan(0.5 * (lo + hi)) / rho
        return self._from_lens_plane(qx * scale, qy * scale)

    @classmethod
    def look_at(
        cls,
        name: str,
        position: Point3D,
        target: Point3D = (0.0, 0.0, 0.0),
        *,
        intrinsics: FisheyeIntrinsics | None = None,
        fov_deg: float = 170.0,
        aspect: float = 1.0,
        near: float = 0.01,
        far: float = 1000.0,
        enabled: bool = True,
    ) -> CameraModel:
        """Camera at ``position`` facing ``target`` with world +y as up.

        Falls back to +z as the up hint when the view direction is
        vertical.
        """
        pos = np.asarray(position, dtype=np.float64)
        forward = _normalize(np.asarray(target, dtype=np.float64) - pos)
        up_hint = np.array(_WORLD_UP)
        if np.linalg.norm(np.cross(forward, up_hint)) < 1e-9:
            up_hint = np.array(_FALLBACK_UP)
        right = _normalize(np.cross(forward, up_hint))
        up = np.cross(right, forward)
        pose = CameraPose(
            position=tuple(pos),
            right=tuple(right),
            up=tuple(up),
            forward=tuple(forward),
        )
        return cls(
            name=name,
            pose=pose,
            intrinsics=intrinsics or FisheyeIntrinsics(),
            fov_deg=fov_deg,
            aspect=aspect,
            near=near,
            far=far,
            enabled=enabled,
        )

    @staticmethod
    def from_dict(d: dict) -> CameraModel:
        """Build a camera from a config dict.

        Either ``target`` (look-at form) or a full ``pose`` is required.
        """
        intrinsics = FisheyeIntrinsics.from_dict(d.get("intrinsics"))
        common = {
            "intrinsics": intrinsics,
            "fov_deg": d.get("fov_deg", 170.0),
            "aspect": d.get("aspect", 1.0),
            "near": d.get("near", 0.01),
            "far": d.get("far", 1000.0),
            "enabled": d.get("enabled", True),
        }
        if "target" in d:
            return CameraModel.look_at(
                d["name"],
                tuple(d["position"]),
                tuple(d["target"]),
                **common,
            )
        if "pose" not in d:
            raise ConfigurationError(
                f"camera {d.get('name')!r} needs either 'target' or 'pose'"
            )
        return CameraModel(
            name=d["name"], pose=CameraPose.from_dict(d["pose"]), **common
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "pose": self.pose.to_dict(),
            "intrinsics": self.intrinsics.to_dict(),
            "fov_deg": self.fov_deg,
            "aspect": self.aspect,
            "near": self.near,
            "far": self.far,
            "enabled": self.enabled,
        }
