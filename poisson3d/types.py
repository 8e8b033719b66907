"""Data types shared by the sampler, the camera model and the JSON configs."""

from __future__ import annotations

import math
from dataclasses import dataclass

Point3D = tuple[float, float, float]

_BASIS_TOLERANCE = 1e-6


class ConfigurationError(ValueError):
    """A sampler or camera parameter violates its precondition."""


class DegenerateIntrinsicsError(ConfigurationError):
    """Fisheye intrinsics outside the domain where the projection is defined."""


class OutOfBoundsError(IndexError):
    """A point maps to a grid cell outside the allocated grid."""


class CellOccupiedError(ValueError):
    """A grid cell already holds an accepted point."""


def _vec3(v) -> Point3D:
    x, y, z = v
    return (float(x), float(y), float(z))


def _dot(a: Point3D, b: Point3D) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@dataclass(frozen=True)
class GenerationBounds:
    """Axis-aligned sampling box centered at the origin.

    Stores full extents; points are drawn from ``[-extent/2, extent/2]`` on
    each axis.
    """

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        for axis, extent in zip("xyz", self.extents):
            if not (extent > 0.0) or math.isinf(extent):
                raise ConfigurationError(
                    f"bounds extent along {axis} must be positive and finite,"
                    f" got {extent}"
                )

    @property
    def extents(self) -> Point3D:
        return (self.x, self.y, self.z)

    @property
    def half_extents(self) -> Point3D:
        return (self.x / 2, self.y / 2, self.z / 2)

    def contains(self, p: Point3D) -> bool:
        """True if ``p`` is inside (or on) the box."""
        return all(-h <= c <= h for c, h in zip(p, self.half_extents))

    @staticmethod
    def from_sequence(v) -> GenerationBounds:
        x, y, z = _vec3(v)
        return GenerationBounds(x, y, z)

    @staticmethod
    def from_dict(d: dict) -> GenerationBounds:
        return GenerationBounds(x=d["x"], y=d["y"], z=d["z"])

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class FisheyeIntrinsics:
    """Triple-sphere-style lens parameters.

    ``xi`` and ``lam`` are the two spherical shifts, ``alpha`` the pinhole
    shift. The projection radicands stay non-negative only for
    ``|xi|, |lam| < 1``, and the displacement ``alpha / (1 - alpha)``
    diverges at ``alpha = 1``.
    """

    xi: float = 0.3
    lam: float = 0.3
    alpha: float = 0.4

    def __post_init__(self) -> None:
        if not -1.0 < self.xi < 1.0:
            raise DegenerateIntrinsicsError(
                f"xi must lie in (-1, 1), got {self.xi}"
            )
        if not -1.0 < self.lam < 1.0:
            raise DegenerateIntrinsicsError(
                f"lambda must lie in (-1, 1), got {self.lam}"
            )
        if not 0.0 < self.alpha < 1.0:
            raise DegenerateIntrinsicsError(
                f"alpha must lie in (0, 1), got {self.alpha}"
            )

    @property
    def displacement(self) -> float:
        return self.alpha / (1.0 - self.alpha)

    @staticmethod
    def from_dict(d: dict | None) -> FisheyeIntrinsics:
        if not d:
            return FisheyeIntrinsics()
        return FisheyeIntrinsics(
            xi=d.get("xi", 0.3),
            lam=d.get("lambda", 0.3),
            alpha=d.get("alpha", 0.4),
        )

    def to_dict(self) -> dict:
        return {"xi": self.xi, "lambda": self.lam, "alpha": self.alpha}


@dataclass(frozen=True)
class CameraPose:
    """World position plus an orthonormal right/up/forward basis."""

    position: Point3D
    right: Point3D = (1.0, 0.0, 0.0)
    up: Point3D = (0.0, 1.0, 0.0)
    forward: Point3D = (0.0, 0.0, -1.0)

    def __post_init__(self) -> None:
        for name in ("position", "right", "up", "forward"):
            object.__setattr__(self, name, _vec3(getattr(self, name)))
        axes = (self.right, self.up, self.forward)
        for i, a in enumerate(axes):
            if abs(_dot(a, a) - 1.0) > _BASIS_TOLERANCE:
                raise ConfigurationError(f"camera basis axis {a} is not unit")
            for b in axes[i + 1 :]:
                if abs(_dot(a, b)) > _BASIS_TOLERANCE:
                    raise ConfigurationError("camera basis is not orthogonal")

    @staticmethod
    def from_dict(d: dict) -> CameraPose:
        return CameraPose(
            position=_vec3(d["position"]),
            right=_vec3(d.get("right", (1.0, 0.0, 0.0))),
            up=_vec3(d.get("up", (0.0, 1.0, 0.0))),
            forward=_vec3(d.get("forward", (0.0, 0.0, -1.0))),
        )

    def to_dict(self) -> dict:
        return {
            "position": list(self.position),
            "right": list(self.right),
            "up": list(self.up),
            "forward": list(self.forward),
        }


@dataclass
class SamplerStats:
    seed_attempts: int = 0
    candidates: int = 0
    rejected_bounds: int = 0
    rejected_spacing: int = 0
    rejected_visibility: int = 0
    retired: int = 0
    accepted: int = 0
    cancelled: bool = False

    def to_dict(self) -> dict:
        return {
            "seed_attempts": self.seed_attempts,
            "candidates": self.candidates,
            "rejected_bounds": self.rejected_bounds,
            "rejected_spacing": self.rejected_spacing,
            "rejected_visibility": self.rejected_visibility,
            "retired": self.retired,
            "accepted": self.accepted,
            "cancelled": self.cancelled,
        }
