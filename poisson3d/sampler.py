"""Dart-throwing (Bridson) Poisson-disk sampler gated by camera visibility.

Produces the placement sequence for a synthetic capture session: every
accepted point is at least ``min_distance`` from every other, and an object
of ``object_radius`` centered on it is fully on screen, with padding, in
every active fisheye camera.

The algorithm keeps an *active list*, the frontier of accepted points that
may still spawn neighbors:

  1. **Init**: draw up to ``max_attempts`` uniform points in the box and
     take the first one the visibility oracle accepts. If none passes, the
     run ends with an empty sequence. That is a normal outcome (the rig
     cannot see the box), reported with a warning, not an exception.
  2. **Seed**: insert that point into the grid (which keeps acceptance
     order and so is the output) and the active list.
  3. **Expand**: while the active list is non-empty, pick a random entry
     and throw up to ``max_attempts`` darts in the spherical shell
     ``[min_distance, 2 * min_distance)`` around it. A dart is kept when it
     is inside the box, no grid neighbor is closer than ``min_distance``,
     and the oracle accepts it. If every dart misses, the entry retires
     from the active list (it stays in the output).
  4. **Terminal**: the active list is empty; return the output.

All randomness flows through the ``PCG32`` passed in, so a fixed seed
reproduces the exact sequence. The order of draws matters: for the seed it
is ``x, y, z``; for each dart it is ``angle1, angle2, radius``.

The public entry points are ``generate_points(...)`` (plain arguments),
``generate(params)`` returning a ``SampleResult``, and ``generate_json`` for
callers that exchange plain JSON dicts.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .camera import CameraModel
from .grid import SpatialGridIndex
from .prng import PCG32
from .types import ConfigurationError, GenerationBounds, Point3D, SamplerStats
from .visibility import VisibilityOracle, select_active

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

DEFAULT_MAX_ATTEMPTS = 30


class DartThrowingSampler:
    """One generation run. Its grid doubles as the output, in acceptance order."""

    def __init__(
        self,
        min_distance: float,
        bounds: GenerationBounds,
        max_attempts: int,
        oracle: VisibilityOracle,
        rng: PCG32,
    ) -> None:
        if not min_distance > 0.0 or math.isinf(min_distance):
            raise ConfigurationError(
                f"min_distance must be positive and finite, got {min_distance}"
            )
        if isinstance(max_attempts, bool) or not isinstance(
            max_attempts, numbers.Integral
        ):
            raise ConfigurationError(
                f"max_attempts must be an integer, got {max_attempts!r}"
            )
        if max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {max_attempts}"
            )
        self.min_distance = min_distance
        self.bounds = bounds
        self.max_attempts = max_attempts
        self.oracle = oracle
        self.rng = rng
        self.grid = SpatialGridIndex(bounds, min_distance)
        self.stats = SamplerStats()
        self._active: list[Point3D] = []
        self._done = False

    def _random_point_in_bounds(self) -> Point3D:
        hx, hy, hz = self.bounds.half_extents
        x = self.rng.uniform(-hx, hx)
        y = self.rng.uniform(-hy, hy)
        z = self.rng.uniform(-hz, hz)
        return (x, y, z)

    def _dart_around(self, p: Point3D) -> Point3D:
        angle1 = self.rng.uniform(0.0, TWO_PI)
        angle2 = self.rng.uniform(0.0, TWO_PI)
        radius = self.rng.uniform(self.min_distance, 2.0 * self.min_distance)
        sin1 = math.sin(angle1)
        return (
            p[0] + radius * sin1 * math.cos(angle2),
            p[1] + radius * sin1 * math.sin(angle2),
            p[2] + radius * math.cos(angle1),
        )

    def _find_seed(self) -> Point3D | None:
        for _ in range(self.max_attempts):
            self.stats.seed_attempts += 1
            candidate = self._random_point_in_bounds()
            if self.oracle.accepts(candidate):
                return candidate
        return None

    def _is_acceptable(self, candidate: Point3D) -> bool:
        """Bounds, then spacing, then visibility (cheapest first)."""
        if (
            not self.bounds.contains(candidate)
            or self.grid.cell_index_of(candidate) is None
        ):
            self.stats.rejected_bounds += 1
            return False
        if self.grid.has_point_within(candidate, self.min_distance):
            self.stats.rejected_spacing += 1
            return False
        if not self.oracle.accepts(candidate):
            self.stats.rejected_visibility += 1
            return False
        return True

    def _accept(self, p: Point3D) -> None:
        self.grid.insert(p)
        self._active.append(p)
        self.stats.accepted += 1

    def _expand_once(self) -> None:
        idx = self.rng.next_index(len(self._active))
        origin = self._active[idx]
        for _ in range(self.max_attempts):
            self.stats.candidates += 1
            candidate = self._dart_around(origin)
            if self._is_acceptable(candidate):
                self._accept(candidate)
                return
        del self._active[idx]
        self.stats.retired += 1

    def run(
        self,
        should_stop: Callable[[], bool] | None = None,
        max_points: int | None = None,
    ) -> list[Point3D]:
        """Generate the sequence. A sampler instance runs once.

        ``should_stop`` is polled before every expand step; when it returns
        true the run ends early with the points accepted so far. The same
        happens once ``max_points`` points have been accepted; with
        ``max_points=0`` no seed is drawn at all.
        """
        if self._done:
            raise RuntimeError("sampler has already run; create a new one")
        self._done = True
        if max_points is not None and max_points < 0:
            raise ConfigurationError(
                f"max_points must be non-negative, got {max_points}"
            )
        if max_points == 0:
            self.stats.cancelled = True
            return []

        seed_point = self._find_seed()
        if seed_point is None:
            logger.warning(
                "No initial visible point found within generation bounds"
                " after %d attempts.",
                self.max_attempts,
            )
            return []
        self._accept(seed_point)

        while self._active:
            if (max_points is not None and len(self.grid) >= max_points) or (
                should_stop is not None and should_stop()
            ):
                self.stats.cancelled = True
                logger.info(
                    "Generation stopped early with %d points.",
                    len(self.grid),
                )
                break
            self._expand_once()

        logger.debug("Generation finished: %s", self.stats.to_dict())
        return list(self.grid.points())


def _run_sampler(
    min_distance: float,
    bounds: GenerationBounds | Sequence[float],
    max_attempts: int,
    active_cameras: Sequence[CameraModel],
    object_radius: float,
    viewport_padding: float,
    rng: PCG32,
    should_stop: Callable[[], bool] | None,
    max_points: int | None,
) -> tuple[list[Point3D], SamplerStats]:
    """Validate everything, then run unless there is no camera to satisfy."""
    if not isinstance(bounds, GenerationBounds):
        bounds = GenerationBounds.from_sequence(bounds)
    if max_points is not None and (
        isinstance(max_points, bool)
        or not isinstance(max_points, numbers.Integral)
        or max_points < 0
    ):
        raise ConfigurationError(
            f"max_points must be a non-negative integer, got {max_points!r}"
        )
    oracle = VisibilityOracle(active_cameras, object_radius, viewport_padding)
    sampler = DartThrowingSampler(
        min_distance, bounds, max_attempts, oracle, rng
    )
    if not active_cameras:
        logger.warning("No active cameras supplied; nothing can be visible.")
        return [], sampler.stats
    return sampler.run(should_stop, max_points), sampler.stats


def generate_points(
    min_distance: float,
    bounds: GenerationBounds | Sequence[float],
    max_attempts: int,
    active_cameras: Sequence[CameraModel],
    object_radius: float,
    viewport_padding: float,
    rng: PCG32 | None = None,
    seed: int = 0,
    should_stop: Callable[[], bool] | None = None,
    max_points: int | None = None,
) -> list[Point3D]:
    """Ordered, well-separated placements visible to every active camera.

    ``active_cameras`` is used as given; callers that hold a mixed list can
    filter it with ``select_active`` first. ``rng`` defaults to
    ``PCG32(seed)``. Returns an empty list when no camera is supplied or no
    visible seed point is found.
    """
    points, _ = _run_sampler(
        min_distance,
        bounds,
        max_attempts,
        active_cameras,
        object_radius,
        viewport_padding,
        rng if rng is not None else PCG32(seed),
        should_stop,
        max_points,
    )
    return points


@dataclass
class SamplerParams:
    seed: int
    min_distance: float
    bounds: GenerationBounds
    cameras: list[CameraModel] = field(default_factory=list)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    object_radius: float = 0.05
    viewport_padding: float = 0.05
    max_points: int | None = None

    @staticmethod
    def from_dict(d: dict) -> SamplerParams:
        return SamplerParams(
            seed=d["seed"],
            min_distance=d["min_distance"],
            bounds=GenerationBounds.from_dict(d["bounds"]),
            cameras=[CameraModel.from_dict(c) for c in d.get("cameras", [])],
            max_attempts=d.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
            object_radius=d.get("object_radius", 0.05),
            viewport_padding=d.get("viewport_padding", 0.05),
            max_points=d.get("max_points"),
        )

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "min_distance": self.min_distance,
            "bounds": self.bounds.to_dict(),
            "cameras": [c.to_dict() for c in self.cameras],
            "max_attempts": self.max_attempts,
            "object_radius": self.object_radius,
            "viewport_padding": self.viewport_padding,
            "max_points": self.max_points,
        }


@dataclass
class SampleResult:
    points: list[Point3D]
    stats: SamplerStats
    camera_names: list[str] = field(default_factory=list)

    @property
    def seed_found(self) -> bool:
        return bool(self.points)

    def to_dict(self) -> dict:
        return {
            "points": [list(p) for p in self.points],
            "stats": self.stats.to_dict(),
            "cameras": self.camera_names,
        }


def generate(
    params: SamplerParams, should_stop: Callable[[], bool] | None = None
) -> SampleResult:
    """Run one generation from params. Disabled cameras are skipped."""
    active = select_active(params.cameras)
    points, stats = _run_sampler(
        params.min_distance,
        params.bounds,
        params.max_attempts,
        active,
        params.object_radius,
        params.viewport_padding,
        PCG32(params.seed),
        should_stop,
        params.max_points,
    )
    return SampleResult(
        points=points,
        stats=stats,
        camera_names=[c.name for c in active],
    )


def generate_json(params_dict: dict) -> dict:
    """JSON-dict in, JSON-dict out wrapper."""
    params = SamplerParams.from_dict(params_dict)
    result = generate(params)
    return result.to_dict()
