"""Uniform 3D background grid for Poisson-disk spacing checks.

The grid covers the generation box with cubic cells of side
``min_distance / sqrt(3)``, so a cell's diagonal equals ``min_distance`` and
a cell can hold at most one accepted point. Two points closer than
``min_distance`` differ by less than ``sqrt(3)`` cells on every axis, which
means a search of 2 cells in each direction (inclusive) finds every
neighbor that could violate the spacing.

Occupancy is a sparse mapping from cell index to point. An empty cell is
simply missing from the mapping, so a point sitting exactly at the origin
is an ordinary occupant. Memory stays proportional to the number of
accepted points rather than to the volume of the box.
"""

from __future__ import annotations

import math
from collections.abc import Iterator

from .types import (
    CellOccupiedError,
    ConfigurationError,
    GenerationBounds,
    OutOfBoundsError,
    Point3D,
)

CellIndex = tuple[int, int, int]

DEFAULT_CELL_RADIUS = 2


class SpatialGridIndex:
    def __init__(self, bounds: GenerationBounds, min_distance: float) -> None:
        if not min_distance > 0.0:
            raise ConfigurationError(
                f"min_distance must be positive, got {min_distance}"
            )
        self.bounds = bounds
        self.min_distance = min_distance
        self.cell_size = min_distance / math.sqrt(3)
        ex, ey, ez = bounds.extents
        self.shape: CellIndex = (
            self._cells_along(ex),
            self._cells_along(ey),
            self._cells_along(ez),
        )
        self._half = bounds.half_extents
        self._cells: dict[CellIndex, Point3D] = {}
        self._order: list[Point3D] = []

    def _cells_along(self, extent: float) -> int:
        return max(1, math.ceil(extent / self.cell_size))

    def _raw_index(self, p: Point3D) -> CellIndex:
        hx, hy, hz = self._half
        return (
            math.floor((p[0] + hx) / self.cell_size),
            math.floor((p[1] + hy) / self.cell_size),
            math.floor((p[2] + hz) / self.cell_size),
        )

    def __len__(self) -> int:
        return len(self._order)

    def points(self) -> Iterator[Point3D]:
        """Occupants in insertion order."""
        return iter(self._order)

    def cell_index_of(self, p: Point3D) -> CellIndex | None:
        """Cell holding ``p``, or None when ``p`` falls outside the grid."""
        idx = self._raw_index(p)
        for i, n in zip(idx, self.shape):
            if i < 0 or i >= n:
                return None
        return idx

    def insert(self, p: Point3D) -> CellIndex:
        """Store ``p`` in its cell. Mutates exactly one cell."""
        cell = self.cell_index_of(p)
        if cell is None:
            raise OutOfBoundsError(f"point {p} lies outside the grid")
        if cell in self._cells:
            raise CellOccupiedError(
                f"cell {cell} already holds {self._cells[cell]}"
            )
        self._cells[cell] = p
        self._order.append(p)
        return cell

    def neighbors_within_radius(
        self, p: Point3D, cell_radius: int = DEFAULT_CELL_RADIUS
    ) -> list[Point3D]:
        """Occupants of every in-grid cell within ``cell_radius`` cells of p.

        The search box is clamped to the grid, so ``p`` itself may lie
        slightly outside it.
        """
        center = self._raw_index(p)
        ranges = [
            range(max(0, i - cell_radius), min(n, i + cell_radius + 1))
            for i, n in zip(center, self.shape)
        ]
        found = []
        for x in ranges[0]:
            for y in ranges[1]:
                for z in ranges[2]:
                    q = self._cells.get((x, y, z))
                    if q is not None:
                        found.append(q)
        return found

    def has_point_within(self, p: Point3D, min_distance: float) -> bool:
        """True if some occupant is strictly closer than ``min_distance``."""
        limit = min_distance * min_distance
        for q in self.neighbors_within_radius(p):
            dx = q[0] - p[0]
            dy = q[1] - p[1]
            dz = q[2] - p[2]
            if dx * dx + dy * dy + dz * dz < limit:
                return True
        return False
