"""
2D elevation map built from a 3D point cloud.

Each grid cell stores the maximum z of all points whose (x, y) falls into
it; cells that received no point hold NaN. The map is built once and is
read-only afterwards, so concurrent queries need no locking.

Tile lookup:
    (ix, iy) = floor(((x, y) - origin) / resolution), valid iff 0 <= i < size
"""

from __future__ import annotations

import logging
import math
import os
import time
from typing import Optional, Tuple

import numpy as np

from mcl_localizer.common import constants
from mcl_localizer.common.pointcloud import as_xyz

_logger = logging.getLogger(__name__)


class ElevationMap:
    """Grid of maximum point height per planar cell."""

    def __init__(
        self,
        point_cloud,
        resolution: float = constants.ELEVATION_RESOLUTION_DEFAULT,
        resolution_min: float = constants.ELEVATION_RESOLUTION_MIN,
    ):
        """
        Args:
            point_cloud: (N, 3) or (N, 4) points
            resolution: cell edge length (m), clamped to ``resolution_min``
            resolution_min: lower bound of the resolution
        """
        self._resolution = max(float(resolution_min), float(resolution))

        xyz = as_xyz(point_cloud)
        planar = np.isfinite(xyz[:, 0]) & np.isfinite(xyz[:, 1])

        if np.any(planar):
            xy = xyz[planar, :2]
            xy_min = xy.min(axis=0)
            xy_max = xy.max(axis=0)
            # Snap the corner down to a resolution-aligned origin.
            self._origin = np.floor(xy_min / self._resolution) * self._resolution
            size = np.floor((xy_max - self._origin) / self._resolution).astype(np.int64) + 1
        else:
            self._origin = np.zeros(2, dtype=float)
            size = np.ones(2, dtype=np.int64)

        self._grid = np.full(tuple(int(s) for s in size), np.nan, dtype=float)

        finite = np.isfinite(xyz).all(axis=1)
        pts = xyz[finite]
        if pts.shape[0] > 0:
            idx = np.floor((pts[:, :2] - self._origin) / self._resolution).astype(np.int64)
            # Every finite point lies in the bounding box; clip off rounding at its edges.
            idx[:, 0] = np.clip(idx[:, 0], 0, self._grid.shape[0] - 1)
            idx[:, 1] = np.clip(idx[:, 1], 0, self._grid.shape[1] - 1)
            # fmax ignores the NaN initial value, so the first write sets the cell.
            np.fmax.at(self._grid, (idx[:, 0], idx[:, 1]), pts[:, 2])

        self._grid.flags.writeable = False
        _logger.info(
            "Built elevation map %dx%d at resolution %.4f (origin %.3f, %.3f)",
            self._grid.shape[0], self._grid.shape[1], self._resolution,
            self._origin[0], self._origin[1],
        )

    # =========================================================================
    # Properties
    # =========================================================================

    def resolution(self) -> float:
        return self._resolution

    @property
    def origin(self) -> Tuple[float, float]:
        return float(self._origin[0]), float(self._origin[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return self._grid.shape

    @property
    def grid(self) -> np.ndarray:
        """Read-only view of the grid, indexed [ix, iy]."""
        return self._grid

    # =========================================================================
    # Tile lookup
    # =========================================================================

    def _check(self, ix, iy):
        return (0 <= ix) & (ix < self._grid.shape[0]) & (0 <= iy) & (iy < self._grid.shape[1])

    def tile(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Index of the cell containing (x, y), or None outside the map."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        ix = math.floor((x - self._origin[0]) / self._resolution)
        iy = math.floor((y - self._origin[1]) / self._resolution)
        if self._check(ix, iy):
            return ix, iy
        return None

    def cell_center(self, ix: int, iy: int) -> Tuple[float, float]:
        """Planar coordinates of the center of cell (ix, iy)."""
        return (
            float(self._origin[0] + (ix + 0.5) * self._resolution),
            float(self._origin[1] + (iy + 0.5) * self._resolution),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def cell_elevation(self, ix: int, iy: int) -> float:
        """Value of cell (ix, iy); NaN for invalid indices."""
        if self._check(ix, iy):
            return float(self._grid[ix, iy])
        return math.nan

    def elevation(self, x: float, y: float) -> float:
        """Elevation at (x, y); NaN outside the map or for non-finite input."""
        cell = self.tile(float(x), float(y))
        if cell is None:
            return math.nan
        return float(self._grid[cell])

    def elevation_at(self, point) -> float:
        """Elevation below a point [x, y, (z, ...)]."""
        return self.elevation(point[0], point[1])

    def elevations(self, xy: np.ndarray) -> np.ndarray:
        """Vectorized elevation lookup for an (N, >=2) array; NaN where undefined."""
        xy = np.asarray(xy, dtype=float)
        if xy.ndim == 1:
            xy = xy.reshape(1, -1)
        xy = xy[:, :2]
        out = np.full(xy.shape[0], np.nan, dtype=float)
        finite = np.isfinite(xy).all(axis=1)
        if not np.any(finite):
            return out
        idx = np.floor((xy[finite] - self._origin) / self._resolution).astype(np.int64)
        inside = self._check(idx[:, 0], idx[:, 1])
        rows = np.flatnonzero(finite)[inside]
        out[rows] = self._grid[idx[inside, 0], idx[inside, 1]]
        return out

    def diff(self, other: "ElevationMap", d_max: float = math.inf) -> float:
        """
        Mean capped height difference to another map.

        Averages min(|dz|, d_max) over all cells of this map whose center has
        a finite elevation in both maps. Returns d_max if no cell is comparable.
        """
        if self._resolution != other.resolution():
            _logger.error("Elevation maps must have the same resolution to be comparable.")

        nx, ny = self._grid.shape
        ix, iy = np.meshgrid(np.arange(nx), np.arange(ny), indexing="ij")
        centers = np.stack([
            self._origin[0] + (ix.ravel() + 0.5) * self._resolution,
            self._origin[1] + (iy.ravel() + 0.5) * self._resolution,
        ], axis=1)

        d = self.elevations(centers) - other.elevations(centers)
        d = d[np.isfinite(d)]
        if d.size == 0:
            return float(d_max)
        return float(np.mean(np.minimum(np.abs(d), d_max)))

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self, path: Optional[str | os.PathLike] = None) -> str:
        """
        Write the grid as text: one line per x index, values separated by spaces.

        Unobserved cells are written as ``nan``. Without a path, the file is
        named after the current wall-clock time (<seconds><nanoseconds>.csv).

        Returns:
            The path written.
        """
        if path is None:
            now_ns = time.time_ns()
            path = f"{now_ns // 1_000_000_000}{now_ns % 1_000_000_000}.csv"
        path = os.fspath(path)
        np.savetxt(path, self._grid, fmt="%g", delimiter=" ")
        _logger.info("Saved %dx%d elevation map to %s", self._grid.shape[0], self._grid.shape[1], path)
        return path
