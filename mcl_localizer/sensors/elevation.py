"""
Elevation sensor model over a 2D elevation grid.

Residual of a scan point = |z - elevation(x, y)| in the map frame. Points
over unobserved cells or outside the grid have no residual and are skipped.
The grid is far smaller than the point cloud it was built from, which
makes this variant the lightweight choice for large maps.
"""

from __future__ import annotations

import numpy as np

from mcl_localizer.common import constants
from mcl_localizer.common.param_models import SensorModelParams
from mcl_localizer.maps.elevation_map import ElevationMap
from mcl_localizer.sensors.sensor_model import ScanMatchingSensorModel


class ElevationSensorModel(ScanMatchingSensorModel):
    """Scores particles by mean height difference to an elevation map."""

    def __init__(self, elevation_map: ElevationMap, **kwargs):
        super().__init__(**kwargs)
        self.elevation_map = elevation_map

    @classmethod
    def from_points(
        cls,
        map_points,
        resolution: float = constants.ELEVATION_RESOLUTION_DEFAULT,
        resolution_min: float = constants.ELEVATION_RESOLUTION_MIN,
        **kwargs,
    ) -> "ElevationSensorModel":
        return cls(ElevationMap(map_points, resolution, resolution_min), **kwargs)

    @classmethod
    def from_params(cls, params: SensorModelParams, map_points) -> "ElevationSensorModel":
        return cls.from_points(
            map_points,
            resolution=params.elevation_resolution,
            resolution_min=params.elevation_resolution_min,
            **cls._params_kwargs(params),
        )

    def point_residuals(self, points_map: np.ndarray) -> np.ndarray:
        if points_map.shape[0] == 0:
            return np.empty(0, dtype=float)
        return np.abs(points_map[:, 2] - self.elevation_map.elevations(points_map[:, :2]))
