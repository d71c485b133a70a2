"""
Endpoint sensor model over a point-cloud map.

Residual of a scan point = Euclidean distance to its nearest map point,
found with a k-d tree built once over the map. Queries are bounded by
d_max: points with no map point closer than d_max report inf, which the
scoring caps to exactly d_max.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial import cKDTree

from mcl_localizer.common.param_models import SensorModelParams
from mcl_localizer.common.pointcloud import finite_xyz
from mcl_localizer.sensors.sensor_model import ScanMatchingSensorModel

_logger = logging.getLogger(__name__)


class EndpointSensorModel(ScanMatchingSensorModel):
    """Scores particles by mean nearest-neighbor distance to the map cloud."""

    def __init__(self, map_points, **kwargs):
        """
        Args:
            map_points: reference map (N, 3) or (N, 4); non-finite rows are dropped
            **kwargs: scoring options of ScanMatchingSensorModel
        """
        super().__init__(**kwargs)
        self.map_points = finite_xyz(map_points)
        self.map_points.flags.writeable = False
        self.kdtree = cKDTree(self.map_points) if self.map_points.shape[0] > 0 else None
        if self.kdtree is None:
            _logger.warning("Endpoint sensor model created with an empty map; no point will match.")
        else:
            _logger.info("Built k-d tree over %d map points", self.map_points.shape[0])

    @classmethod
    def from_params(cls, params: SensorModelParams, map_points) -> "EndpointSensorModel":
        return cls(map_points, **cls._params_kwargs(params))

    def point_residuals(self, points_map: np.ndarray) -> np.ndarray:
        if self.kdtree is None or points_map.shape[0] == 0:
            return np.full(points_map.shape[0], np.nan)
        distances, _ = self.kdtree.query(points_map, k=1, distance_upper_bound=self.d_max)
        return np.asarray(distances, dtype=float)
