"""
Sensor (observation) models.

SCORING MODEL:
    For a particle with pose T and robot-frame scans {S_k}, every finite
    point p in every scan is moved into the map frame (T * p) and compared
    against the reference map, giving a residual r(p) >= 0 or "undefined".
    The particle weight is the mean capped residual

        w = sum_p min(d_max, r(p)) / n_defined

    so LOWER weights mean a better geometric fit. Every scan contributes to
    the same per-particle accumulator. A particle with no defined residual
    (no scans, or nothing matched) gets the fixed minimum weight.

NORMALIZATION:
    After all particles are scored, the maximum weight is subtracted from
    every weight: the largest value becomes exactly 0, all others <= 0.

PARALLELISM:
    The population is split into contiguous ranges of ceil(N / n_threads)
    particles, scored on a thread pool. The map and the scans are read-only
    and the ranges are disjoint, so no locking is needed. All ranges finish
    before normalization.
"""

from __future__ import annotations

import logging
import math
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import numpy as np

from mcl_localizer.common import constants
from mcl_localizer.common.logging_utils import warn_throttled
from mcl_localizer.common.param_models import SensorModelParams
from mcl_localizer.common.pointcloud import finite_mask, finite_xyz, voxel_filter
from mcl_localizer.common.se3 import se3_apply
from mcl_localizer.filter.particle import Particle

_logger = logging.getLogger(__name__)


class SensorModel(ABC):
    """Interface of the observation step."""

    @abstractmethod
    def compute_particle_weights(self, scans: Sequence[np.ndarray], particles: List[Particle]) -> None:
        """Rewrite the weight of every particle given robot-frame scans."""


def normalize_weights(particles: List[Particle]) -> None:
    """Shift all weights so that the maximum becomes 0."""
    if len(particles) == 0:
        return
    max_weight = max(p.weight for p in particles)
    for p in particles:
        p.weight -= max_weight


def hardware_concurrency() -> int:
    return os.cpu_count() or 1


class ScanMatchingSensorModel(SensorModel):
    """
    Shared scoring machinery for models that compare transformed scan points
    against a static map. Subclasses only provide per-point residuals.
    """

    def __init__(
        self,
        d_max: float = constants.SENSOR_D_MAX_DEFAULT,
        sparsification_resolution: float = constants.SPARSIFICATION_RESOLUTION_DEFAULT,
        min_sparsification_resolution: float = constants.SPARSIFICATION_RESOLUTION_MIN,
        min_weight: float = constants.PARTICLE_WEIGHT_MIN,
        multithreading: bool = True,
        n_threads: int = 0,
        warn_throttle_sec: float = constants.WARN_THROTTLE_SEC,
    ):
        self.d_max = float(d_max)
        self.min_resolution = float(min_sparsification_resolution)
        self.min_weight = float(min_weight)
        self.multithreading = bool(multithreading)
        self.n_threads = int(n_threads) if n_threads and n_threads > 0 else hardware_concurrency()
        self.warn_throttle_sec = float(warn_throttle_sec)
        self.resolution = self.min_resolution
        self.set_sparsification_resolution(sparsification_resolution)

    @staticmethod
    def _params_kwargs(params: SensorModelParams) -> dict:
        return dict(
            d_max=params.d_max,
            sparsification_resolution=params.sparsification_resolution,
            min_sparsification_resolution=params.min_sparsification_resolution,
            min_weight=params.min_weight,
            multithreading=params.multithreading,
            n_threads=params.n_threads,
            warn_throttle_sec=params.warn_throttle_sec,
        )

    def set_sparsification_resolution(self, resolution: float) -> None:
        """Set the voxel size used to downsample incoming scans (clamped to the minimum)."""
        if resolution < self.min_resolution:
            _logger.warning(
                "Sparsification resolution must not be less than %g (got %g).",
                self.min_resolution, resolution,
            )
        self.resolution = max(self.min_resolution, float(resolution))

    def sparsify(self, scans: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Voxel-downsampled copies of the scans; the inputs are left untouched."""
        return [voxel_filter(scan, self.resolution) for scan in scans]

    @abstractmethod
    def point_residuals(self, points_map: np.ndarray) -> np.ndarray:
        """
        Residual of each map-frame point against the map.

        Returns:
            (N,) array; NaN marks an undefined residual, inf is capped to d_max.
        """

    def particle_weight(self, scans: Sequence[np.ndarray], pose: np.ndarray) -> float:
        """
        Pre-normalization weight of a single pose.

        ``scans`` are used as given (no sparsification).
        """
        if len(scans) < 1:
            warn_throttled(_logger, self.warn_throttle_sec, "Cannot compute particle weight given no point clouds.")
            return self.min_weight

        d_tot = 0.0
        n_tot = 0
        for scan in scans:
            points = finite_xyz(scan)
            if points.shape[0] == 0:
                continue
            points_map = se3_apply(pose, points)
            points_map = points_map[finite_mask(points_map)]
            residuals = self.point_residuals(points_map)
            defined = ~np.isnan(residuals)
            d_tot += float(np.sum(np.minimum(self.d_max, residuals[defined])))
            n_tot += int(np.count_nonzero(defined))

        if n_tot < 1:
            warn_throttled(_logger, self.warn_throttle_sec, "No scan point could be matched against the map.")
            return self.min_weight
        return d_tot / n_tot

    def _compute_range(self, scans: Sequence[np.ndarray], particles: List[Particle], start: int, stop: int) -> None:
        for i in range(start, stop):
            particles[i].weight = self.particle_weight(scans, particles[i].pose)

    def compute_particle_weights(self, scans: Sequence[np.ndarray], particles: List[Particle]) -> None:
        if len(particles) < 1:
            return

        scans_sparse = self.sparsify(scans)

        if self.multithreading and self.n_threads > 1:
            per_thread = math.ceil(len(particles) / float(self.n_threads))
            ranges = [
                (start, min(len(particles), start + per_thread))
                for start in range(0, len(particles), per_thread)
            ]
            with ThreadPoolExecutor(max_workers=self.n_threads) as executor:
                futures = [
                    executor.submit(self._compute_range, scans_sparse, particles, start, stop)
                    for start, stop in ranges
                ]
                for future in futures:
                    future.result()
        else:
            self._compute_range(scans_sparse, particles, 0, len(particles))

        normalize_weights(particles)


def make_sensor_model(params: SensorModelParams, map_points) -> ScanMatchingSensorModel:
    """
    Build the configured sensor model over a reference point cloud.

    Raises:
        ValueError: for an unknown model kind.
    """
    if params.kind == "endpoint":
        from mcl_localizer.sensors.endpoint import EndpointSensorModel
        return EndpointSensorModel.from_params(params, map_points)
    elif params.kind == "elevation":
        from mcl_localizer.sensors.elevation import ElevationSensorModel
        return ElevationSensorModel.from_params(params, map_points)
    raise ValueError(f"Unknown sensor model kind: {params.kind!r}")
