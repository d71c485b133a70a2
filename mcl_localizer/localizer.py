"""
In-process localization pipeline.

Assembles a motion model, a particle filter and a sensor model from
LocalizerParams and runs one localization cycle per call:

    odometry delta -> motion update -> weight computation -> mean origin

Process wiring (topics, TF broadcasting, map file loading) stays with the
caller; this class only sees numpy arrays.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

import numpy as np

from mcl_localizer.common.param_models import LocalizerParams
from mcl_localizer.filter.motion_model import MotionModel, make_motion_model
from mcl_localizer.filter.particle import particle_weights
from mcl_localizer.filter.particle_filter import ParticleFilter
from mcl_localizer.sensors.sensor_model import SensorModel, make_sensor_model

_logger = logging.getLogger(__name__)


class Localizer:
    """Monte Carlo localizer against a static reference map."""

    def __init__(
        self,
        motion_model: MotionModel,
        sensor_model: SensorModel,
        n_particles: int,
        start_pose: np.ndarray,
    ):
        self.motion_model = motion_model
        self.sensor_model = sensor_model
        self.n_particles = int(n_particles)
        self.start_pose = np.asarray(start_pose, dtype=float).reshape(6)
        self.filter = ParticleFilter(motion_model)
        self.reset()

    @classmethod
    def from_params(cls, params: LocalizerParams, map_points) -> "Localizer":
        """Build every component from validated parameters and a map cloud."""
        return cls(
            motion_model=make_motion_model(params.motion),
            sensor_model=make_sensor_model(params.sensor, map_points),
            n_particles=params.n_particles,
            start_pose=params.start_pose_vector(),
        )

    def reset(self, start_pose: Optional[np.ndarray] = None) -> None:
        """Reinitialize the population, optionally around a new start pose."""
        if start_pose is not None:
            self.start_pose = np.asarray(start_pose, dtype=float).reshape(6)
        self.filter.init(self.n_particles, self.start_pose)

    def step(self, movement: np.ndarray, scans: Sequence[np.ndarray]) -> np.ndarray:
        """
        Run one cycle.

        Args:
            movement: robot movement since the last cycle, in the robot frame
            scans: point clouds in the robot frame

        Returns:
            Mean particle origin (3,)
        """
        t0 = time.perf_counter()
        self.filter.update_motion(movement)
        t1 = time.perf_counter()
        self.sensor_model.compute_particle_weights(scans, self.filter.particles)
        t2 = time.perf_counter()
        mean = self.filter.get_mean()
        _logger.debug(
            "Cycle: motion %.1f ms, weights %.1f ms, %d particles",
            (t1 - t0) * 1e3, (t2 - t1) * 1e3, len(self.filter),
        )
        return mean

    def weights(self) -> np.ndarray:
        """Current particle weights (normalized, maximum 0)."""
        return particle_weights(self.filter.particles)
