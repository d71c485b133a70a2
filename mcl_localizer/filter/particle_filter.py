"""
Particle filter for robot localization.

The filter owns the particle population and delegates the prediction step
to a motion model. Observation updates are driven by the caller: between
two motion updates it passes the latest scans and ``filter.particles`` to a
sensor model, which rewrites the weights in place.

The filter neither resamples nor uses the weights in get_mean(); the mean
is the unweighted centroid of the particle origins.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from mcl_localizer.common.se3 import IDENTITY_POSE
from mcl_localizer.filter.motion_model import MotionModel
from mcl_localizer.filter.particle import Particle, make_particles, particle_poses

_logger = logging.getLogger(__name__)


class ParticleFilter:
    """
    Owner of the particle population.

    The motion model may be shared with other holders; the filter keeps a
    reference and never copies it.
    """

    def __init__(self, motion_model: MotionModel):
        self.motion_model = motion_model
        self.particles: List[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def init(self, n_particles: int, start_pose: np.ndarray = IDENTITY_POSE) -> None:
        """Replace the population with ``n_particles`` scattered around ``start_pose``."""
        start_pose = np.asarray(start_pose, dtype=float).reshape(6)
        self.particles = make_particles(n_particles, start_pose)
        self.motion_model.init(start_pose, self.particles)
        _logger.info("Initialized %d particles around %s", len(self.particles), start_pose[:3])

    def update_motion(self, movement: np.ndarray) -> None:
        """Move all particles by ``movement`` (robot frame) plus motion noise."""
        self.motion_model.move_particles(movement, self.particles)

    def get_mean(self) -> np.ndarray:
        """Unweighted mean of the particle origins; NaN vector for an empty population."""
        if len(self.particles) == 0:
            return np.full(3, np.nan)
        return particle_poses(self.particles)[:, :3].mean(axis=0)
