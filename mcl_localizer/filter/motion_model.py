"""
Odometry motion models.

GENERATIVE MODEL:
    Given a measured movement u = (t, rpy) in the robot frame and a 6x6
    motion covariance C, the per-axis noise variance is

        var = |C @ [tx, ty, tz, roll, pitch, yaw]|

    i.e. linear in the increment, so a stationary robot accumulates no
    uncertainty and a fast turn accumulates proportionally more. For every
    particle an independent noisy movement u_i ~ N(u, diag(var)) is drawn
    and applied in the particle's local frame:

        pose_i <- pose_i * u_i

    The absolute value keeps variances non-negative for backward motion and
    negative turns.

Variants are selected by configuration through make_motion_model().
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np

from mcl_localizer.common import constants
from mcl_localizer.common.param_models import MotionModelParams
from mcl_localizer.common.se3 import (
    pose_to_rpy,
    rpy_to_rotvec_batch,
    se3_compose_batch,
)
from mcl_localizer.filter.noise import GaussVectorGenerator, make_rng
from mcl_localizer.filter.particle import Particle, particle_poses

_logger = logging.getLogger(__name__)


class MotionModel(ABC):
    """Interface of the motion (prediction) step."""

    @abstractmethod
    def init(self, start_pose: np.ndarray, particles: List[Particle]) -> None:
        """Scatter the particles around the start pose."""

    @abstractmethod
    def move_particles(self, movement: np.ndarray, particles: List[Particle]) -> None:
        """Apply a noisy version of ``movement`` (robot frame) to every particle."""


class SixDofMotionModel(MotionModel):
    """
    Simplified 6D odometry motion model.

    Noise is sampled per Euler axis; translation and rotation are drawn
    independently.
    """

    def __init__(
        self,
        motion_covariance: Optional[np.ndarray] = None,
        start_pose_variance: Optional[Sequence[float]] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Args:
            motion_covariance: 6x6 matrix mapping increments to variances (default 0.1 * I)
            start_pose_variance: [x, y, z, roll, pitch, yaw] variances of the start pose
            rng: numpy Generator shared by all draws of this model
        """
        self.covariance = np.eye(6, dtype=float) * constants.MOTION_COVARIANCE_DIAG_DEFAULT
        self.start_variance = np.full(6, constants.START_POSE_VARIANCE_DEFAULT, dtype=float)
        self.rng = rng if rng is not None else np.random.default_rng()

        if motion_covariance is not None:
            self.set_motion_covariance(motion_covariance)
        if start_pose_variance is not None:
            self.set_start_pose_variance(start_pose_variance)

    @classmethod
    def from_params(cls, params: MotionModelParams) -> "SixDofMotionModel":
        return cls(
            motion_covariance=params.covariance_matrix(),
            start_pose_variance=params.start_pose_variance,
            rng=make_rng(params.rng_seed),
        )

    def set_start_pose_variance(self, variance: Sequence[float]) -> None:
        variance = np.asarray(variance, dtype=float).reshape(-1)
        if variance.shape != (6,):
            raise ValueError(f"start pose variance must have 6 entries, got {variance.shape[0]}")
        self.start_variance = variance.copy()

    def set_motion_covariance(self, covariance: np.ndarray) -> None:
        covariance = np.asarray(covariance, dtype=float)
        if covariance.shape != (6, 6):
            raise ValueError(f"motion covariance must be 6x6, got {covariance.shape}")
        self.covariance = covariance.copy()

    def init(self, start_pose: np.ndarray, particles: List[Particle]) -> None:
        if len(particles) == 0:
            return

        origin, rpy = pose_to_rpy(start_pose)
        random_origin = GaussVectorGenerator(origin, self.start_variance[:3], self.rng)
        random_rotation = GaussVectorGenerator(rpy, self.start_variance[3:6], self.rng)

        n = len(particles)
        origins = random_origin.sample(n)
        rotvecs = rpy_to_rotvec_batch(random_rotation.sample(n))
        for p, particle in enumerate(particles):
            particle.pose = np.concatenate([origins[p], rotvecs[p]])

    def noise_variance(self, movement: np.ndarray) -> np.ndarray:
        """Per-axis variance [tx, ty, tz, roll, pitch, yaw] for one movement."""
        translation, rpy = pose_to_rpy(movement)
        increment = np.concatenate([translation, rpy])
        return np.abs(self.covariance @ increment)

    def move_particles(self, movement: np.ndarray, particles: List[Particle]) -> None:
        if len(particles) == 0:
            return

        translation, rpy = pose_to_rpy(movement)
        variance = self.noise_variance(movement)

        random_translation = GaussVectorGenerator(translation, variance[:3], self.rng)
        random_rotation = GaussVectorGenerator(rpy, variance[3:6], self.rng)

        n = len(particles)
        noisy_movements = np.hstack([
            random_translation.sample(n),
            rpy_to_rotvec_batch(random_rotation.sample(n)),
        ])

        # Right-multiply: the movement is expressed in each particle's own frame.
        moved = se3_compose_batch(particle_poses(particles), noisy_movements)
        for p, particle in enumerate(particles):
            particle.pose = moved[p]


def make_motion_model(params: MotionModelParams) -> MotionModel:
    """Build the configured motion model."""
    _logger.debug("Creating 6D motion model (rng_seed=%d)", params.rng_seed)
    return SixDofMotionModel.from_params(params)
