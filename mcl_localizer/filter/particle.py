"""Particle data class."""

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from mcl_localizer.common.se3 import IDENTITY_POSE


@dataclass
class Particle:
    """
    One pose hypothesis.

    Attributes:
        pose: [x, y, z, rx, ry, rz] in the map frame
        weight: mean capped residual distance to the map (lower = better fit)
    """
    pose: np.ndarray = field(default_factory=lambda: IDENTITY_POSE.copy())
    weight: float = 0.0

    def __post_init__(self):
        self.pose = np.array(self.pose, dtype=float).reshape(6)

    @property
    def origin(self) -> np.ndarray:
        return self.pose[:3]


def make_particles(n: int, pose: np.ndarray = IDENTITY_POSE) -> List[Particle]:
    """Allocate ``n`` particles, each holding its own copy of ``pose``."""
    return [Particle(pose) for _ in range(int(n))]


def particle_poses(particles: Sequence[Particle]) -> np.ndarray:
    """Stack particle poses into an (N, 6) array."""
    if len(particles) == 0:
        return np.empty((0, 6), dtype=float)
    return np.stack([p.pose for p in particles])


def particle_weights(particles: Sequence[Particle]) -> np.ndarray:
    """Particle weights as an (N,) array."""
    return np.array([p.weight for p in particles], dtype=float)
