"""
Particle filter core.

- particle: Particle data class
- noise: per-axis Gaussian pose-noise sampler
- motion_model: MotionModel interface and the 6D odometry variant
- particle_filter: population owner and orchestration
"""

from mcl_localizer.filter.particle import Particle, make_particles
from mcl_localizer.filter.noise import GaussVectorGenerator
from mcl_localizer.filter.motion_model import MotionModel, SixDofMotionModel, make_motion_model
from mcl_localizer.filter.particle_filter import ParticleFilter

__all__ = [
    "GaussVectorGenerator",
    "MotionModel",
    "Particle",
    "ParticleFilter",
    "SixDofMotionModel",
    "make_motion_model",
    "make_particles",
]
