"""
Monte Carlo localization of a mobile robot in a static 3D map.

Subpackages:
- common/: pose algebra, point-cloud helpers, parameters, logging helpers
- filter/: particles, pose-noise sampling, motion model, particle filter
- maps/: elevation map
- sensors/: sensor models (endpoint k-d tree, elevation grid)
"""

__version__ = "0.1.0"

__all__ = [
    "Localizer",
    "ParticleFilter",
]


def __getattr__(name):
    if name == "Localizer":
        from mcl_localizer.localizer import Localizer
        return Localizer
    elif name == "ParticleFilter":
        from mcl_localizer.filter.particle_filter import ParticleFilter
        return ParticleFilter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
