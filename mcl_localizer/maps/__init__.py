"""Reference map representations."""

from mcl_localizer.maps.elevation_map import ElevationMap

__all__ = ["ElevationMap"]
