"""
Sensor models.

- endpoint: nearest-neighbor distance to a point-cloud map (k-d tree)
- elevation: height difference to an elevation grid
"""

from mcl_localizer.sensors.sensor_model import (
    ScanMatchingSensorModel,
    SensorModel,
    make_sensor_model,
    normalize_weights,
)
from mcl_localizer.sensors.endpoint import EndpointSensorModel
from mcl_localizer.sensors.elevation import ElevationSensorModel

__all__ = [
    "ElevationSensorModel",
    "EndpointSensorModel",
    "ScanMatchingSensorModel",
    "SensorModel",
    "make_sensor_model",
    "normalize_weights",
]
