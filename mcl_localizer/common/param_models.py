"""Pydantic parameter models for the localizer."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Literal

import numpy as np
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcl_localizer.common import constants
from mcl_localizer.common.se3 import pose_from_rpy


def _default_motion_covariance() -> List[float]:
    return [float(v) for v in (np.eye(6) * constants.MOTION_COVARIANCE_DIAG_DEFAULT).reshape(-1)]


class BaseLocalizerParams(BaseModel):
    """Shared parameter base."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class MotionModelParams(BaseLocalizerParams):
    """6D motion model parameters."""

    # Row-major 6x6 matrix mapping [tx, ty, tz, roll, pitch, yaw] to variances.
    motion_covariance: List[float] = Field(
        default_factory=_default_motion_covariance,
        min_length=36,
        max_length=36,
    )
    start_pose_variance: List[float] = Field(
        default_factory=lambda: [constants.START_POSE_VARIANCE_DEFAULT] * 6,
        min_length=6,
        max_length=6,
    )
    rng_seed: int = Field(constants.RNG_SEED_RANDOM, ge=-1)

    @field_validator("start_pose_variance")
    @classmethod
    def _non_negative_variance(cls, value: List[float]) -> List[float]:
        if any(v < 0.0 for v in value):
            raise ValueError("start_pose_variance entries must be >= 0")
        return value

    def covariance_matrix(self) -> np.ndarray:
        return np.asarray(self.motion_covariance, dtype=float).reshape(6, 6)


class SensorModelParams(BaseLocalizerParams):
    """Sensor model parameters (shared by the endpoint and elevation variants)."""

    kind: Literal["endpoint", "elevation"] = "endpoint"
    d_max: float = Field(constants.SENSOR_D_MAX_DEFAULT, gt=0.0)
    sparsification_resolution: float = constants.SPARSIFICATION_RESOLUTION_DEFAULT
    min_sparsification_resolution: float = Field(constants.SPARSIFICATION_RESOLUTION_MIN, gt=0.0)
    min_weight: float = constants.PARTICLE_WEIGHT_MIN
    multithreading: bool = True
    # 0 selects the hardware concurrency.
    n_threads: int = Field(0, ge=0)
    elevation_resolution: float = constants.ELEVATION_RESOLUTION_DEFAULT
    elevation_resolution_min: float = Field(constants.ELEVATION_RESOLUTION_MIN, gt=0.0)
    warn_throttle_sec: float = Field(constants.WARN_THROTTLE_SEC, ge=0.0)


class LocalizerParams(BaseLocalizerParams):
    """Top-level parameter model."""

    n_particles: int = Field(constants.N_PARTICLES_DEFAULT, ge=1)
    # [x, y, z, roll, pitch, yaw]
    start_pose: List[float] = Field(
        default_factory=lambda: [0.0] * 6,
        min_length=6,
        max_length=6,
    )
    motion: MotionModelParams = Field(default_factory=MotionModelParams)
    sensor: SensorModelParams = Field(default_factory=SensorModelParams)

    def start_pose_vector(self) -> np.ndarray:
        """Start pose as [x, y, z, rx, ry, rz]."""
        return pose_from_rpy(self.start_pose[:3], self.start_pose[3:])


def unwrap_ros_parameters(data: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the ``/**: ros__parameters:`` wrapper used by ROS 2 YAML files."""
    if "/**" in data and "ros__parameters" in (data.get("/**") or {}):
        return data["/**"]["ros__parameters"] or {}
    return data


def load_params(path: str | os.PathLike) -> LocalizerParams:
    """
    Load and validate localizer parameters from a YAML file.

    Raises:
        pydantic.ValidationError: if a value violates the parameter models.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return LocalizerParams.model_validate(unwrap_ros_parameters(data))
