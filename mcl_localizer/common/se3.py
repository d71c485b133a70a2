"""
SE(3) pose algebra for particle poses and odometry increments.

State representation: (x, y, z, rx, ry, rz) where:
- (x, y, z): translation in R^3
- (rx, ry, rz): rotation vector (axis-angle) in so(3)

Odometry noise is parameterized per Euler axis, so this module also
converts between rotations and roll/pitch/yaw. The RPY convention is
fixed-axis: R = Rz(yaw) @ Ry(pitch) @ Rx(roll), pitch in [-pi/2, pi/2].

Numerical Policy:
    ROTATION_EPSILON = 1e-10: ~sqrt(machine_epsilon) for stable trig

References:
- Barfoot (2017): State Estimation for Robotics
- Sola et al. (2018): A micro Lie theory for state estimation
"""

import math
import numpy as np
from scipy.spatial.transform import Rotation
from typing import Tuple


# For small-angle approximations: use when theta < eps to avoid division by ~0
ROTATION_EPSILON: float = 1e-10

IDENTITY_POSE = np.zeros(6, dtype=float)
IDENTITY_POSE.flags.writeable = False


# =============================================================================
# Exponential map (so(3) -> SO(3))
# =============================================================================


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix [v]_x of a 3-vector."""
    x, y, z = np.asarray(v, dtype=float).reshape(3)
    return np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ], dtype=float)


def rotvec_to_rotmat(rotvec: np.ndarray) -> np.ndarray:
    """
    Rotation matrix of a rotation vector (Rodrigues):

        R = I + sin(theta) K + (1 - cos(theta)) K^2,   K = [rotvec / theta]_x

    Below ROTATION_EPSILON the first-order expansion I + [rotvec]_x is used.
    """
    rotvec = np.asarray(rotvec, dtype=float).reshape(3)
    theta = float(np.linalg.norm(rotvec))
    if theta < ROTATION_EPSILON:
        return np.eye(3) + skew(rotvec)
    K = skew(rotvec / theta)
    return np.eye(3) + math.sin(theta) * K + (1.0 - math.cos(theta)) * (K @ K)


# =============================================================================
# Euler angle (roll, pitch, yaw) conversions
# =============================================================================


def rpy_to_rotmat(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Rotation matrix R = Rz(yaw) @ Ry(pitch) @ Rx(roll)."""
    return Rotation.from_euler("xyz", [roll, pitch, yaw]).as_matrix()


def rotmat_to_rpy(R: np.ndarray) -> Tuple[float, float, float]:
    """
    Decompose a rotation matrix into (roll, pitch, yaw).

    Inverse of rpy_to_rotmat; pitch is returned in [-pi/2, pi/2].
    """
    roll, pitch, yaw = Rotation.from_matrix(np.asarray(R, dtype=float)).as_euler("xyz")
    return float(roll), float(pitch), float(yaw)


def rpy_to_rotvec_batch(rpy: np.ndarray) -> np.ndarray:
    """Convert (N, 3) roll/pitch/yaw rows to (N, 3) rotation vectors."""
    rpy = np.asarray(rpy, dtype=float).reshape(-1, 3)
    return Rotation.from_euler("xyz", rpy).as_rotvec()


def pose_from_rpy(translation: np.ndarray, rpy: np.ndarray) -> np.ndarray:
    """Build a pose from a translation and roll/pitch/yaw angles."""
    t = np.asarray(translation, dtype=float).reshape(3)
    return np.concatenate([t, rpy_to_rotvec_batch(rpy)[0]])


def pose_to_rpy(pose: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Split a pose into its translation and (roll, pitch, yaw) angles."""
    pose = np.asarray(pose, dtype=float).reshape(6)
    rpy = np.array(rotmat_to_rpy(rotvec_to_rotmat(pose[3:6])), dtype=float)
    return pose[:3].copy(), rpy


# =============================================================================
# Group action
# =============================================================================


def se3_compose_batch(poses: np.ndarray, increments: np.ndarray) -> np.ndarray:
    """
    Row-wise composition: out[i] = poses[i] * increments[i].

    Args:
        poses: (N, 6) poses
        increments: (N, 6) increments expressed in each pose's local frame

    Returns:
        (N, 6) composed poses
    """
    poses = np.asarray(poses, dtype=float).reshape(-1, 6)
    increments = np.asarray(increments, dtype=float).reshape(-1, 6)
    if poses.shape[0] == 0:
        return poses.copy()

    R_a = Rotation.from_rotvec(poses[:, 3:6])
    R_b = Rotation.from_rotvec(increments[:, 3:6])

    t_out = poses[:, :3] + R_a.apply(increments[:, :3])
    rotvec_out = (R_a * R_b).as_rotvec()
    return np.hstack([t_out, rotvec_out])


def se3_apply(pose: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Move (N, 3) points from the pose's local frame into its parent frame."""
    pose = np.asarray(pose, dtype=float).reshape(6)
    R = rotvec_to_rotmat(pose[3:6])
    return np.asarray(points, dtype=float).reshape(-1, 3) @ R.T + pose[:3]
