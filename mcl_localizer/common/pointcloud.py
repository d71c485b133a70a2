"""
Point cloud helpers.

Clouds are numpy arrays of shape (N, 3) with [x, y, z] or (N, 4) with
[x, y, z, intensity]. The intensity channel is carried along but never
used for matching. Rows with a non-finite coordinate are treated as absent.
"""

import numpy as np


def as_xyz(cloud) -> np.ndarray:
    """
    View the XYZ columns of a cloud as a float64 (N, 3) array.

    Raises:
        ValueError: if the cloud has fewer than 3 columns.
    """
    arr = np.asarray(cloud, dtype=float)
    if arr.size == 0:
        return np.empty((0, 3), dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2 or arr.shape[1] < 3:
        raise ValueError(f"Point cloud must have shape (N, >=3), got {arr.shape}")
    return arr[:, :3]


def finite_mask(points: np.ndarray) -> np.ndarray:
    """Boolean mask of rows whose x, y and z are all finite."""
    return np.isfinite(points).all(axis=1)


def finite_xyz(cloud) -> np.ndarray:
    """XYZ rows of a cloud with non-finite points removed."""
    xyz = as_xyz(cloud)
    return xyz[finite_mask(xyz)]


def voxel_filter(cloud, voxel_size: float) -> np.ndarray:
    """
    Voxel grid downsampling.

    Every occupied cube of edge ``voxel_size`` is replaced by the centroid
    of the points it contains, so the output holds at most one point per
    voxel. Non-finite points are dropped.

    Args:
        cloud: Input point cloud (N, 3) or (N, 4)
        voxel_size: Voxel edge length (m), must be > 0

    Returns:
        Downsampled point cloud (M, 3) where M <= N
    """
    points = finite_xyz(cloud)
    if points.shape[0] == 0:
        return points

    voxel_indices = np.floor(points / voxel_size).astype(np.int64)
    _, inverse, counts = np.unique(voxel_indices, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)

    # Average points in each voxel
    sums = np.zeros((counts.shape[0], 3), dtype=float)
    np.add.at(sums, inverse, points)
    return sums / counts[:, None]
