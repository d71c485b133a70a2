"""
Point cloud helper tests: finite filtering and voxel downsampling.
"""

import numpy as np
import pytest

from mcl_localizer.common.pointcloud import as_xyz, finite_xyz, voxel_filter


class TestPointCloudHelpers:

    def test_intensity_column_ignored(self):
        cloud = np.array([[1.0, 2.0, 3.0, 42.0]])
        assert np.array_equal(as_xyz(cloud), [[1.0, 2.0, 3.0]])

    def test_empty_cloud(self):
        assert as_xyz([]).shape == (0, 3)

    def test_rejects_two_columns(self):
        with pytest.raises(ValueError):
            as_xyz(np.zeros((4, 2)))

    def test_non_finite_rows_removed(self):
        cloud = np.array([
            [0.0, 0.0, 0.0],
            [np.nan, 1.0, 1.0],
            [1.0, np.inf, 1.0],
            [2.0, 2.0, 2.0],
        ])
        assert np.array_equal(finite_xyz(cloud), [[0.0, 0.0, 0.0], [2.0, 2.0, 2.0]])


class TestVoxelFilter:
    """Voxel grid downsampling."""

    def test_voxel_filter_reduces_points(self, small_pointcloud):
        filtered = voxel_filter(small_pointcloud, 1.0)
        assert filtered.shape[0] < small_pointcloud.shape[0]
        assert filtered.shape[1] == 3

    def test_at_most_one_point_per_voxel(self, small_pointcloud):
        filtered = voxel_filter(small_pointcloud, 0.5)
        voxels = np.floor(filtered / 0.5)
        # Centroids stay inside their voxel, so voxel keys are unique.
        assert np.unique(voxels, axis=0).shape[0] == filtered.shape[0]

    def test_centroid_of_voxel(self):
        cloud = np.array([[0.1, 0.1, 0.1], [0.3, 0.3, 0.3], [5.0, 5.0, 5.0]])
        filtered = voxel_filter(cloud, 1.0)
        filtered = filtered[np.argsort(filtered[:, 0])]
        assert np.allclose(filtered, [[0.2, 0.2, 0.2], [5.0, 5.0, 5.0]])

    def test_single_point_passes_through(self):
        cloud = np.array([[0.2, 0.0, 0.0]])
        assert np.array_equal(voxel_filter(cloud, 0.1), cloud)

    def test_empty_and_non_finite(self):
        assert voxel_filter(np.empty((0, 3)), 0.1).shape == (0, 3)
        assert voxel_filter(np.array([[np.nan, 0.0, 0.0]]), 0.1).shape == (0, 3)

    def test_input_not_modified(self, small_pointcloud):
        before = small_pointcloud.copy()
        voxel_filter(small_pointcloud, 0.5)
        assert np.array_equal(small_pointcloud, before)
