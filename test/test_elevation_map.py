"""
Elevation map tests: construction, tile lookup, diff, persistence.
"""

import math
import os

import numpy as np
import pytest

from mcl_localizer.maps.elevation_map import ElevationMap


@pytest.fixture
def stacked_points():
    return np.array([
        [0.0, 0.0, 1.0],
        [0.0, 0.0, 2.0],
        [1.0, 1.0, 5.0],
    ])


class TestElevationMapConstruction:

    def test_cell_holds_maximum_height(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        assert emap.shape == (2, 2)
        assert emap.elevation(0.0, 0.0) == 2.0
        assert emap.elevation(1.0, 1.0) == 5.0
        assert math.isnan(emap.cell_elevation(0, 1))
        assert math.isnan(emap.cell_elevation(1, 0))

    def test_negative_heights_kept(self):
        emap = ElevationMap(np.array([[0.5, 0.5, -3.0], [0.5, 0.5, -1.0]]), resolution=1.0)
        assert emap.elevation(0.5, 0.5) == -1.0

    def test_origin_is_resolution_aligned(self):
        emap = ElevationMap(np.array([[-0.75, 1.3, 0.0], [0.4, 2.2, 0.0]]), resolution=0.5)
        assert emap.origin == pytest.approx((-1.0, 1.0))

    def test_all_points_covered(self, small_pointcloud):
        emap = ElevationMap(small_pointcloud, resolution=0.3)
        values = emap.elevations(small_pointcloud[:, :2])
        assert np.all(np.isfinite(values))
        assert np.all(values >= small_pointcloud[:, 2] - 1e-12)

    def test_resolution_clamped(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=0.0)
        assert emap.resolution() == pytest.approx(1e-3)

    def test_non_finite_points_ignored(self):
        cloud = np.array([
            [0.0, 0.0, 1.0],
            [np.nan, 0.0, 9.0],
            [0.0, 0.0, np.inf],
            [np.inf, np.inf, 4.0],
        ])
        emap = ElevationMap(cloud, resolution=1.0)
        assert emap.shape == (1, 1)
        assert emap.elevation(0.0, 0.0) == 1.0

    def test_empty_cloud(self):
        emap = ElevationMap(np.empty((0, 3)), resolution=0.1)
        assert emap.shape == (1, 1)
        assert math.isnan(emap.cell_elevation(0, 0))

    def test_single_point_gives_single_cell(self):
        emap = ElevationMap(np.array([[0.35, -0.15, 2.0]]), resolution=0.1)
        assert emap.shape == (1, 1)
        assert emap.cell_elevation(0, 0) == 2.0

    def test_grid_is_read_only(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        with pytest.raises(ValueError):
            emap.grid[0, 0] = 0.0


class TestTileLookup:

    def test_cell_center_maps_back_to_cell(self, small_pointcloud):
        emap = ElevationMap(small_pointcloud, resolution=0.25)
        nx, ny = emap.shape
        for ix in range(nx):
            for iy in range(ny):
                assert emap.tile(*emap.cell_center(ix, iy)) == (ix, iy)

    def test_out_of_bounds_is_nan(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        assert emap.tile(-0.5, 0.0) is None
        assert emap.tile(2.0, 0.0) is None
        assert math.isnan(emap.elevation(-0.5, 0.0))
        assert math.isnan(emap.cell_elevation(5, 0))
        assert math.isnan(emap.cell_elevation(-1, 0))

    def test_non_finite_query_is_nan(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        assert math.isnan(emap.elevation(math.nan, 0.0))
        assert math.isnan(emap.elevation(0.0, math.inf))

    def test_elevation_at_point(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        assert emap.elevation_at(np.array([1.2, 1.7, -10.0])) == 5.0

    def test_vectorized_matches_scalar(self, stacked_points):
        emap = ElevationMap(stacked_points, resolution=1.0)
        queries = np.array([[0.0, 0.0], [1.5, 1.5], [0.0, 1.0], [9.0, 9.0], [np.nan, 0.0]])
        values = emap.elevations(queries)
        for q, v in zip(queries, values):
            expected = emap.elevation(q[0], q[1])
            assert (math.isnan(v) and math.isnan(expected)) or v == expected


class TestElevationMapDiff:

    def test_diff_with_itself_is_zero(self, small_pointcloud):
        emap = ElevationMap(small_pointcloud, resolution=0.5)
        assert emap.diff(emap, 1.0) == 0.0

    def test_diff_is_mean_capped_height_difference(self):
        a = ElevationMap(np.array([[0.5, 0.5, 0.0], [1.5, 0.5, 0.0]]), resolution=1.0)
        b = ElevationMap(np.array([[0.5, 0.5, 0.2], [1.5, 0.5, 3.0]]), resolution=1.0)
        # Cells differ by 0.2 and 3.0 -> capped at 1.0.
        assert a.diff(b, 1.0) == pytest.approx(0.6)

    def test_diff_without_overlap_returns_cap(self):
        a = ElevationMap(np.array([[0.5, 0.5, 0.0]]), resolution=1.0)
        b = ElevationMap(np.array([[10.5, 10.5, 0.0]]), resolution=1.0)
        assert a.diff(b, 0.7) == 0.7

    def test_resolution_mismatch_logged_not_fatal(self, small_pointcloud, caplog):
        a = ElevationMap(small_pointcloud, resolution=0.5)
        b = ElevationMap(small_pointcloud, resolution=0.25)
        with caplog.at_level("ERROR"):
            d = a.diff(b, 1.0)
        assert np.isfinite(d)
        assert "same resolution" in caplog.text


class TestElevationMapSave:

    def test_save_writes_rows_per_x_index(self, stacked_points, tmp_path):
        emap = ElevationMap(stacked_points, resolution=1.0)
        path = emap.save(tmp_path / "map.csv")
        with open(path) as f:
            lines = f.read().splitlines()
        assert lines == ["2 nan", "nan 5"]

    def test_save_roundtrip_with_numpy(self, small_pointcloud, tmp_path):
        emap = ElevationMap(small_pointcloud, resolution=0.5)
        path = emap.save(tmp_path / "map.csv")
        loaded = np.loadtxt(path, ndmin=2)
        assert loaded.shape == emap.shape
        assert np.allclose(loaded, emap.grid, equal_nan=True, atol=1e-4)

    def test_default_name_from_timestamp(self, stacked_points, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        emap = ElevationMap(stacked_points, resolution=1.0)
        path = emap.save()
        assert path.endswith(".csv")
        assert path[:-4].isdigit()
        assert os.path.exists(tmp_path / path)
