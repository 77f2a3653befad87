"""
Tests for the lat/lon and Gaussian grid layouts.
"""

import math

import numpy as np
import pytest

from geospatial.quadrature import gaussian_latitudes
from grids.gaussian import OctahedralGaussianGrid, ReducedGaussianGrid, RegularGaussianGrid
from grids.indexing import grid_index
from grids.latlon import LatLonGrid


# ---------------------------------------------------------------------------
# Lat/lon grids
# ---------------------------------------------------------------------------

def test_latlon_axes(small_grid):
    np.testing.assert_array_equal(
        small_grid.latitudes,
        [35.0, 34.5, 34.0, 33.5, 33.0, 32.5, 32.0, 31.5, 31.0, 30.5, 30.0],
    )
    np.testing.assert_array_equal(
        small_grid.longitudes,
        [110.0, 110.5, 111.0, 111.5, 112.0, 112.5, 113.0, 113.5, 114.0, 114.5, 115.0],
    )
    assert small_grid.size == 121
    assert small_grid.is_rectangular
    assert not small_grid.is_global


def test_latlon_bounds_in_any_order():
    grid = LatLonGrid(35.0, 30.0, 115.0, 110.0, 0.5, 0.5)
    assert grid.cache_key == LatLonGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5).cache_key
    assert grid.latitudes[0] == 35.0


def test_latlon_arrays_read_only(small_grid):
    with pytest.raises(ValueError):
        small_grid.latitudes[0] = 0.0
    with pytest.raises(ValueError):
        small_grid.longitudes[0] = 0.0


@pytest.mark.parametrize("args", [
    (30.0, 35.0, 110.0, 115.0, 0.0, 0.5),
    (30.0, 35.0, 110.0, 115.0, 0.5, -0.5),
    (float("nan"), 35.0, 110.0, 115.0, 0.5, 0.5),
])
def test_latlon_rejects_bad_arguments(args):
    with pytest.raises(ValueError):
        LatLonGrid(*args)


@pytest.mark.parametrize("lat,lon,expected", [
    (35.0, 110.0, 0),
    (30.0, 115.0, 120),
    (32.5, 112.5, 60),
    (29.0, 112.0, 26),    # latitude wraps: 29 -> 34
    (36.0, 112.0, 92),    # latitude wraps: 36 -> 31
    (36.0, 116.0, 98),    # longitude clamps to the eastern bound
    (32.5, 472.5, 60),    # a full turn east maps back onto the grid
    (32.5, -247.5, 60),   # and a full turn west
])
def test_latlon_normalization(small_grid, lat, lon, expected):
    assert grid_index(small_grid, lat, lon) == expected


def test_latlon_longitude_clamps_to_nearer_bound(small_grid):
    assert small_grid.normalize_longitude(116.0) == 115.0
    assert small_grid.normalize_longitude(100.0) == 110.0


def test_latlon_sphere_wraps_longitude(global_grid):
    assert global_grid.normalize_longitude(-0.25) == 359.75
    assert global_grid.normalize_longitude(720.5) == 0.5
    assert global_grid.normalize_longitude(360.0) == 0.0


def test_latlon_sphere_starting_west_of_greenwich():
    grid = LatLonGrid(-90.0, 90.0, -180.0, 179.0, 1.0, 1.0)
    assert grid.is_global
    assert grid.normalize_longitude(190.0) == -170.0
    assert grid.get_nearest_index(0.0, 179.6) == (90, 0)


def test_nearest_exact_at_origin(global_grid):
    assert global_grid.get_nearest_index(0.0, 0.0) == (360, 0)
    assert global_grid.guess_nearest_index(0.0, 0.0) == (360, 0)


def test_guess_can_differ_from_exact_near_pole():
    grid = LatLonGrid(80.0, 90.0, 0.0, 300.0, 1.0, 60.0)
    # 0.45 degrees from the 89N row but 30 degrees of longitude off its
    # nearest column: the pole itself is geodesically closer
    assert grid.guess_nearest_index(89.45, 30.0) == (1, 0)
    assert grid.get_nearest_index(89.45, 30.0) == (0, 0)


# ---------------------------------------------------------------------------
# Gaussian grids
# ---------------------------------------------------------------------------

def test_regular_n48(f48):
    assert f48.rows == 96
    assert f48.is_rectangular
    assert f48.lon_points_at(0) == 192
    assert f48.size == 96 * 192
    assert f48.latitudes[0] == pytest.approx(88.572169, abs=1e-6)
    assert f48.latitudes[47] == pytest.approx(0.932630, abs=1e-6)
    assert f48.longitudes[1] == pytest.approx(360.0 / 192)
    assert f48.cache_key == "F48"


def test_reduced_row_counts(n8):
    lats = gaussian_latitudes(16)
    for row, lat in enumerate(lats):
        expected = max(4, 4 * round(8 * math.cos(math.radians(lat))))
        assert n8.lon_points_at(row) == expected
    assert n8.size == sum(n8.lon_points_at(r) for r in range(n8.rows))
    assert not n8.is_rectangular
    assert len(n8.longitudes) == 32
    assert n8.cache_key == "N8"


def test_reduced_row_longitudes_evenly_spaced(n8):
    row = 0
    longitudes = n8.longitudes_on_row(row)
    assert len(longitudes) == n8.lon_points_at(row)
    assert longitudes[0] == 0.0
    np.testing.assert_allclose(np.diff(longitudes), 360.0 / len(longitudes))


def test_octahedral_o32(o32):
    assert o32.rows == 64
    counts = [o32.lon_points_at(r) for r in range(o32.rows)]
    assert counts[:10] == [4] * 10
    assert counts[54:] == [4] * 10
    assert counts[10:54] == [128] * 44
    assert o32.size == 2 * 4 * 10 + 128 * 44
    assert o32.latitudes[0] == pytest.approx(87.86379883923267, abs=1e-9)
    assert o32.latitudes[31] == pytest.approx(1.3953069108194958, abs=1e-9)


def test_octahedral_nearest_at_origin(o32):
    assert o32.get_nearest_index(0.0, 0.0) == (31, 0)


def test_octahedral_longitudes_on_latitude(o32):
    assert len(o32.longitudes_on_latitude(89.0)) == 4
    assert len(o32.longitudes_on_latitude(0.5)) == 128
    assert len(o32.longitudes_on_latitude(-95.0)) == 4


def test_gaussian_longitude_wrap(o32):
    # 359.9 degrees is closer to column 0 than to the last column
    assert o32.get_nearest_index(1.39, 359.9) == (31, 0)
    assert o32.guess_nearest_index(1.39, 359.9) == (31, 0)


@pytest.mark.parametrize("cls", [RegularGaussianGrid, ReducedGaussianGrid, OctahedralGaussianGrid])
@pytest.mark.parametrize("order", [0, -3, 2.5])
def test_gaussian_rejects_bad_order(cls, order):
    with pytest.raises(ValueError):
        cls(order)


def test_gaussian_latitude_symmetry(o32, n8, f48):
    for grid in (o32, n8, f48):
        np.testing.assert_array_equal(grid.latitudes, -grid.latitudes[::-1])
