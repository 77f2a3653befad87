"""
Tests for value readers and point interpolation on grids.
"""

import numpy as np
import pytest
import xarray as xr

from common.errors import DataUnavailableError, InvalidGridIndexError
from common.types import GeoPoint
from grids.gaussian import OctahedralGaussianGrid, ReducedGaussianGrid
from grids.indexing import grid_index_from_indices
from grids.latlon import LatLonGrid
from grids.scan_mode import ScanMode
from interpolation.grid_interpolator import GridInterpolator
from interpolation.interpolators import NearestInterpolator
from interpolation.readers import ArrayValueReader, ValueReader, XarrayValueReader


@pytest.fixture
def cell_grid():
    """2 x 2 grid: (31, 120) (31, 121) over (30, 120) (30, 121)."""
    return LatLonGrid(30.0, 31.0, 120.0, 121.0, 1.0, 1.0)


@pytest.fixture
def cell_reader():
    # Scan mode 0 order: north row first, west to east
    return ArrayValueReader([[15.0, 25.0, 10.0, 20.0]])


class FailingReader:
    def __init__(self):
        self.calls = 0

    def read_value_at(self, time_step, grid_index):
        self.calls += 1
        raise DataUnavailableError(time_step, grid_index, "offline")


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def test_array_reader():
    reader = ArrayValueReader(np.arange(6.0).reshape(2, 3))
    assert isinstance(reader, ValueReader)
    assert reader.read_value_at(1, 2) == 5.0
    assert ArrayValueReader([1.0, 2.0]).read_value_at(0, 1) == 2.0


@pytest.mark.parametrize("time_step,index", [(2, 0), (-1, 0), (0, 3), (0, -1)])
def test_array_reader_out_of_range(time_step, index):
    reader = ArrayValueReader(np.zeros((2, 3)))
    with pytest.raises(DataUnavailableError) as excinfo:
        reader.read_value_at(time_step, index)
    assert isinstance(excinfo.value, LookupError)
    assert excinfo.value.grid_index == index


def test_array_reader_rejects_cubes():
    with pytest.raises(ValueError):
        ArrayValueReader(np.zeros((2, 2, 2)))


def test_xarray_reader_flattens_lat_lon():
    data = xr.DataArray(
        np.arange(2 * 3 * 4, dtype=float).reshape(2, 3, 4),
        dims=("time", "latitude", "longitude"),
        name="t2m",
    )
    reader = XarrayValueReader(data)
    assert isinstance(reader, ValueReader)
    assert reader.read_value_at(0, 5) == 5.0
    assert reader.read_value_at(1, 11) == 23.0
    with pytest.raises(DataUnavailableError):
        reader.read_value_at(0, 12)
    with pytest.raises(DataUnavailableError):
        reader.read_value_at(2, 0)


def test_xarray_reader_explicit_dims():
    data = xr.DataArray(np.arange(6.0).reshape(3, 2), dims=("values", "step"))
    reader = XarrayValueReader(data, time_dim="step", grid_dims=["values"])
    assert reader.read_value_at(1, 2) == 5.0


@pytest.mark.parametrize("kwargs", [
    {"time_dim": "valid_time"},
    {"grid_dims": ["latitude"]},
])
def test_xarray_reader_rejects_bad_dims(kwargs):
    data = xr.DataArray(np.zeros((1, 2, 2)), dims=("time", "latitude", "longitude"))
    with pytest.raises(ValueError):
        XarrayValueReader(data, **kwargs)


# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("lat,lon,expected", [
    (30.5, 120.5, 17.5),   # cell center
    (30.0, 120.5, 15.0),   # southern edge
    (30.0, 120.0, 10.0),   # corner
    (31.0, 120.5, 20.0),   # northern edge
    (30.75, 120.25, 16.25),
])
def test_interpolate_single_cell(cell_grid, cell_reader, lat, lon, expected):
    interpolator = GridInterpolator(cell_reader, cell_grid)
    assert interpolator.interpolate_at(0, lat, lon) == pytest.approx(expected)


def test_interpolate_with_scan_mode(cell_grid):
    # Same field stored south to north, east to west
    mode = ScanMode.POSITIVE_J | ScanMode.NEGATIVE_I
    reader = ArrayValueReader([[20.0, 10.0, 25.0, 15.0]])
    interpolator = GridInterpolator(reader, cell_grid, mode)
    assert interpolator.interpolate_at(0, 30.75, 120.25) == pytest.approx(16.25)


def test_interpolate_linear_field_on_global_grid(global_grid):
    # f(lat, lon) = lat + 0.01 * lon is reproduced exactly away from the wrap
    lat_grid, lon_grid = np.meshgrid(global_grid.latitudes, global_grid.longitudes, indexing="ij")
    field = (lat_grid + 0.01 * lon_grid).ravel()
    interpolator = GridInterpolator(ArrayValueReader(field), global_grid)

    for lat, lon in [(39.9, 116.4), (-33.9, 151.2), (12.34, 200.01)]:
        assert interpolator.interpolate_at(0, lat, lon) == pytest.approx(lat + 0.01 * lon)


def test_interpolate_across_longitude_wrap(global_grid):
    field = np.zeros(global_grid.size)
    row = 360
    field[grid_index_from_indices(global_grid, row, 1439)] = 1.0
    field[grid_index_from_indices(global_grid, row + 1, 1439)] = 1.0
    interpolator = GridInterpolator(ArrayValueReader(field), global_grid)

    # 359.9 lies 60% of the way from column 1439 (359.75) to column 0 (360)
    assert interpolator.interpolate_at(0, 0.0, 359.9) == pytest.approx(0.4)
    assert interpolator.interpolate_at(0, -0.1, -0.1) == pytest.approx(0.4)


def test_interpolate_on_octahedral_grid():
    grid = OctahedralGaussianGrid(8)
    field = np.full(grid.size, 7.5)
    interpolator = GridInterpolator(ArrayValueReader(field), grid)
    assert interpolator.interpolate_at(0, 45.0, 100.0) == pytest.approx(7.5)
    assert interpolator.interpolate_at(0, 88.0, 359.0) == pytest.approx(7.5)


def test_cell_corners_on_ragged_rows():
    grid = OctahedralGaussianGrid(8)
    interpolator = GridInterpolator(ArrayValueReader(np.zeros(grid.size)), grid)
    corners, (w_row, w_top, w_bottom) = interpolator.cell_corners(60.0, 10.0)
    (r0, _), (r1, _), (r2, _), (r3, _) = corners
    assert r0 == r1 and r2 == r3 == r0 + 1
    assert grid.latitudes[r0] >= 60.0 >= grid.latitudes[r2]
    assert 0.0 <= w_row <= 1.0
    assert 0.0 <= w_top <= 1.0
    assert 0.0 <= w_bottom <= 1.0


def _longitude_field(grid):
    return np.concatenate([grid.longitudes_on_row(r) for r in range(grid.rows)])


def test_column_fraction_measured_per_row():
    grid = OctahedralGaussianGrid(8)
    interpolator = GridInterpolator(ArrayValueReader(np.zeros(grid.size)), grid)
    lat = (grid.latitudes[13] + grid.latitudes[14]) / 2.0
    assert (grid.lon_points_at(13), grid.lon_points_at(14)) == (32, 4)

    _, (w_row, w_top, w_bottom) = interpolator.cell_corners(lat, 100.0)
    assert w_row == pytest.approx(0.5)
    # 100 lies between 90 and 101.25 on the 32-point row, 90 and 180 on the 4-point row
    assert w_top == pytest.approx(10.0 / 11.25)
    assert w_bottom == pytest.approx(10.0 / 90.0)


@pytest.mark.parametrize("grid", [OctahedralGaussianGrid(8), ReducedGaussianGrid(8)], ids=repr)
def test_longitude_field_reproduced_on_ragged_rows(grid):
    # f(lat, lon) = lon is linear along every row, whatever its point count
    interpolator = GridInterpolator(ArrayValueReader(_longitude_field(grid)), grid)
    latitudes = grid.latitudes
    for row in range(grid.rows - 1):
        lat = (latitudes[row] + latitudes[row + 1]) / 2.0
        for lon in (40.0, 100.0, 200.0):
            assert interpolator.interpolate_at(0, lat, lon) == pytest.approx(lon), (row, lon)


def test_custom_interpolator(cell_grid, cell_reader):
    interpolator = GridInterpolator(cell_reader, cell_grid, interpolator=NearestInterpolator())
    assert interpolator.interpolate_at(0, 30.9, 120.1) == 15.0


def test_reader_failure_propagates(cell_grid):
    reader = FailingReader()
    interpolator = GridInterpolator(reader, cell_grid)
    with pytest.raises(DataUnavailableError, match="offline"):
        interpolator.interpolate_at(0, 30.5, 120.5)
    assert reader.calls == 1


def test_missing_corner_raises():
    grid = LatLonGrid(30.0, 30.0, 120.0, 121.0, 1.0, 1.0)
    interpolator = GridInterpolator(ArrayValueReader([[1.0, 2.0]]), grid)
    with pytest.raises(InvalidGridIndexError):
        interpolator.interpolate_at(0, 30.0, 120.5)


def test_interpolate_many(cell_grid, cell_reader):
    interpolator = GridInterpolator(cell_reader, cell_grid)
    values = interpolator.interpolate_many(0, [(30.5, 120.5), GeoPoint(30.0, 120.0)])
    np.testing.assert_allclose(values, [17.5, 10.0])


def test_interpolate_many_aborts_on_failure(cell_grid, cell_reader):
    interpolator = GridInterpolator(cell_reader, cell_grid)
    with pytest.raises(DataUnavailableError):
        interpolator.interpolate_many(1, [(30.5, 120.5)])
