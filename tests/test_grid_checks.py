"""
Tests for the runtime grid consistency checks.
"""

import numpy as np
import pytest

from common.errors import GridConsistencyError
from grids.gaussian import OctahedralGaussianGrid, ReducedGaussianGrid
from grids.latlon import LatLonGrid
from validation.grid_checks import GridCheckConfig, GridConsistencyChecker


class SkewedGrid(LatLonGrid):
    """Lat/lon grid whose latitudes are reported out of order."""

    @property
    def latitudes(self):
        lats = np.array(super().latitudes)
        lats[[0, 1]] = lats[[1, 0]]
        return lats


@pytest.mark.parametrize("grid", [
    LatLonGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5),
    ReducedGaussianGrid(8),
    OctahedralGaussianGrid(8),
], ids=repr)
def test_all_checks_pass_on_builtin_layouts(grid):
    results = GridConsistencyChecker().check_all(grid)
    assert all(result.passed for result in results), [r for r in results if not r.passed]


def test_gaussian_grids_get_symmetry_check():
    names = [r.test_name for r in GridConsistencyChecker().check_all(OctahedralGaussianGrid(8))]
    assert "gaussian_symmetry" in names
    names = [r.test_name for r in GridConsistencyChecker().check_all(LatLonGrid(0, 1, 0, 1, 1, 1))]
    assert "gaussian_symmetry" not in names


def test_round_trip_skips_column_major_on_ragged_grid():
    result = GridConsistencyChecker().check_round_trip(OctahedralGaussianGrid(8))
    assert result.passed
    assert result.details['modes_checked'] == 8


def test_bijection_skipped_for_large_grids():
    checker = GridConsistencyChecker(GridCheckConfig(max_exhaustive_points=100))
    result = checker.check_bijection(LatLonGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5))
    assert result.passed
    assert result.details['skipped']


def test_round_trip_samples_large_grids(global_grid):
    checker = GridConsistencyChecker(GridCheckConfig(round_trip_samples=50))
    result = checker.check_round_trip(global_grid)
    assert result.passed
    assert result.details['modes_checked'] == 16


def test_descending_latitudes_violation_reported():
    grid = SkewedGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5)
    result = GridConsistencyChecker(log_violations=False).check_latitudes_descending(grid)
    assert not result.passed
    assert result.details['num_violations'] == 1


def test_strict_mode_raises():
    grid = SkewedGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5)
    checker = GridConsistencyChecker(strict_mode=True)
    with pytest.raises(GridConsistencyError, match="latitudes_descending"):
        checker.check_all(grid)
