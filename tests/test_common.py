"""
Tests for the shared value types, units and logging helpers.
"""

import logging
import math

import pytest

from common.constants import PhysicalConstants
from common.errors import DataUnavailableError, GridAddressingError, InvalidGridIndexError
from common.logging_config import get_logger, set_level
from common.types import GeoPoint, GridCoordinate
from common.units import Q_, constant_in, returns_kilometers, to_kilometers
from grids.cache import GridCache
from grids.nearest import NearestGrids
from interpolation.grid_interpolator import GridInterpolator
from interpolation.readers import ArrayValueReader


def test_geopoint_normalized():
    point = GeoPoint(51.5, -0.13).normalized()
    assert point.latitude == 51.5
    assert point.longitude == pytest.approx(359.87)
    assert GeoPoint(10.0, 725.0).normalized().as_tuple() == (10.0, 5.0)


@pytest.mark.parametrize("lat,lon", [(91.0, 0.0), (-90.5, 10.0), (math.nan, 0.0), (0.0, math.nan)])
def test_geopoint_rejects_bad_coordinates(lat, lon):
    with pytest.raises(ValueError):
        GeoPoint(lat, lon)


def test_grid_coordinate_is_a_tuple():
    row, col = GridCoordinate(3, 4)
    assert (row, col) == (3, 4)


def test_to_kilometers():
    assert to_kilometers(1500.0) == 1.5
    assert to_kilometers(2.0, "km") == 2.0
    assert to_kilometers(Q_(1.0, "mile")) == pytest.approx(1.609344)
    with pytest.raises(ValueError):
        to_kilometers(Q_(3.0, "second"))


def test_constant_in():
    assert constant_in(PhysicalConstants.HAVERSINE_RADIUS, "km") == 6371.0
    assert PhysicalConstants.semi_minor_axis() == pytest.approx(6_356_752.314245, abs=1e-5)


def test_returns_kilometers():
    @returns_kilometers
    def span(meters):
        return Q_(meters, "m")

    @returns_kilometers
    def plain():
        return 7.0

    assert span(2500.0) == 2.5
    assert plain() == 7.0


def test_error_hierarchy():
    error = DataUnavailableError(2, 17, "past end of file")
    assert isinstance(error, GridAddressingError)
    assert isinstance(error, LookupError)
    assert "past end of file" in str(error)

    error = InvalidGridIndexError(5, -1, 0)
    assert isinstance(error, ValueError)
    assert (error.row, error.col, error.scan_mode) == (5, -1, 0)


def test_set_level_updates_library_loggers():
    logger = get_logger("grids.example")
    other = logging.getLogger("some_application")
    other.setLevel(logging.INFO)

    set_level(logging.DEBUG)
    assert logger.level == logging.DEBUG
    assert other.level == logging.INFO

    set_level(logging.WARNING, "grids.example")
    assert logger.level == logging.WARNING


def test_new_components_keep_chosen_level():
    names = ("grids.cache", "grids.nearest", "interpolation.grid_interpolator")
    set_level(logging.DEBUG)
    try:
        cache = GridCache()
        grid = cache.latlon(0.0, 1.0, 0.0, 1.0, 1.0, 1.0)
        NearestGrids(grid)
        GridInterpolator(ArrayValueReader([[0.0] * 4]), grid)
        get_logger("grids.cache")
        for name in names:
            assert logging.getLogger(name).level == logging.DEBUG
    finally:
        set_level(logging.INFO)
