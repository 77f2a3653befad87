"""
Point Interpolation on Grid Layouts.

`GridInterpolator` ties a grid layout, the scan mode of a stored field,
a value reader and an interpolator together:

1. The nearest grid point is found with the layout's geodesic search.
2. The row is moved up if needed so the point lies between ``row`` and
   ``row + 1``. On each of those two rows the columns bracketing the
   point are located separately, which handles reduced grids whose rows
   carry different numbers of points. On global rows the column after
   the last one wraps to column 0.
3. The four corners are encoded with the scan-mode codec and read.
4. The fractional position inside the cell is computed from the
   latitudes and, separately for each row, from that row's bracketing
   longitudes (unrolled by 360 degrees across the wrap). The three
   weights are handed to the interpolator.

A corner that does not exist (e.g. a single-row grid) raises
`InvalidGridIndexError`; reader failures propagate unchanged and no
partial result is produced.
"""

from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from common.errors import InvalidGridIndexError
from common.logging_config import get_logger
from common.types import INVALID_INDEX, GeoPoint, GridCoordinate
from grids.base import Grid
from grids.indexing import corner_indices
from grids.nearest import bracket_longitude
from grids.scan_mode import ScanMode
from interpolation.interpolators import BilinearInterpolator, Interpolator
from interpolation.readers import ValueReader

logger = get_logger(__name__)


def _column_pair(lon: float, longitudes, wrap: bool) -> Tuple[int, int, float, float]:
    """Columns (left, right) around `lon` with their longitudes, right one unrolled."""
    count = len(longitudes)
    left, right = bracket_longitude(lon, longitudes, wrap)
    if left == right:
        if right + 1 < count:
            right = left + 1
        elif wrap:
            right = 0
        else:
            left = right - 1

    left_lon = float(longitudes[left]) if left >= 0 else float("nan")
    right_lon = float(longitudes[right])
    if wrap and right <= left:
        right_lon += 360.0
    return left, right, left_lon, right_lon


def _column_fraction(lon: float, left_lon: float, right_lon: float) -> float:
    if right_lon == left_lon:
        return 0.0
    return (lon - left_lon) / (right_lon - left_lon)


class GridInterpolator:
    """Interpolate a stored field at arbitrary points.

    Parameters
    ----------
    reader : ValueReader
        Source of samples, addressed by the linear index of `scan_mode`.
    grid : Grid
        Layout of the stored field.
    scan_mode : ScanMode
        Scanning mode of the stored field.
    interpolator : Interpolator, optional
        Blending method; bilinear when omitted.

    Examples
    --------
    >>> grid = LatLonGrid(30.0, 31.0, 120.0, 121.0, 1.0, 1.0)     # doctest: +SKIP
    >>> reader = ArrayValueReader([[15.0, 25.0, 10.0, 20.0]])     # doctest: +SKIP
    >>> GridInterpolator(reader, grid).interpolate_at(0, 30.5, 120.5)  # doctest: +SKIP
    17.5
    """

    def __init__(
        self,
        reader: ValueReader,
        grid: Grid,
        scan_mode: ScanMode = ScanMode(0),
        interpolator: Optional[Interpolator] = None
    ):
        self.reader = reader
        self.grid = grid
        self.scan_mode = ScanMode(scan_mode)
        self.interpolator = interpolator or BilinearInterpolator()
        self._logger = logger

    def _upper_row(self, lat: float, nearest_row: int) -> int:
        latitudes = self.grid.latitudes
        row = nearest_row
        # Rows run north to south: a point north of its nearest row
        # belongs to the cell above it
        if lat > latitudes[row] and row > 0:
            row -= 1
        return max(0, min(row, self.grid.rows - 2))

    def cell_corners(self, lat: float, lon: float) -> Tuple[Tuple[GridCoordinate, ...], Tuple[float, float, float]]:
        """Corner coordinates of the cell holding (lat, lon) and the blend weights.

        Returns
        -------
        corners : tuple of GridCoordinate
            (row, col), (row, col + 1), (row + 1, col), (row + 1, col + 1)
            with column numbers taken per row.
        weights : (float, float, float)
            Fractional position (w_row, w_col_top, w_col_bottom). The
            column fraction is measured on each row's own longitudes.
        """
        nlat, nlon = self.grid.normalize(lat, lon)
        nearest_row, _ = self.grid.get_nearest_index(lat, lon)
        row = self._upper_row(nlat, nearest_row)
        wrap = self.grid.is_global

        top_left, top_right, left_lon, right_lon = _column_pair(
            nlon, self.grid.longitudes_on_row(row), wrap
        )
        corners = [GridCoordinate(row, top_left), GridCoordinate(row, top_right)]
        w_top = _column_fraction(nlon, left_lon, right_lon)

        latitudes = self.grid.latitudes
        if self.grid.rows > 1:
            bottom_left, bottom_right, left_lon, right_lon = _column_pair(
                nlon, self.grid.longitudes_on_row(row + 1), wrap
            )
            w_bottom = _column_fraction(nlon, left_lon, right_lon)
            w_row = (nlat - latitudes[row]) / (latitudes[row + 1] - latitudes[row])
        else:
            bottom_left = bottom_right = INVALID_INDEX
            w_bottom = w_top
            w_row = 0.0
        corners += [GridCoordinate(row + 1, bottom_left), GridCoordinate(row + 1, bottom_right)]

        return tuple(corners), (float(w_row), float(w_top), float(w_bottom))

    def interpolate_at(self, time_step: int, lat: float, lon: float) -> float:
        """Interpolated field value at (lat, lon) for `time_step`.

        Raises
        ------
        InvalidGridIndexError
            If a corner of the cell falls outside the grid.
        DataUnavailableError
            Or any other error raised by the reader, unchanged.
        """
        corners, weights = self.cell_corners(lat, lon)
        indices = corner_indices(self.grid, corners, self.scan_mode)

        for (row, col), index in zip(corners, indices):
            if index == INVALID_INDEX:
                raise InvalidGridIndexError(row, col, int(self.scan_mode))

        points = [self.reader.read_value_at(time_step, index) for index in indices]
        return self.interpolator.interpolate(points, weights)

    def interpolate_many(
        self,
        time_step: int,
        points: Iterable[Union[GeoPoint, Tuple[float, float]]]
    ) -> NDArray[np.float64]:
        """Interpolate at several points; returns one value per point.

        The first failing point aborts the whole call.
        """
        values: List[float] = []
        for point in points:
            lat, lon = point.as_tuple() if isinstance(point, GeoPoint) else point
            values.append(self.interpolate_at(time_step, lat, lon))

        self._logger.debug(f"Interpolated {len(values)} points at time step {time_step}")
        return np.asarray(values, dtype=np.float64)
