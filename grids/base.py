"""
Grid Layout Contract.

Every grid layout is an ordered sequence of latitude rows stored north
to south. Each row holds a number of evenly spaced longitude points,
either the same for every row (rectangular grids) or varying per row
(reduced and octahedral Gaussian grids).

Row Offsets
-----------
The per-row point counts are turned into a prefix-sum array once at
construction:

    row_offsets[0] = 0
    row_offsets[r + 1] = row_offsets[r] + lon_points_at(r)

so the first linear index of a row is a single lookup, the grid size is
``row_offsets[-1]``, and the row holding a given index is found with a
binary search (`numpy.searchsorted`).

Grids are immutable: every array exposed by this module is read-only.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Tuple

import numpy as np
from numpy.typing import NDArray

from common.types import GridCoordinate
from grids.nearest import (
    NearestSearchConfig,
    bracket_longitude,
    find_nearest_indices,
    nearest_by_degrees,
    nearest_by_distance,
    unique_pair,
)


@lru_cache(maxsize=256)
def even_longitudes(count: int, start: float = 0.0) -> NDArray[np.float64]:
    """`count` evenly spaced longitudes from `start` covering 360 degrees."""
    longitudes = start + np.arange(count, dtype=np.float64) * (360.0 / count)
    longitudes.setflags(write=False)
    return longitudes


def _readonly(values, dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.setflags(write=False)
    return array


class Grid(ABC):
    """Abstract base class for grid layouts.

    Parameters
    ----------
    latitudes : array_like
        Row latitudes in degrees, strictly descending.
    lon_points : array_like of int
        Number of longitude points on each row.
    search_config : NearestSearchConfig, optional
        Tuning for nearest-point searches.

    Raises
    ------
    ValueError
        If the latitude and point-count arrays differ in length, or a row
        has no points.
    """

    def __init__(self, latitudes, lon_points, search_config: NearestSearchConfig = None):
        self._latitudes = _readonly(latitudes, np.float64)
        self._lon_points = _readonly(lon_points, np.int64)

        if self._latitudes.ndim != 1 or self._latitudes.shape != self._lon_points.shape:
            raise ValueError(
                f"Expected one point count per latitude, got {self._latitudes.shape} "
                f"latitudes and {self._lon_points.shape} counts"
            )
        if self._lon_points.size and self._lon_points.min() < 1:
            raise ValueError("Every grid row needs at least one longitude point")

        self._row_offsets = _readonly(
            np.concatenate(([0], np.cumsum(self._lon_points))), np.int64
        )
        self._rectangular = bool(
            self._lon_points.size == 0 or np.all(self._lon_points == self._lon_points[0])
        )
        self.search_config = search_config or NearestSearchConfig()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def cache_key(self) -> str:
        """Canonical key identifying this layout, e.g. ``"O32"``."""
        pass

    @property
    @abstractmethod
    def is_global(self) -> bool:
        """Whether every row closes around the globe."""
        pass

    @abstractmethod
    def normalize(self, lat: float, lon: float) -> Tuple[float, float]:
        """Map an arbitrary coordinate into the grid's own coordinate range."""
        pass

    @abstractmethod
    def longitudes_on_row(self, row: int) -> NDArray[np.float64]:
        """Longitudes of the points on `row`, west to east."""
        pass

    @property
    def latitudes(self) -> NDArray[np.float64]:
        """Row latitudes in degrees, north to south (read-only)."""
        return self._latitudes

    @property
    def rows(self) -> int:
        return int(self._latitudes.size)

    @property
    def size(self) -> int:
        """Total number of grid points."""
        return int(self._row_offsets[-1])

    @property
    def row_offsets(self) -> NDArray[np.int64]:
        """Prefix sums of the per-row point counts (length rows + 1)."""
        return self._row_offsets

    @property
    def is_rectangular(self) -> bool:
        """Whether every row has the same number of points."""
        return self._rectangular

    def lon_points_at(self, row: int) -> int:
        """Number of longitude points on `row`; 0 for a row outside the grid."""
        if not 0 <= row < self.rows:
            return 0
        return int(self._lon_points[row])

    def row_offset(self, row: int) -> int:
        """Linear index of the first point of `row` in north-to-south storage."""
        return int(self._row_offsets[row])

    def row_containing(self, offset: int) -> int:
        """Row holding the `offset`-th point in north-to-south storage."""
        return int(np.searchsorted(self._row_offsets, offset, side="right")) - 1

    # ------------------------------------------------------------------
    # Nearest-point search
    # ------------------------------------------------------------------

    def _row_candidates(self, lat: float) -> Tuple[int, ...]:
        return unique_pair(*find_nearest_indices(lat, self._latitudes))

    def _column_candidates(self, lon: float, longitudes) -> List[Tuple[int, float]]:
        """Bracketing columns with their longitudes, nearest in degrees first."""
        lo, hi = bracket_longitude(lon, longitudes, self.is_global)
        # The wrap cell sits one full turn east of the first column
        hi_lon = longitudes[hi] + 360.0 if hi < lo else longitudes[hi]
        pairs = [(lo, float(longitudes[lo])), (hi, float(hi_lon))]
        if lo == hi:
            return pairs[:1]
        return sorted(pairs, key=lambda pair: abs(pair[1] - lon))

    def get_nearest_index(self, lat: float, lon: float) -> GridCoordinate:
        """(row, col) of the grid point geodesically nearest to (lat, lon).

        Up to two rows bracket the latitude and up to two columns per row
        bracket the longitude. The candidates are ranked with a truncated
        Vincenty distance and the first minimum wins; on each row the
        column nearer in degrees is tried first, which settles ties
        between coincident polar points.
        """
        nlat, nlon = self.normalize(lat, lon)

        candidates = []
        for row in self._row_candidates(nlat):
            longitudes = self.longitudes_on_row(row)
            row_lat = self._latitudes[row]
            for col, col_lon in self._column_candidates(nlon, longitudes):
                candidates.append(((row, col), row_lat, col_lon))

        row, col = nearest_by_distance(
            nlat, nlon, candidates, self.search_config.vincenty_iterations
        )
        return GridCoordinate(row, col)

    def guess_nearest_index(self, lat: float, lon: float) -> GridCoordinate:
        """(row, col) nearest to (lat, lon) by absolute degree difference.

        The row is picked first, then the column on that row. Near the
        poles this can disagree with `get_nearest_index`.
        """
        nlat, nlon = self.normalize(lat, lon)

        row = nearest_by_degrees(
            nlat, [(r, self._latitudes[r]) for r in self._row_candidates(nlat)]
        )
        col = nearest_by_degrees(nlon, self._column_candidates(nlon, self.longitudes_on_row(row)))
        return GridCoordinate(row, col)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cache_key}, rows={self.rows}, size={self.size})"
