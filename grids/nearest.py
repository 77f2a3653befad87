"""
Nearest-Point Search.

Finding the grid point nearest to an arbitrary location happens in two
stages:

1. Bracketing. The query latitude is located between two adjacent rows
   with a binary search, and on each of those rows the query longitude
   is located between two adjacent columns. This yields at most four
   candidate cells.
2. Ranking. Candidates are ranked either by a truncated Vincenty
   distance (exact search) or by plain degree differences per axis
   (fast guess). The guess can be wrong near the poles and the date
   line, where degrees are a poor proxy for distance.

`NearestGrids` widens the candidate set to three columns per bracketing
row and returns linear storage indices rather than (row, col) pairs.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from common.constants import NumericalTolerances
from common.logging_config import get_logger
from common.types import INVALID_INDEX
from geospatial.distance_calculations import vincenty_estimate
from grids.indexing import grid_index_from_indices
from grids.scan_mode import ScanMode

if TYPE_CHECKING:
    from grids.base import Grid

logger = get_logger(__name__)


@dataclass(frozen=True)
class NearestSearchConfig:
    """Tuning of nearest-point searches.

    Attributes
    ----------
    vincenty_iterations : int
        Iteration budget of the truncated Vincenty distance used to rank
        candidate cells. Three steps separate candidates a fraction of a
        degree apart reliably.
    """
    vincenty_iterations: int = NumericalTolerances.VINCENTY_COMPARE_ITERATIONS

    def __post_init__(self):
        if self.vincenty_iterations < 1:
            raise ValueError(
                f"vincenty_iterations must be positive, got {self.vincenty_iterations}"
            )


def find_nearest_indices(value: float, sorted_values: Sequence[float]) -> Tuple[int, int]:
    """Bracket `value` inside a monotonic sequence.

    Parameters
    ----------
    value : float
        Value to locate.
    sorted_values : sequence of float
        Strictly ascending or strictly descending values.

    Returns
    -------
    Tuple[int, int]
        ``(i, i)`` on an exact hit or when `value` lies outside the range
        (clamped to the first or last index), otherwise adjacent indices
        ``(i, i + 1)`` with `value` strictly between their values.
        An empty sequence gives ``(0, 0)``.

    Examples
    --------
    >>> find_nearest_indices(2.5, [1.0, 2.0, 3.0])
    (1, 2)
    >>> find_nearest_indices(34.2, [35.0, 34.5, 34.0])
    (1, 2)
    """
    count = len(sorted_values)
    if count < 2:
        return 0, 0

    last = count - 1
    ascending = sorted_values[0] <= sorted_values[last]

    def before(a, b) -> bool:
        return a < b if ascending else a > b

    if not before(sorted_values[0], value):
        return 0, 0
    if not before(value, sorted_values[last]):
        return last, last

    left, right = 0, last
    while right - left > 1:
        mid = (left + right) // 2
        if sorted_values[mid] == value:
            return mid, mid
        if before(sorted_values[mid], value):
            left = mid
        else:
            right = mid
    return left, right


def bracket_longitude(lon: float, longitudes: Sequence[float], wrap: bool) -> Tuple[int, int]:
    """Bracket a longitude on one row.

    When `wrap` is set the row closes around the globe: a longitude past
    the last column is bracketed by ``(last, 0)``. `lon` is expected to be
    already normalized into ``[longitudes[0], longitudes[0] + 360)``.
    """
    lo, hi = find_nearest_indices(lon, longitudes)
    last = len(longitudes) - 1
    if wrap and last > 0 and lo == hi == last and lon > longitudes[last]:
        return last, 0
    return lo, hi


def nearest_by_distance(
    lat: float,
    lon: float,
    candidates: Iterable[Tuple[Hashable, float, float]],
    iterations: int = NumericalTolerances.VINCENTY_COMPARE_ITERATIONS
) -> Optional[Hashable]:
    """Key of the candidate closest to (lat, lon).

    Parameters
    ----------
    lat, lon : float
        Query point in degrees.
    candidates : iterable of (key, latitude, longitude)
        Candidate points; keys are returned as given.
    iterations : int
        Vincenty iteration budget for the ranking distance.

    Returns
    -------
    key or None
        The first candidate with the smallest distance; a later candidate
        wins only when closer by more than a micrometer, so points that
        coincide (every column of a polar row) resolve to the earliest
        one. None when there are no candidates.
    """
    best_key = None
    best_distance = float("inf")
    for key, cand_lat, cand_lon in candidates:
        distance = vincenty_estimate(lat, lon, float(cand_lat), float(cand_lon), iterations)
        if distance < best_distance - NumericalTolerances.DISTANCE_TIE_EPSILON_KM:
            best_key, best_distance = key, distance
    return best_key


def nearest_by_degrees(value: float, candidates: Iterable[Tuple[Hashable, float]]) -> Optional[Hashable]:
    """Key of the candidate coordinate with the smallest absolute difference."""
    best_key = None
    best_diff = float("inf")
    for key, coordinate in candidates:
        diff = abs(float(coordinate) - value)
        if diff < best_diff:
            best_key, best_diff = key, diff
    return best_key


def unique_pair(first: int, second: int) -> Tuple[int, ...]:
    """(first, second) with the duplicate dropped when both are equal."""
    return (first,) if first == second else (first, second)


class NearestGrids:
    """Candidate storage indices around a point on one grid.

    Parameters
    ----------
    grid : Grid
        Grid to search.
    column_radius : int
        Columns taken on each side of the rounded column on every
        bracketing row.

    Examples
    --------
    >>> finder = NearestGrids(grid)                     # doctest: +SKIP
    >>> finder.nearest_grids(39.9, 116.4)               # doctest: +SKIP
    [288465, 288466, 288467, 289905, 289906, 289907]
    """

    def __init__(self, grid: "Grid", column_radius: int = 1):
        if column_radius < 0:
            raise ValueError(f"column_radius must be non-negative, got {column_radius}")
        self.grid = grid
        self.column_radius = column_radius
        self._logger = logger

    def _columns_around(self, row: int, lon: float) -> List[int]:
        longitudes = self.grid.longitudes_on_row(row)
        count = len(longitudes)
        if count == 1:
            return [0]

        step = float(longitudes[1] - longitudes[0])
        center = round((lon - float(longitudes[0])) / step)
        columns = []
        for col in range(center - self.column_radius, center + self.column_radius + 1):
            if self.grid.is_global:
                col %= count
            elif not 0 <= col < count:
                continue
            if col not in columns:
                columns.append(col)
        return columns

    def nearest_grids(self, lat: float, lon: float, mode: ScanMode = ScanMode(0)) -> List[int]:
        """Linear indices of the cells around (lat, lon).

        Rows come from the latitude bracket; on each row the columns are
        the rounded column and its neighbors, wrapped on global rows.
        Invalid indices are dropped and duplicates removed, keeping order.
        """
        nlat, nlon = self.grid.normalize(lat, lon)
        r0, r1 = find_nearest_indices(nlat, self.grid.latitudes)

        indices: List[int] = []
        for row in unique_pair(r0, r1):
            for col in self._columns_around(row, nlon):
                index = grid_index_from_indices(self.grid, row, col, mode)
                if index != INVALID_INDEX and index not in indices:
                    indices.append(index)

        self._logger.debug(f"{len(indices)} candidate cells around ({lat}, {lon})")
        return indices

    def nearest_grid(self, lat: float, lon: float, mode: ScanMode = ScanMode(0)) -> int:
        """Linear index of the exact nearest cell."""
        row, col = self.grid.get_nearest_index(lat, lon)
        return grid_index_from_indices(self.grid, row, col, mode)
