"""
Gaussian Grids.

Gaussian grids place their latitude rows at the Gauss-Legendre
quadrature nodes, which makes them the natural companion of spectral
models. A grid of order N has 2N rows, N per hemisphere, symmetric about
the equator.

Variants
--------
- Regular ("F" grids): every row has 4N evenly spaced longitudes.
- Reduced ("N" grids): rows keep roughly constant zonal spacing,
  ``max(4, 4 * round(N * cos(lat)))`` points per row.
- Octahedral ("O" grids): ``max(4, 4 * N * round(sin(colatitude)))``
  points per row, so the rows poleward of 60 degrees collapse to 4 points
  and the rest carry 4N.

All variants are global: longitudes start at 0 on every row and wrap.

References
----------
- Hortal, M. & Simmons, A.J. (1991). Use of reduced Gaussian grids in
  spectral models. Monthly Weather Review, 119(4), 1057-1074.
- Malardel, S. et al. (2016). A new grid for the IFS. ECMWF Newsletter 146.
"""

import math
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from geospatial.quadrature import gaussian_latitudes
from grids.base import Grid, even_longitudes
from grids.nearest import NearestSearchConfig, find_nearest_indices, nearest_by_degrees, unique_pair

logger = get_logger(__name__)

# Fewest longitude points any Gaussian row may carry
MIN_ROW_POINTS = 4


class GaussianGrid(Grid):
    """Shared behavior of the Gaussian grid family.

    Parameters
    ----------
    n : int
        Grid order: number of latitude rows between pole and equator.
    lon_points : array_like of int
        Points per row, north to south.
    """

    prefix = ""

    def __init__(self, n: int, lon_points, search_config: Optional[NearestSearchConfig] = None):
        super().__init__(gaussian_latitudes(2 * n), lon_points, search_config)
        self.n = n
        logger.debug(f"Built Gaussian grid {self.cache_key}: {self.rows} rows, {self.size} points")

    @staticmethod
    def check_order(n: int) -> int:
        """Canonical integer order; rejects bools, fractions and n < 1."""
        if isinstance(n, bool) or int(n) != n or n < 1:
            raise ValueError(f"Gaussian grid order must be a positive integer, got {n!r}")
        return int(n)

    @property
    def cache_key(self) -> str:
        return f"{self.prefix}{self.n}"

    @property
    def is_global(self) -> bool:
        return True

    def longitudes_on_row(self, row: int) -> NDArray[np.float64]:
        """Evenly spaced longitudes from 0 for the row's point count."""
        return even_longitudes(self.lon_points_at(row))

    def normalize(self, lat: float, lon: float) -> Tuple[float, float]:
        return min(90.0, max(-90.0, lat)), lon % 360.0


class RegularGaussianGrid(GaussianGrid):
    """Full Gaussian grid ("F" grid) with 4N longitudes on every row.

    Examples
    --------
    >>> grid = RegularGaussianGrid(48)
    >>> grid.rows, grid.lon_points_at(0)
    (96, 192)
    """

    prefix = "F"

    def __init__(self, n: int, search_config: Optional[NearestSearchConfig] = None):
        n = self.check_order(n)
        super().__init__(n, np.full(2 * n, 4 * n), search_config)

    @property
    def longitudes(self) -> NDArray[np.float64]:
        """The 4N longitudes shared by every row (read-only)."""
        return even_longitudes(4 * self.n)


class ReducedGaussianGrid(GaussianGrid):
    """Reduced Gaussian grid ("N" grid).

    Row r carries ``max(4, 4 * round(N * cos(lat_r)))`` points, keeping
    the zonal spacing close to that of the equatorial row.
    """

    prefix = "N"

    def __init__(self, n: int, search_config: Optional[NearestSearchConfig] = None):
        n = self.check_order(n)
        counts = [
            max(MIN_ROW_POINTS, 4 * int(round(n * math.cos(math.radians(lat)))))
            for lat in gaussian_latitudes(2 * n)
        ]
        super().__init__(n, counts, search_config)

    @property
    def longitudes(self) -> NDArray[np.float64]:
        """Longitudes of the conceptual full row of 4N points."""
        return even_longitudes(4 * self.n)


class OctahedralGaussianGrid(GaussianGrid):
    """Octahedral Gaussian grid ("O" grid).

    Examples
    --------
    >>> grid = OctahedralGaussianGrid(32)
    >>> grid.lon_points_at(0), grid.lon_points_at(31)
    (4, 128)
    """

    prefix = "O"

    def __init__(self, n: int, search_config: Optional[NearestSearchConfig] = None):
        n = self.check_order(n)
        counts = [
            max(MIN_ROW_POINTS, 4 * n * int(round(math.sin(math.radians(90.0 - lat)))))
            for lat in gaussian_latitudes(2 * n)
        ]
        super().__init__(n, counts, search_config)

    def longitudes_on_latitude(self, lat: float) -> NDArray[np.float64]:
        """Longitudes of the row whose latitude is nearest to `lat`."""
        lat = min(90.0, max(-90.0, lat))
        rows = unique_pair(*find_nearest_indices(lat, self.latitudes))
        row = nearest_by_degrees(lat, [(r, self.latitudes[r]) for r in rows])
        return self.longitudes_on_row(row)
