"""
Type Definitions for Grid Addressing.

This module defines the small value types passed between the grid
layouts, the index codec and the interpolation layer.

Conventions
-----------
- Latitudes and longitudes are in DEGREES throughout the public API.
- Rows are latitude indices, stored north-to-south.
- Columns are longitude indices, stored west-to-east.
"""

from dataclasses import dataclass
import math
from typing import NamedTuple, Tuple


# Distinguished index returned for any invalid (row, col) combination
INVALID_INDEX = -1


@dataclass(frozen=True)
class GeoPoint:
    """A geographic point in degrees.

    Attributes
    ----------
    latitude : float
        Latitude in DEGREES. Range: [-90, 90].
    longitude : float
        Longitude in DEGREES. Any value; circular modulo 360.

    Examples
    --------
    >>> GeoPoint(51.5, -0.13).normalized()
    GeoPoint(latitude=51.5, longitude=359.87)
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if math.isnan(self.latitude) or math.isnan(self.longitude):
            raise ValueError("GeoPoint coordinates must not be NaN")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(
                f"Latitude {self.latitude} out of range [-90, 90]. "
                f"Did you swap latitude and longitude?"
            )

    def normalized(self) -> 'GeoPoint':
        """Return the same point with longitude in [0, 360)."""
        return GeoPoint(self.latitude, self.longitude % 360.0)

    def as_tuple(self) -> Tuple[float, float]:
        """(latitude, longitude) pair."""
        return self.latitude, self.longitude


class GridCoordinate(NamedTuple):
    """A (row, column) pair addressing one grid point."""
    row: int
    col: int


class GridPointLocation(NamedTuple):
    """Result of decoding a linear index back to coordinates.

    `ok` is False for invalid indices, in which case both coordinates
    are NaN.
    """
    latitude: float
    longitude: float
    ok: bool
