"""
Regular Latitude/Longitude Grids.

A lat/lon grid samples a rectangular region at constant angular steps.
Rows run from the northern bound to the southern bound and columns from
the western bound to the eastern bound.

Bounds Arithmetic
-----------------
Grid files frequently carry bounds and steps truncated to a fixed number
of decimals (e.g. a 1/6 degree step written as 0.166667 with an eastern
bound of 359.833). To keep the row and column counts and the sphere test
stable, the arithmetic is done on integer microdegrees and a span that
falls short of a whole number of steps by at most 1% of a step counts as
that whole number of steps. The same slack applies to the sphere test.

Normalization
-------------
- Latitude wraps modulo the latitude span, so a point one degree south
  of a regional grid maps one degree below its northern bound.
- On a sphere (the longitude span plus one step is a full turn) the
  longitude wraps into ``[min_lon, min_lon + 360)``.
- Otherwise the longitude is first moved by whole turns towards the
  grid and then clamped to ``[min_lon, max_lon]``.
"""

import math
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from common.constants import NumericalTolerances
from common.logging_config import get_logger
from grids.base import Grid
from grids.nearest import NearestSearchConfig

logger = get_logger(__name__)

_MICRO = NumericalTolerances.MICRODEGREES
_FULL_TURN = 360 * _MICRO

# Slack for bounds written with truncated decimals, as a fraction of one step
STEP_TOLERANCE = 0.01


def to_microdegrees(value: float) -> int:
    """Degrees to the nearest integer microdegree."""
    return int(round(value * _MICRO))


def _slack(step_ud: int) -> int:
    return int(step_ud * STEP_TOLERANCE)


def step_count(span: float, step: float) -> int:
    """Number of whole steps in `span`, tolerant of truncated bounds."""
    span_ud = to_microdegrees(abs(span))
    step_ud = to_microdegrees(step)
    if step_ud <= 0:
        raise ValueError(f"Grid step {step} is below one microdegree")
    steps, remainder = divmod(span_ud, step_ud)
    if step_ud - remainder <= _slack(step_ud):
        steps += 1
    return int(steps)


class LatLonGrid(Grid):
    """Uniform latitude/longitude grid.

    Parameters
    ----------
    min_lat, max_lat : float
        Latitude bounds in degrees, in either order.
    min_lon, max_lon : float
        Longitude bounds in degrees, in either order.
    lat_step, lon_step : float
        Positive angular steps in degrees.
    search_config : NearestSearchConfig, optional
        Tuning for nearest-point searches.

    Raises
    ------
    ValueError
        If a bound is NaN or a step is not positive.

    Examples
    --------
    >>> grid = LatLonGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5)
    >>> grid.size
    121
    >>> grid.get_nearest_index(32.5, 112.5)
    GridCoordinate(row=5, col=5)
    """

    def __init__(
        self,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
        lat_step: float,
        lon_step: float,
        search_config: Optional[NearestSearchConfig] = None
    ):
        bounds = (min_lat, max_lat, min_lon, max_lon, lat_step, lon_step)
        if any(math.isnan(value) for value in bounds):
            raise ValueError(f"Grid bounds must not be NaN, got {bounds}")
        if lat_step <= 0 or lon_step <= 0:
            raise ValueError(
                f"Grid steps must be positive, got lat_step={lat_step}, lon_step={lon_step}"
            )

        self.min_lat, self.max_lat = sorted((float(min_lat), float(max_lat)))
        self.min_lon, self.max_lon = sorted((float(min_lon), float(max_lon)))
        self.lat_step = float(lat_step)
        self.lon_step = float(lon_step)

        lat_count = step_count(self.max_lat - self.min_lat, self.lat_step) + 1
        lon_count = step_count(self.max_lon - self.min_lon, self.lon_step) + 1

        latitudes = self.max_lat - np.arange(lat_count, dtype=np.float64) * self.lat_step
        super().__init__(latitudes, np.full(lat_count, lon_count), search_config)

        self._longitudes = self.min_lon + np.arange(lon_count, dtype=np.float64) * self.lon_step
        self._longitudes.setflags(write=False)

        wrap_gap = (
            to_microdegrees(self.max_lon) + to_microdegrees(self.lon_step)
            - to_microdegrees(self.min_lon) - _FULL_TURN
        )
        self._sphere = abs(wrap_gap) <= _slack(to_microdegrees(self.lon_step))

        logger.debug(
            f"Built lat/lon grid {self.cache_key}: {lat_count} x {lon_count}, "
            f"sphere={self._sphere}"
        )

    @property
    def cache_key(self) -> str:
        return (
            f"L{self.min_lat:f},{self.max_lat:f},{self.min_lon:f},"
            f"{self.max_lon:f},{self.lat_step:f},{self.lon_step:f}"
        )

    @property
    def is_global(self) -> bool:
        """True when the longitudes close around the globe."""
        return self._sphere

    @property
    def longitudes(self) -> NDArray[np.float64]:
        """Longitudes shared by every row, west to east (read-only)."""
        return self._longitudes

    def longitudes_on_row(self, row: int) -> NDArray[np.float64]:
        return self._longitudes

    def normalize_latitude(self, lat: float) -> float:
        """Wrap `lat` into ``[min_lat, max_lat]`` modulo the span."""
        low = to_microdegrees(self.min_lat)
        high = to_microdegrees(self.max_lat)
        span = high - low
        if span == 0:
            return self.min_lat

        value = to_microdegrees(lat)
        if value > high:
            value -= -(-(value - high) // span) * span
        elif value < low:
            value += -(-(low - value) // span) * span
        return value / _MICRO

    def normalize_longitude(self, lon: float) -> float:
        """Bring `lon` into the grid's longitude range (see module notes)."""
        low = to_microdegrees(self.min_lon)
        value = low + (to_microdegrees(lon) - low) % _FULL_TURN
        if self._sphere:
            return value / _MICRO

        high = to_microdegrees(self.max_lon)
        if value <= high:
            return value / _MICRO
        # Past the eastern bound: clamp to whichever bound is nearer
        if value - high <= low + _FULL_TURN - value:
            return self.max_lon
        return self.min_lon

    def normalize(self, lat: float, lon: float) -> Tuple[float, float]:
        return self.normalize_latitude(lat), self.normalize_longitude(lon)
