"""
Four-Corner Interpolators.

Every interpolator blends the four samples surrounding a point:

    p0 = (row,     col)        p1 = (row,     col + 1)
    p2 = (row + 1, col)        p3 = (row + 1, col + 1)

with the point's fractional position inside that cell given as
``weights = (w_row, w_col)``, each nominally in [0, 1]: w_row = 0 on the
first row, w_col = 0 on the first column.

On reduced grids the two rows of a cell have different column spacing,
so the point sits at a different fraction between p0/p1 than between
p2/p3. Such cells pass three weights, ``(w_row, w_col_top,
w_col_bottom)``; each row pair is then placed in its own frame, and two
weights are shorthand for ``w_col_top == w_col_bottom``.

Methods
-------
- bilinear: tensor-product linear blend.
- nearest: value of the closest corner; a weight of exactly 0.5 goes to
  the higher index.
- average: plain mean, ignores the weights.
- idw: inverse distance weighting in (w_row, w_col) space.
- kriging: inverse-variogram weighting with a spherical variogram. This
  is a weighting heuristic, not a solved kriging system.

References
----------
- Shepard, D. (1968). A two-dimensional interpolation function for
  irregularly-spaced data. Proc. 23rd ACM National Conference.
- Cressie, N. (1993). Statistics for Spatial Data, §2.3.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import Dict, Sequence, Tuple, Type

from common.constants import NumericalTolerances
from common.logging_config import get_logger

logger = get_logger(__name__)

# Corner positions in (w_row, w_col) space, in corner order
CORNER_POSITIONS: Tuple[Tuple[float, float], ...] = ((0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0))


class Interpolator(ABC):
    """Abstract base class for four-corner interpolators."""

    name: str = ""

    def interpolate(self, points: Sequence[float], weights: Sequence[float]) -> float:
        """Blend four corner values.

        Parameters
        ----------
        points : sequence of 4 floats
            Corner values in the order p0, p1, p2, p3.
        weights : sequence of 2 or 3 floats
            Fractional position (w_row, w_col), or
            (w_row, w_col_top, w_col_bottom) when the rows differ.

        Returns
        -------
        float
            Interpolated value.

        Raises
        ------
        ValueError
            If the number of points or weights is wrong.
        """
        if len(points) != 4:
            raise ValueError(f"Expected 4 corner values, got {len(points)}")
        if len(weights) not in (2, 3):
            raise ValueError(f"Expected 2 or 3 weights, got {len(weights)}")
        w_row, w_top = float(weights[0]), float(weights[1])
        w_bottom = float(weights[2]) if len(weights) == 3 else w_top
        return self._blend(tuple(float(p) for p in points), w_row, (w_top, w_bottom))

    @abstractmethod
    def _blend(
        self, points: Tuple[float, ...], w_row: float, w_cols: Tuple[float, float]
    ) -> float:
        """Blend with `w_cols[0]` on the first row and `w_cols[1]` on the second."""
        pass

    @staticmethod
    def _corner_offsets(w_row: float, w_cols: Tuple[float, float]):
        """(value index, row offset, column offset) of the point from each corner."""
        for i, (corner_row, corner_col) in enumerate(CORNER_POSITIONS):
            w_col = w_cols[int(corner_row)]
            yield i, w_row - corner_row, w_col - corner_col

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BilinearInterpolator(Interpolator):
    """Bilinear blend of the four corners.

    Examples
    --------
    >>> BilinearInterpolator().interpolate([10, 20, 30, 40], [0.5, 0.5])
    25.0
    """

    name = "bilinear"

    def _blend(self, points, w_row, w_cols):
        p0, p1, p2, p3 = points
        w_top, w_bottom = w_cols
        top = (1 - w_top) * p0 + w_top * p1
        bottom = (1 - w_bottom) * p2 + w_bottom * p3
        return (1 - w_row) * top + w_row * bottom


class NearestInterpolator(Interpolator):
    """Value of the corner nearest in weight space."""

    name = "nearest"

    def _blend(self, points, w_row, w_cols):
        p0, p1, p2, p3 = points
        if w_row < 0.5:
            return p0 if w_cols[0] < 0.5 else p1
        return p2 if w_cols[1] < 0.5 else p3


class AverageInterpolator(Interpolator):
    """Arithmetic mean of the four corners."""

    name = "average"

    def _blend(self, points, w_row, w_cols):
        return sum(points) / 4.0


class IDWInterpolator(Interpolator):
    """Inverse distance weighting.

    Parameters
    ----------
    power : float
        Distance exponent. Larger powers favor the nearest corner; as the
        power grows the result tends to the nearest corner's value.
    """

    name = "idw"

    def __init__(self, power: float = 2.0):
        if power <= 0:
            raise ValueError(f"IDW power must be positive, got {power}")
        self.power = power

    def _blend(self, points, w_row, w_cols):
        weighted_sum = 0.0
        weight_total = 0.0
        for i, d_row, d_col in self._corner_offsets(w_row, w_cols):
            value = points[i]
            distance = math.hypot(d_row, d_col)
            if distance < NumericalTolerances.CORNER_DISTANCE_EPSILON:
                return value
            weight = 1.0 / distance ** self.power
            weighted_sum += weight * value
            weight_total += weight
        return weighted_sum / weight_total

    def __repr__(self) -> str:
        return f"IDWInterpolator(power={self.power})"


class KrigingInterpolator(Interpolator):
    """Inverse-variogram weighting with a spherical variogram.

    Parameters
    ----------
    sill : float
        Variance of the field beyond the range.
    range_ : float
        Distance at which the variogram reaches the sill.
    nugget : float
        Variogram value at zero separation; also regularizes the weights.

    Notes
    -----
    For separation h = d / range_ the spherical variogram is

        γ(d) = nugget + sill * (1.5 h - 0.5 h³)    for d <= range_
        γ(d) = nugget + sill                        otherwise

    and each corner is weighted by 1 / (γ + nugget). Distances are
    measured in (w_col, w_row) space; a point on a corner returns that
    corner's value.
    """

    name = "kriging"

    def __init__(self, sill: float = 1.0, range_: float = 1.0, nugget: float = 0.1):
        if range_ <= 0:
            raise ValueError(f"Variogram range must be positive, got {range_}")
        if sill < 0 or nugget < 0:
            raise ValueError(f"Sill and nugget must be non-negative, got sill={sill}, nugget={nugget}")
        self.sill = sill
        self.range_ = range_
        self.nugget = nugget

    def variogram(self, distance: float) -> float:
        """Spherical variogram γ(distance)."""
        if distance > self.range_:
            return self.nugget + self.sill
        h = distance / self.range_
        return self.nugget + self.sill * (1.5 * h - 0.5 * h ** 3)

    def _blend(self, points, w_row, w_cols):
        weighted_sum = 0.0
        weight_total = 0.0
        for i, d_row, d_col in self._corner_offsets(w_row, w_cols):
            value = points[i]
            distance = math.hypot(d_col, d_row)
            if distance < NumericalTolerances.CORNER_DISTANCE_EPSILON:
                return value
            gamma = self.variogram(distance)
            denominator = gamma + self.nugget
            if denominator == 0.0:
                # Zero sill and nugget: no spatial structure to weight by
                return sum(points) / 4.0
            weight = 1.0 / denominator
            weighted_sum += weight * value
            weight_total += weight
        return weighted_sum / weight_total

    def __repr__(self) -> str:
        return f"KrigingInterpolator(sill={self.sill}, range_={self.range_}, nugget={self.nugget})"


_INTERPOLATORS: Dict[str, Type[Interpolator]] = {
    cls.name: cls
    for cls in (
        BilinearInterpolator,
        NearestInterpolator,
        AverageInterpolator,
        IDWInterpolator,
        KrigingInterpolator,
    )
}


@dataclass
class InterpolationConfig:
    """Configuration for building an interpolator.

    Attributes
    ----------
    method : str
        One of "bilinear", "nearest", "average", "idw", "kriging".
    power : float
        IDW distance exponent.
    sill, range_, nugget : float
        Kriging variogram parameters.
    """
    method: str = "bilinear"
    power: float = 2.0
    sill: float = 1.0
    range_: float = 1.0
    nugget: float = 0.1


def available_methods() -> Tuple[str, ...]:
    """Names accepted by `InterpolationConfig.method`."""
    return tuple(_INTERPOLATORS)


def create_interpolator(config: InterpolationConfig = None) -> Interpolator:
    """Build the interpolator described by `config`.

    Raises
    ------
    ValueError
        If the method name is unknown.
    """
    config = config or InterpolationConfig()
    method = config.method.lower()
    if method not in _INTERPOLATORS:
        raise ValueError(
            f"Unknown interpolation method {config.method!r}; "
            f"expected one of {', '.join(available_methods())}"
        )

    if method == "idw":
        interpolator = IDWInterpolator(power=config.power)
    elif method == "kriging":
        interpolator = KrigingInterpolator(
            sill=config.sill, range_=config.range_, nugget=config.nugget
        )
    else:
        interpolator = _INTERPOLATORS[method]()

    logger.debug(f"Created {interpolator!r}")
    return interpolator
