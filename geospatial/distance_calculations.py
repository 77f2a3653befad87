"""
Geodesic Distance Calculations.

This module provides the distances used to decide which grid point is
"nearest" to an arbitrary location. Three models are available:

1. Haversine (spherical, closed form). Cheap, no failure mode, up to
   ~0.5% error against the ellipsoid.
2. Vincenty inverse solution on the WGS84 ellipsoid. Iterative, accurate
   to well below a millimeter when it converges, but it can fail to
   converge for nearly antipodal points.
3. Karney's algorithm through `pyproj.Geod`. Converges everywhere; used
   as the reference and as the fallback when Vincenty gives up.

All public functions take coordinates in DEGREES and return KILOMETERS.

Grid Lookups
------------
Nearest-point searches only compare candidate distances against each
other, so they call `vincenty_estimate` with a truncated iteration
budget (3 by default). The absolute value is then slightly off but the
ordering of candidates a fraction of a degree apart is preserved.

References
----------
- Vincenty, T. (1975). Direct and inverse solutions of geodesics on the
  ellipsoid with application of nested equations. Survey Review, 23(176).
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy, 87(1), 43-55.
"""

from dataclasses import dataclass
import math

import numpy as np
from numpy.typing import NDArray
from pyproj import Geod

from common.constants import PhysicalConstants, NumericalTolerances
from common.logging_config import get_logger
from common.units import Q_, constant_in, returns_kilometers

logger = get_logger(__name__)


# Sentinel returned by `vincenty_distance` when the iteration budget is exhausted
VINCENTY_FAILED = -1.0

_A = PhysicalConstants.EARTH_SEMI_MAJOR_AXIS.value
_F = PhysicalConstants.EARTH_FLATTENING.value
_B = PhysicalConstants.semi_minor_axis()

_HAVERSINE_RADIUS_KM = constant_in(PhysicalConstants.HAVERSINE_RADIUS, "km")

# Create the geodesic calculator for WGS84
_wgs84_geod = Geod(ellps='WGS84')


@dataclass(frozen=True)
class VincentyResult:
    """Outcome of the Vincenty inverse iteration.

    Attributes
    ----------
    distance_km : float
        Geodesic distance in kilometers. When `converged` is False this is
        the estimate from the last iteration performed.
    iterations : int
        Number of λ updates performed.
    converged : bool
        True when successive λ estimates differed by less than 1e-12 rad.
    """
    distance_km: float
    iterations: int
    converged: bool


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance on a 6371 km sphere.

    Parameters
    ----------
    lat1, lon1 : float
        First point in degrees.
    lat2, lon2 : float
        Second point in degrees.

    Returns
    -------
    float
        Distance in kilometers.

    Examples
    --------
    >>> round(haversine_distance(0.0, 0.0, 0.0, 90.0), 1)
    10007.5
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlam = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    # Rounding can push a a hair outside [0, 1] for antipodal pairs
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return _HAVERSINE_RADIUS_KM * c


def vincenty_inverse(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    max_iterations: int = NumericalTolerances.VINCENTY_MAX_ITERATIONS
) -> VincentyResult:
    """Solve the inverse geodesic problem on the WGS84 ellipsoid.

    Parameters
    ----------
    lat1, lon1 : float
        First point in degrees.
    lat2, lon2 : float
        Second point in degrees.
    max_iterations : int
        Iteration budget for the λ fixed-point iteration.

    Returns
    -------
    VincentyResult
        Distance, iteration count and convergence flag.

    Raises
    ------
    ValueError
        If `max_iterations` is not positive.

    Notes
    -----
    Coincident points return a zero distance immediately. On equatorial
    lines cos²α is zero and cos(2σm) is taken as 0.
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")

    U1 = math.atan((1 - _F) * math.tan(math.radians(lat1)))
    U2 = math.atan((1 - _F) * math.tan(math.radians(lat2)))
    L = math.radians(lon2 - lon1)

    sin_U1, cos_U1 = math.sin(U1), math.cos(U1)
    sin_U2, cos_U2 = math.sin(U2), math.cos(U2)

    lam = L
    sin_sigma = cos_sigma = sigma = cos2_alpha = cos_2sigma_m = 0.0
    converged = False
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        sin_lam = math.sin(lam)
        cos_lam = math.cos(lam)

        term1 = cos_U2 * sin_lam
        term2 = cos_U1 * sin_U2 - sin_U1 * cos_U2 * cos_lam
        sin_sigma = math.sqrt(term1 * term1 + term2 * term2)
        if sin_sigma == 0.0:
            return VincentyResult(distance_km=0.0, iterations=iterations, converged=True)

        cos_sigma = sin_U1 * sin_U2 + cos_U1 * cos_U2 * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)

        sin_alpha = cos_U1 * cos_U2 * sin_lam / sin_sigma
        cos2_alpha = 1 - sin_alpha * sin_alpha
        if cos2_alpha != 0.0:
            cos_2sigma_m = cos_sigma - 2 * sin_U1 * sin_U2 / cos2_alpha
        else:
            cos_2sigma_m = 0.0
        if math.isnan(cos_2sigma_m):
            cos_2sigma_m = 0.0

        C = _F / 16 * cos2_alpha * (4 + _F * (4 - 3 * cos2_alpha))
        lam_prev = lam
        lam = L + (1 - C) * _F * sin_alpha * (
            sigma + C * sin_sigma * (cos_2sigma_m + C * cos_sigma * (-1 + 2 * cos_2sigma_m ** 2))
        )

        if abs(lam - lam_prev) < NumericalTolerances.VINCENTY_LAMBDA_EPSILON:
            converged = True
            break

    u2 = cos2_alpha * (_A * _A - _B * _B) / (_B * _B)
    A = 1 + u2 / 16384 * (4096 + u2 * (-768 + u2 * (320 - 175 * u2)))
    B = u2 / 1024 * (256 + u2 * (-128 + u2 * (74 - 47 * u2)))
    delta_sigma = B * sin_sigma * (
        cos_2sigma_m + B / 4 * (
            cos_sigma * (-1 + 2 * cos_2sigma_m ** 2)
            - B / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma ** 2) * (-3 + 4 * cos_2sigma_m ** 2)
        )
    )

    distance_km = _B * A * (sigma - delta_sigma) / 1000.0
    return VincentyResult(distance_km=distance_km, iterations=iterations, converged=converged)


def vincenty_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    max_iterations: int = NumericalTolerances.VINCENTY_MAX_ITERATIONS
) -> float:
    """Vincenty distance in kilometers, or `VINCENTY_FAILED` (-1).

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float
        Points in degrees.
    max_iterations : int
        Iteration budget.

    Returns
    -------
    float
        Distance in kilometers, -1.0 when the iteration did not converge.
    """
    result = vincenty_inverse(lat1, lon1, lat2, lon2, max_iterations)
    if not result.converged:
        return VINCENTY_FAILED
    return result.distance_km


def vincenty_estimate(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    iterations: int = NumericalTolerances.VINCENTY_COMPARE_ITERATIONS
) -> float:
    """Truncated Vincenty distance for ranking nearby candidates.

    Unlike `vincenty_distance` this never returns the sentinel: the
    estimate after `iterations` steps is returned as is.
    """
    return vincenty_inverse(lat1, lon1, lat2, lon2, iterations).distance_km


@returns_kilometers
def geodesic_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Reference geodesic distance (Karney) in kilometers.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float
        Points in degrees.

    Returns
    -------
    float
        Distance in kilometers. Valid for every point pair, including
        antipodes.

    Examples
    --------
    >>> # Shanghai to Beijing
    >>> round(geodesic_distance(31.2304, 121.4737, 39.9042, 116.4074))
    1067
    """
    _, _, distance_m = _wgs84_geod.inv(lon1, lat1, lon2, lat2)
    return Q_(float(distance_m), "m")


def geodesic_distance_batch(
    lat1: NDArray[np.float64],
    lon1: NDArray[np.float64],
    lat2: NDArray[np.float64],
    lon2: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Compute reference geodesic distances for arrays of point pairs.

    Parameters
    ----------
    lat1, lon1 : ndarray
        First points in degrees.
    lat2, lon2 : ndarray
        Second points in degrees.

    Returns
    -------
    ndarray
        Geodesic distances in kilometers.

    Notes
    -----
    Inputs are broadcast against each other, so one point against many
    works as expected.
    """
    lat1, lon1, lat2, lon2 = np.broadcast_arrays(
        np.asarray(lat1, dtype=np.float64),
        np.asarray(lon1, dtype=np.float64),
        np.asarray(lat2, dtype=np.float64),
        np.asarray(lon2, dtype=np.float64),
    )
    _, _, distances = _wgs84_geod.inv(lon1, lat1, lon2, lat2)
    return np.asarray(distances, dtype=np.float64) / 1000.0


def robust_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    max_iterations: int = NumericalTolerances.VINCENTY_MAX_ITERATIONS
) -> float:
    """Vincenty distance with a Karney fallback on non-convergence.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float
        Points in degrees.
    max_iterations : int
        Vincenty iteration budget before falling back.

    Returns
    -------
    float
        Distance in kilometers; never the failure sentinel.
    """
    result = vincenty_inverse(lat1, lon1, lat2, lon2, max_iterations)
    if result.converged:
        return result.distance_km

    logger.debug(
        f"Vincenty did not converge after {result.iterations} iterations for "
        f"({lat1}, {lon1}) -> ({lat2}, {lon2}); using reference geodesic"
    )
    return geodesic_distance(lat1, lon1, lat2, lon2)
