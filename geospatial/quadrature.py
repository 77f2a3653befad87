"""
Gauss-Legendre Quadrature Latitudes.

The latitude rows of every Gaussian grid are the arcsines of the roots of
the Legendre polynomial P_N. This module finds those roots with Newton's
method and converts them to latitudes.

Numerical Method
----------------
- P_N(x) is evaluated with Bonnet's three-term recurrence
  (k+1) P_{k+1} = (2k+1) x P_k - k P_{k-1}.
- P'_N(x) = N (x P_N(x) - P_{N-1}(x)) / (x^2 - 1).
- Root i starts from the Chebyshev-like guess cos(π(4i+3)/(4N+2)) and is
  refined until the Newton step drops below 1e-15 or 10 steps elapse.
  There is no failure signal: near the poles the last digits may be lost,
  which is accepted.

Only the northern half is iterated; the southern half is its mirror image,
which makes the equatorial symmetry exact rather than approximate.

References
----------
- Abramowitz, M. & Stegun, I. (1972). Handbook of Mathematical Functions, §22.
- ECMWF, "Gaussian grid with 48 latitude lines between pole and equator (N48)".
"""

from functools import lru_cache
import math
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from common.constants import NumericalTolerances
from common.logging_config import get_logger

logger = get_logger(__name__)


def legendre_polynomial(n: int, x: float) -> float:
    """Value of the Legendre polynomial P_n at x."""
    if n == 0:
        return 1.0
    if n == 1:
        return x

    p0, p1 = 1.0, x
    for k in range(2, n + 1):
        p0, p1 = p1, ((2 * k - 1) * x * p1 - (k - 1) * p0) / k
    return p1


def legendre_derivative(n: int, x: float) -> float:
    """Value of dP_n/dx at x, for |x| < 1."""
    if n == 0:
        return 0.0
    if n == 1:
        return 1.0
    return n * (x * legendre_polynomial(n, x) - legendre_polynomial(n - 1, x)) / (x * x - 1.0)


def _newton_root(n: int, i: int) -> Tuple[float, bool]:
    """Refine root i of P_n; returns (root, converged)."""
    x = math.cos(math.pi * (4 * i + 3) / (4 * n + 2))

    for _ in range(NumericalTolerances.NEWTON_MAX_ITERATIONS):
        dx = -legendre_polynomial(n, x) / legendre_derivative(n, x)
        x += dx
        if abs(dx) < NumericalTolerances.NEWTON_STEP_EPSILON:
            return x, True
    return x, False


@lru_cache(maxsize=None)
def _legendre_roots(n: int) -> NDArray[np.float64]:
    roots = np.zeros(n, dtype=np.float64)
    unconverged = 0

    for i in range(n // 2):
        root, converged = _newton_root(n, i)
        unconverged += not converged
        roots[i] = root
        roots[n - 1 - i] = -root
    # odd orders have a root exactly on the equator, left at 0.0

    if unconverged:
        logger.debug(
            f"{unconverged} of {n // 2} Legendre roots of order {n} "
            f"used the full Newton budget"
        )

    roots.setflags(write=False)
    return roots


def gaussian_latitudes(n: int) -> NDArray[np.float64]:
    """Gaussian latitudes for quadrature order n.

    Parameters
    ----------
    n : int
        Number of latitudes (order of the Legendre polynomial).

    Returns
    -------
    ndarray
        n latitudes in degrees, ordered north to south. The array is
        read-only and shared between callers.

    Raises
    ------
    ValueError
        If n is less than 1.

    Examples
    --------
    >>> lats = gaussian_latitudes(96)
    >>> round(float(lats[0]), 6)
    88.572169
    """
    if n < 1:
        raise ValueError(f"Quadrature order must be positive, got {n}")
    return _gaussian_latitudes(n)


@lru_cache(maxsize=None)
def _gaussian_latitudes(n: int) -> NDArray[np.float64]:
    latitudes = np.degrees(np.arcsin(_legendre_roots(n)))
    latitudes.setflags(write=False)
    return latitudes


def gaussian_weights(n: int) -> NDArray[np.float64]:
    """Gauss-Legendre quadrature weights matching `gaussian_latitudes(n)`.

    Notes
    -----
    w_i = 2 / ((1 - x_i^2) P'_n(x_i)^2). The weights sum to 2.
    """
    if n < 1:
        raise ValueError(f"Quadrature order must be positive, got {n}")
    roots = _legendre_roots(n)
    return np.array(
        [2.0 / ((1.0 - x * x) * legendre_derivative(n, x) ** 2) for x in roots],
        dtype=np.float64,
    )
