"""
Geospatial Module for Grid Addressing.

All earth-surface distances and the Gaussian quadrature latitudes used
by the grid layouts originate from this module.

This module provides:
- Haversine, Vincenty and reference (Karney) geodesic distances
- Legendre polynomial roots converted to Gaussian latitudes
"""

from geospatial.distance_calculations import (
    VINCENTY_FAILED,
    VincentyResult,
    haversine_distance,
    vincenty_inverse,
    vincenty_distance,
    vincenty_estimate,
    geodesic_distance,
    geodesic_distance_batch,
    robust_distance,
)

from geospatial.quadrature import (
    legendre_polynomial,
    legendre_derivative,
    gaussian_latitudes,
    gaussian_weights,
)

__all__ = [
    # Distance calculations
    "VINCENTY_FAILED",
    "VincentyResult",
    "haversine_distance",
    "vincenty_inverse",
    "vincenty_distance",
    "vincenty_estimate",
    "geodesic_distance",
    "geodesic_distance_batch",
    "robust_distance",
    # Quadrature
    "legendre_polynomial",
    "legendre_derivative",
    "gaussian_latitudes",
    "gaussian_weights",
]
