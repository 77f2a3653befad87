"""
Physical and Numerical Constants for Grid Addressing.

This module provides the earth-model constants used by the distance
calculations and the numerical tolerances used by the iterative solvers.
Every constant carries its unit and provenance so that conversions can be
done through the unit registry rather than by hand.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- Vincenty, T. (1975). Direct and inverse solutions of geodesics on the
  ellipsoid with application of nested equations. Survey Review, 23(176).
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant, parseable by pint.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class PhysicalConstants:
    """Registry of earth-model constants used throughout the library.

    Earth Geometry (WGS84)
    ----------------------
    The ellipsoid used by the Vincenty inverse solution and by the
    reference geodesic computed through pyproj.

    Spherical Earth
    ---------------
    The conventional 6371 km sphere used by the Haversine formula, not
    the IUGG mean radius: published Haversine distances use 6371 km.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    HAVERSINE_RADIUS: Final[Constant] = Constant(
        value=6_371_000.0,
        uncertainty=0.0,  # Conventional value
        unit="m",
        source="Conventional spherical earth",
        description="Sphere radius used by the Haversine distance"
    )

    @staticmethod
    def semi_minor_axis() -> float:
        """Semi-minor axis b = a(1 - f) of the WGS84 ellipsoid in meters."""
        a = PhysicalConstants.EARTH_SEMI_MAJOR_AXIS.value
        f = PhysicalConstants.EARTH_FLATTENING.value
        return a * (1.0 - f)


class NumericalTolerances:
    """Convergence thresholds and iteration budgets of the solvers."""

    # Vincenty inverse problem
    VINCENTY_LAMBDA_EPSILON: Final[float] = 1e-12  # radians
    VINCENTY_MAX_ITERATIONS: Final[int] = 100
    # Cheap comparisons only need relative ordering of distances
    VINCENTY_COMPARE_ITERATIONS: Final[int] = 3
    # Candidate distances closer than this count as equal (1 micrometer)
    DISTANCE_TIE_EPSILON_KM: Final[float] = 1e-9

    # Newton iteration for Legendre roots
    NEWTON_STEP_EPSILON: Final[float] = 1e-15
    NEWTON_MAX_ITERATIONS: Final[int] = 10

    # Corner coincidence for IDW / kriging
    CORNER_DISTANCE_EPSILON: Final[float] = 1e-10

    # Integer microdegree scale for boundary arithmetic
    MICRODEGREES: Final[int] = 1_000_000
