"""
Common utilities and infrastructure for the grid addressing library.

This package provides foundational components used across all modules:
- Earth-model constants and solver tolerances with provenance
- Unit registry for distance conversions
- Value types for points and grid coordinates
- Exception hierarchy
- Logging configuration
"""

from common.constants import PhysicalConstants, NumericalTolerances
from common.units import ureg, Q_, to_kilometers
from common.types import GeoPoint, GridCoordinate, GridPointLocation, INVALID_INDEX
from common.errors import (
    GridAddressingError,
    DataUnavailableError,
    InvalidGridIndexError,
    GridConsistencyError,
)
from common.logging_config import get_logger

__all__ = [
    "PhysicalConstants",
    "NumericalTolerances",
    "ureg",
    "Q_",
    "to_kilometers",
    "GeoPoint",
    "GridCoordinate",
    "GridPointLocation",
    "INVALID_INDEX",
    "GridAddressingError",
    "DataUnavailableError",
    "InvalidGridIndexError",
    "GridConsistencyError",
    "get_logger",
]
