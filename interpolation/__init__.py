"""
Interpolation Module.

This module provides:
- Four-corner interpolators (bilinear, nearest, average, IDW, kriging)
- The value reader contract and numpy / xarray adapters
- Point interpolation on any grid layout and scan mode
"""

from interpolation.interpolators import (
    Interpolator,
    BilinearInterpolator,
    NearestInterpolator,
    AverageInterpolator,
    IDWInterpolator,
    KrigingInterpolator,
    InterpolationConfig,
    available_methods,
    create_interpolator,
)

from interpolation.readers import (
    ValueReader,
    ArrayValueReader,
    XarrayValueReader,
)

from interpolation.grid_interpolator import GridInterpolator

__all__ = [
    # Interpolators
    "Interpolator",
    "BilinearInterpolator",
    "NearestInterpolator",
    "AverageInterpolator",
    "IDWInterpolator",
    "KrigingInterpolator",
    "InterpolationConfig",
    "available_methods",
    "create_interpolator",
    # Readers
    "ValueReader",
    "ArrayValueReader",
    "XarrayValueReader",
    # Grid interpolation
    "GridInterpolator",
]
