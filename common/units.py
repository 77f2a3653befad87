"""
Unit Registry for Distance and Angle Quantities.

This module provides the centralized pint registry used to convert the
SI constants in `common.constants` into the units the public API reports
(kilometers for distances, degrees for coordinates). Conversions go
through pint so that a constant declared in meters can never be mixed
with a kilometer result by accident.

Example Usage
-------------
>>> from common.units import Q_
>>> Q_(6371000.0, "m").to("km").magnitude
6371.0
"""

from functools import wraps
from typing import Callable, Union

import pint
from pint import UnitRegistry as PintUnitRegistry

from common.constants import Constant

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity


def to_kilometers(value: Union[float, pint.Quantity], unit: str = "m") -> float:
    """Convert a length to kilometers.

    Parameters
    ----------
    value : float or pint.Quantity
        The length. Bare numbers are interpreted in `unit`.
    unit : str
        Unit of a bare number (default: meters).

    Returns
    -------
    float
        Magnitude in kilometers.

    Raises
    ------
    ValueError
        If the quantity is not a length.
    """
    quantity = value if isinstance(value, pint.Quantity) else Q_(value, unit)
    try:
        return float(quantity.to("km").magnitude)
    except pint.DimensionalityError as e:
        raise ValueError(
            f"Expected a length, got {quantity.units}"
        ) from e


def constant_in(constant: Constant, unit: str) -> float:
    """Magnitude of a `Constant` expressed in `unit`.

    Parameters
    ----------
    constant : Constant
        Constant with a pint-parseable unit string.
    unit : str
        Target unit.

    Returns
    -------
    float
        The converted magnitude.
    """
    return float(Q_(constant.value, constant.unit).to(unit).magnitude)


def returns_kilometers(func: Callable) -> Callable:
    """Decorator that converts a pint length result into bare kilometers.

    Functions that compute in meters may return a `pint.Quantity`; the
    public distance API always hands back plain floats in km.

    Examples
    --------
    >>> @returns_kilometers
    ... def span():
    ...     return Q_(1500.0, "m")
    >>> span()
    1.5
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        result = func(*args, **kwargs)
        if isinstance(result, pint.Quantity):
            return to_kilometers(result)
        return result
    return wrapper
