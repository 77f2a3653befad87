"""
Validation Module.

Runtime consistency checks for grid layouts and the scan-mode codec.
"""

from validation.grid_checks import (
    ValidationResult,
    GridCheckConfig,
    GridConsistencyChecker,
)

__all__ = [
    "ValidationResult",
    "GridCheckConfig",
    "GridConsistencyChecker",
]
