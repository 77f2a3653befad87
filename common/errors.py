"""
Exception hierarchy for the grid addressing library.

Only failures that must abort a single lookup or interpolation call are
raised. Numerical non-convergence and invalid coordinates in the index
codec are reported through sentinels (see `common.types.INVALID_INDEX`
and `geospatial.distance_calculations.VINCENTY_FAILED`).
"""


class GridAddressingError(Exception):
    """Base class for all library errors."""


class DataUnavailableError(GridAddressingError, LookupError):
    """A value reader has no sample for the requested (time step, index)."""

    def __init__(self, time_step: int, grid_index: int, reason: str = ""):
        self.time_step = time_step
        self.grid_index = grid_index
        message = f"No value for time step {time_step} at grid index {grid_index}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidGridIndexError(GridAddressingError, ValueError):
    """A (row, col) pair does not address a point of the grid."""

    def __init__(self, row: int, col: int, scan_mode: int):
        self.row = row
        self.col = col
        self.scan_mode = scan_mode
        super().__init__(
            f"Invalid grid coordinate (row={row}, col={col}) "
            f"for scan mode {scan_mode}"
        )


class GridConsistencyError(GridAddressingError):
    """A grid failed a consistency check in strict mode."""
