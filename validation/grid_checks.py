"""
Consistency Checks for Grid Layouts.

This module verifies at runtime that a grid layout and the index codec
agree with each other. It is meant for layouts built from external
metadata, where a wrong step or bound shows up as a broken index
mapping long before it shows up as a wrong value.

Check Categories
----------------
1. Structure (row offsets add up to the size, latitudes strictly
   descending, enough points per row)
2. Round trip (decode then encode returns the index, per scan mode)
3. Bijection (every (row, col) gets a distinct index in [0, size))
4. Symmetry (Gaussian latitudes mirror about the equator)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from common.errors import GridConsistencyError
from common.logging_config import get_logger
from common.types import INVALID_INDEX
from grids.base import Grid
from grids.gaussian import GaussianGrid, MIN_ROW_POINTS
from grids.indexing import grid_index_from_indices, grid_point_indices
from grids.scan_mode import ScanMode, index_scan_modes

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of the result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


@dataclass
class GridCheckConfig:
    """Limits for the grid checks.

    Attributes
    ----------
    max_exhaustive_points : int
        Largest grid on which the bijection check enumerates every point;
        larger grids are skipped by that check.
    round_trip_samples : int
        Number of evenly spaced indices checked per scan mode.
    symmetry_tolerance : float
        Allowed |lat[i] + lat[n-1-i]| in degrees.
    scan_modes : list of ScanMode
        Modes to check; the 16 index-affecting combinations by default.
    """
    max_exhaustive_points: int = 50_000
    round_trip_samples: int = 2_000
    symmetry_tolerance: float = 1e-12
    scan_modes: List[ScanMode] = field(default_factory=index_scan_modes)


def _applicable(grid: Grid, mode: ScanMode) -> bool:
    return grid.is_rectangular or not mode.is_consecutive_j


class GridConsistencyChecker:
    """Checker for internal consistency of grid layouts."""

    def __init__(
        self,
        config: Optional[GridCheckConfig] = None,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        """Initialize grid checker.

        Parameters
        ----------
        config : GridCheckConfig, optional
            Sampling limits.
        strict_mode : bool
            If True, raise `GridConsistencyError` on the first failed check.
        log_violations : bool
            Whether to log failed checks.
        """
        self.config = config or GridCheckConfig()
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = logger

    def _report(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"{result.test_name}: {result.message}")
            if self.strict_mode:
                raise GridConsistencyError(f"{result.test_name}: {result.message}")
        return result

    def check_all(self, grid: Grid) -> List[ValidationResult]:
        """Run every applicable check on `grid`.

        Returns
        -------
        List[ValidationResult]
            Results in the order run.
        """
        results = [
            self.check_size_consistency(grid),
            self.check_latitudes_descending(grid),
            self.check_row_points(grid),
            self.check_round_trip(grid),
            self.check_bijection(grid),
        ]
        if isinstance(grid, GaussianGrid):
            results.append(self.check_gaussian_symmetry(grid))

        failed = sum(not r.passed for r in results)
        self._logger.debug(f"{grid!r}: {len(results) - failed}/{len(results)} checks passed")
        return results

    def check_size_consistency(self, grid: Grid) -> ValidationResult:
        """Check that the row offsets sum the per-row counts to the size."""
        counts = np.array([grid.lon_points_at(r) for r in range(grid.rows)], dtype=np.int64)
        expected = np.concatenate(([0], np.cumsum(counts)))
        offsets_ok = np.array_equal(expected, grid.row_offsets)
        size_ok = int(counts.sum()) == grid.size

        return self._report(ValidationResult(
            test_name="size_consistency",
            passed=bool(offsets_ok and size_ok),
            message=f"Size {grid.size}, per-row sum {int(counts.sum())}",
            details={
                'size': grid.size,
                'row_sum': int(counts.sum()),
                'offsets_match': bool(offsets_ok),
            }
        ))

    def check_latitudes_descending(self, grid: Grid) -> ValidationResult:
        """Check that rows are stored strictly north to south."""
        steps = np.diff(grid.latitudes)
        violations = int(np.sum(steps >= 0))

        return self._report(ValidationResult(
            test_name="latitudes_descending",
            passed=violations == 0,
            message=f"Latitude order check: {violations} violations",
            details={
                'first_latitude': float(grid.latitudes[0]) if grid.rows else None,
                'last_latitude': float(grid.latitudes[-1]) if grid.rows else None,
                'num_violations': violations,
            }
        ))

    def check_row_points(self, grid: Grid) -> ValidationResult:
        """Check the minimum point count per row (4 on Gaussian grids)."""
        minimum = MIN_ROW_POINTS if isinstance(grid, GaussianGrid) else 1
        short_rows = [r for r in range(grid.rows) if grid.lon_points_at(r) < minimum]

        return self._report(ValidationResult(
            test_name="row_points",
            passed=not short_rows,
            message=f"{len(short_rows)} rows with fewer than {minimum} points",
            details={'minimum': minimum, 'short_rows': short_rows[:10]}
        ))

    def _sample_indices(self, size: int) -> Sequence[int]:
        if size <= self.config.round_trip_samples:
            return range(size)
        return np.unique(
            np.linspace(0, size - 1, self.config.round_trip_samples).astype(np.int64)
        ).tolist()

    def check_round_trip(self, grid: Grid) -> ValidationResult:
        """Check decode-then-encode identity on sampled indices for every mode."""
        failures: List[Dict[str, int]] = []
        modes_checked = 0

        for mode in self.config.scan_modes:
            if not _applicable(grid, mode):
                continue
            modes_checked += 1
            for index in self._sample_indices(grid.size):
                coordinate = grid_point_indices(grid, index, mode)
                encoded = (
                    INVALID_INDEX if coordinate is None
                    else grid_index_from_indices(grid, coordinate.row, coordinate.col, mode)
                )
                if encoded != index:
                    failures.append({'mode': int(mode), 'index': int(index), 'encoded': int(encoded)})

        return self._report(ValidationResult(
            test_name="round_trip",
            passed=not failures,
            message=f"Round trip over {modes_checked} scan modes: {len(failures)} failures",
            details={'modes_checked': modes_checked, 'failures': failures[:10]}
        ))

    def check_bijection(self, grid: Grid) -> ValidationResult:
        """Check that every (row, col) maps to a distinct index in [0, size).

        Skipped (reported as passed) for grids larger than
        `GridCheckConfig.max_exhaustive_points`.
        """
        if grid.size > self.config.max_exhaustive_points:
            return ValidationResult(
                test_name="bijection",
                passed=True,
                message=f"Skipped: {grid.size} points exceed the exhaustive limit",
                details={'skipped': True}
            )

        broken_modes = []
        for mode in self.config.scan_modes:
            if not _applicable(grid, mode):
                continue
            seen = np.zeros(grid.size, dtype=bool)
            ok = True
            for row in range(grid.rows):
                for col in range(grid.lon_points_at(row)):
                    index = grid_index_from_indices(grid, row, col, mode)
                    if index == INVALID_INDEX or seen[index]:
                        ok = False
                        break
                    seen[index] = True
                if not ok:
                    break
            if not (ok and seen.all()):
                broken_modes.append(int(mode))

        return self._report(ValidationResult(
            test_name="bijection",
            passed=not broken_modes,
            message=f"Bijection check: {len(broken_modes)} scan modes broken",
            details={'skipped': False, 'broken_modes': broken_modes}
        ))

    def check_gaussian_symmetry(self, grid: Grid) -> ValidationResult:
        """Check lat[i] == -lat[n-1-i] and mirrored row counts."""
        latitudes = grid.latitudes
        asymmetry = float(np.max(np.abs(latitudes + latitudes[::-1]))) if grid.rows else 0.0
        counts = [grid.lon_points_at(r) for r in range(grid.rows)]
        counts_mirrored = counts == counts[::-1]

        return self._report(ValidationResult(
            test_name="gaussian_symmetry",
            passed=asymmetry <= self.config.symmetry_tolerance and counts_mirrored,
            message=f"Max latitude asymmetry {asymmetry:.3e} deg",
            details={
                'max_asymmetry_deg': asymmetry,
                'counts_mirrored': counts_mirrored,
            }
        ))
