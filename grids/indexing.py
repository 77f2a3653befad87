"""
Scan-Mode Index Codec.

Converts between a (row, col) grid coordinate and the linear index of
the same point in a serialized field, for every combination of the four
index-affecting scan-mode flags.

Encoding Order
--------------
1. negative-i: the column is mirrored within its row.
2. positive-j: the row is mirrored, giving the storage row.
3. opposite rows: in row-major storage the column is mirrored again on
   odd storage rows; in column-major storage the storage row is
   mirrored on odd storage columns.
4. offset: row-major uses the prefix sum of the rows that precede the
   storage row plus the column; column-major uses ``col * rows + row``.

Decoding applies the same steps in reverse. Column-major storage is only
defined for rectangular grids; ragged grids report an invalid index.

Rows are always counted north to south and columns west to east, so the
decoded (row, col) is independent of the scan mode.
"""

from typing import Optional, Tuple, TYPE_CHECKING

from common.types import INVALID_INDEX, GridCoordinate, GridPointLocation
from grids.scan_mode import ScanMode

if TYPE_CHECKING:
    from grids.base import Grid


def grid_index_from_indices(grid: "Grid", row: int, col: int, mode: ScanMode = ScanMode(0)) -> int:
    """Linear index of the point at (row, col).

    Parameters
    ----------
    grid : Grid
        Grid layout.
    row, col : int
        Row (north to south) and column (west to east).
    mode : ScanMode
        Scanning mode of the serialized field.

    Returns
    -------
    int
        Index in ``[0, grid.size)``, or `INVALID_INDEX` when the row or
        column is out of range, or when column-major storage is requested
        on a ragged grid.

    Examples
    --------
    >>> grid = LatLonGrid(30, 35, 110, 115, 0.5, 0.5)  # doctest: +SKIP
    >>> grid_index_from_indices(grid, 5, 5)               # doctest: +SKIP
    60
    """
    mode = ScanMode(mode)
    rows = grid.rows
    if not 0 <= row < rows:
        return INVALID_INDEX
    points = grid.lon_points_at(row)
    if not 0 <= col < points:
        return INVALID_INDEX
    if mode.is_consecutive_j and not grid.is_rectangular:
        return INVALID_INDEX

    storage_col = points - 1 - col if mode.is_negative_i else col
    storage_row = rows - 1 - row if mode.is_positive_j else row

    if mode.is_consecutive_j:
        if mode.has_opposite_rows and storage_col % 2 == 1:
            storage_row = rows - 1 - storage_row
        return storage_col * rows + storage_row

    if mode.has_opposite_rows and storage_row % 2 == 1:
        storage_col = points - 1 - storage_col

    if mode.is_positive_j:
        # Storage runs south to north: every row south of this one comes first
        prefix = grid.size - grid.row_offset(row + 1)
    else:
        prefix = grid.row_offset(row)
    return prefix + storage_col


def grid_point_indices(grid: "Grid", index: int, mode: ScanMode = ScanMode(0)) -> Optional[GridCoordinate]:
    """Inverse of `grid_index_from_indices`.

    Returns
    -------
    GridCoordinate or None
        The (row, col) stored at `index`, or None for an index outside
        ``[0, grid.size)`` or column-major storage on a ragged grid.
    """
    mode = ScanMode(mode)
    if not 0 <= index < grid.size:
        return None

    rows = grid.rows

    if mode.is_consecutive_j:
        if not grid.is_rectangular:
            return None
        storage_col, storage_row = divmod(index, rows)
        if mode.has_opposite_rows and storage_col % 2 == 1:
            storage_row = rows - 1 - storage_row
        row = rows - 1 - storage_row if mode.is_positive_j else storage_row
        points = grid.lon_points_at(row)
        col = points - 1 - storage_col if mode.is_negative_i else storage_col
        return GridCoordinate(row, col)

    if mode.is_positive_j:
        row = grid.row_containing(grid.size - 1 - index)
        storage_col = index - (grid.size - grid.row_offset(row + 1))
        storage_row = rows - 1 - row
    else:
        row = grid.row_containing(index)
        storage_col = index - grid.row_offset(row)
        storage_row = row

    points = grid.lon_points_at(row)
    if mode.has_opposite_rows and storage_row % 2 == 1:
        storage_col = points - 1 - storage_col
    col = points - 1 - storage_col if mode.is_negative_i else storage_col
    return GridCoordinate(row, col)


def grid_point(grid: "Grid", index: int, mode: ScanMode = ScanMode(0)) -> GridPointLocation:
    """Latitude and longitude of the point stored at `index`.

    Returns ``(nan, nan, False)`` when the index cannot be decoded.
    """
    coordinate = grid_point_indices(grid, index, mode)
    if coordinate is None:
        return GridPointLocation(float("nan"), float("nan"), False)

    row, col = coordinate
    return GridPointLocation(
        float(grid.latitudes[row]),
        float(grid.longitudes_on_row(row)[col]),
        True,
    )


def grid_index(grid: "Grid", lat: float, lon: float, mode: ScanMode = ScanMode(0)) -> int:
    """Linear index of the grid point nearest to (lat, lon)."""
    row, col = grid.get_nearest_index(lat, lon)
    return grid_index_from_indices(grid, row, col, mode)


def guess_grid_index(grid: "Grid", lat: float, lon: float, mode: ScanMode = ScanMode(0)) -> int:
    """Linear index of the grid point nearest to (lat, lon) in degree terms."""
    row, col = grid.guess_nearest_index(lat, lon)
    return grid_index_from_indices(grid, row, col, mode)


def corner_indices(
    grid: "Grid",
    corners: Tuple[GridCoordinate, ...],
    mode: ScanMode = ScanMode(0)
) -> Tuple[int, ...]:
    """Encode several (row, col) pairs at once; invalid pairs give `INVALID_INDEX`."""
    return tuple(grid_index_from_indices(grid, row, col, mode) for row, col in corners)
