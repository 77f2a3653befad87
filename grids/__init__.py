"""
Grid Layouts and Index Addressing.

This module provides:
- Scan-mode flags and the (row, col) <-> linear index codec
- Uniform lat/lon grids and the Gaussian grid family
- Nearest-point search and candidate neighborhoods
- A single-flight cache of grid layouts
"""

from grids.scan_mode import ScanMode, INDEX_FLAGS, index_scan_modes

from grids.indexing import (
    grid_index_from_indices,
    grid_point_indices,
    grid_point,
    grid_index,
    guess_grid_index,
    corner_indices,
)

from grids.nearest import (
    NearestSearchConfig,
    NearestGrids,
    find_nearest_indices,
    bracket_longitude,
    nearest_by_distance,
    nearest_by_degrees,
)

from grids.base import Grid, even_longitudes

from grids.latlon import LatLonGrid

from grids.gaussian import (
    GaussianGrid,
    RegularGaussianGrid,
    ReducedGaussianGrid,
    OctahedralGaussianGrid,
)

from grids.cache import GridCache

__all__ = [
    # Scan modes
    "ScanMode",
    "INDEX_FLAGS",
    "index_scan_modes",
    # Index codec
    "grid_index_from_indices",
    "grid_point_indices",
    "grid_point",
    "grid_index",
    "guess_grid_index",
    "corner_indices",
    # Nearest search
    "NearestSearchConfig",
    "NearestGrids",
    "find_nearest_indices",
    "bracket_longitude",
    "nearest_by_distance",
    "nearest_by_degrees",
    # Layouts
    "Grid",
    "even_longitudes",
    "LatLonGrid",
    "GaussianGrid",
    "RegularGaussianGrid",
    "ReducedGaussianGrid",
    "OctahedralGaussianGrid",
    # Cache
    "GridCache",
]
