"""
Pytest configuration.

Puts the repository root on the import path and provides shared grids.
"""

import sys
from pathlib import Path

import pytest

# Repository root holds the top-level packages (common, grids, ...)
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from grids.cache import GridCache
from grids.gaussian import OctahedralGaussianGrid, ReducedGaussianGrid, RegularGaussianGrid
from grids.latlon import LatLonGrid


@pytest.fixture
def small_grid():
    """11 x 11 regional grid, 0.5 degree steps, 30-35N / 110-115E."""
    return LatLonGrid(30.0, 35.0, 110.0, 115.0, 0.5, 0.5)


@pytest.fixture(scope="session")
def global_grid():
    """Global 0.25 degree grid, 721 x 1440."""
    return LatLonGrid(-90.0, 90.0, 0.0, 359.75, 0.25, 0.25)


@pytest.fixture(scope="session")
def o32():
    return OctahedralGaussianGrid(32)


@pytest.fixture(scope="session")
def n8():
    return ReducedGaussianGrid(8)


@pytest.fixture(scope="session")
def f48():
    return RegularGaussianGrid(48)


@pytest.fixture
def grid_cache():
    """A fresh, empty cache."""
    return GridCache()
