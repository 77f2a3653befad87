"""
Grid Construction Cache.

Building a Gaussian grid solves for hundreds of Legendre roots and a
large lat/lon grid allocates its coordinate arrays, so applications keep
one `GridCache` and ask it for grids by layout.

Single Flight
-------------
The first caller for a key builds the grid; callers that arrive while
the build is running wait on the same `concurrent.futures.Future` and
receive the same instance. Builds for different keys run concurrently.
A builder that raises hands its exception to every waiter and leaves
nothing cached, so a later call retries the build.

The cache only grows. Grids are immutable, which makes sharing them
between threads safe.
"""

from concurrent.futures import Future
import threading
from typing import Callable, Dict, List, Optional

from common.logging_config import get_logger
from grids.base import Grid
from grids.gaussian import (
    GaussianGrid,
    OctahedralGaussianGrid,
    ReducedGaussianGrid,
    RegularGaussianGrid,
)
from grids.latlon import LatLonGrid

logger = get_logger(__name__)


class GridCache:
    """Thread-safe, append-only cache of grid layouts keyed by `Grid.cache_key`.

    Examples
    --------
    >>> cache = GridCache()
    >>> cache.octahedral(32) is cache.octahedral(32)
    True
    >>> cache.keys()
    ['O32']
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Future] = {}
        self._build_count = 0
        self._logger = logger

    def get_or_build(self, key: str, builder: Callable[[], Grid]) -> Grid:
        """Return the grid cached under `key`, building it on first use.

        Parameters
        ----------
        key : str
            Canonical layout key.
        builder : callable
            Zero-argument function creating the grid. Called at most once
            per successful key.

        Returns
        -------
        Grid
            The cached instance.

        Raises
        ------
        Exception
            Whatever `builder` raised, re-raised in every caller that was
            waiting for that build.
        """
        with self._lock:
            future = self._entries.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._entries[key] = future

        if not owner:
            self._logger.debug(f"Cache hit for {key}")
            return future.result()

        self._logger.debug(f"Cache miss for {key}, building")
        try:
            grid = builder()
        except BaseException as exc:
            with self._lock:
                del self._entries[key]
            future.set_exception(exc)
            self._logger.warning(f"Building grid {key} failed: {exc}")
            raise

        with self._lock:
            self._build_count += 1
        future.set_result(grid)
        self._logger.info(f"Built grid {key} with {grid.size} points")
        return grid

    # ------------------------------------------------------------------
    # Layout factories
    # ------------------------------------------------------------------

    def latlon(
        self,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
        lat_step: float,
        lon_step: float
    ) -> LatLonGrid:
        """Cached `LatLonGrid`; bounds given in either order share one entry."""
        min_lat, max_lat = sorted((float(min_lat), float(max_lat)))
        min_lon, max_lon = sorted((float(min_lon), float(max_lon)))
        key = (
            f"L{min_lat:f},{max_lat:f},{min_lon:f},{max_lon:f},"
            f"{float(lat_step):f},{float(lon_step):f}"
        )
        return self.get_or_build(
            key,
            lambda: LatLonGrid(min_lat, max_lat, min_lon, max_lon, lat_step, lon_step),
        )

    def regular(self, n: int) -> RegularGaussianGrid:
        n = GaussianGrid.check_order(n)
        return self.get_or_build(f"F{n}", lambda: RegularGaussianGrid(n))

    def reduced(self, n: int) -> ReducedGaussianGrid:
        n = GaussianGrid.check_order(n)
        return self.get_or_build(f"N{n}", lambda: ReducedGaussianGrid(n))

    def octahedral(self, n: int) -> OctahedralGaussianGrid:
        n = GaussianGrid.check_order(n)
        return self.get_or_build(f"O{n}", lambda: OctahedralGaussianGrid(n))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @property
    def build_count(self) -> int:
        """Number of successful builds so far."""
        with self._lock:
            return self._build_count

    def keys(self) -> List[str]:
        """Keys of the cached (or in-flight) grids, in insertion order."""
        with self._lock:
            return list(self._entries)

    def peek(self, key: str) -> Optional[Grid]:
        """The grid under `key` if its build has finished successfully, else None."""
        with self._lock:
            future = self._entries.get(key)
        if future is None or not future.done():
            return None
        return future.result()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
