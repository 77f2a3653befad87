"""
Tests for the single-flight grid cache.
"""

from concurrent.futures import ThreadPoolExecutor
import threading
import time

import pytest

from grids.gaussian import OctahedralGaussianGrid
from grids.latlon import LatLonGrid


def test_factories_return_cached_instances(grid_cache):
    o32 = grid_cache.octahedral(32)
    assert grid_cache.octahedral(32) is o32
    assert grid_cache.regular(16) is grid_cache.regular(16)
    assert grid_cache.reduced(16) is grid_cache.reduced(16)
    assert grid_cache.build_count == 3
    assert grid_cache.keys() == ["O32", "F16", "N16"]


def test_latlon_key_matches_grid_key(grid_cache):
    grid = grid_cache.latlon(30.0, 35.0, 110.0, 115.0, 0.5, 0.5)
    assert grid.cache_key in grid_cache
    # Swapped bounds describe the same layout
    assert grid_cache.latlon(35.0, 30.0, 115.0, 110.0, 0.5, 0.5) is grid
    assert len(grid_cache) == 1


def test_distinct_keys_distinct_grids(grid_cache):
    assert grid_cache.octahedral(8) is not grid_cache.octahedral(16)
    assert "O8" in grid_cache and "O16" in grid_cache
    assert "O32" not in grid_cache


def test_concurrent_requests_build_once(grid_cache):
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_builder():
        calls.append(1)
        started.set()
        release.wait(timeout=5)
        return OctahedralGaussianGrid(8)

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(grid_cache.get_or_build, "O8", slow_builder) for _ in range(8)]
        assert started.wait(timeout=5)
        release.set()
        grids = [future.result(timeout=10) for future in futures]

    assert len(calls) == 1
    assert all(grid is grids[0] for grid in grids)
    assert grid_cache.build_count == 1


def test_builder_error_reaches_every_waiter_and_is_not_cached(grid_cache):
    started = threading.Event()
    release = threading.Event()

    def failing_builder():
        started.set()
        release.wait(timeout=5)
        raise RuntimeError("bad layout")

    with ThreadPoolExecutor(max_workers=4) as pool:
        first = pool.submit(grid_cache.get_or_build, "X1", failing_builder)
        assert started.wait(timeout=5)
        waiters = [pool.submit(grid_cache.get_or_build, "X1", failing_builder) for _ in range(3)]
        # Give the waiters time to park on the in-flight build
        time.sleep(0.1)
        release.set()
        for future in [first] + waiters:
            with pytest.raises(RuntimeError, match="bad layout"):
                future.result(timeout=10)

    assert "X1" not in grid_cache
    assert grid_cache.build_count == 0

    # A later call retries the build
    grid = grid_cache.get_or_build("X1", lambda: LatLonGrid(0.0, 1.0, 0.0, 1.0, 1.0, 1.0))
    assert grid.size == 4
    assert grid_cache.peek("X1") is grid


def test_peek_unknown_key(grid_cache):
    assert grid_cache.peek("F8") is None


@pytest.mark.parametrize("factory,key", [("regular", "F8"), ("reduced", "N8"), ("octahedral", "O8")])
def test_gaussian_order_is_canonicalized(grid_cache, factory, key):
    build = getattr(grid_cache, factory)
    grid = build(8)
    assert build(8.0) is grid
    assert grid_cache.keys() == [key] == [grid.cache_key]
    assert grid_cache.build_count == 1


@pytest.mark.parametrize("order", [0, 2.5, True])
def test_bad_gaussian_order_is_not_cached(grid_cache, order):
    with pytest.raises(ValueError):
        grid_cache.octahedral(order)
    assert len(grid_cache) == 0
