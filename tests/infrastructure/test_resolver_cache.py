"""Tests for the single-flight resolver cache."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
import threading
import time
from unittest.mock import Mock

import pytest

from songlink.domain.entities import Track
from songlink.infrastructure.cache import ResolverCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _track(key: str) -> Track:
    return Track(entity_unique_id=key, user_country="US", page_url=f"https://song.link/{key}")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResolverCache(
        max_size=3, expire_after_access=timedelta(minutes=10), timer=clock
    )


class TestResolverCacheBasics:
    """Hits, misses and configuration validation."""

    def test_loads_once_then_hits(self, cache):
        loader = Mock(side_effect=_track)

        first = cache.get_or_compute("a", loader)
        second = cache.get_or_compute("a", loader)

        assert first is second
        loader.assert_called_once_with("a")
        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)

    def test_get_does_not_load(self, cache):
        assert cache.get("a") is None
        cache.get_or_compute("a", _track)
        assert cache.get("a").entity_unique_id == "a"

    def test_invalidate_and_clear(self, cache):
        cache.get_or_compute("a", _track)
        cache.get_or_compute("b", _track)

        cache.invalidate("a")
        assert "a" not in cache
        assert "b" in cache

        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize(
        ("max_size", "expiry"),
        [(0, timedelta(hours=1)), (10, timedelta(0)), (10, timedelta(seconds=-1))],
    )
    def test_rejects_invalid_configuration(self, max_size, expiry):
        with pytest.raises(ValueError):
            ResolverCache(max_size=max_size, expire_after_access=expiry)


class TestResolverCacheEviction:
    """Capacity and idle expiry."""

    def test_least_recently_used_is_evicted(self, cache):
        for key in ("a", "b", "c"):
            cache.get_or_compute(key, _track)

        cache.get_or_compute("a", _track)  # touch a, b is now oldest
        cache.get_or_compute("d", _track)

        assert "b" not in cache
        assert all(key in cache for key in ("a", "c", "d"))

    def test_idle_entry_expires(self, cache, clock):
        loader = Mock(side_effect=_track)
        cache.get_or_compute("a", loader)

        clock.advance(10 * 60 + 1)

        assert cache.get("a") is None
        cache.get_or_compute("a", loader)
        assert loader.call_count == 2

    def test_access_refreshes_expiry(self, cache, clock):
        loader = Mock(side_effect=_track)
        cache.get_or_compute("a", loader)

        for _ in range(3):
            clock.advance(6 * 60)
            cache.get_or_compute("a", loader)

        loader.assert_called_once()

    def test_expired_entries_are_evicted_before_fresh_ones(self, cache, clock):
        cache.get_or_compute("a", _track)
        clock.advance(11 * 60)
        for key in ("b", "c", "d"):
            cache.get_or_compute(key, _track)

        assert len(cache) == 3
        assert all(key in cache for key in ("b", "c", "d"))


class TestResolverCacheSingleFlight:
    """Concurrent callers share one load."""

    def test_concurrent_callers_share_one_load(self, cache):
        release = threading.Event()
        calls = []

        def loader(key):
            calls.append(key)
            release.wait(timeout=5)
            return _track(key)

        callers = 16
        with ThreadPoolExecutor(max_workers=callers) as pool:
            futures = [pool.submit(cache.get_or_compute, "a", loader) for _ in range(callers)]
            # Give every caller time to reach the cache before the load finishes
            while cache.stats().misses < callers:
                time.sleep(0.01)
            release.set()
            results = [f.result(timeout=5) for f in futures]

        assert calls == ["a"]
        assert all(result is results[0] for result in results)

    def test_failure_propagates_to_waiters_and_is_not_cached(self, cache):
        release = threading.Event()
        error = RuntimeError("upstream down")

        def failing_loader(key):
            release.wait(timeout=5)
            raise error

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [
                pool.submit(cache.get_or_compute, "a", failing_loader) for _ in range(4)
            ]
            while cache.stats().misses < 4:
                time.sleep(0.01)
            release.set()
            raised = [f.exception(timeout=5) for f in futures]

        assert all(exc is error for exc in raised)
        assert "a" not in cache
        assert cache.stats().load_failures == 1

        # Key is eligible for a fresh attempt
        assert cache.get_or_compute("a", _track).entity_unique_id == "a"

    def test_different_keys_load_in_parallel(self, cache):
        both_started = threading.Barrier(2, timeout=5)

        def loader(key):
            both_started.wait()
            return _track(key)

        with ThreadPoolExecutor(max_workers=2) as pool:
            a = pool.submit(cache.get_or_compute, "a", loader)
            b = pool.submit(cache.get_or_compute, "b", loader)

            assert a.result(timeout=5).entity_unique_id == "a"
            assert b.result(timeout=5).entity_unique_id == "b"
