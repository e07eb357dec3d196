"""In-memory resolver cache with single-flight loading.

ResolverCache maps a normalized request key to a resolved Track. It combines
three policies:

- Capacity: least-recently-used eviction through cachetools.LRUCache
- Idle expiry: entries not read or written within ``expire_after_access``
  are dropped on the next lookup and reloaded
- Single-flight: concurrent ``get_or_compute`` calls for one key share a
  single loader invocation and all observe its result or its exception

Failed loads are never stored. Loaders run outside the cache lock, so slow
network calls for one key never block lookups for another.
"""

from collections.abc import Callable
from concurrent.futures import Future
from datetime import timedelta
import threading
import time

from attrs import define
from cachetools import LRUCache

from songlink.config import get_logger
from songlink.domain.entities import Track

logger = get_logger(__name__).bind(service="cache")


@define(slots=True)
class _Entry:
    track: Track
    last_access: float


@define(frozen=True, slots=True)
class CacheStats:
    """Point-in-time counters for a ResolverCache."""

    hits: int
    misses: int
    load_failures: int
    size: int


class ResolverCache:
    """Bounded, idle-expiring, single-flight cache of resolved Tracks.

    Args:
        max_size: Maximum number of entries kept
        expire_after_access: Idle time after which an entry expires
        timer: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        max_size: int,
        expire_after_access: timedelta,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        if expire_after_access <= timedelta(0):
            raise ValueError(
                f"expire_after_access must be positive, got {expire_after_access}"
            )

        self.max_size = max_size
        self.expire_after_access = expire_after_access
        self._ttl = expire_after_access.total_seconds()
        self._timer = timer
        self._entries: LRUCache[str, _Entry] = LRUCache(maxsize=max_size)
        self._in_flight: dict[str, Future[Track]] = {}
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._load_failures = 0

    def _lookup(self, key: str, now: float) -> Track | None:
        """Return a live entry and refresh its access time. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now - entry.last_access > self._ttl:
            del self._entries[key]
            logger.debug(f"Expired cache entry {key}")
            return None
        entry.last_access = now
        return entry.track

    def get(self, key: str) -> Track | None:
        """Return the cached Track for ``key`` without loading it."""
        with self._lock:
            return self._lookup(key, self._timer())

    def get_or_compute(self, key: str, loader: Callable[[str], Track]) -> Track:
        """Return the Track for ``key``, calling ``loader(key)`` on a miss.

        Only one loader runs per key at a time; other callers for the same key
        wait for it and receive the same Track or the same exception.
        """
        with self._lock:
            track = self._lookup(key, self._timer())
            if track is not None:
                self._hits += 1
                return track

            self._misses += 1
            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                future.set_running_or_notify_cancel()
                self._in_flight[key] = future

        if not owner:
            logger.debug(f"Waiting on in-flight load for {key}")
            return future.result()

        try:
            track = loader(key)
        except BaseException as e:
            with self._lock:
                self._load_failures += 1
                del self._in_flight[key]
            future.set_exception(e)
            raise

        with self._lock:
            self._entries[key] = _Entry(track=track, last_access=self._timer())
            del self._in_flight[key]
        future.set_result(track)
        return track

    def invalidate(self, key: str) -> None:
        """Drop ``key`` if present. In-flight loads are unaffected."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                load_failures=self._load_failures,
                size=len(self._entries),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership test; like get(), it counts as an access."""
        with self._lock:
            return self._lookup(key, self._timer()) is not None
