"""
Lock-guarded wrappers around BoundedCache.

Both wrappers hold one coarse lock for the whole duration of each call, which
is the only supported way to share a BoundedCache.
"""

import logging
import threading
from typing import Any, Awaitable, Callable, Generic, List, Tuple

import trio

from boundcache.cache.bounded_cache import BoundedCache, CacheKey
from boundcache.cache.coalescer import LoadCoalescer
from boundcache.counter import Counter
from boundcache.types import CacheStats

logger = logging.getLogger(__name__)

_MISSING = object()


class LockedCache(Generic[CacheKey]):
    """BoundedCache guarded by a threading.Lock. Safe to share between threads."""

    def __init__(self, capacity: int, *, on_evict: Callable[[CacheKey, Any], None] | None = None) -> None:
        """
        :param on_evict: Called with (key, value) for every capacity eviction,
            after the lock is released, so it may use this cache again.
        """
        self._on_evict = on_evict
        # evictions recorded under the lock, reported once it is released
        self._evicted: List[Tuple[CacheKey, Any]] = []
        self._cache: BoundedCache[CacheKey] = BoundedCache(
            capacity, on_evict=lambda key, value: self._evicted.append((key, value))
        )
        self._lock = threading.Lock()

    def _take_evicted(self) -> List[Tuple[CacheKey, Any]]:
        # caller holds self._lock
        evicted, self._evicted = self._evicted, []
        return evicted

    def _notify_evicted(self, evicted: List[Tuple[CacheKey, Any]]) -> None:
        if self._on_evict is None:
            return
        for key, value in evicted:
            try:
                self._on_evict(key, value)
            except Exception:
                logger.exception("on_evict failed for %r", key)

    @property
    def capacity(self) -> int:
        return self._cache.capacity

    def get(self, key: CacheKey, default: Any = None) -> Any:
        with self._lock:
            return self._cache.get(key, default)

    def put(self, key: CacheKey, value: Any) -> None:
        with self._lock:
            self._cache.put(key, value)
            evicted = self._take_evicted()
        self._notify_evicted(evicted)

    def peek(self, key: CacheKey, default: Any = None) -> Any:
        with self._lock:
            return self._cache.peek(key, default)

    def delete(self, key: CacheKey) -> bool:
        with self._lock:
            return self._cache.delete(key)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def resize(self, capacity: int) -> None:
        with self._lock:
            self._cache.resize(capacity)
            evicted = self._take_evicted()
        self._notify_evicted(evicted)

    def items(self) -> List[Tuple[CacheKey, Any]]:
        """Snapshot of (key, value) pairs, least recently used first."""
        with self._lock:
            return self._cache.items()

    def keys(self) -> List[CacheKey]:
        with self._lock:
            return self._cache.keys()

    def stats(self) -> CacheStats:
        with self._lock:
            return self._cache.stats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache


class AsyncLockedCache(Generic[CacheKey]):
    """
    BoundedCache for trio tasks.

    Concurrency:
      - guarded by a trio.Lock
      - get() marks the entry as recently used
      - get_or_load() coalesces concurrent misses on the same key into one load
    """

    def __init__(self, capacity: int) -> None:
        self._cache: BoundedCache[CacheKey] = BoundedCache(capacity)
        self._lock = trio.Lock()
        self._coalescer: LoadCoalescer[CacheKey] = LoadCoalescer()
        self.loads = Counter()

    async def get(self, key: CacheKey, default: Any = None) -> Any:
        async with self._lock:
            return self._cache.get(key, default)

    async def put(self, key: CacheKey, value: Any) -> None:
        async with self._lock:
            self._cache.put(key, value)

    async def delete(self, key: CacheKey) -> bool:
        async with self._lock:
            return self._cache.delete(key)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    async def stats(self) -> CacheStats:
        async with self._lock:
            return self._cache.stats()

    def loading(self, key: CacheKey) -> bool:
        """True while some task is running the loader for key."""
        return self._coalescer.loading(key)

    async def get_or_load(
        self, key: CacheKey, loader: Callable[[CacheKey], Awaitable[Any]]
    ) -> Any:
        """
        Returns the cached value for key, calling loader(key) on a miss.
        Only one task loads a given key at a time; the others wait and re-read.
        If the leader's load fails, its exception propagates to the leader and
        the followers retry the load themselves.
        """
        while True:
            value = await self.get(key, _MISSING)
            if value is not _MISSING:
                return value

            done, leader = await self._coalescer.join_or_lead(key)
            if not leader:
                await done.wait()
                continue

            try:
                # Double-check: a previous leader may have finished in between
                async with self._lock:
                    value = self._cache.peek(key, _MISSING)
                if value is not _MISSING:
                    return value

                logger.debug("Loading %r", key)
                value = await loader(key)
                self.loads.increment_and_get()
                await self.put(key, value)
                return value
            finally:
                with trio.CancelScope(shield=True):
                    await self._coalescer.notify_done(key)
