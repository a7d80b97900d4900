"""
Fixed-capacity key/value store with least-recently-used eviction.

Entries live in an explicit doubly linked list ordered by recency
(head = least recently used, tail = most recently used) plus a key -> entry
dict, so get/put/delete are all O(1).

Not thread-safe: wrap it in boundcache.cache.locked_cache.LockedCache when
several threads share one instance.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Tuple, TypeVar

from boundcache.counter import Counter
from boundcache.errors import validate_capacity
from boundcache.types import CacheStats

logger = logging.getLogger(__name__)

CacheKey = TypeVar("CacheKey")


@dataclass(eq=False)
class CacheEntry(Generic[CacheKey]):
    key: CacheKey
    value: Any
    prev: "CacheEntry | None" = field(default=None, repr=False)
    next: "CacheEntry | None" = field(default=None, repr=False)


class BoundedCache(Generic[CacheKey]):
    def __init__(
        self,
        capacity: int,
        *,
        on_evict: Callable[[CacheKey, Any], None] | None = None,
    ) -> None:
        """
        :param capacity: Maximum number of entries, must be >= 1.
        :param on_evict: Called with (key, value) for every capacity eviction.
        """
        self._capacity = validate_capacity(capacity)
        self._on_evict = on_evict
        self._entries: dict[CacheKey, CacheEntry[CacheKey]] = {}

        # Sentinel nodes; real entries always sit between them
        self._head: CacheEntry = CacheEntry(key=None, value=None)
        self._tail: CacheEntry = CacheEntry(key=None, value=None)
        self._head.next = self._tail
        self._tail.prev = self._head

        self._hits = Counter()
        self._misses = Counter()
        self._evictions = Counter()

    @property
    def capacity(self) -> int:
        return self._capacity

    # =========================================================================
    # Linked list plumbing
    # =========================================================================

    def _unlink(self, entry: CacheEntry) -> None:
        entry.prev.next = entry.next
        entry.next.prev = entry.prev
        entry.prev = None
        entry.next = None

    def _append(self, entry: CacheEntry) -> None:
        last = self._tail.prev
        last.next = entry
        entry.prev = last
        entry.next = self._tail
        self._tail.prev = entry

    def _touch(self, entry: CacheEntry) -> None:
        """Mark entry as most recently used."""
        if entry.next is self._tail:
            return
        self._unlink(entry)
        self._append(entry)

    def _evict_lru(self) -> CacheEntry:
        """Unlinks and forgets the LRU entry. Does not run on_evict."""
        victim = self._head.next
        self._unlink(victim)
        del self._entries[victim.key]
        self._evictions.increment_and_get()
        logger.debug("Evicted %r (capacity=%d)", victim.key, self._capacity)
        return victim

    def _notify_evicted(self, victims: List[CacheEntry]) -> None:
        # Runs once the cache is consistent again; a failing hook cannot undo that
        if self._on_evict is None:
            return
        for victim in victims:
            try:
                self._on_evict(victim.key, victim.value)
            except Exception:
                logger.exception("on_evict failed for %r", victim.key)

    # =========================================================================
    # Public API
    # =========================================================================

    def get(self, key: CacheKey, default: Any = None) -> Any:
        """
        Returns the cached value and marks key as most recently used.
        Returns default when key is absent.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._misses.increment_and_get()
            return default
        self._hits.increment_and_get()
        self._touch(entry)
        return entry.value

    def put(self, key: CacheKey, value: Any) -> None:
        entry = self._entries.get(key)
        if entry is not None:
            entry.value = value
            self._touch(entry)
            return
        victims = []
        if len(self._entries) >= self._capacity:
            victims.append(self._evict_lru())
        entry = CacheEntry(key=key, value=value)
        self._entries[key] = entry
        self._append(entry)
        self._notify_evicted(victims)

    def peek(self, key: CacheKey, default: Any = None) -> Any:
        """Like get(), but leaves recency order and stats untouched."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        return entry.value

    def delete(self, key: CacheKey) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._unlink(entry)
        return True

    def clear(self) -> None:
        for entry in list(self._entries.values()):
            self._unlink(entry)
        self._entries.clear()

    def resize(self, capacity: int) -> None:
        """Changes capacity, evicting LRU entries if the cache shrinks."""
        capacity = validate_capacity(capacity)
        logger.debug("Resizing cache %d -> %d", self._capacity, capacity)
        self._capacity = capacity
        victims = []
        while len(self._entries) > self._capacity:
            victims.append(self._evict_lru())
        self._notify_evicted(victims)

    def items(self) -> List[Tuple[CacheKey, Any]]:
        """Snapshot of (key, value) pairs from least to most recently used."""
        pairs = []
        node = self._head.next
        while node is not self._tail:
            pairs.append((node.key, node.value))
            node = node.next
        return pairs

    def keys(self) -> List[CacheKey]:
        return [key for key, _ in self.items()]

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits.get(),
            misses=self._misses.get(),
            evictions=self._evictions.get(),
            size=len(self._entries),
            capacity=self._capacity,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # membership test only, no recency update
        return key in self._entries

    def __repr__(self) -> str:
        return f"BoundedCache(capacity={self._capacity}, size={len(self._entries)})"
