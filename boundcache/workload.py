"""
Drives a LockedCache and a Counter from many worker threads at once.
Worker threads are started from a trio nursery through trio.to_thread.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable

import trio

from boundcache.cache.locked_cache import LockedCache
from boundcache.config import DriverConfig
from boundcache.counter import Counter
from boundcache.types import CacheStats

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class WorkloadReport:
    counter_total: int
    expected_total: int
    cache_stats: CacheStats
    elapsed_s: float

    @property
    def consistent(self) -> bool:
        return (
            self.counter_total == self.expected_total
            and self.cache_stats.size <= self.cache_stats.capacity
        )


def run_worker(
    worker_id: int,
    cache: LockedCache,
    counter: Counter,
    iterations: int,
    key_space: int,
    rng: random.Random | None = None,
) -> None:
    """One round = one increment, one cache lookup and a put on miss."""
    if rng is None:
        rng = random.Random(worker_id)
    for _ in range(iterations):
        ticket = counter.increment_and_get()
        key = f"key-{rng.randrange(key_space)}"
        if cache.get(key, _MISSING) is _MISSING:
            cache.put(key, ticket)


async def run_workload(
    config: DriverConfig,
    worker: Callable[..., None] = run_worker,
) -> WorkloadReport:
    cache: LockedCache[str] = LockedCache(config.capacity)
    counter = Counter()

    logger.info(
        "Starting %d workers x %d iterations (capacity=%d, key_space=%d)",
        config.workers, config.iterations, config.capacity, config.key_space,
    )
    started = time.monotonic()
    async with trio.open_nursery() as nursery:
        for worker_id in range(config.workers):
            nursery.start_soon(
                trio.to_thread.run_sync, worker,
                worker_id, cache, counter, config.iterations, config.key_space,
            )
    elapsed = time.monotonic() - started

    report = WorkloadReport(
        counter_total=counter.get(),
        expected_total=config.expected_total,
        cache_stats=cache.stats(),
        elapsed_s=elapsed,
    )
    if not report.consistent:
        logger.error(
            "Inconsistent state: counter=%d expected=%d size=%d capacity=%d",
            report.counter_total, report.expected_total,
            report.cache_stats.size, report.cache_stats.capacity,
        )
    return report
