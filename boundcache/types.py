from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of a cache's bookkeeping."""
    hits: int
    misses: int
    evictions: int
    size: int
    capacity: int

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return self.hits / lookups
