"""LRU + TTL cache of optimization results.

Keys round every parameter to a fixed number of decimals so that slider
micro-movements collide on the same entry. The cache is purely a shortcut:
every entry can be recomputed from its parameters.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .domain import EconomicParameters, OptimizationResult

logger = logging.getLogger(__name__)


def cache_key(params: EconomicParameters, precision: int = 3) -> str:
    """Canonical ``name=value`` string of the rounded parameters, in sorted order."""
    values = params.model_dump()
    parts = []
    for name in sorted(values):
        rounded = round(float(values[name]), precision) + 0.0  # normalize -0.0
        parts.append("%s=%.*f" % (name, precision, rounded))
    return "|".join(parts)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    result: OptimizationResult
    inserted_at: float


class ResultCache:
    """Bounded result cache with least-recently-used eviction and expiry on read."""

    def __init__(
        self,
        max_size: int = 100,
        ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries

    def get(self, key: str) -> Optional[OptimizationResult]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if self._clock() - entry.inserted_at > self.ttl:
            del self._entries[key]
            self.misses += 1
            logger.debug("cache entry expired: %s", key)
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return replace(entry.result)

    def put(self, key: str, result: OptimizationResult) -> None:
        if key in self._entries:
            del self._entries[key]
        while len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache evicted least recently used entry: %s", evicted)
        self._entries[key] = CacheEntry(key=key, result=result, inserted_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self):
        requests = self.hits + self.misses
        return {
            'size': len(self._entries),
            'max_size': self.max_size,
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / requests if requests else 0.0,
        }
