"""Stateful front end around the optimizer.

An ``OptimizationSession`` owns the result cache and the warm start tracker
that the optimizer itself stays free of. Sessions are not thread-safe; give
each thread its own.
"""

import logging
import time
from typing import Optional

from .cache import ResultCache, cache_key
from .config import OptimizerSettings
from .domain import EconomicParameters, OptimizationResult
from .executors import make_executor
from .warm_start import WarmStartTracker

logger = logging.getLogger(__name__)


class OptimizationSession:
    """Cache-first, warm-started access to ``WealthOptimizer.solve``."""

    def __init__(self, settings: Optional[OptimizerSettings] = None, executor=None, clock=time.monotonic):
        self.settings = settings or OptimizerSettings()
        self.executor = executor or make_executor(self.settings)
        self.cache = ResultCache(max_size=self.settings.cache_size, ttl=self.settings.cache_ttl, clock=clock)
        self.warm_start = WarmStartTracker(threshold=self.settings.similarity_threshold)
        self.solves = 0

    def find_optimal_wealth(self, params: EconomicParameters) -> OptimizationResult:
        """Optimal ``(w1, w2)`` for ``params``.

        Raises ``SearchExhausted`` if the search box holds no feasible pair.
        Cache hits are flagged with ``cache_hit=True`` and leave the warm
        start untouched.
        """
        key = cache_key(params, self.settings.cache_precision)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache hit for %s", key)
            return cached.with_cache_hit(True)

        hint = self.warm_start.hint_for(params) if self.settings.warm_start_enabled else None
        result = self.executor.solve(params, hint)
        self.solves += 1

        result = result.with_cache_hit(False)
        self.cache.put(key, result)
        self.warm_start.update(params, result)
        return result

    def clear_cache(self) -> None:
        self.cache.clear()

    def reset_warm_start(self) -> None:
        self.warm_start.clear()

    def reset(self) -> None:
        """Forget all cached results and learned warm start history."""
        self.clear_cache()
        self.reset_warm_start()
        logger.info("optimization session reset")

    def stats(self):
        return {
            'solves': self.solves,
            'cache': self.cache.stats(),
            'executor': self.executor.stats(),
        }

    def close(self) -> None:
        self.executor.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
