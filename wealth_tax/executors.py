"""Execution strategies for running a solve.

The optimizer is a pure function, so the same call can run in the calling
thread or on a worker thread. Strategies expose ``solve(params, hint)`` and
keep simple timing statistics.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from .errors import SearchExhausted
from .optimizer import WealthOptimizer

logger = logging.getLogger(__name__)


class SynchronousExecutor:
    """Runs the optimizer in the calling thread."""

    def __init__(self, optimizer=None):
        self.optimizer = optimizer or WealthOptimizer()
        self.jobs = 0
        self.total_time = 0.0

    def solve(self, params, hint=None):
        start = time.perf_counter()
        try:
            return self.optimizer.solve(params, hint)
        finally:
            self.jobs += 1
            self.total_time += time.perf_counter() - start

    def stats(self):
        return {
            'kind': 'synchronous',
            'jobs': self.jobs,
            'total_time': self.total_time,
            'avg_time': self.total_time / self.jobs if self.jobs else 0.0,
        }

    def shutdown(self):
        pass


class ThreadedExecutor:
    """Runs the optimizer on a worker thread with a timeout.

    On timeout or an unexpected worker error the solve is repeated in the
    calling thread when ``fallback_to_sync`` is set. ``SearchExhausted`` is a
    property of the parameters rather than of the worker and is re-raised
    as is. A timed-out job cannot be cancelled once running, so its pool is
    retired and later solves go to a fresh one.
    """

    def __init__(self, optimizer=None, timeout=30.0, fallback_to_sync=True, max_workers=1):
        self.optimizer = optimizer or WealthOptimizer()
        self.timeout = timeout
        self.fallback_to_sync = fallback_to_sync
        self.max_workers = max_workers
        self._pool = self._new_pool()
        self.worker_jobs = 0
        self.worker_time = 0.0
        self.fallback_jobs = 0
        self.fallback_time = 0.0
        self.failed_jobs = 0
        self.pool_restarts = 0

    def solve(self, params, hint=None):
        start = time.perf_counter()
        future = self._pool.submit(self.optimizer.solve, params, hint)
        try:
            result = future.result(timeout=self.timeout)
        except SearchExhausted:
            raise
        except FutureTimeoutError:
            future.cancel()
            self.failed_jobs += 1
            logger.warning("worker solve timed out after %.1fs", self.timeout)
            self._replace_pool()
            if not self.fallback_to_sync:
                raise
        except Exception as exc:
            self.failed_jobs += 1
            logger.warning("worker solve failed, falling back to calling thread: %s", exc)
            if not self.fallback_to_sync:
                raise
        else:
            self.worker_jobs += 1
            self.worker_time += time.perf_counter() - start
            return result

        fallback_start = time.perf_counter()
        try:
            return self.optimizer.solve(params, hint)
        finally:
            self.fallback_jobs += 1
            self.fallback_time += time.perf_counter() - fallback_start

    def _new_pool(self):
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="wealth-tax-solver")

    def _replace_pool(self):
        # The stuck job keeps its thread until it returns on its own
        self._pool.shutdown(wait=False)
        self._pool = self._new_pool()
        self.pool_restarts += 1

    def stats(self):
        return {
            'kind': 'threaded',
            'worker_jobs': self.worker_jobs,
            'worker_time': self.worker_time,
            'fallback_jobs': self.fallback_jobs,
            'fallback_time': self.fallback_time,
            'failed_jobs': self.failed_jobs,
            'pool_restarts': self.pool_restarts,
            'avg_worker_time': self.worker_time / self.worker_jobs if self.worker_jobs else 0.0,
        }

    def shutdown(self, wait=True):
        self._pool.shutdown(wait=wait)


def make_executor(settings, optimizer=None):
    """Executor selected by ``settings.use_worker``."""
    optimizer = optimizer or WealthOptimizer(settings)
    if settings.use_worker:
        return ThreadedExecutor(optimizer, timeout=settings.worker_timeout)
    return SynchronousExecutor(optimizer)
