"""Shared fixtures for the wealth tax test suite."""

import pytest

from wealth_tax.config import OptimizerSettings
from wealth_tax.domain import DEFAULT_PARAMETERS


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def params():
    return DEFAULT_PARAMETERS


@pytest.fixture
def fast_settings():
    """Coarser grids keep solver tests quick without changing the algorithm."""
    return OptimizerSettings(grid_steps=30, warm_grid_steps=15, max_iterations=400)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def exhausted_params(params):
    """A tax so high that no bequest in the cold search box is affordable."""
    return params.with_tax(0.99)
