"""Warm start bookkeeping for incremental re-optimization.

When parameters move only a little between calls (a slider being dragged),
the previous optimum is a good center for the next, narrower search.
"""

import logging
from typing import Optional

from .domain import PREFERENCE_FIELDS, EconomicParameters, OptimizationResult, WealthPair

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.10


def relative_difference(a: float, b: float) -> float:
    scale = max(abs(a), abs(b))
    if scale == 0:
        return 0.0
    return abs(a - b) / scale


def similar(
    a: EconomicParameters,
    b: Optional[EconomicParameters],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> bool:
    """True if every preference parameter differs by at most ``threshold`` (relative)."""
    if b is None:
        return False
    return all(
        relative_difference(getattr(a, name), getattr(b, name)) <= threshold
        for name in PREFERENCE_FIELDS
    )


class WarmStartTracker:
    """Single slot holding the last accepted solution and its parameters."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.threshold = threshold
        self.last_result: Optional[WealthPair] = None
        self.last_parameters: Optional[EconomicParameters] = None

    def hint_for(self, params: EconomicParameters) -> Optional[WealthPair]:
        """Previous optimum if ``params`` is close to the parameters that produced it."""
        if self.last_result is None or not similar(params, self.last_parameters, self.threshold):
            return None
        return self.last_result

    def update(self, params: EconomicParameters, result: OptimizationResult) -> None:
        self.last_result = WealthPair(float(result.w1), float(result.w2))
        self.last_parameters = params
        logger.debug("warm start updated to w1=%.6f w2=%.6f", result.w1, result.w2)

    def clear(self) -> None:
        self.last_result = None
        self.last_parameters = None
