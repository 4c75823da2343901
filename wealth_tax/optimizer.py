"""Two-phase search for the utility-maximizing wealth pair.

The lifetime utility is non-concave in places and undefined outside the
feasible region, so a coarse uniform grid first locates the global basin and
a local minimizer then polishes the best grid point. The minimizer works on
an unconstrained objective in which infeasible points carry a large finite
penalty.

``WealthOptimizer.solve`` is a pure function of its arguments; caching and
warm-start state live in ``OptimizationSession``.
"""

import logging
import math
import time
from typing import NamedTuple, Optional

import numpy as np
from scipy.optimize import minimize

from .config import OptimizerSettings
from .domain import (
    CONVERGED,
    GRID_ONLY,
    METHOD_GRID,
    METHOD_REFINED,
    EconomicParameters,
    OptimizationResult,
    SearchBox,
    WealthPair,
)
from .errors import RefinementFailed, SearchExhausted
from .model import INFEASIBLE_UTILITY, check_constraints, lifetime_utility, max_pre_tax_wealth

logger = logging.getLogger(__name__)

# Objective value the minimizer sees for infeasible points.
EXTERIOR_PENALTY = 1e10

# Keeps box edges strictly inside the feasible region.
BOX_MARGIN = 0.01

COLD_CENTER_W1 = 0.6
COLD_CENTER_W2 = 0.5


def _feasible_utility(params, w1, w2):
    """Lifetime utility, or None when the pair is infeasible."""
    if not check_constraints(w1, w2, params):
        return None
    utility = lifetime_utility(params, params.w0, w1, w2)
    if utility == INFEASIBLE_UTILITY or not math.isfinite(utility):
        return None
    return utility


class GridResult(NamedTuple):
    w1: float
    w2: float
    utility: float
    evaluations: int
    feasible: bool


class WealthOptimizer:
    """Grid search followed by local refinement over ``(w1, w2)``."""

    def __init__(self, settings: Optional[OptimizerSettings] = None):
        self.settings = settings or OptimizerSettings()

    # --- DetermineBox ---

    def determine_search_box(
        self, params: EconomicParameters, hint: Optional[WealthPair] = None
    ) -> SearchBox:
        """Center the box on ``hint`` if it is still feasible, else on the default guess.

        The caller decides whether a hint applies to ``params``; see
        ``WarmStartTracker.hint_for``.
        """
        s = self.settings
        max_w1 = max_pre_tax_wealth(params)

        warm = (
            s.warm_start_enabled
            and hint is not None
            and check_constraints(hint.w1, hint.w2, params)
        )
        if warm:
            center_w1, center_w2, radius = hint.w1, hint.w2, s.warm_radius
        else:
            if hint is not None:
                logger.debug("warm start hint (%.6f, %.6f) infeasible, using cold box", hint.w1, hint.w2)
            center_w1 = COLD_CENTER_W1 * max_w1
            center_w2 = COLD_CENTER_W2 * max_w1
            radius = s.cold_radius

        return SearchBox(
            w1_min=max(BOX_MARGIN, center_w1 * (1 - radius)),
            w1_max=min(max_w1 - BOX_MARGIN, center_w1 * (1 + radius)),
            w2_min=max(BOX_MARGIN, center_w2 * (1 - radius)),
            w2_max=min(center_w2 * (1 + 2 * radius), max_w1 * 3),
            center_w1=center_w1,
            center_w2=center_w2,
            radius=radius,
            warm_started=warm,
        )

    # --- GridSearch ---

    def grid_search(self, params: EconomicParameters, box: SearchBox, steps: int) -> GridResult:
        """Evaluate a uniform ``(steps + 1) x (steps + 1)`` lattice and keep the argmax."""
        w1_grid = np.linspace(box.w1_min, box.w1_max, steps + 1)
        w2_grid = np.linspace(box.w2_min, box.w2_max, steps + 1)

        best_w1, best_w2 = box.center_w1, box.center_w2
        best_utility = -math.inf
        evaluations = 0

        for w1 in w1_grid.tolist():
            for w2 in w2_grid.tolist():
                evaluations += 1
                utility = _feasible_utility(params, w1, w2)
                if utility is not None and utility > best_utility:
                    best_utility = utility
                    best_w1, best_w2 = w1, w2

        return GridResult(best_w1, best_w2, best_utility, evaluations, best_utility > -math.inf)

    # --- Refine ---

    def objective(self, params: EconomicParameters):
        """Negative lifetime utility with the exterior penalty for infeasible points."""

        def negative_utility(x):
            utility = _feasible_utility(params, float(x[0]), float(x[1]))
            if utility is None:
                return EXTERIOR_PENALTY
            return -utility

        return negative_utility

    def refine(self, params: EconomicParameters, grid: GridResult):
        """Polish the grid optimum; raises ``RefinementFailed`` if it cannot improve it."""
        s = self.settings
        try:
            result = minimize(
                self.objective(params),
                np.array([grid.w1, grid.w2]),
                method=s.refine_method,
                tol=s.tolerance,
                options={'maxiter': s.max_iterations},
            )
        except (ArithmeticError, ValueError) as exc:
            raise RefinementFailed("local minimizer raised: %s" % exc) from exc

        w1, w2 = float(result.x[0]), float(result.x[1])
        utility = _feasible_utility(params, w1, w2)
        if utility is None:
            raise RefinementFailed("refined point is infeasible", {'w1': w1, 'w2': w2})
        if not utility > grid.utility:
            raise RefinementFailed("refined point does not improve", {'utility': utility, 'grid_utility': grid.utility})

        return w1, w2, utility, int(getattr(result, 'nit', 0) or 0)

    # --- Solve ---

    def solve(self, params: EconomicParameters, hint: Optional[WealthPair] = None) -> OptimizationResult:
        start = time.perf_counter()
        s = self.settings

        box = self.determine_search_box(params, hint)
        steps = s.warm_grid_steps if box.warm_started else s.grid_steps
        grid = self.grid_search(params, box, steps)
        if not grid.feasible:
            raise SearchExhausted("no feasible wealth pair in search box", box=box, parameters=params)

        w1, w2, utility = grid.w1, grid.w2, grid.utility
        iterations, convergence, method = 0, GRID_ONLY, METHOD_GRID
        if s.refine_enabled:
            try:
                w1, w2, utility, iterations = self.refine(params, grid)
                convergence, method = CONVERGED, METHOD_REFINED
            except RefinementFailed as exc:
                logger.debug("refinement skipped, keeping grid result: %s", exc)

        elapsed = time.perf_counter() - start
        logger.debug(
            "solved w1=%.6f w2=%.6f utility=%.6f method=%s warm=%s in %.3fs",
            w1, w2, utility, method, box.warm_started, elapsed,
        )
        return OptimizationResult(
            w1=w1,
            w2=w2,
            utility=utility,
            iterations=iterations,
            convergence=convergence,
            method=method,
            evaluations=grid.evaluations,
            calculation_time=elapsed,
            warm_started=box.warm_started,
        )
