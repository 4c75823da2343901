"""
Tests for the two-phase wealth optimizer

Covers:
1. Search box placement (cold, warm, infeasible hint)
2. Grid search determinism and feasibility
3. Refinement never regressing the grid result
4. SearchExhausted for scenarios without feasible points
5. Finite, in-range solutions across the supported tax range
"""

import math

import pytest

from wealth_tax.config import OptimizerSettings
from wealth_tax.domain import CONVERGED, GRID_ONLY, METHOD_GRID, EconomicParameters, WealthPair
from wealth_tax.errors import RefinementFailed, SearchExhausted
from wealth_tax.model import check_constraints, lifetime_utility, max_pre_tax_wealth
from wealth_tax.optimizer import EXTERIOR_PENALTY, GridResult, WealthOptimizer


@pytest.fixture
def optimizer(fast_settings: OptimizerSettings) -> WealthOptimizer:
    return WealthOptimizer(fast_settings)


class TestDetermineSearchBox:
    def test_cold_box(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        max_w1 = math.exp(0.06 * 20)
        box = optimizer.determine_search_box(params)

        assert not box.warm_started
        assert box.radius == 0.4
        assert box.center_w1 == pytest.approx(0.6 * max_w1)
        assert box.center_w2 == pytest.approx(0.5 * max_w1)
        assert box.w1_min == pytest.approx(0.6 * max_w1 * 0.6)
        assert box.w1_max == pytest.approx(min(max_w1 - 0.01, 0.6 * max_w1 * 1.4))
        assert box.w2_min == pytest.approx(0.5 * max_w1 * 0.6)
        assert box.w2_max == pytest.approx(min(0.5 * max_w1 * 1.8, 3 * max_w1))

    def test_warm_box_centers_on_hint(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params, WealthPair(2.0, 1.5))

        assert box.warm_started
        assert box.radius == 0.2
        assert (box.center_w1, box.center_w2) == (2.0, 1.5)
        assert box.w1_min == pytest.approx(1.6)
        assert box.w1_max == pytest.approx(2.4)
        assert box.w2_min == pytest.approx(1.2)
        assert box.w2_max == pytest.approx(2.1)

    def test_infeasible_hint_falls_back_to_cold_box(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params, WealthPair(10.0, 1.0))
        assert not box.warm_started
        assert box.radius == 0.4

    def test_warm_start_can_be_disabled(self, params: EconomicParameters) -> None:
        optimizer = WealthOptimizer(OptimizerSettings(warm_start_enabled=False))
        assert not optimizer.determine_search_box(params, WealthPair(2.0, 1.5)).warm_started

    def test_w1_upper_bound_stays_below_maximum(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        max_w1 = max_pre_tax_wealth(params)
        box = optimizer.determine_search_box(params, WealthPair(max_w1 - 0.001, 1.0))
        assert box.w1_max == pytest.approx(max_w1 - 0.01)


class TestGridSearch:
    def test_deterministic(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params)
        first = optimizer.grid_search(params, box, 40)
        second = optimizer.grid_search(params, box, 40)

        assert (first.w1, first.w2, first.utility) == (second.w1, second.w2, second.utility)

    def test_evaluates_full_lattice(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params)
        assert optimizer.grid_search(params, box, 10).evaluations == 11 * 11

    def test_argmax_is_feasible(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params)
        grid = optimizer.grid_search(params, box, 20)

        assert grid.feasible
        assert check_constraints(grid.w1, grid.w2, params)
        assert grid.utility == lifetime_utility(params, params.w0, grid.w1, grid.w2)

    def test_no_feasible_point(self, optimizer: WealthOptimizer, exhausted_params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(exhausted_params)
        grid = optimizer.grid_search(exhausted_params, box, 10)
        assert not grid.feasible
        assert grid.utility == -math.inf


class TestRefine:
    def test_objective_penalizes_infeasible_points(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        objective = optimizer.objective(params)
        assert objective([10.0, 1.0]) == EXTERIOR_PENALTY
        assert objective([2.0, -1.0]) == EXTERIOR_PENALTY
        assert objective([2.0, 1.5]) == -lifetime_utility(params, params.w0, 2.0, 1.5)

    def test_improves_on_grid(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params)
        grid = optimizer.grid_search(params, box, 10)
        w1, w2, utility, iterations = optimizer.refine(params, grid)

        assert utility > grid.utility
        assert check_constraints(w1, w2, params)
        assert iterations > 0

    def test_rejects_non_improving_result(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        box = optimizer.determine_search_box(params)
        grid = optimizer.grid_search(params, box, 10)
        unbeatable = grid._replace(utility=1e9)

        with pytest.raises(RefinementFailed):
            optimizer.refine(params, unbeatable)

    def test_refinement_failure_keeps_grid_result(self, params: EconomicParameters, monkeypatch) -> None:
        optimizer = WealthOptimizer(OptimizerSettings(grid_steps=10))

        def fail(*args, **kwargs):
            raise RefinementFailed("forced")

        monkeypatch.setattr(optimizer, 'refine', fail)
        result = optimizer.solve(params)
        grid = optimizer.grid_search(params, optimizer.determine_search_box(params), 10)

        assert result.convergence == GRID_ONLY
        assert result.method == METHOD_GRID
        assert (result.w1, result.w2, result.utility) == (grid.w1, grid.w2, grid.utility)


class TestSolve:
    def test_default_parameters_inside_feasible_region(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        result = optimizer.solve(params)

        assert 0 < result.w1 < math.exp(0.06 * 20)
        assert 0 < result.w2 < result.w1 * math.exp(0.06 * 25)
        assert result.convergence in (CONVERGED, GRID_ONLY)
        assert not result.cache_hit

    def test_refinement_never_regresses(self, params: EconomicParameters) -> None:
        refined = WealthOptimizer(OptimizerSettings(grid_steps=20)).solve(params)
        grid_only = WealthOptimizer(OptimizerSettings(grid_steps=20, refine_enabled=False)).solve(params)

        assert grid_only.convergence == GRID_ONLY
        assert grid_only.iterations == 0
        assert refined.utility >= grid_only.utility

    def test_result_fields_are_finite(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        result = optimizer.solve(params)
        for value in (result.w1, result.w2, result.utility, result.calculation_time):
            assert math.isfinite(value)

    def test_warm_solve_uses_smaller_grid(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        cold = optimizer.solve(params)
        warm = optimizer.solve(params, cold.pair)

        assert not cold.warm_started
        assert warm.warm_started
        assert cold.evaluations == 31 * 31
        assert warm.evaluations == 16 * 16
        assert warm.utility == pytest.approx(cold.utility, rel=1e-4)

    def test_search_exhausted(self, optimizer: WealthOptimizer, exhausted_params: EconomicParameters) -> None:
        with pytest.raises(SearchExhausted) as excinfo:
            optimizer.solve(exhausted_params)

        assert excinfo.value.box is not None
        assert excinfo.value.context['parameters']['tau'] == 0.99

    @pytest.mark.parametrize("tau", [0.0, 0.1, 0.2, 0.3, 0.4, 0.5])
    def test_feasible_across_tax_range(self, optimizer: WealthOptimizer, params: EconomicParameters, tau: float) -> None:
        p = params.with_tax(tau)
        result = optimizer.solve(p)
        assert check_constraints(result.w1, result.w2, p)

    def test_log_utility_parameters(self, optimizer: WealthOptimizer, params: EconomicParameters) -> None:
        p = params.model_copy(update={'gamma': 1.0, 'eta': 1.0})
        result = optimizer.solve(p)
        assert check_constraints(result.w1, result.w2, p)
        assert math.isfinite(result.utility)


def test_grid_result_is_plain_data() -> None:
    grid = GridResult(1.0, 2.0, 3.0, 4, True)
    assert grid._asdict() == {'w1': 1.0, 'w2': 2.0, 'utility': 3.0, 'evaluations': 4, 'feasible': True}
