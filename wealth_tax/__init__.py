"""Optimal life-cycle wealth under a one-time proportional wealth tax."""

from .config import OptimizerSettings
from .domain import DEFAULT_PARAMETERS, EconomicParameters, OptimizationResult, WealthPair
from .errors import DomainError, InfeasibleError, RefinementFailed, SearchExhausted, WealthTaxError
from .model import check_constraints, kappa, lifetime_utility, period_utility
from .optimizer import WealthOptimizer
from .session import OptimizationSession
from .tax_effects import tax_effect_sweep
from .trajectories import sample_trajectory

__all__ = [
    'DEFAULT_PARAMETERS',
    'DomainError',
    'EconomicParameters',
    'InfeasibleError',
    'OptimizationResult',
    'OptimizationSession',
    'OptimizerSettings',
    'RefinementFailed',
    'SearchExhausted',
    'WealthOptimizer',
    'WealthPair',
    'WealthTaxError',
    'check_constraints',
    'kappa',
    'lifetime_utility',
    'period_utility',
    'sample_trajectory',
    'tax_effect_sweep',
]
