"""Optimizer configuration.

All tunables of the solver, the result cache and the warm start live in one
immutable pydantic model so a session can be built from defaults, from keyword
overrides or from ``WEALTH_TAX_*`` environment variables:

    >>> from wealth_tax.config import OptimizerSettings
    >>> settings = OptimizerSettings(grid_steps=40)
    >>> OptimizerSettings.model_fields['cache_ttl'].description
    'Seconds a cached result stays valid.'
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "WEALTH_TAX_"


class OptimizerSettings(BaseModel):
    """Settings for the grid search, the refinement and the caches."""

    model_config = {'frozen': True, 'extra': 'forbid'}

    # === Grid search ===

    grid_steps: int = Field(
        default=100,
        ge=1,
        description="Grid intervals per axis on a cold start; (N+1)^2 samples are evaluated.",
    )
    warm_grid_steps: int = Field(
        default=50,
        ge=1,
        description="Grid intervals per axis when the box is centered on a warm start.",
    )
    cold_radius: float = Field(
        default=0.4,
        gt=0.0,
        description="Relative half-width of the search box around the default center.",
    )
    warm_radius: float = Field(
        default=0.2,
        gt=0.0,
        description="Relative half-width of the search box around a warm start hint.",
    )

    # === Local refinement ===

    refine_method: str = Field(
        default="Nelder-Mead",
        description="scipy.optimize.minimize method used to polish the grid optimum.",
    )
    tolerance: float = Field(
        default=1e-12,
        gt=0.0,
        description="Convergence tolerance handed to the local minimizer.",
    )
    max_iterations: int = Field(
        default=1000,
        ge=1,
        description="Iteration cap of the local minimizer.",
    )
    refine_enabled: bool = Field(
        default=True,
        description="Skip the refinement phase and return grid results when False.",
    )

    # === Warm start ===

    warm_start_enabled: bool = Field(
        default=True,
        description="Center the search on the previous solution for similar parameters.",
    )
    similarity_threshold: float = Field(
        default=0.10,
        ge=0.0,
        description="Maximum relative change per preference parameter for a warm start.",
    )

    # === Result cache ===

    cache_size: int = Field(
        default=100,
        ge=1,
        description="Maximum number of cached optimization results.",
    )
    cache_ttl: float = Field(
        default=60.0,
        gt=0.0,
        description="Seconds a cached result stays valid.",
    )
    cache_precision: int = Field(
        default=3,
        ge=0,
        description="Decimal places parameters are rounded to when building cache keys.",
    )

    # === Execution ===

    use_worker: bool = Field(
        default=False,
        description="Run solves on a worker thread instead of the calling thread.",
    )
    worker_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds to wait for a worker solve before falling back to the calling thread.",
    )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
        **overrides,
    ) -> "OptimizerSettings":
        """Build settings from ``<prefix><FIELD>`` environment variables.

        Values are passed to pydantic as strings and coerced to the field
        types, so ``WEALTH_TAX_GRID_STEPS=60`` yields ``grid_steps == 60``.
        Keyword overrides win over the environment.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = prefix + name.upper()
            if key in environ:
                values[name] = environ[key]
        values.update(overrides)
        return cls.model_validate(values)
