"""Parameter, search-box and result types shared by the optimizer."""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, NamedTuple

from pydantic import BaseModel

# Parameters compared when deciding whether a warm start applies.
PREFERENCE_FIELDS = ('r', 'rho', 'gamma', 'eta', 'beta', 'tau')

CONVERGED = "converged"
GRID_ONLY = "grid_only"

METHOD_GRID = "grid_search"
METHOD_REFINED = "numerical_refinement"


class EconomicParameters(BaseModel):
    """Inputs of one optimization call.

    Range and cross-field checks (``r > rho``, ``0 <= tau < 1``, positive
    horizons) are the caller's responsibility and are not repeated here.
    """

    model_config = {'frozen': True, 'extra': 'forbid'}

    r: float
    rho: float
    gamma: float
    eta: float
    beta: float
    tau: float
    t1: float
    t2: float
    w0: float = 1.0

    def with_tax(self, tau: float) -> "EconomicParameters":
        return self.model_copy(update={'tau': tau})


DEFAULT_PARAMETERS = EconomicParameters(
    r=0.06,
    rho=0.04,
    gamma=0.7,
    eta=1.7,
    beta=3.0,
    tau=0.0,
    t1=20.0,
    t2=25.0,
    w0=1.0,
)


class WealthPair(NamedTuple):
    """Wealth just before the tax event and wealth bequeathed at death."""

    w1: float
    w2: float


class SearchBox(NamedTuple):
    w1_min: float
    w1_max: float
    w2_min: float
    w2_max: float
    center_w1: float
    center_w2: float
    radius: float
    warm_started: bool = False


@dataclass(frozen=True)
class OptimizationResult:
    """Finalized solution of one optimization call."""

    w1: float
    w2: float
    utility: float
    iterations: int = 0
    convergence: str = GRID_ONLY
    method: str = METHOD_GRID
    evaluations: int = 0
    calculation_time: float = 0.0
    warm_started: bool = False
    cache_hit: bool = False

    @property
    def pair(self) -> WealthPair:
        return WealthPair(self.w1, self.w2)

    def with_cache_hit(self, cache_hit: bool = True) -> "OptimizationResult":
        return replace(self, cache_hit=cache_hit)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
