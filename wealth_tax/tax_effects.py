"""Response of the optimal wealth pair to the tax rate."""

from dataclasses import asdict, dataclass
from typing import List, Sequence, Tuple

TAX_RATES = (0.0, 0.1, 0.2, 0.3, 0.4, 0.5)

# Effects are reported per 10 percentage points of tax.
EFFECT_SCALE = 10


@dataclass(frozen=True)
class TaxPoint:
    tau: float
    before_tax: float
    after_tax: float
    bequest: float


@dataclass(frozen=True)
class TaxEffectSweep:
    points: Tuple[TaxPoint, ...]
    effect_before_tax: float
    effect_after_tax: float
    effect_bequest: float

    def to_dict(self):
        return {
            'points': [asdict(p) for p in self.points],
            'effect_before_tax': self.effect_before_tax,
            'effect_after_tax': self.effect_after_tax,
            'effect_bequest': self.effect_bequest,
        }


def mean_slope(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Average of the finite-difference slopes between consecutive points."""
    if len(xs) < 2:
        return 0.0
    slopes = [(ys[i] - ys[i - 1]) / (xs[i] - xs[i - 1]) for i in range(1, len(xs))]
    return sum(slopes) / len(slopes)


def tax_effect_sweep(session, params, tax_rates: Sequence[float] = TAX_RATES) -> TaxEffectSweep:
    """Solve once per tax rate and summarize how wealth responds.

    Each effect is the mean slope across the sweep divided by 10, i.e. the
    approximate change for a 10-point tax increase.
    """
    points: List[TaxPoint] = []
    for tau in tax_rates:
        result = session.find_optimal_wealth(params.with_tax(tau))
        points.append(TaxPoint(tau, result.w1, result.w1 * (1 - tau), result.w2))

    taus = [p.tau for p in points]
    return TaxEffectSweep(
        points=tuple(points),
        effect_before_tax=mean_slope(taus, [p.before_tax for p in points]) / EFFECT_SCALE,
        effect_after_tax=mean_slope(taus, [p.after_tax for p in points]) / EFFECT_SCALE,
        effect_bequest=mean_slope(taus, [p.bequest for p in points]) / EFFECT_SCALE,
    )
