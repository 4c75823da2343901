"""Optimal consumption and wealth paths for a finalized wealth pair.

These are consumed by charting code after the optimizer has picked
``(w1, w2)``; the optimization loop itself never calls them. Path functions
accept scalars or numpy arrays of times measured from the start of their
period.
"""

from dataclasses import dataclass

import numpy as np

from .errors import DomainError
from .model import kappa

_DENOMINATOR_FLOOR = 1e-10


def initial_consumption(r, rho, gamma, T, start, end):
    """Consumption at the start of a period that runs ``start`` down to ``end``."""
    k = kappa(r, rho, gamma)
    exp_rt = np.exp(r * T)
    num = k * (exp_rt * start - end)
    den = exp_rt - np.exp((r - rho) * T / gamma)

    if abs(den) < _DENOMINATOR_FLOOR:
        raise DomainError("near-zero denominator in initial consumption", {'T': T, 'den': float(den)})

    result = float(num / den)
    if not np.isfinite(result) or result <= 0:
        raise DomainError("initial consumption is not positive", {'start': start, 'end': end, 'c0': result})
    return result


def consumption_path(r, rho, gamma, c0):
    """c(t) = c0 * exp((r - rho) * t / gamma)"""
    growth = (r - rho) / gamma

    def c(t):
        t = np.asarray(t, dtype=float)
        if np.any(t < 0):
            raise DomainError("time must be non-negative")
        return c0 * np.exp(growth * t)

    return c


def wealth_path(r, rho, gamma, T, start, end):
    """Wealth w(t) on ``[0, T]`` with ``w(0) == start`` and ``w(T) == end``."""
    k = kappa(r, rho, gamma)
    c0 = initial_consumption(r, rho, gamma, T, start, end)

    def w(t):
        t = np.asarray(t, dtype=float)
        if np.any(t < 0) or np.any(t > T):
            raise DomainError("time outside [0, %s]" % T)
        exp_rt = np.exp(r * t)
        result = exp_rt * start - c0 * exp_rt * (1 - np.exp(-k * t)) / k
        if not np.all(np.isfinite(result)):
            raise DomainError("wealth path is not finite")
        return result

    return w


@dataclass(frozen=True)
class Trajectory:
    """Sampled optimal paths over both periods on a common time axis."""

    pre_tax_times: np.ndarray
    pre_tax_wealth: np.ndarray
    pre_tax_consumption: np.ndarray
    post_tax_times: np.ndarray
    post_tax_wealth: np.ndarray
    post_tax_consumption: np.ndarray
    w1: float
    w1_after_tax: float
    w2: float

    def to_dict(self):
        return {
            'pre_tax': {
                't': self.pre_tax_times.tolist(),
                'wealth': self.pre_tax_wealth.tolist(),
                'consumption': self.pre_tax_consumption.tolist(),
            },
            'post_tax': {
                't': self.post_tax_times.tolist(),
                'wealth': self.post_tax_wealth.tolist(),
                'consumption': self.post_tax_consumption.tolist(),
            },
            'w1': self.w1,
            'w1_after_tax': self.w1_after_tax,
            'w2': self.w2,
        }


def sample_trajectory(params, w1, w2, num_points=100):
    """Sample wealth and consumption for both periods at ``num_points + 1`` times each.

    Period 2 times are reported on the lifetime axis ``[t1, t1 + t2]``.
    """
    p = params
    w1_after_tax = w1 * (1 - p.tau)

    c01 = initial_consumption(p.r, p.rho, p.gamma, p.t1, p.w0, w1)
    c02 = initial_consumption(p.r, p.rho, p.gamma, p.t2, w1_after_tax, w2)

    s1 = np.linspace(0.0, p.t1, num_points + 1)
    s2 = np.linspace(0.0, p.t2, num_points + 1)

    return Trajectory(
        pre_tax_times=s1,
        pre_tax_wealth=wealth_path(p.r, p.rho, p.gamma, p.t1, p.w0, w1)(s1),
        pre_tax_consumption=consumption_path(p.r, p.rho, p.gamma, c01)(s1),
        post_tax_times=p.t1 + s2,
        post_tax_wealth=wealth_path(p.r, p.rho, p.gamma, p.t2, w1_after_tax, w2)(s2),
        post_tax_consumption=consumption_path(p.r, p.rho, p.gamma, c02)(s2),
        w1=float(w1),
        w1_after_tax=float(w1_after_tax),
        w2=float(w2),
    )
