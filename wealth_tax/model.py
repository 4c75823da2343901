"""Closed-form utility model of the two-period life cycle with a wealth tax.

A household starts with wealth ``w0``, consumes optimally until the tax date
``t1`` where it holds ``w1``, pays ``tau * w1`` once, then consumes for ``t2``
more years and bequeaths ``w2``. Each period's utility has a closed form given
its start and terminal wealth, so the lifetime problem reduces to choosing the
pair ``(w1, w2)``.

Every function here is pure. ``period_utility`` raises ``InfeasibleError`` on
inputs outside the feasible region; ``lifetime_utility`` absorbs those and
returns the finite ``INFEASIBLE_UTILITY`` sentinel instead.
"""

import math

from .errors import DomainError, InfeasibleError

# Returned by lifetime_utility for any infeasible pair; never +/-inf or NaN.
INFEASIBLE_UTILITY = -5000.0

# Floor applied to the bequest before taking logs or powers.
BEQUEST_FLOOR = 1e-10


def kappa(r, rho, gamma):
    """kappa = (r * (gamma - 1) + rho) / gamma"""
    if gamma == 0:
        raise DomainError("gamma cannot be zero in kappa", {'r': r, 'rho': rho, 'gamma': gamma})

    result = (r * (gamma - 1) + rho) / gamma
    if not math.isfinite(result):
        raise DomainError("kappa is not finite", {'r': r, 'rho': rho, 'gamma': gamma})
    return result


def period_utility(T, A, B, r, rho, gamma):
    """Utility of running wealth down from ``A`` to ``B`` over ``T`` years.

    Consumption follows the CRRA optimal path; ``gamma == 1`` selects the log
    branch. Raises ``InfeasibleError`` when the resources cannot cover the
    terminal requirement or the closed form leaves the real numbers.
    """
    if T <= 0:
        raise InfeasibleError("horizon must be positive", {'T': T})

    k = kappa(r, rho, gamma)
    try:
        exp_rt = math.exp(r * T)
        # Guard against infeasible paths where terminal wealth is too high
        term1 = exp_rt * A - B
        if term1 <= 0:
            raise InfeasibleError("insufficient wealth for terminal requirement", {'term1': term1, 'A': A, 'B': B})

        term2 = exp_rt - math.exp((r - rho) * T / gamma)
        if term2 <= 0:
            raise InfeasibleError("consumption annuity factor is not positive", {'term2': term2})

        if gamma == 1:
            result = math.log(term1) * (1 - math.exp(-k * T)) / k - math.log(term2)
        else:
            # A fractional power of a negative base raises ValueError below
            power = 1 - gamma
            numer = math.pow(term1, power) * (1 - math.exp(-k * T)) * math.pow(k, -gamma)
            denom = power * math.pow(term2, power)
            result = numer / denom
    except (OverflowError, ZeroDivisionError, ValueError) as exc:
        raise InfeasibleError("period utility is undefined: %s" % exc, {'T': T, 'A': A, 'B': B}) from exc

    if not math.isfinite(result):
        raise InfeasibleError("period utility is not finite", {'T': T, 'A': A, 'B': B})
    return result


def bequest_utility(w2, beta, eta):
    if w2 <= 0:
        raise InfeasibleError("bequest must be positive", {'w2': w2})

    w2 = max(w2, BEQUEST_FLOOR)
    if eta == 1:
        return beta * math.log(w2)
    return beta * math.pow(w2, 1 - eta) / (1 - eta)


def lifetime_utility(params, w0, w1, w2):
    """Discounted utility of both periods plus the bequest.

    Returns ``INFEASIBLE_UTILITY`` whenever any part of the chain is
    infeasible, so optimizers only ever see ordinary floats.
    """
    p = params
    try:
        u1 = period_utility(p.t1, w0, w1, p.r, p.rho, p.gamma)
        u2 = period_utility(p.t2, w1 * (1 - p.tau), w2, p.r, p.rho, p.gamma)
        u_bequest = bequest_utility(w2, p.beta, p.eta)
        total = u1 + math.exp(-p.rho * p.t1) * u2 + u_bequest
    except (InfeasibleError, DomainError, OverflowError, ZeroDivisionError, ValueError):
        return INFEASIBLE_UTILITY

    if not math.isfinite(total):
        return INFEASIBLE_UTILITY
    return total


def max_pre_tax_wealth(params):
    """Wealth at the tax date if nothing is consumed in the first period."""
    return params.w0 * math.exp(params.r * params.t1)


def check_constraints(w1, w2, params):
    """True if ``(w1, w2)`` lies strictly inside the feasible wealth region."""
    # Written positively so NaN fails every check
    if not (w1 > 0 and w2 > 0):
        return False

    if not w1 < max_pre_tax_wealth(params):
        return False

    # Bequest cannot exceed untouched post-tax wealth grown over period 2
    max_w2 = w1 * (1 - params.tau) * math.exp(params.r * params.t2)
    if not w2 < max_w2:
        return False

    return True
