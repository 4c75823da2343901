"""Exception types raised by the wealth tax optimizer.

``DomainError`` signals a structural precondition violation and is never
expected during normal operation. ``InfeasibleError`` is raised by the
closed-form model for a particular wealth pair and is absorbed before it
reaches the optimizer boundary. ``SearchExhausted`` is the only failure a
caller of ``find_optimal_wealth`` sees.
"""

from typing import Any, Dict, Optional


class WealthTaxError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})


class DomainError(WealthTaxError, ValueError):
    """A model function was called outside its mathematical domain."""


class InfeasibleError(WealthTaxError):
    """A wealth pair or one of its sub-terms is economically infeasible."""


class SearchExhausted(WealthTaxError):
    """No feasible point was found anywhere in the search box."""

    def __init__(self, message: str, box=None, parameters=None):
        context = {}
        if box is not None:
            context["box"] = box._asdict()
        if parameters is not None:
            context["parameters"] = parameters.model_dump()
        super().__init__(message, context)
        self.box = box
        self.parameters = parameters


class RefinementFailed(WealthTaxError):
    """Local refinement did not improve on the grid search result."""
