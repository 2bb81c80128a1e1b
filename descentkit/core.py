"""Core types shared by the line-search and stochastic solvers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

import numpy as np

if TYPE_CHECKING:
    from .objectives import Objective

Array = np.ndarray

ATOL = 1e-10


class NonSmoothFunctionError(ArithmeticError):
    """Raised by an objective whose gradient is undefined at the query point.

    Solvers never catch this error: without a gradient the search cannot
    continue, so it propagates out of ``solve``.
    """


@dataclass
class OptimizeResult:
    """Summary of a finished solver run."""

    x: Array
    fun: float
    nit: int
    success: bool
    message: str
    grad_norm: float
    nfev: int
    njev: int
    history: List[Array] = field(default_factory=list)


class EvaluationCounter:
    """Objective wrapper counting value and gradient evaluations."""

    def __init__(self, objective: "Objective") -> None:
        self.objective = objective
        self.nfev = 0
        self.njev = 0

    def value(self, point: Array) -> float:
        self.nfev += 1
        return float(self.objective.value(point))

    def gradient(self, point: Array) -> Array:
        self.njev += 1
        return np.asarray(self.objective.gradient(point), dtype=float)


def as_point(values) -> Array:
    """Return ``values`` as a fresh one-dimensional float array."""
    point = np.array(values, dtype=float).reshape(-1)
    if point.size == 0:
        raise ValueError("Points must contain at least one coordinate.")
    return point


def check_convergence(grad_norm: float, tol: float) -> bool:
    """Return True if gradient norm satisfies tolerance."""
    return grad_norm <= max(tol, ATOL)


__all__ = [
    "ATOL",
    "Array",
    "EvaluationCounter",
    "NonSmoothFunctionError",
    "OptimizeResult",
    "as_point",
    "check_convergence",
]
