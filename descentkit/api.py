"""Convenience entry points choosing a solver from a configuration."""

from __future__ import annotations

from typing import Optional, Union

from .config import SolverConfig, StochasticSolverConfig
from .conjugate_gradient import NonlinearConjugateGradientSolver
from .coordinate_descent import CoordinateDescentSolver
from .core import Array, OptimizeResult
from .directions import ConjugateGradientMethod, CoordinateMethod
from .gradient import GradientDescentSolver
from .objectives import Objective
from .stochastic import stochastic_solver_class

AnyConfig = Union[SolverConfig, StochasticSolverConfig]


def create_solver(
    objective: Objective,
    initial_point: Array,
    config: Optional[AnyConfig] = None,
    history: bool = False,
):
    """
    Create the solver selected by ``config``.

    Args:
        objective: Objective to minimize.
        initial_point: Starting point.
        config: A :class:`SolverConfig` (deterministic line-search solvers) or
            a :class:`StochasticSolverConfig`. Defaults to ``SolverConfig()``,
            i.e. Polak-Ribière+ conjugate gradient.
        history: Record every iterate.

    Returns:
        An unsolved solver instance.

    Raises:
        ValueError: If the configuration type or method is not supported.
    """
    if config is None:
        config = SolverConfig()
    if isinstance(config, StochasticSolverConfig):
        solver_class = stochastic_solver_class(config.method)
        return solver_class(objective, initial_point, config, history)
    if not isinstance(config, SolverConfig):
        raise ValueError(f"Unsupported configuration type {type(config).__name__}.")

    method = config.method
    if method is None:
        return GradientDescentSolver(objective, initial_point, config, history)
    elif isinstance(method, ConjugateGradientMethod):
        return NonlinearConjugateGradientSolver(objective, initial_point, config, history)
    elif isinstance(method, CoordinateMethod):
        return CoordinateDescentSolver(objective, initial_point, config, history)
    else:
        raise ValueError(f"Unsupported method {method!r}.")


def solve(objective: Objective, initial_point: Array, config: Optional[AnyConfig] = None) -> Array:
    """Run the configured solver and return the final point."""
    return create_solver(objective, initial_point, config).solve()


def minimize(
    objective: Objective,
    initial_point: Array,
    config: Optional[AnyConfig] = None,
    history: bool = False,
) -> OptimizeResult:
    """
    Run the configured solver and return an :class:`OptimizeResult`.

    Example
    -------
    >>> import numpy as np
    >>> from descentkit import RosenbrockObjective, minimize
    >>> res = minimize(RosenbrockObjective(), np.array([-1.2, 1.0]))
    >>> res.success
    True
    """
    solver = create_solver(objective, initial_point, config, history)
    solver.solve()
    return solver.result()


__all__ = ["create_solver", "minimize", "solve"]
