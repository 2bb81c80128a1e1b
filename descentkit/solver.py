"""Deterministic iterate-update loop shared by the line-search solvers.

Each iteration runs, in order: direction update, step size (line search),
point update with box constraints, gradient and objective value refresh.
Subclasses supply the direction and point updates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .bounds import BoxConstraints
from .config import SolverConfig
from .core import Array, EvaluationCounter, OptimizeResult, as_point, check_convergence
from .line_search import ExactLineSearch, LineSearch, StrongWolfeInterpolationLineSearch
from .logging import get_logger
from .objectives import Objective, QuadraticObjective

logger = get_logger(__name__)


@dataclass
class IterationState:
    """Mutable per-solve iteration state, written only by the solver loop."""

    current_iteration: int
    current_point: Array
    current_gradient: Array
    current_objective_value: float
    previous_point: Optional[Array] = None
    previous_gradient: Optional[Array] = None
    current_direction: Optional[Array] = None
    previous_direction: Optional[Array] = None
    current_step_size: float = 0.0
    previous_step_size: float = 0.0
    previous_objective_value: Optional[float] = None


def default_line_search(objective: Objective, counted, config: SolverConfig) -> LineSearch:
    """Exact search on SPD quadratics, strong Wolfe interpolation otherwise."""
    if config.line_search is not None:
        return config.line_search
    if isinstance(objective, QuadraticObjective) and objective.is_positive_definite():
        return ExactLineSearch(objective, counted)
    return StrongWolfeInterpolationLineSearch(
        counted,
        c1=config.c1,
        c2=config.c2,
        a_max=config.a_max,
        step_size_initialization=config.step_size_initialization,
    )


class AbstractLineSearchSolver(ABC):
    """Base class of the deterministic line-search solvers.

    Parameters
    ----------
    objective:
        Objective exposing ``value`` and ``gradient``.
    initial_point:
        Starting point; copied, never modified.
    config:
        Solver configuration. Bounds are checked against the dimension of
        ``initial_point`` here, before any evaluation.
    history:
        Record every iterate in ``self.history``.
    """

    def __init__(
        self,
        objective: Objective,
        initial_point: Array,
        config: Optional[SolverConfig] = None,
        history: bool = False,
    ) -> None:
        self.config = config if config is not None else SolverConfig()
        point = as_point(initial_point)
        self.dimension = point.size
        self.constraints = BoxConstraints(
            self.config.lower_bound, self.config.upper_bound, dim=self.dimension
        )
        self.objective = objective
        self.counter = EvaluationCounter(objective)
        self.line_search = default_line_search(objective, self.counter, self.config)
        self.record_history = history
        self.history: List[Array] = [point.copy()] if history else []

        self.state = IterationState(
            current_iteration=0,
            current_point=point,
            current_gradient=self.counter.gradient(point),
            current_objective_value=self.counter.value(point),
        )
        self.point_change = np.inf
        self.objective_change = np.inf
        self.gradient_norm = float(np.linalg.norm(self.state.current_gradient))
        self._iterations_with_no_point_change = 0
        self._iterations_with_no_objective_change = 0
        self.point_converged = False
        self.objective_converged = False
        self.gradient_converged = False
        self.custom_converged = False

    @property
    def point_patience(self) -> int:
        return self.config.maximum_iterations_with_no_point_change

    @property
    def objective_patience(self) -> int:
        return self.config.maximum_iterations_with_no_objective_change

    def solve(self) -> Array:
        """Iterate until a termination condition holds and return the final point."""
        logger.info("Optimization is starting (%s).", type(self).__name__)
        log_every = self.config.log_every
        while not self.check_termination_conditions():
            self.perform_iteration_updates()
            self.state.current_iteration += 1
            if self.record_history:
                self.history.append(self.state.current_point.copy())
            if log_every and self.state.current_iteration % log_every == 0:
                self.log_iteration()
        self.log_termination()
        return self.state.current_point.copy()

    def perform_iteration_updates(self) -> None:
        state = self.state
        state.previous_direction = state.current_direction
        state.current_direction = self.update_direction()
        state.previous_step_size = state.current_step_size
        state.current_step_size = self.update_step_size()
        state.previous_point = state.current_point
        state.current_point = self.constraints.apply(self.update_point())
        self.after_point_update()
        state.previous_gradient = state.current_gradient
        state.current_gradient = self.counter.gradient(state.current_point)
        state.previous_objective_value = state.current_objective_value
        state.current_objective_value = self.counter.value(state.current_point)

    def update_step_size(self) -> float:
        state = self.state
        return float(
            self.line_search.compute_step_size(
                state.current_point,
                state.current_direction,
                state.previous_point,
                state.previous_direction,
                state.previous_step_size,
            )
        )

    def update_point(self) -> Array:
        state = self.state
        return state.current_point + state.current_step_size * state.current_direction

    def after_point_update(self) -> None:
        """Hook run right after the point (and its box clamping) is updated."""

    @abstractmethod
    def update_direction(self) -> Array:
        """Return the search direction for the current iteration."""

    def check_termination_conditions(self) -> bool:
        state = self.state
        config = self.config
        self.gradient_norm = float(np.linalg.norm(state.current_gradient))
        if config.check_for_gradient_convergence and check_convergence(
            self.gradient_norm, config.gradient_tolerance
        ):
            self.gradient_converged = True
            return True
        if config.custom_convergence_predicate is not None and config.custom_convergence_predicate(
            state.current_point.copy()
        ):
            self.custom_converged = True
            return True
        if state.current_iteration >= config.maximum_iterations:
            return True
        if state.current_iteration == 0:
            return False

        if config.check_for_point_convergence:
            self.point_change = float(np.linalg.norm(state.current_point - state.previous_point))
            if self.point_change <= config.point_change_tolerance:
                self._iterations_with_no_point_change += 1
            else:
                self._iterations_with_no_point_change = 0
            if self._iterations_with_no_point_change >= self.point_patience:
                self.point_converged = True

        if config.check_for_objective_convergence:
            self.objective_change = abs(
                state.current_objective_value - state.previous_objective_value
            )
            if self.objective_change <= config.objective_change_tolerance:
                self._iterations_with_no_objective_change += 1
            else:
                self._iterations_with_no_objective_change = 0
            if self._iterations_with_no_objective_change >= self.objective_patience:
                self.objective_converged = True

        return self.point_converged or self.objective_converged

    @property
    def converged(self) -> bool:
        return (
            self.gradient_converged
            or self.point_converged
            or self.objective_converged
            or self.custom_converged
        )

    def termination_message(self) -> str:
        if self.gradient_converged:
            return "Gradient tolerance satisfied."
        if self.custom_converged:
            return "Custom convergence criterion satisfied."
        if self.point_converged:
            return (
                f"Point change {self.point_change:.3e} stayed below "
                f"{self.config.point_change_tolerance:.3e} for {self.point_patience} iteration(s)."
            )
        if self.objective_converged:
            return (
                f"Objective change {self.objective_change:.3e} stayed below "
                f"{self.config.objective_change_tolerance:.3e} for {self.objective_patience} iteration(s)."
            )
        return "Maximum iterations reached."

    def log_iteration(self) -> None:
        state = self.state
        logger.info(
            "Iteration #: %10d | Objective value: %.6e | Gradient norm: %.6e | Step size: %.3e",
            state.current_iteration,
            state.current_objective_value,
            self.gradient_norm,
            state.current_step_size,
        )

    def log_termination(self) -> None:
        logger.info(
            "%s Iterations: %d, objective value: %.6e.",
            self.termination_message(),
            self.state.current_iteration,
            self.state.current_objective_value,
        )

    def result(self) -> OptimizeResult:
        """Summary of the run so far (call after ``solve``)."""
        state = self.state
        return OptimizeResult(
            x=state.current_point.copy(),
            fun=float(state.current_objective_value),
            nit=state.current_iteration,
            success=self.converged,
            message=self.termination_message(),
            grad_norm=float(np.linalg.norm(state.current_gradient)),
            nfev=self.counter.nfev,
            njev=self.counter.njev,
            history=list(self.history),
        )


__all__ = ["AbstractLineSearchSolver", "IterationState", "default_line_search"]
