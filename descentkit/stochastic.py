"""Stochastic solvers driven by mini-batch gradient estimates.

There is no line search here: the step size comes from a schedule of the
iteration index. L2 regularization is folded into every gradient estimate as
``+ 2 λ₂ x``; L1 regularization is handled by the concrete point update rule
through a soft-thresholding (proximal) step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .bounds import BoxConstraints
from .config import StochasticMethod, StochasticSolverConfig
from .core import Array, EvaluationCounter, OptimizeResult, as_point
from .logging import get_logger
from .objectives import Objective, StochasticObjective

logger = get_logger(__name__)


def soft_threshold(point: Array, threshold) -> Array:
    """Proximal operator of ``threshold * ||x||_1``."""
    return np.sign(point) * np.maximum(np.abs(point) - threshold, 0.0)


class AbstractStochasticSolver(ABC):
    """Base class of the stochastic solvers.

    Parameters
    ----------
    objective:
        A :class:`StochasticObjective` (mini-batch estimates) or any
        :class:`Objective`, whose exact gradient is then used as a noiseless
        estimate.
    initial_point:
        Starting point; copied, never modified.
    config:
        Solver configuration. When ``config.seed`` is set, the objective's
        sampler receives a fresh generator seeded with it.
    history:
        Record every iterate in ``self.history``.
    """

    def __init__(
        self,
        objective: Objective,
        initial_point: Array,
        config: Optional[StochasticSolverConfig] = None,
        history: bool = False,
    ) -> None:
        self.config = config if config is not None else StochasticSolverConfig()
        point = as_point(initial_point)
        self.dimension = point.size
        self.constraints = BoxConstraints(
            self.config.lower_bound, self.config.upper_bound, dim=self.dimension
        )
        self.objective = objective
        self.counter = EvaluationCounter(objective)
        if isinstance(objective, StochasticObjective):
            objective.set_sample_with_replacement(self.config.sample_with_replacement)
            if self.config.seed is not None:
                objective.set_random_generator(np.random.default_rng(self.config.seed))
        self.n_gradient_estimates = 0

        self.record_history = history
        self.history: List[Array] = [point.copy()] if history else []
        self.current_iteration = 0
        self.current_point = point
        self.previous_point: Optional[Array] = None
        self.current_direction: Optional[Array] = None
        self.current_step_size = 0.0
        self.current_gradient = self.estimate_gradient(point)

        self.point_change = np.inf
        self._iterations_with_no_point_change = 0
        self.point_converged = False
        self.custom_converged = False

    def estimate_gradient(self, point: Array) -> Array:
        self.n_gradient_estimates += 1
        if isinstance(self.objective, StochasticObjective):
            gradient = np.asarray(
                self.objective.gradient_estimate(point, self.config.batch_size), dtype=float
            )
        else:
            gradient = self.counter.gradient(point)
        if self.config.use_l2_regularization:
            gradient = gradient + 2.0 * self.config.l2_regularization_weight * point
        return gradient

    def solve(self) -> Array:
        """Iterate until a termination condition holds and return the final point."""
        logger.info("Stochastic optimization is starting (%s).", type(self).__name__)
        predicate = self.config.custom_convergence_predicate
        log_every = self.config.log_every
        while not self.check_termination_conditions():
            if predicate is not None and predicate(self.current_point.copy()):
                self.custom_converged = True
                break
            self.perform_iteration_updates()
            self.current_iteration += 1
            if self.record_history:
                self.history.append(self.current_point.copy())
            if log_every and self.current_iteration % log_every == 0:
                logger.info(
                    "Iteration #: %10d | Point change: %.6e | Step size: %.3e",
                    self.current_iteration,
                    self.point_change,
                    self.current_step_size,
                )
        logger.info("%s Iterations: %d.", self.termination_message(), self.current_iteration)
        return self.current_point.copy()

    def perform_iteration_updates(self) -> None:
        self.current_direction = self.update_direction()
        self.current_step_size = self.update_step_size()
        self.previous_point = self.current_point
        self.current_point = self.constraints.apply(self.update_point())
        self.current_gradient = self.estimate_gradient(self.current_point)

    def update_step_size(self) -> float:
        return self.config.step_size_schedule.compute(
            self.current_iteration, self.config.step_size_parameters
        )

    def check_termination_conditions(self) -> bool:
        if self.current_iteration == 0:
            return self.config.maximum_iterations == 0
        if self.current_iteration >= self.config.maximum_iterations:
            return True
        if self.config.check_for_point_convergence:
            self.point_change = float(np.linalg.norm(self.current_point - self.previous_point))
            if self.point_change <= self.config.point_change_tolerance:
                self._iterations_with_no_point_change += 1
            else:
                self._iterations_with_no_point_change = 0
            if self._iterations_with_no_point_change >= self.config.maximum_iterations_with_no_point_change:
                self.point_converged = True
        return self.point_converged

    def termination_message(self) -> str:
        if self.custom_converged:
            return "Custom convergence criterion satisfied."
        if self.point_converged:
            return (
                f"Point change {self.point_change:.3e} stayed below "
                f"{self.config.point_change_tolerance:.3e} for "
                f"{self.config.maximum_iterations_with_no_point_change} iteration(s)."
            )
        return "Maximum iterations reached."

    def result(self) -> OptimizeResult:
        """Summary of the run so far; ``fun`` is the full objective value."""
        return OptimizeResult(
            x=self.current_point.copy(),
            fun=self.counter.value(self.current_point),
            nit=self.current_iteration,
            success=self.point_converged or self.custom_converged,
            message=self.termination_message(),
            grad_norm=float(np.linalg.norm(self.current_gradient)),
            nfev=self.counter.nfev,
            njev=self.n_gradient_estimates,
            history=list(self.history),
        )

    @abstractmethod
    def update_direction(self) -> Array:
        """Direction for the current iteration, including any regularization scaling."""

    @abstractmethod
    def update_point(self) -> Array:
        """New point from ``previous_point``; must return a new array."""


class StochasticGradientDescentSolver(AbstractStochasticSolver):
    """Stochastic gradient descent, with a proximal step for L1 regularization."""

    def update_direction(self) -> Array:
        return -self.current_gradient

    def update_point(self) -> Array:
        point = self.previous_point + self.current_step_size * self.current_direction
        if self.config.use_l1_regularization:
            point = soft_threshold(
                point, self.current_step_size * self.config.l1_regularization_weight
            )
        return point


class AdaGradSolver(AbstractStochasticSolver):
    """AdaGrad: per-coordinate steps scaled by accumulated squared gradients."""

    def __init__(
        self,
        objective: Objective,
        initial_point: Array,
        config: Optional[StochasticSolverConfig] = None,
        history: bool = False,
    ) -> None:
        super().__init__(objective, initial_point, config, history)
        self.squared_gradient_sum = np.zeros(self.dimension)
        self._scaling = np.ones(self.dimension)

    def update_direction(self) -> Array:
        self.squared_gradient_sum = self.squared_gradient_sum + self.current_gradient**2
        self._scaling = 1.0 / (np.sqrt(self.squared_gradient_sum) + self.config.adagrad_epsilon)
        return -self.current_gradient * self._scaling

    def update_point(self) -> Array:
        point = self.previous_point + self.current_step_size * self.current_direction
        if self.config.use_l1_regularization:
            point = soft_threshold(
                point,
                self.current_step_size * self.config.l1_regularization_weight * self._scaling,
            )
        return point


def stochastic_solver_class(method: StochasticMethod) -> type:
    if method is StochasticMethod.ADAGRAD:
        return AdaGradSolver
    return StochasticGradientDescentSolver


__all__ = [
    "AbstractStochasticSolver",
    "AdaGradSolver",
    "StochasticGradientDescentSolver",
    "soft_threshold",
    "stochastic_solver_class",
]
