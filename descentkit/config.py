"""Immutable solver configuration records.

All validation happens when a configuration is constructed, so an invalid
setting fails fast instead of surfacing in the middle of a solve.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Tuple, Union

import numpy as np

from .bounds import Bound, check_bound_order, normalize_bound
from .directions import ConjugateGradientMethod, CoordinateMethod, RestartMethod
from .line_search import StepSizeInitialization
from .schedules import StepSizeSchedule

if TYPE_CHECKING:
    from .line_search import LineSearch

ConvergencePredicate = Callable[[np.ndarray], bool]


class StochasticMethod(Enum):
    """Direction update rules of the stochastic solvers."""

    GRADIENT_DESCENT = "gradient_descent"
    ADAGRAD = "adagrad"


@dataclass(frozen=True)
class IterationConfig:
    """
    Settings shared by the deterministic and stochastic solver loops.

    Args:
        maximum_iterations: Iteration cap. Reaching it is not an error.
        point_change_tolerance: Threshold on ``||x_k - x_{k-1}||_2``.
        maximum_iterations_with_no_point_change: Number of consecutive
            iterations the point change must stay below the tolerance.
        check_for_point_convergence: Enables the point change test.
        lower_bound: Scalar or per-coordinate lower bound (box constraint).
        upper_bound: Scalar or per-coordinate upper bound (box constraint).
        custom_convergence_predicate: Extra stopping rule evaluated on the
            current point.
        log_every: Emit a progress record every ``log_every`` iterations
            (0 disables progress records).
    """

    maximum_iterations: int = 10000
    point_change_tolerance: float = 1e-10
    maximum_iterations_with_no_point_change: int = 1
    check_for_point_convergence: bool = True
    lower_bound: Bound = None
    upper_bound: Bound = None
    custom_convergence_predicate: Optional[ConvergencePredicate] = None
    log_every: int = 0

    def __post_init__(self) -> None:
        if self.maximum_iterations < 0:
            raise ValueError("maximum_iterations must be non-negative.")
        if self.point_change_tolerance < 0:
            raise ValueError("point_change_tolerance must be non-negative.")
        if self.maximum_iterations_with_no_point_change < 1:
            raise ValueError("maximum_iterations_with_no_point_change must be at least 1.")
        if self.log_every < 0:
            raise ValueError("log_every must be non-negative.")
        if self.custom_convergence_predicate is not None and not callable(
            self.custom_convergence_predicate
        ):
            raise ValueError("custom_convergence_predicate must be callable.")
        lower = normalize_bound(self.lower_bound, "lower_bound")
        upper = normalize_bound(self.upper_bound, "upper_bound")
        check_bound_order(lower, upper)
        object.__setattr__(self, "lower_bound", lower)
        object.__setattr__(self, "upper_bound", upper)


@dataclass(frozen=True)
class SolverConfig(IterationConfig):
    """
    Configuration of the deterministic line-search solvers.

    Args:
        c1: Sufficient decrease constant of the strong Wolfe conditions.
        c2: Curvature constant of the strong Wolfe conditions.
        a_max: Largest step size the line search may return.
        step_size_initialization: First trial step rule of the line search.
        method: Conjugate gradient variant, coordinate strategy, or None for
            steepest descent.
        restart_method: Conjugate gradient restart policy.
        gradient_tolerance: Stop once ``||g_k||_2`` falls below this value.
        check_for_gradient_convergence: Enables the gradient norm test.
        objective_change_tolerance: Threshold on ``|f_k - f_{k-1}|``.
        maximum_iterations_with_no_objective_change: Consecutive iterations
            the objective change must stay below its tolerance.
        check_for_objective_convergence: Enables the objective change test.
        line_search: Line search instance overriding the default choice.
    """

    c1: float = 1e-4
    c2: float = 0.1
    a_max: float = 10.0
    step_size_initialization: StepSizeInitialization = StepSizeInitialization.CONSERVE_FIRST_ORDER_CHANGE
    method: Union[ConjugateGradientMethod, CoordinateMethod, None] = ConjugateGradientMethod.POLAK_RIBIERE_PLUS
    restart_method: RestartMethod = RestartMethod.GRADIENTS_ORTHOGONALITY_CHECK
    gradient_tolerance: float = 1e-6
    check_for_gradient_convergence: bool = True
    objective_change_tolerance: float = 1e-10
    maximum_iterations_with_no_objective_change: int = 1
    check_for_objective_convergence: bool = True
    line_search: Optional["LineSearch"] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0 < self.c1 < 1:
            raise ValueError("c1 must lie in (0, 1).")
        if not self.c1 < self.c2 < 1:
            raise ValueError("c2 must lie in (c1, 1).")
        if not self.a_max > 0:
            raise ValueError("a_max must be positive.")
        if self.gradient_tolerance < 0:
            raise ValueError("gradient_tolerance must be non-negative.")
        if self.objective_change_tolerance < 0:
            raise ValueError("objective_change_tolerance must be non-negative.")
        if self.maximum_iterations_with_no_objective_change < 1:
            raise ValueError("maximum_iterations_with_no_objective_change must be at least 1.")
        if self.method is not None and not isinstance(
            self.method, (ConjugateGradientMethod, CoordinateMethod)
        ):
            raise ValueError(f"Unsupported method {self.method!r}.")
        object.__setattr__(
            self, "step_size_initialization", StepSizeInitialization(self.step_size_initialization)
        )
        object.__setattr__(self, "restart_method", RestartMethod(self.restart_method))


@dataclass(frozen=True)
class StochasticSolverConfig(IterationConfig):
    """
    Configuration of the stochastic solvers.

    Args:
        batch_size: Examples per gradient estimate.
        sample_with_replacement: Whether mini-batches are drawn with
            replacement.
        step_size_schedule: Step size as a function of the iteration index.
        step_size_parameters: Parameters of ``step_size_schedule``.
        l1_regularization_weight: Weight of the L1 penalty (0 disables it).
        l2_regularization_weight: Weight of the L2 penalty (0 disables it).
        method: Direction update rule.
        adagrad_epsilon: Denominator offset of the AdaGrad scaling.
        seed: Seed of the mini-batch sampler's random generator.
    """

    batch_size: int = 100
    sample_with_replacement: bool = True
    step_size_schedule: StepSizeSchedule = StepSizeSchedule.SCALED
    step_size_parameters: Tuple[float, ...] = (10.0, 0.75)
    l1_regularization_weight: float = 0.0
    l2_regularization_weight: float = 0.0
    method: StochasticMethod = StochasticMethod.GRADIENT_DESCENT
    adagrad_epsilon: float = 1e-8
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1.")
        if self.l1_regularization_weight < 0:
            raise ValueError("l1_regularization_weight must be non-negative.")
        if self.l2_regularization_weight < 0:
            raise ValueError("l2_regularization_weight must be non-negative.")
        if self.adagrad_epsilon <= 0:
            raise ValueError("adagrad_epsilon must be positive.")
        schedule = StepSizeSchedule(self.step_size_schedule)
        parameters = tuple(float(p) for p in self.step_size_parameters)
        schedule.validate(parameters)
        object.__setattr__(self, "step_size_schedule", schedule)
        object.__setattr__(self, "step_size_parameters", parameters)
        object.__setattr__(self, "method", StochasticMethod(self.method))

    @property
    def use_l1_regularization(self) -> bool:
        return self.l1_regularization_weight > 0

    @property
    def use_l2_regularization(self) -> bool:
        return self.l2_regularization_weight > 0


__all__ = [
    "ConvergencePredicate",
    "IterationConfig",
    "SolverConfig",
    "StochasticMethod",
    "StochasticSolverConfig",
]
