"""Line searches computing step sizes along a search direction.

The main routine is the interpolation based strong Wolfe search of Nocedal &
Wright (algorithms 3.5 and 3.6): a bracketing phase that grows the trial step
until an interval containing acceptable steps is found, followed by a zoom
phase that shrinks that interval using safeguarded cubic interpolation.

For ``φ(a) = f(x + a d)`` a step ``a`` satisfies the strong Wolfe conditions
when

    φ(a) <= φ(0) + c1 a φ'(0)        (sufficient decrease)
    |φ'(a)| <= -c2 φ'(0)             (curvature)

with ``0 < c1 < c2 < 1``.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

import numpy as np

from .core import Array
from .logging import get_logger
from .objectives import Objective, QuadraticObjective

logger = get_logger(__name__)

MAXIMUM_ITERATIONS_WITH_NO_OBJECTIVE_IMPROVEMENT = 10
MINIMUM_DISTANCE_FROM_INTERVAL_ENDPOINTS = 1e-3


class StepSizeInitialization(Enum):
    """How the first trial step of an iterative line search is chosen.

    The history based methods fall back to the previous step size on the
    first solver iteration, when no history exists yet.
    """

    UNIT = "unit"
    PREVIOUS_STEP_SIZE = "previous_step_size"
    CONSERVE_FIRST_ORDER_CHANGE = "conserve_first_order_change"
    QUADRATIC_INTERPOLATION = "quadratic_interpolation"
    MODIFIED_QUADRATIC_INTERPOLATION = "modified_quadratic_interpolation"


class _LineFunction:
    """``φ(a)`` and ``φ'(a)`` along a fixed ray, cached per step size."""

    def __init__(self, objective: Objective, point: Array, direction: Array) -> None:
        self.objective = objective
        self.point = point
        self.direction = direction
        self._values: dict[float, float] = {}
        self._derivatives: dict[float, float] = {}

    def point_at(self, step: float) -> Array:
        return self.point + step * self.direction

    def phi(self, step: float) -> float:
        if step not in self._values:
            self._values[step] = float(self.objective.value(self.point_at(step)))
        return self._values[step]

    def derivative(self, step: float) -> float:
        if step not in self._derivatives:
            gradient = np.asarray(self.objective.gradient(self.point_at(step)), dtype=float)
            self._derivatives[step] = float(gradient @ self.direction)
        return self._derivatives[step]


class LineSearch(ABC):
    """Computes a step size along a direction from a point."""

    def __init__(self, objective: Objective) -> None:
        self.objective = objective

    @abstractmethod
    def compute_step_size(
        self,
        point: Array,
        direction: Array,
        previous_point: Optional[Array] = None,
        previous_direction: Optional[Array] = None,
        previous_step_size: float = 0.0,
    ) -> float:
        """Return a non-negative step size for ``point + step * direction``."""


class IterativeLineSearch(LineSearch):
    """Line search that refines an initial trial step."""

    def __init__(
        self,
        objective: Objective,
        step_size_initialization: StepSizeInitialization = StepSizeInitialization.UNIT,
    ) -> None:
        super().__init__(objective)
        self.step_size_initialization = StepSizeInitialization(step_size_initialization)

    def compute_step_size(
        self,
        point: Array,
        direction: Array,
        previous_point: Optional[Array] = None,
        previous_direction: Optional[Array] = None,
        previous_step_size: float = 0.0,
    ) -> float:
        initial_step_size = self.initial_step_size(
            point, direction, previous_point, previous_direction, previous_step_size
        )
        return self.perform_line_search(point, direction, initial_step_size)

    def initial_step_size(
        self,
        point: Array,
        direction: Array,
        previous_point: Optional[Array],
        previous_direction: Optional[Array],
        previous_step_size: float,
    ) -> float:
        method = self.step_size_initialization
        if method is StepSizeInitialization.UNIT:
            return 1.0
        if method is StepSizeInitialization.PREVIOUS_STEP_SIZE:
            return float(previous_step_size)
        if previous_point is None or previous_direction is None or previous_step_size <= 0:
            return float(previous_step_size)

        slope = float(np.asarray(self.objective.gradient(point), dtype=float) @ direction)
        if slope == 0.0 or not math.isfinite(slope):
            return float(previous_step_size)

        if method is StepSizeInitialization.CONSERVE_FIRST_ORDER_CHANGE:
            previous_gradient = np.asarray(self.objective.gradient(previous_point), dtype=float)
            previous_slope = float(previous_gradient @ previous_direction)
            return previous_step_size * previous_slope / slope

        value_change = self.objective.value(point) - self.objective.value(previous_point)
        step = 2.0 * value_change / slope
        if method is StepSizeInitialization.MODIFIED_QUADRATIC_INTERPOLATION:
            step = min(1.0, 1.01 * step)
        return step

    @abstractmethod
    def perform_line_search(self, point: Array, direction: Array, initial_step_size: float) -> float:
        """Search along ``direction`` starting from ``initial_step_size``."""


def perform_cubic_interpolation(
    a_low: float,
    a_high: float,
    phi: Callable[[float], float],
    phi_prime: Callable[[float], float],
    minimum_distance: float = MINIMUM_DISTANCE_FROM_INTERVAL_ENDPOINTS,
) -> float:
    """Minimizer of the cubic interpolating ``φ`` at two step sizes.

    The cubic matches ``φ`` and ``φ'`` at ``a_low`` and ``a_high``
    (Nocedal & Wright, eq. 3.59). The closed form minimizer is used only when
    it lies inside the interval and improves on both endpoints; otherwise the
    better endpoint is taken. A result within ``minimum_distance`` of either
    endpoint is replaced by the interval midpoint so that the zoom phase keeps
    making progress. The returned value always lies between ``a_low`` and
    ``a_high`` (which need not be ordered).
    """
    a_low = float(a_low)
    a_high = float(a_high)
    if a_low == a_high:
        return a_low

    lower = min(a_low, a_high)
    upper = max(a_low, a_high)
    phi_low = phi(a_low)
    phi_high = phi(a_high)
    a_new = a_high if phi_high < phi_low else a_low

    phi_prime_low = phi_prime(a_low)
    phi_prime_high = phi_prime(a_high)
    d1 = phi_prime_low + phi_prime_high - 3.0 * (phi_low - phi_high) / (a_low - a_high)
    discriminant = d1 * d1 - phi_prime_low * phi_prime_high
    if math.isfinite(discriminant) and discriminant >= 0.0:
        d2 = math.copysign(math.sqrt(discriminant), a_high - a_low)
        denominator = phi_prime_high - phi_prime_low + 2.0 * d2
        if denominator != 0.0 and math.isfinite(denominator):
            candidate = a_high - (a_high - a_low) * (phi_prime_high + d2 - d1) / denominator
            if lower <= candidate <= upper:
                phi_candidate = phi(candidate)
                if phi_candidate < phi_low and phi_candidate < phi_high:
                    a_new = candidate

    if abs(a_new - a_low) <= minimum_distance or abs(a_new - a_high) <= minimum_distance:
        a_new = 0.5 * (a_low + a_high)
    return a_new


class StrongWolfeInterpolationLineSearch(IterativeLineSearch):
    """Interpolation based line search returning strong Wolfe step sizes.

    Parameters
    ----------
    objective:
        Objective evaluated along the search direction.
    c1:
        Sufficient decrease constant, ``0 < c1 < 1``.
    c2:
        Curvature constant, ``c1 < c2 < 1``.
    a_max:
        Largest step size the search may return.
    step_size_initialization:
        Rule for the first trial step. Trial steps outside ``(0, a_max)`` are
        replaced by ``a_max / 2``.
    maximum_zoom_iterations:
        Hard cap on zoom iterations. The stagnation guard (no objective
        improvement for more than ten iterations) usually ends the zoom much
        earlier on pathological functions.
    """

    def __init__(
        self,
        objective: Objective,
        c1: float = 1e-4,
        c2: float = 0.9,
        a_max: float = 10.0,
        step_size_initialization: StepSizeInitialization = StepSizeInitialization.CONSERVE_FIRST_ORDER_CHANGE,
        maximum_zoom_iterations: int = 100,
    ) -> None:
        if not 0 < c1 < 1:
            raise ValueError("c1 must lie in (0, 1).")
        if not c1 < c2 < 1:
            raise ValueError("c2 must lie in (c1, 1).")
        if not a_max > 0:
            raise ValueError("a_max must be positive.")
        if maximum_zoom_iterations < 1:
            raise ValueError("maximum_zoom_iterations must be at least 1.")
        super().__init__(objective, step_size_initialization)
        self.c1 = float(c1)
        self.c2 = float(c2)
        self.a_max = float(a_max)
        self.maximum_zoom_iterations = int(maximum_zoom_iterations)

    def perform_line_search(self, point: Array, direction: Array, initial_step_size: float) -> float:
        line = _LineFunction(self.objective, point, direction)
        phi0 = line.phi(0.0)
        phi_prime0 = line.derivative(0.0)
        if not phi_prime0 < 0.0:
            logger.debug("Direction is not a descent direction (slope %g); returning a zero step.", phi_prime0)
            return 0.0

        a0 = 0.0
        a1 = float(initial_step_size)
        if not 0.0 < a1 < self.a_max:
            a1 = self.a_max / 2.0

        first_iteration = True
        while True:
            phi_a1 = line.phi(a1)
            if (
                not math.isfinite(phi_a1)
                or phi_a1 > phi0 + self.c1 * a1 * phi_prime0
                or (not first_iteration and phi_a1 >= line.phi(a0))
            ):
                return self._zoom(line, a0, a1)
            phi_prime_a1 = line.derivative(a1)
            if abs(phi_prime_a1) <= -self.c2 * phi_prime0:
                return a1
            if phi_prime_a1 >= 0.0:
                return self._zoom(line, a1, a0)
            a0 = a1
            a1 = 2.0 * a1
            if a1 > self.a_max:
                return self.a_max
            first_iteration = False

    def _zoom(self, line: _LineFunction, a_low: float, a_high: float) -> float:
        """Shrink the bracket ``(a_low, a_high)`` until a strong Wolfe step is found.

        Invariants: the bracket contains strong Wolfe steps, ``a_low`` has the
        smallest value among the sufficient decrease steps seen so far, and
        ``φ'(a_low) (a_high - a_low) < 0``. ``a_low`` may exceed ``a_high``.
        """
        phi0 = line.phi(0.0)
        phi_prime0 = line.derivative(0.0)

        minimum_value = math.inf
        minimum_value_iteration = -1
        for iteration in range(1, self.maximum_zoom_iterations + 1):
            a_new = perform_cubic_interpolation(a_low, a_high, line.phi, line.derivative)
            phi_new = line.phi(a_new)

            if (
                not math.isfinite(phi_new)
                or phi_new > phi0 + self.c1 * a_new * phi_prime0
                or phi_new >= line.phi(a_low)
            ):
                a_high = a_new
            else:
                phi_prime_new = line.derivative(a_new)
                if abs(phi_prime_new) <= -self.c2 * phi_prime0:
                    return a_new
                if phi_prime_new * (a_high - a_low) >= 0.0:
                    a_high = a_low
                a_low = a_new

            if phi_new < minimum_value:
                minimum_value = phi_new
                minimum_value_iteration = iteration
            elif iteration - minimum_value_iteration > MAXIMUM_ITERATIONS_WITH_NO_OBJECTIVE_IMPROVEMENT:
                logger.debug("Zoom stalled after %d iterations at step %g.", iteration, a_new)
                return a_new

        logger.debug("Zoom reached %d iterations; returning step %g.", self.maximum_zoom_iterations, a_low)
        return a_low


class BacktrackingLineSearch(IterativeLineSearch):
    """Armijo backtracking: shrink the trial step until sufficient decrease holds."""

    def __init__(
        self,
        objective: Objective,
        c: float = 1e-4,
        rho: float = 0.5,
        max_iter: int = 50,
        step_size_initialization: StepSizeInitialization = StepSizeInitialization.UNIT,
    ) -> None:
        if not 0 < c < 1:
            raise ValueError("Armijo constant c must lie in (0, 1)")
        if not 0 < rho < 1:
            raise ValueError("rho must lie in (0, 1)")
        super().__init__(objective, step_size_initialization)
        self.c = float(c)
        self.rho = float(rho)
        self.max_iter = int(max_iter)

    def perform_line_search(self, point: Array, direction: Array, initial_step_size: float) -> float:
        line = _LineFunction(self.objective, point, direction)
        phi0 = line.phi(0.0)
        slope = line.derivative(0.0)
        alpha = float(initial_step_size) if initial_step_size > 0 else 1.0
        for _ in range(self.max_iter):
            if line.phi(alpha) <= phi0 + self.c * alpha * slope:
                return alpha
            alpha *= self.rho
        return alpha


class ExactLineSearch(LineSearch):
    """Closed form minimizer along the direction of a quadratic objective.

    ``evaluator`` (for example an :class:`~descentkit.core.EvaluationCounter`
    wrapping the quadratic) answers the gradient queries; the curvature comes
    from the quadratic's matrix directly.
    """

    def __init__(self, objective: QuadraticObjective, evaluator: Optional[Objective] = None) -> None:
        if not isinstance(objective, QuadraticObjective):
            raise ValueError("Exact line search requires a QuadraticObjective.")
        super().__init__(evaluator if evaluator is not None else objective)
        self.matrix = objective.a

    def compute_step_size(
        self,
        point: Array,
        direction: Array,
        previous_point: Optional[Array] = None,
        previous_direction: Optional[Array] = None,
        previous_step_size: float = 0.0,
    ) -> float:
        curvature = float(direction @ (self.matrix @ direction))
        if curvature <= 0.0:
            return 0.0
        slope = float(np.asarray(self.objective.gradient(point), dtype=float) @ direction)
        return max(0.0, -slope / curvature)


__all__ = [
    "BacktrackingLineSearch",
    "ExactLineSearch",
    "IterativeLineSearch",
    "LineSearch",
    "StepSizeInitialization",
    "StrongWolfeInterpolationLineSearch",
    "perform_cubic_interpolation",
]
