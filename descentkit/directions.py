"""Search direction strategies.

Nonlinear conjugate gradient directions follow ``d_k = -g_k + β_k d_{k-1}``
with ``d_0 = -g_0``. The ``β_k`` formula is picked by
:class:`ConjugateGradientMethod` and periodic resets to steepest descent by
:class:`RestartMethod`. Coordinate strategies produce unit coordinate
directions for derivative-free coordinate descent.

Strategies own their restart or cycle state; everything else they need is
passed in explicitly on each call.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from .core import Array
from .utils import machine_epsilon

HAGER_ZHANG_ETA = 0.01
GRADIENTS_ORTHOGONALITY_THRESHOLD = 0.1


def _ratio(numerator: float, denominator: float) -> float:
    # A vanishing denominator means the history carries no usable
    # information; β = 0 turns the step into steepest descent.
    if denominator == 0.0 or not np.isfinite(denominator):
        return 0.0
    return numerator / denominator


class ConjugateGradientMethod(Enum):
    """Nonlinear conjugate gradient ``β`` formulas."""

    FLETCHER_REEVES = "fletcher_reeves"
    POLAK_RIBIERE = "polak_ribiere"
    POLAK_RIBIERE_PLUS = "polak_ribiere_plus"
    HESTENES_STIEFEL = "hestenes_stiefel"
    FLETCHER_REEVES_POLAK_RIBIERE = "fletcher_reeves_polak_ribiere"
    DAI_YUAN = "dai_yuan"
    HAGER_ZHANG = "hager_zhang"

    def compute_beta(
        self,
        gradient: Array,
        previous_gradient: Array,
        previous_direction: Array,
    ) -> float:
        """``β_k`` for the current gradient and the previous gradient and direction."""
        g = np.asarray(gradient, dtype=float)
        g_prev = np.asarray(previous_gradient, dtype=float)
        d_prev = np.asarray(previous_direction, dtype=float)
        y = g - g_prev
        g_norm_sq = float(g @ g)
        g_prev_norm_sq = float(g_prev @ g_prev)

        if self is ConjugateGradientMethod.FLETCHER_REEVES:
            return _ratio(g_norm_sq, g_prev_norm_sq)
        if self is ConjugateGradientMethod.POLAK_RIBIERE:
            return _ratio(float(g @ y), g_prev_norm_sq)
        if self is ConjugateGradientMethod.POLAK_RIBIERE_PLUS:
            return max(0.0, _ratio(float(g @ y), g_prev_norm_sq))
        if self is ConjugateGradientMethod.HESTENES_STIEFEL:
            return _ratio(float(g @ y), float(d_prev @ y))
        if self is ConjugateGradientMethod.DAI_YUAN:
            return _ratio(g_norm_sq, float(d_prev @ y))
        if self is ConjugateGradientMethod.FLETCHER_REEVES_POLAK_RIBIERE:
            beta_fr = _ratio(g_norm_sq, g_prev_norm_sq)
            beta_pr = _ratio(float(g @ y), g_prev_norm_sq)
            if beta_pr < -beta_fr:
                return -beta_fr
            if abs(beta_pr) <= beta_fr:
                return beta_pr
            return beta_fr

        # Hager-Zhang
        dy = float(d_prev @ y)
        if dy == 0.0 or not np.isfinite(dy):
            return 0.0
        beta = float((y - d_prev * (2.0 * float(y @ y) / dy)) @ g) / dy
        lower_bound_denominator = float(np.linalg.norm(d_prev)) * min(
            HAGER_ZHANG_ETA, float(np.sqrt(g_prev_norm_sq))
        )
        if lower_bound_denominator > 0.0:
            beta = max(beta, -1.0 / lower_bound_denominator)
        return beta


class RestartMethod(Enum):
    """Policies for resetting the conjugate gradient direction to ``-g``."""

    NO_RESTART = "no_restart"
    N_STEP = "n_step"
    GRADIENTS_ORTHOGONALITY_CHECK = "gradients_orthogonality_check"

    def should_restart(
        self,
        gradient: Array,
        previous_gradient: Array,
        steps_since_restart: int,
        dimension: int,
    ) -> bool:
        if self is RestartMethod.NO_RESTART:
            return False
        if self is RestartMethod.N_STEP:
            return steps_since_restart >= dimension
        g_norm_sq = float(gradient @ gradient)
        if g_norm_sq == 0.0:
            return True
        return abs(float(gradient @ previous_gradient)) / g_norm_sq >= GRADIENTS_ORTHOGONALITY_THRESHOLD


class ConjugateGradientDirection:
    """Direction strategy for nonlinear conjugate gradient solvers.

    Attributes
    ----------
    steps_since_restart:
        Number of directions computed since the last reset to ``-g``. It is 0
        right after a restart.
    restarted:
        Whether the most recent direction was a reset to ``-g``.
    """

    def __init__(
        self,
        method: ConjugateGradientMethod = ConjugateGradientMethod.POLAK_RIBIERE_PLUS,
        restart_method: RestartMethod = RestartMethod.GRADIENTS_ORTHOGONALITY_CHECK,
        dimension: int = 1,
    ) -> None:
        self.method = ConjugateGradientMethod(method)
        self.restart_method = RestartMethod(restart_method)
        self.dimension = int(dimension)
        self.steps_since_restart = 0
        self.restarted = False
        self.last_beta = 0.0

    def reset(self) -> None:
        self.steps_since_restart = 0
        self.restarted = False
        self.last_beta = 0.0

    def compute(
        self,
        gradient: Array,
        previous_gradient: Optional[Array],
        previous_direction: Optional[Array],
    ) -> Array:
        """Next search direction; ``previous_*`` are None on the first iteration."""
        restart = (
            previous_gradient is None
            or previous_direction is None
            or self.restart_method.should_restart(
                gradient, previous_gradient, self.steps_since_restart + 1, self.dimension
            )
        )
        if not restart:
            beta = self.method.compute_beta(gradient, previous_gradient, previous_direction)
            direction = -gradient + beta * previous_direction
            # Safeguard against directions that point uphill.
            if np.isfinite(beta) and float(gradient @ direction) < 0.0:
                self.last_beta = beta
                self.steps_since_restart += 1
                self.restarted = False
                return direction
        self.last_beta = 0.0
        self.steps_since_restart = 0
        self.restarted = True
        return -np.asarray(gradient, dtype=float)


class CoordinateMethod(Enum):
    """Coordinate selection rules for coordinate descent.

    ``CYCLE``
        ``e_0, e_1, ..., e_{n-1}, e_0, ...``
    ``BACK_AND_FORTH``
        ``e_0, ..., e_{n-1}, e_{n-2}, ..., e_1, e_0, e_1, ...``
    ``CYCLE_AND_JOIN_ENDPOINTS``
        one ``CYCLE`` pass, then a step along the vector joining the point
        where the pass started to the point where it ended.
    """

    CYCLE = "cycle"
    BACK_AND_FORTH = "back_and_forth"
    CYCLE_AND_JOIN_ENDPOINTS = "cycle_and_join_endpoints"


class CoordinateDirection:
    """Direction strategy for coordinate descent.

    ``next_direction`` returns the raw coordinate (or cycle-joining) direction
    and ``orient`` flips it when a small forward probe does not decrease the
    objective. ``after_point_update`` records cycle end points.
    """

    def __init__(self, method: CoordinateMethod, dimension: int, initial_point: Array) -> None:
        self.method = CoordinateMethod(method)
        self.dimension = int(dimension)
        self.current_dimension = 0
        self.completed_cycle = False
        self.joining_endpoints = False
        self.cycle_start_point = np.array(initial_point, dtype=float)
        self.cycle_end_point = np.array(initial_point, dtype=float)
        self.epsilon = float(np.sqrt(machine_epsilon()))

    def _unit(self, index: int) -> Array:
        direction = np.zeros(self.dimension)
        direction[index] = 1.0
        return direction

    def next_direction(self) -> Array:
        if self.method is CoordinateMethod.CYCLE:
            direction = self._unit(self.current_dimension)
            self.current_dimension = (self.current_dimension + 1) % self.dimension
            return direction

        if self.method is CoordinateMethod.BACK_AND_FORTH:
            if self.dimension == 1:
                return self._unit(0)
            if self.current_dimension < self.dimension:
                direction = self._unit(self.current_dimension)
                self.current_dimension += 1
            else:
                direction = self._unit(2 * self.dimension - self.current_dimension - 2)
                if self.current_dimension >= 2 * self.dimension - 2:
                    self.current_dimension = 1
                else:
                    self.current_dimension += 1
            return direction

        if not self.completed_cycle:
            direction = self._unit(self.current_dimension)
            self.current_dimension += 1
            self.joining_endpoints = False
            if self.current_dimension >= self.dimension:
                self.completed_cycle = True
            return direction
        self.joining_endpoints = True
        self.completed_cycle = False
        self.current_dimension = 0
        return self.cycle_end_point - self.cycle_start_point

    def orient(self, direction: Array, point: Array, value: float, objective) -> Array:
        """Flip ``direction`` unless a probe of size ``sqrt(eps)`` decreases the objective."""
        if not objective.value(point + self.epsilon * direction) - value < 0.0:
            return -direction
        return direction

    def after_point_update(self, point: Array) -> None:
        if self.method is not CoordinateMethod.CYCLE_AND_JOIN_ENDPOINTS:
            return
        if self.joining_endpoints:
            self.cycle_start_point = np.array(point, dtype=float)
            self.joining_endpoints = False
        elif self.completed_cycle:
            self.cycle_end_point = np.array(point, dtype=float)


__all__ = [
    "ConjugateGradientDirection",
    "ConjugateGradientMethod",
    "CoordinateDirection",
    "CoordinateMethod",
    "RestartMethod",
]
