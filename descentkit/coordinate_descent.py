"""Coordinate descent solver.

Searches along one coordinate at a time (or along the vector joining the ends
of a coordinate cycle). Combined with a finite-difference
:class:`~descentkit.objectives.FunctionObjective` it needs no analytic
gradient.
"""

from __future__ import annotations

from typing import Optional

from .config import SolverConfig
from .core import Array
from .directions import CoordinateDirection, CoordinateMethod
from .objectives import Objective
from .solver import AbstractLineSearchSolver


class CoordinateDescentSolver(AbstractLineSearchSolver):
    """Coordinate descent with a line search along each coordinate.

    ``config.method`` must be a :class:`CoordinateMethod` (defaults to
    ``CYCLE_AND_JOIN_ENDPOINTS``). A single coordinate may already be
    stationary while others are not, so the point and objective change tests
    wait for at least ``dimension`` consecutive stalled iterations.
    """

    def __init__(
        self,
        objective: Objective,
        initial_point: Array,
        config: Optional[SolverConfig] = None,
        history: bool = False,
    ) -> None:
        super().__init__(objective, initial_point, config, history)
        method = self.config.method
        if not isinstance(method, CoordinateMethod):
            method = CoordinateMethod.CYCLE_AND_JOIN_ENDPOINTS
        self.direction_strategy = CoordinateDirection(
            method, self.dimension, self.state.current_point
        )

    @property
    def point_patience(self) -> int:
        return max(self.config.maximum_iterations_with_no_point_change, self.dimension)

    @property
    def objective_patience(self) -> int:
        return max(self.config.maximum_iterations_with_no_objective_change, self.dimension)

    def update_direction(self) -> Array:
        state = self.state
        direction = self.direction_strategy.next_direction()
        return self.direction_strategy.orient(
            direction, state.current_point, state.current_objective_value, self.counter
        )

    def after_point_update(self) -> None:
        self.direction_strategy.after_point_update(self.state.current_point)


__all__ = ["CoordinateDescentSolver"]
