"""Steepest descent with a line search."""

from __future__ import annotations

from .core import Array
from .solver import AbstractLineSearchSolver


class GradientDescentSolver(AbstractLineSearchSolver):
    """Moves along ``-g_k`` with the step size chosen by the line search."""

    def update_direction(self) -> Array:
        return -self.state.current_gradient


__all__ = ["GradientDescentSolver"]
