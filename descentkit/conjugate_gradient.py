"""Nonlinear conjugate gradient solver."""

from __future__ import annotations

from typing import Optional

from .config import SolverConfig
from .core import Array
from .directions import ConjugateGradientDirection, ConjugateGradientMethod
from .objectives import Objective
from .solver import AbstractLineSearchSolver


class NonlinearConjugateGradientSolver(AbstractLineSearchSolver):
    """Nonlinear conjugate gradient with a configurable ``β`` formula and restarts.

    ``config.method`` selects the ``β`` formula (Polak-Ribière+ by default) and
    ``config.restart_method`` the restart policy. The default line search
    uses ``c2 = 0.1``, the usual choice for conjugate gradient methods.

    Example
    -------
    >>> import numpy as np
    >>> from descentkit import NonlinearConjugateGradientSolver, RosenbrockObjective
    >>> solver = NonlinearConjugateGradientSolver(RosenbrockObjective(), np.array([-1.2, 1.0]))
    >>> np.allclose(solver.solve(), [1.0, 1.0], atol=1e-2)
    True
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
        if method is None:
            method = ConjugateGradientMethod.POLAK_RIBIERE_PLUS
        if not isinstance(method, ConjugateGradientMethod):
            raise ValueError(f"{method!r} is not a conjugate gradient method.")
        self.direction_strategy = ConjugateGradientDirection(
            method=method,
            restart_method=self.config.restart_method,
            dimension=self.dimension,
        )

    def update_direction(self) -> Array:
        state = self.state
        return self.direction_strategy.compute(
            state.current_gradient,
            state.previous_gradient,
            state.previous_direction,
        )


__all__ = ["NonlinearConjugateGradientSolver"]
