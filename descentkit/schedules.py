"""Step-size schedules for the stochastic solvers.

A schedule maps the iteration index ``k`` (starting at 0) and a short tuple of
parameters to a positive step size.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class StepSizeSchedule(Enum):
    """Supported step-size schedules.

    ``CONSTANT(a)``
        ``a``
    ``SCALED(tau, kappa)``
        ``(tau + k) ** -kappa``
    ``INVERSE_DECAY(a, b, p)``
        ``a / (1 + b * k) ** p``
    ``EXPONENTIAL(a, gamma)``
        ``a * gamma ** k``
    """

    CONSTANT = "constant"
    SCALED = "scaled"
    INVERSE_DECAY = "inverse_decay"
    EXPONENTIAL = "exponential"

    @property
    def num_parameters(self) -> int:
        return _NUM_PARAMETERS[self]

    def validate(self, parameters: Sequence[float]) -> None:
        """Raise ``ValueError`` if ``parameters`` do not fit this schedule."""
        if len(parameters) != self.num_parameters:
            raise ValueError(
                f"Step size schedule {self.name} expects {self.num_parameters} "
                f"parameter(s), got {len(parameters)}."
            )
        if self is StepSizeSchedule.CONSTANT:
            if parameters[0] <= 0:
                raise ValueError("Constant step size must be positive.")
        elif self is StepSizeSchedule.SCALED:
            tau, kappa = parameters
            if tau <= 0:
                raise ValueError("SCALED schedule requires tau > 0.")
            if kappa < 0:
                raise ValueError("SCALED schedule requires kappa >= 0.")
        elif self is StepSizeSchedule.INVERSE_DECAY:
            a, b, p = parameters
            if a <= 0 or b < 0 or p < 0:
                raise ValueError("INVERSE_DECAY schedule requires a > 0, b >= 0 and p >= 0.")
        elif self is StepSizeSchedule.EXPONENTIAL:
            a, gamma = parameters
            if a <= 0 or not 0 < gamma <= 1:
                raise ValueError("EXPONENTIAL schedule requires a > 0 and 0 < gamma <= 1.")

    def compute(self, iteration: int, parameters: Sequence[float]) -> float:
        """Step size for iteration ``iteration``."""
        k = float(iteration)
        if self is StepSizeSchedule.CONSTANT:
            return float(parameters[0])
        if self is StepSizeSchedule.SCALED:
            return float((parameters[0] + k) ** (-parameters[1]))
        if self is StepSizeSchedule.INVERSE_DECAY:
            a, b, p = parameters
            return float(a / (1.0 + b * k) ** p)
        a, gamma = parameters
        return float(a * gamma**k)


_NUM_PARAMETERS = {
    StepSizeSchedule.CONSTANT: 1,
    StepSizeSchedule.SCALED: 2,
    StepSizeSchedule.INVERSE_DECAY: 3,
    StepSizeSchedule.EXPONENTIAL: 2,
}


__all__ = ["StepSizeSchedule"]
