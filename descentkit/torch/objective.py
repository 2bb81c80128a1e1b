"""Objective whose gradient comes from PyTorch automatic differentiation."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import torch

from ..core import Array, NonSmoothFunctionError
from ..logging import get_logger
from ..objectives import Objective
from .utils import as_float_tensor, to_numpy, validate_params_shape

logger = get_logger(__name__)


class TorchObjective(Objective):
    """
    Wrap a scalar PyTorch function so the solvers can use it.

    ``fn`` receives a 1D float64 tensor and returns a 0-dim tensor. Gradients
    are computed with ``torch.autograd.grad``; a non-finite value or
    gradient raises :class:`NonSmoothFunctionError`.

    Parameters
    ----------
    fn:
        Differentiable scalar function of a 1D tensor.
    dimension:
        Expected number of parameters. If given, every query point is checked
        against it.
    device:
        Device the evaluations run on. Defaults to the CPU.

    Example
    -------
    >>> import numpy as np
    >>> from descentkit.torch import TorchObjective
    >>> objective = TorchObjective(lambda x: (x**2).sum())
    >>> objective.gradient(np.array([1.0, -2.0]))
    array([ 2., -4.])
    """

    def __init__(
        self,
        fn: Callable[[torch.Tensor], torch.Tensor],
        dimension: Optional[int] = None,
        device: Optional[torch.device] = None,
    ) -> None:
        self.fn = fn
        self.dimension = dimension
        self.device = device

    def _params(self, point: Array, requires_grad: bool) -> torch.Tensor:
        params = as_float_tensor(point, self.device)
        if self.dimension is not None:
            validate_params_shape(params, self.dimension)
        if requires_grad:
            params = params.detach().clone().requires_grad_(True)
        return params

    def value(self, point: Array) -> float:
        with torch.no_grad():
            result = self.fn(self._params(point, requires_grad=False))
        if not torch.all(torch.isfinite(result)):
            raise NonSmoothFunctionError(f"Objective is not finite at {np.asarray(point)!r}.")
        return float(result)

    def gradient(self, point: Array) -> Array:
        params = self._params(point, requires_grad=True)
        result = self.fn(params)
        if result.ndim != 0:
            raise ValueError(f"fn must return a scalar tensor, got shape {tuple(result.shape)}")
        if not torch.isfinite(result):
            raise NonSmoothFunctionError(f"Objective is not finite at {np.asarray(point)!r}.")
        grad = None
        if result.requires_grad:
            (grad,) = torch.autograd.grad(result, params, allow_unused=True)
        if grad is None:
            logger.debug("fn does not depend on its input; returning a zero gradient.")
            return np.zeros(params.shape[0])
        if not torch.all(torch.isfinite(grad)):
            raise NonSmoothFunctionError(f"Gradient is not finite at {np.asarray(point)!r}.")
        return to_numpy(grad)


__all__ = ["TorchObjective"]
