"""PyTorch integration for descentkit.

Objectives written as PyTorch functions get exact gradients from autograd
and can be handed to any solver.

Example:
    >>> import numpy as np
    >>> import torch
    >>> from descentkit import SolverConfig, minimize
    >>> from descentkit.torch import TorchObjective
    >>>
    >>> objective = TorchObjective(lambda x: ((x - 3.0) ** 2).sum() + torch.cosh(x[0] - 3.0))
    >>> result = minimize(objective, np.zeros(2), SolverConfig())
"""

from descentkit.torch.objective import TorchObjective
from descentkit.torch.utils import as_float_tensor, infer_device, to_numpy, validate_params_shape

__all__ = [
    "TorchObjective",
    "as_float_tensor",
    "infer_device",
    "to_numpy",
    "validate_params_shape",
]
