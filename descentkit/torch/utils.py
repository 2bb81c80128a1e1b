"""Tensor conversion helpers for the PyTorch objective adapter."""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch


def infer_device(device: Optional[torch.device]) -> torch.device:
    """
    Infer the PyTorch device to use.

    Parameters
    ----------
    device:
        Optional PyTorch device. If None, the CPU is used.

    Returns
    -------
    torch.device
        The device to use for computation.
    """
    if device is not None:
        return torch.device(device)
    return torch.device("cpu")


def as_float_tensor(values, device: Optional[torch.device] = None) -> torch.Tensor:
    """
    Convert a NumPy array or tensor to a float64 tensor on ``device``.

    Parameters
    ----------
    values:
        Array-like or tensor input.
    device:
        Optional device. If None, uses infer_device().
    """
    target_device = infer_device(device)
    if isinstance(values, torch.Tensor):
        return values.to(device=target_device, dtype=torch.float64)
    return torch.as_tensor(np.asarray(values, dtype=float), dtype=torch.float64, device=target_device)


def to_numpy(t: torch.Tensor) -> np.ndarray:
    """Detach ``t`` and return it as a float64 NumPy array."""
    return t.detach().to("cpu", dtype=torch.float64).numpy().astype(float, copy=True)


def validate_params_shape(params: torch.Tensor, expected_len: int) -> None:
    """
    Validate that a parameter tensor has the expected shape.

    Raises
    ------
    ValueError
        If params is not 1D or has incorrect length.
    """
    if params.ndim != 1:
        raise ValueError(f"params must be 1D, got shape {tuple(params.shape)}")
    if params.shape[0] != expected_len:
        raise ValueError(
            f"params length {params.shape[0]} does not match expected length {expected_len}"
        )


__all__ = [
    "infer_device",
    "as_float_tensor",
    "to_numpy",
    "validate_params_shape",
]
