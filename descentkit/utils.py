"""Numerical helpers: finite differences, definiteness checks, machine epsilon.

Pure NumPy, suitable for the small to medium problems the solvers target.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

Array = np.ndarray
Function = Callable[[Array], float]


def approx_grad(fun: Function, x: Array, eps: float = 1e-6) -> Array:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x, dtype=float)
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        grad[i] = (fun(x + ei) - fun(x - ei)) / (2.0 * eps)
    return grad


def is_pos_def(mat: Array, tol: float = 1e-12) -> bool:
    """Check if a symmetric matrix is positive definite via eigenvalues."""
    mat = np.asarray(mat, dtype=float)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        return False
    if not np.allclose(mat, mat.T):
        return False
    eigvals = np.linalg.eigvalsh(mat)
    return bool(np.all(eigvals > tol))


def machine_epsilon() -> float:
    """Machine epsilon for double precision floats."""
    return float(np.finfo(float).eps)


__all__ = ["approx_grad", "is_pos_def", "machine_epsilon"]
