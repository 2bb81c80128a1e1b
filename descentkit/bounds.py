"""Box constraints applied by clamping after each point update."""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from .core import Array

Bound = Union[None, float, Sequence[float], Array]


def normalize_bound(bound: Bound, name: str) -> Optional[Array]:
    """Return ``bound`` as a 1-D float array (size 1 for scalars) or None."""
    if bound is None:
        return None
    arr = np.asarray(bound, dtype=float)
    if arr.ndim > 1:
        raise ValueError(f"{name} must be a scalar or a one-dimensional sequence.")
    arr = arr.reshape(-1)
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty.")
    if np.any(np.isnan(arr)):
        raise ValueError(f"{name} must not contain NaN.")
    return arr


def check_bound_order(lower: Optional[Array], upper: Optional[Array]) -> None:
    if lower is None or upper is None:
        return
    if lower.size != upper.size and lower.size != 1 and upper.size != 1:
        raise ValueError(
            f"Lower bound size {lower.size} does not match upper bound size {upper.size}."
        )
    if np.any(lower > upper):
        raise ValueError("Lower bound must not exceed upper bound.")


class BoxConstraints:
    """Element-wise ``[lower, upper]`` bounds.

    A bound of size one broadcasts to every coordinate; a longer bound applies
    per coordinate and must match the problem dimension. Clamping is
    idempotent: clamping an already clamped point returns an equal point.
    """

    def __init__(self, lower: Bound = None, upper: Bound = None, dim: Optional[int] = None) -> None:
        self.lower = normalize_bound(lower, "lower_bound")
        self.upper = normalize_bound(upper, "upper_bound")
        check_bound_order(self.lower, self.upper)
        if dim is not None:
            for name, bound in (("lower_bound", self.lower), ("upper_bound", self.upper)):
                if bound is not None and bound.size not in (1, dim):
                    raise ValueError(
                        f"{name} has {bound.size} entries but the problem has {dim} coordinates."
                    )

    @property
    def active(self) -> bool:
        return self.lower is not None or self.upper is not None

    def apply(self, point: Array) -> Array:
        """Return a clamped copy of ``point``."""
        clamped = np.array(point, dtype=float)
        if self.lower is not None:
            clamped = np.maximum(clamped, self.lower)
        if self.upper is not None:
            clamped = np.minimum(clamped, self.upper)
        return clamped

    def __repr__(self) -> str:
        return f"BoxConstraints(lower={self.lower!r}, upper={self.upper!r})"


__all__ = ["BoxConstraints", "check_bound_order", "normalize_bound"]
