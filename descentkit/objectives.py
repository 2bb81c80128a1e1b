"""Objective function contracts and reference objectives.

Every solver consumes objectives through two calls: ``value(point)`` and
``gradient(point)``. Stochastic solvers additionally call
``gradient_estimate(point, batch_size)``. Any of them may raise
:class:`~descentkit.core.NonSmoothFunctionError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from .core import Array
from .sampling import MiniBatchSampler
from .utils import approx_grad, is_pos_def


class Objective(ABC):
    """Differentiable function to be minimized."""

    @abstractmethod
    def value(self, point: Array) -> float:
        """Function value at ``point``."""

    @abstractmethod
    def gradient(self, point: Array) -> Array:
        """Gradient at ``point``."""


class FunctionObjective(Objective):
    """Objective built from plain callables.

    When ``grad`` is omitted the gradient is approximated with central finite
    differences, which lets derivative-free problems run through the
    line-search solvers.
    """

    def __init__(
        self,
        fun: Callable[[Array], float],
        grad: Optional[Callable[[Array], Array]] = None,
        eps: float = 1e-6,
    ) -> None:
        self.fun = fun
        self.grad = grad
        self.eps = eps

    def value(self, point: Array) -> float:
        return float(self.fun(point))

    def gradient(self, point: Array) -> Array:
        if self.grad is not None:
            return np.asarray(self.grad(point), dtype=float)
        return approx_grad(self.fun, point, eps=self.eps)


class QuadraticObjective(Objective):
    """Quadratic function ``0.5 xᵀAx − bᵀx + c``."""

    def __init__(self, a: Array, b: Array, c: float = 0.0) -> None:
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float).reshape(-1)
        if a.ndim != 2 or a.shape[0] != a.shape[1]:
            raise ValueError("Quadratic factor matrix must be square.")
        if a.shape[0] != b.size:
            raise ValueError(
                f"Quadratic factor shape {a.shape} does not match linear term size {b.size}."
            )
        self.a = a
        self.b = b
        self.c = float(c)

    def value(self, point: Array) -> float:
        return float(0.5 * point @ (self.a @ point) - self.b @ point + self.c)

    def gradient(self, point: Array) -> Array:
        return self.a @ point - self.b

    def is_positive_definite(self) -> bool:
        return is_pos_def(self.a)

    def minimizer(self) -> Array:
        return np.linalg.solve(self.a, self.b)


class RosenbrockObjective(Objective):
    """Rosenbrock function ``Σ (a − x_i)² + b (x_{i+1} − x_i²)²``."""

    def __init__(self, a: float = 1.0, b: float = 100.0) -> None:
        self.a = float(a)
        self.b = float(b)

    def value(self, point: Array) -> float:
        x = np.asarray(point, dtype=float)
        return float(
            np.sum((self.a - x[:-1]) ** 2 + self.b * (x[1:] - x[:-1] ** 2) ** 2)
        )

    def gradient(self, point: Array) -> Array:
        x = np.asarray(point, dtype=float)
        grad = np.zeros_like(x)
        inner = x[1:] - x[:-1] ** 2
        grad[:-1] = -2.0 * (self.a - x[:-1]) - 4.0 * self.b * x[:-1] * inner
        grad[1:] += 2.0 * self.b * inner
        return grad


class LinearObjective(Objective):
    """Linear function ``cᵀx + d``; only bounded when box constraints are set."""

    def __init__(self, c: Array, d: float = 0.0) -> None:
        self.c = np.asarray(c, dtype=float).reshape(-1)
        self.d = float(d)

    def value(self, point: Array) -> float:
        return float(self.c @ point + self.d)

    def gradient(self, point: Array) -> Array:
        return self.c.copy()


class StochasticObjective(Objective):
    """Objective defined as the mean of per-example terms.

    Subclasses implement ``example_values`` and ``example_gradients`` over a
    subset of example indices. ``gradient_estimate`` averages the per-example
    gradients of a mini-batch drawn by a :class:`MiniBatchSampler`.
    """

    def __init__(
        self,
        n_examples: int,
        sample_with_replacement: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.n_examples = int(n_examples)
        self.sampler = MiniBatchSampler(
            self.n_examples, with_replacement=sample_with_replacement, rng=rng
        )

    @abstractmethod
    def example_values(self, point: Array, indices: np.ndarray) -> Array:
        """Per-example function values, shape ``(len(indices),)``."""

    @abstractmethod
    def example_gradients(self, point: Array, indices: np.ndarray) -> Array:
        """Per-example gradients, shape ``(len(indices), dim)``."""

    def set_sample_with_replacement(self, sample_with_replacement: bool) -> None:
        self.sampler.with_replacement = bool(sample_with_replacement)
        self.sampler.reset()

    def set_random_generator(self, rng: np.random.Generator) -> None:
        self.sampler.rng = rng
        self.sampler.reset()

    def value(self, point: Array) -> float:
        indices = np.arange(self.n_examples)
        return float(np.mean(self.example_values(point, indices)))

    def gradient(self, point: Array) -> Array:
        indices = np.arange(self.n_examples)
        return np.mean(self.example_gradients(point, indices), axis=0)

    def gradient_estimate(self, point: Array, batch_size: int) -> Array:
        indices = self.sampler.sample(batch_size)
        return np.mean(self.example_gradients(point, indices), axis=0)


class LeastSquaresObjective(StochasticObjective):
    """Mean squared residual ``mean_i (f_iᵀx − y_i)²``."""

    def __init__(
        self,
        features: Array,
        targets: Array,
        sample_with_replacement: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        features = np.asarray(features, dtype=float)
        targets = np.asarray(targets, dtype=float).reshape(-1)
        if features.ndim != 2 or features.shape[0] != targets.size:
            raise ValueError("features must be (n_examples, dim) and match targets.")
        super().__init__(features.shape[0], sample_with_replacement, rng)
        self.features = features
        self.targets = targets

    def example_values(self, point: Array, indices: np.ndarray) -> Array:
        residuals = self.features[indices] @ point - self.targets[indices]
        return residuals**2

    def example_gradients(self, point: Array, indices: np.ndarray) -> Array:
        rows = self.features[indices]
        residuals = rows @ point - self.targets[indices]
        return 2.0 * residuals[:, None] * rows


class LogisticLossObjective(StochasticObjective):
    """Mean logistic loss for labels in ``{0, 1}``."""

    def __init__(
        self,
        features: Array,
        labels: Array,
        sample_with_replacement: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        features = np.asarray(features, dtype=float)
        labels = np.asarray(labels, dtype=float).reshape(-1)
        if features.ndim != 2 or features.shape[0] != labels.size:
            raise ValueError("features must be (n_examples, dim) and match labels.")
        if not np.all((labels == 0.0) | (labels == 1.0)):
            raise ValueError("labels must be 0 or 1.")
        super().__init__(features.shape[0], sample_with_replacement, rng)
        self.features = features
        self.labels = labels

    def example_values(self, point: Array, indices: np.ndarray) -> Array:
        margins = self.features[indices] @ point
        # log(1 + exp(m)) - y m, computed without overflow
        return np.logaddexp(0.0, margins) - self.labels[indices] * margins

    def example_gradients(self, point: Array, indices: np.ndarray) -> Array:
        rows = self.features[indices]
        probabilities = 1.0 / (1.0 + np.exp(-(rows @ point)))
        return (probabilities - self.labels[indices])[:, None] * rows

    def predict_probabilities(self, point: Array, features: Array) -> Array:
        return 1.0 / (1.0 + np.exp(-(np.asarray(features, dtype=float) @ point)))


__all__ = [
    "FunctionObjective",
    "LeastSquaresObjective",
    "LinearObjective",
    "LogisticLossObjective",
    "Objective",
    "QuadraticObjective",
    "RosenbrockObjective",
    "StochasticObjective",
]
