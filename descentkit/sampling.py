"""Mini-batch index sampling for stochastic gradient estimates."""

from __future__ import annotations

from typing import Optional

import numpy as np


class MiniBatchSampler:
    """Draw example indices for mini-batch gradient estimates.

    With replacement, every batch is an independent uniform draw. Without
    replacement, the sampler walks through a shuffled permutation of all
    examples and reshuffles once it is exhausted, so that each example is used
    once per pass. Without replacement, a batch size at least as large as the
    data set yields every index (a full, noiseless batch); with replacement
    such a batch is still a random draw.

    The random generator is owned by the sampler; pass a seeded
    ``numpy.random.Generator`` for reproducible runs.
    """

    def __init__(
        self,
        n_examples: int,
        with_replacement: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if n_examples <= 0:
            raise ValueError("n_examples must be positive.")
        self.n_examples = int(n_examples)
        self.with_replacement = bool(with_replacement)
        self.rng = rng if rng is not None else np.random.default_rng()
        self._permutation: Optional[np.ndarray] = None
        self._position = 0

    def reset(self) -> None:
        self._permutation = None
        self._position = 0

    def sample(self, batch_size: int) -> np.ndarray:
        """Return an integer array of ``batch_size`` example indices."""
        if batch_size <= 0:
            raise ValueError("batch_size must be positive.")
        if batch_size >= self.n_examples and not self.with_replacement:
            return np.arange(self.n_examples)
        if self.with_replacement:
            return self.rng.integers(0, self.n_examples, size=batch_size)
        return self._next_without_replacement(batch_size)

    def _next_without_replacement(self, batch_size: int) -> np.ndarray:
        if self._permutation is None:
            self._permutation = self.rng.permutation(self.n_examples)
            self._position = 0
        end = self._position + batch_size
        if end <= self.n_examples:
            batch = self._permutation[self._position:end]
            self._position = end
            return batch
        # Finish the current pass, then start a fresh permutation.
        head = self._permutation[self._position:]
        self._permutation = self.rng.permutation(self.n_examples)
        remaining = batch_size - head.size
        self._position = remaining
        return np.concatenate([head, self._permutation[:remaining]])


__all__ = ["MiniBatchSampler"]
