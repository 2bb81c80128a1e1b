"""Pytest configuration and shared fixtures for descentkit tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small objectives shared by the solver tests
"""

import os

import numpy as np
import pytest
import torch

from descentkit import QuadraticObjective, RosenbrockObjective


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator(device="cpu")
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def rosenbrock() -> RosenbrockObjective:
    return RosenbrockObjective()


@pytest.fixture
def spd_quadratic() -> QuadraticObjective:
    a = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 0.5], [0.0, 0.5, 2.0]])
    b = np.array([1.0, -2.0, 0.5])
    return QuadraticObjective(a, b)
