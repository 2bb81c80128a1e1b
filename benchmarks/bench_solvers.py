"""Benchmark the deterministic solvers on high-dimensional Rosenbrock problems."""

import time
from typing import Dict

import numpy as np

from descentkit import ConjugateGradientMethod, RosenbrockObjective, SolverConfig, minimize


def benchmark_conjugate_gradient(
    dimension: int,
    method: ConjugateGradientMethod = ConjugateGradientMethod.POLAK_RIBIERE_PLUS,
    repeats: int = 3,
) -> Dict[str, float]:
    """Benchmark one conjugate gradient variant.

    Args:
        dimension: Number of Rosenbrock coordinates.
        method: Conjugate gradient formula.
        repeats: Number of timed runs.

    Returns:
        Dictionary with timing and work counters.
    """
    objective = RosenbrockObjective()
    x0 = np.full(dimension, -1.0)
    x0[::2] = -1.2
    config = SolverConfig(method=method)

    # Warmup
    minimize(objective, x0, config)

    start = time.perf_counter()
    for _ in range(repeats):
        res = minimize(objective, x0, config)
    end = time.perf_counter()

    return {
        "dimension": dimension,
        "time_per_solve_sec": (end - start) / repeats,
        "nit": res.nit,
        "nfev": res.nfev,
        "njev": res.njev,
        "fun": res.fun,
    }


if __name__ == "__main__":
    print("Benchmarking conjugate gradient solvers...")
    for method in ConjugateGradientMethod:
        results = benchmark_conjugate_gradient(dimension=100, method=method)
        print(f"{method.name} (Rosenbrock, 100 coordinates):")
        print(f"  Time per solve: {results['time_per_solve_sec']*1e3:.1f} ms")
        print(f"  Iterations: {results['nit']}, f evals: {results['nfev']}, g evals: {results['njev']}")
