"""
Example: Nonlinear conjugate gradient variants on the Rosenbrock function

Runs every conjugate gradient formula with each restart policy from the
classic starting point (-1.2, 1) and prints iteration and evaluation counts.
"""

import numpy as np

from descentkit import (
    ConjugateGradientMethod,
    RestartMethod,
    RosenbrockObjective,
    SolverConfig,
    minimize,
)


def compare_variants():
    objective = RosenbrockObjective()
    x0 = np.array([-1.2, 1.0])
    print(f"{'method':32s} {'restart':32s} {'nit':>6s} {'nfev':>6s} {'f(x)':>12s}")
    for method in ConjugateGradientMethod:
        for restart in RestartMethod:
            config = SolverConfig(method=method, restart_method=restart)
            res = minimize(objective, x0, config)
            print(
                f"{method.name:32s} {restart.name:32s} {res.nit:6d} {res.nfev:6d} {res.fun:12.3e}"
            )


def bounded_run():
    print("\nBox constrained run (x <= 0.5):")
    config = SolverConfig(upper_bound=0.5)
    res = minimize(RosenbrockObjective(), np.array([-1.2, 1.0]), config)
    print(f"x = {res.x}, f(x) = {res.fun:.6f}")
    print(res.message)


if __name__ == "__main__":
    print("=" * 60)
    print("descentkit - Conjugate Gradient on Rosenbrock")
    print("=" * 60)
    compare_variants()
    bounded_run()
    print("\nDone.")
