import math

import numpy as np
import pytest

from descentkit import (
    BacktrackingLineSearch,
    ExactLineSearch,
    FunctionObjective,
    QuadraticObjective,
    RosenbrockObjective,
    StepSizeInitialization,
    StrongWolfeInterpolationLineSearch,
    perform_cubic_interpolation,
)
from descentkit.core import EvaluationCounter


def sphere() -> FunctionObjective:
    return FunctionObjective(lambda x: float(x @ x), lambda x: 2.0 * x)


def assert_strong_wolfe(objective, x, direction, alpha, c1=1e-4, c2=0.9):
    slope0 = objective.gradient(x) @ direction
    new_point = x + alpha * direction
    assert objective.value(new_point) <= objective.value(x) + c1 * alpha * slope0
    assert abs(objective.gradient(new_point) @ direction) <= c2 * abs(slope0)


def test_cubic_interpolation_recovers_quadratic_minimizer():
    phi = lambda a: (a - 0.3) ** 2
    phi_prime = lambda a: 2.0 * (a - 0.3)
    assert perform_cubic_interpolation(0.0, 1.0, phi, phi_prime) == pytest.approx(0.3)
    # Unordered endpoints give the same answer.
    assert perform_cubic_interpolation(1.0, 0.0, phi, phi_prime) == pytest.approx(0.3)


def test_cubic_interpolation_avoids_endpoints():
    phi = lambda a: (a - 1e-4) ** 2
    phi_prime = lambda a: 2.0 * (a - 1e-4)
    assert perform_cubic_interpolation(0.0, 1.0, phi, phi_prime) == pytest.approx(0.5)


def test_cubic_interpolation_falls_back_on_nan():
    phi = lambda a: math.nan if a > 0.9 else a
    phi_prime = lambda a: math.nan if a > 0.9 else 1.0
    assert perform_cubic_interpolation(0.0, 1.0, phi, phi_prime) == pytest.approx(0.5)


def test_cubic_interpolation_coinciding_endpoints():
    assert perform_cubic_interpolation(0.25, 0.25, abs, lambda a: 1.0) == 0.25


def test_cubic_interpolation_stays_in_interval(rng):
    for _ in range(50):
        a_low, a_high = rng.uniform(0.0, 5.0, size=2)
        coefficients = rng.normal(size=4)
        phi = lambda a: float(np.polyval(coefficients, a))
        phi_prime = lambda a: float(np.polyval(np.polyder(coefficients), a))
        a_new = perform_cubic_interpolation(a_low, a_high, phi, phi_prime)
        assert min(a_low, a_high) <= a_new <= max(a_low, a_high)


def test_strong_wolfe_on_sphere_finds_exact_step():
    objective = sphere()
    x = np.array([1.0, -2.0])
    direction = -objective.gradient(x)
    search = StrongWolfeInterpolationLineSearch(objective)
    alpha = search.compute_step_size(x, direction)
    assert alpha == pytest.approx(0.5)
    assert_strong_wolfe(objective, x, direction, alpha)


@pytest.mark.parametrize(
    "x",
    [np.array([-1.2, 1.0]), np.array([0.0, 0.0]), np.array([2.0, 2.0])],
)
def test_strong_wolfe_conditions_rosenbrock(x):
    objective = RosenbrockObjective()
    direction = -objective.gradient(x)
    search = StrongWolfeInterpolationLineSearch(
        objective, c1=1e-4, c2=0.9, step_size_initialization=StepSizeInitialization.UNIT
    )
    alpha = search.compute_step_size(x, direction)
    assert 0.0 < alpha <= search.a_max
    assert_strong_wolfe(objective, x, direction, alpha)


def test_strong_wolfe_returns_a_max_for_unbounded_descent():
    objective = FunctionObjective(lambda x: -float(x[0]), lambda x: np.array([-1.0]))
    search = StrongWolfeInterpolationLineSearch(objective, a_max=8.0)
    alpha = search.compute_step_size(np.array([0.0]), np.array([1.0]))
    assert alpha == 8.0


def test_non_descent_direction_gives_zero_step():
    objective = sphere()
    x = np.array([1.0, 1.0])
    search = StrongWolfeInterpolationLineSearch(objective)
    assert search.compute_step_size(x, objective.gradient(x)) == 0.0
    assert search.compute_step_size(x, np.array([1.0, -1.0])) == 0.0


def test_search_terminates_on_rough_function():
    def fun(x):
        return float(x[0] ** 2 + 1e-3 * np.sin(1e6 * x[0]))

    def grad(x):
        return np.array([2.0 * x[0] + 1e3 * np.cos(1e6 * x[0])])

    counter = EvaluationCounter(FunctionObjective(fun, grad))
    search = StrongWolfeInterpolationLineSearch(counter, maximum_zoom_iterations=100)
    x = np.array([1.0])
    direction = np.array([-1.0])
    if grad(x) @ direction >= 0:
        direction = -direction
    alpha = search.compute_step_size(x, direction)
    assert math.isfinite(alpha)
    assert 0.0 <= alpha <= search.a_max
    assert counter.nfev <= 2 * search.maximum_zoom_iterations + 10


def plateau() -> FunctionObjective:
    # Descending at 0, flat and higher everywhere to the right: every zoom
    # trial fails sufficient decrease without improving on the last one.
    return FunctionObjective(
        lambda x: 0.0 if x[0] <= 0.0 else 1.0,
        lambda x: np.array([-1.0 if x[0] <= 0.0 else 0.0]),
    )


def test_zoom_returns_trial_step_when_stalled():
    search = StrongWolfeInterpolationLineSearch(
        plateau(), step_size_initialization=StepSizeInitialization.UNIT
    )
    # Zoom bisects (0, 1); the eleventh trial after the best value is returned.
    alpha = search.compute_step_size(np.zeros(1), np.ones(1))
    assert alpha == 2.0**-12


def test_zoom_iteration_cap_returns_low_endpoint():
    search = StrongWolfeInterpolationLineSearch(
        plateau(),
        step_size_initialization=StepSizeInitialization.UNIT,
        maximum_zoom_iterations=5,
    )
    assert search.compute_step_size(np.zeros(1), np.ones(1)) == 0.0


def test_non_finite_values_shrink_the_step():
    def fun(x):
        return math.inf if x[0] > 3.0 else float((x[0] - 1.0) ** 2)

    objective = FunctionObjective(fun, lambda x: np.array([2.0 * (x[0] - 1.0)]))
    search = StrongWolfeInterpolationLineSearch(objective)
    alpha = search.compute_step_size(np.array([0.0]), np.array([1.0]))
    assert 0.0 < alpha <= 3.0
    assert fun(np.array([alpha])) < fun(np.array([0.0]))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"c1": 0.0},
        {"c1": 1.0},
        {"c1": 0.5, "c2": 0.4},
        {"c2": 1.0},
        {"a_max": 0.0},
        {"maximum_zoom_iterations": 0},
    ],
)
def test_strong_wolfe_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        StrongWolfeInterpolationLineSearch(sphere(), **kwargs)


def test_initial_step_size_rules():
    objective = sphere()
    x_prev = np.array([2.0, 0.0])
    d_prev = np.array([-1.0, 0.0])
    x = np.array([1.0, 1.0])
    d = np.array([-1.0, -1.0])

    def initial(method):
        search = StrongWolfeInterpolationLineSearch(objective, step_size_initialization=method)
        return search.initial_step_size(x, d, x_prev, d_prev, 0.5)

    slope = objective.gradient(x) @ d
    previous_slope = objective.gradient(x_prev) @ d_prev
    value_change = objective.value(x) - objective.value(x_prev)

    assert initial(StepSizeInitialization.UNIT) == 1.0
    assert initial(StepSizeInitialization.PREVIOUS_STEP_SIZE) == 0.5
    assert initial(StepSizeInitialization.CONSERVE_FIRST_ORDER_CHANGE) == pytest.approx(
        0.5 * previous_slope / slope
    )
    assert initial(StepSizeInitialization.QUADRATIC_INTERPOLATION) == pytest.approx(
        2.0 * value_change / slope
    )
    assert initial(StepSizeInitialization.MODIFIED_QUADRATIC_INTERPOLATION) == pytest.approx(
        min(1.0, 1.01 * 2.0 * value_change / slope)
    )


def test_first_iteration_uses_half_a_max():
    calls = []

    def fun(x):
        calls.append(float(x[0]))
        return float((x[0] - 5.0) ** 2)

    objective = FunctionObjective(fun, lambda x: np.array([2.0 * (x[0] - 5.0)]))
    search = StrongWolfeInterpolationLineSearch(objective, a_max=10.0)
    alpha = search.compute_step_size(np.array([0.0]), np.array([1.0]))
    assert calls[1] == 5.0
    assert alpha == 5.0


def test_backtracking_monotone():
    objective = sphere()
    x = np.array([1.0, -2.0])
    direction = -objective.gradient(x)
    alpha = BacktrackingLineSearch(objective).compute_step_size(x, direction)
    assert 0 < alpha <= 1.0
    assert objective.value(x + alpha * direction) <= objective.value(x)


def test_backtracking_invalid_parameters():
    with pytest.raises(ValueError):
        BacktrackingLineSearch(sphere(), c=1.5)
    with pytest.raises(ValueError):
        BacktrackingLineSearch(sphere(), rho=1.1)


def test_exact_line_search_minimizes_along_direction(spd_quadratic):
    search = ExactLineSearch(spd_quadratic)
    x = np.array([1.0, 1.0, 1.0])
    direction = -spd_quadratic.gradient(x)
    alpha = search.compute_step_size(x, direction)
    assert alpha > 0
    assert spd_quadratic.gradient(x + alpha * direction) @ direction == pytest.approx(0.0, abs=1e-12)


def test_exact_line_search_requires_quadratic():
    with pytest.raises(ValueError):
        ExactLineSearch(sphere())


def test_exact_line_search_rejects_ascent(spd_quadratic):
    search = ExactLineSearch(spd_quadratic)
    x = np.array([1.0, 1.0, 1.0])
    assert search.compute_step_size(x, spd_quadratic.gradient(x)) == 0.0
