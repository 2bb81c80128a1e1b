import numpy as np
import pytest

from descentkit import (
    ConjugateGradientDirection,
    ConjugateGradientMethod,
    CoordinateDirection,
    CoordinateMethod,
    LinearObjective,
    RestartMethod,
)

G = np.array([1.0, 0.0])
G_PREV = np.array([2.0, 0.0])
D_PREV = np.array([-2.0, 0.0])


@pytest.mark.parametrize(
    "method, expected",
    [
        (ConjugateGradientMethod.FLETCHER_REEVES, 0.25),
        (ConjugateGradientMethod.POLAK_RIBIERE, -0.25),
        (ConjugateGradientMethod.POLAK_RIBIERE_PLUS, 0.0),
        (ConjugateGradientMethod.HESTENES_STIEFEL, -0.5),
        (ConjugateGradientMethod.DAI_YUAN, 0.5),
        (ConjugateGradientMethod.FLETCHER_REEVES_POLAK_RIBIERE, -0.25),
        (ConjugateGradientMethod.HAGER_ZHANG, 0.5),
    ],
)
def test_beta_formulas(method, expected):
    assert method.compute_beta(G, G_PREV, D_PREV) == pytest.approx(expected)


def test_hybrid_beta_clips_to_fletcher_reeves():
    g = np.array([3.0, 0.0])
    g_prev = np.array([1.0, 0.0])
    # beta_FR = 9, beta_PR = 6
    beta = ConjugateGradientMethod.FLETCHER_REEVES_POLAK_RIBIERE.compute_beta(g, g_prev, -g_prev)
    assert beta == pytest.approx(6.0)
    g = np.array([-3.0, 0.0])
    # beta_FR = 9, beta_PR = 12
    beta = ConjugateGradientMethod.FLETCHER_REEVES_POLAK_RIBIERE.compute_beta(g, g_prev, -g_prev)
    assert beta == pytest.approx(9.0)


@pytest.mark.parametrize("method", list(ConjugateGradientMethod))
def test_zero_denominator_gives_zero_beta(method):
    zero = np.zeros(2)
    assert method.compute_beta(G, zero, zero) == 0.0


def test_orthogonality_restart():
    assert RestartMethod.GRADIENTS_ORTHOGONALITY_CHECK.should_restart(G, G, 1, 2)
    assert not RestartMethod.GRADIENTS_ORTHOGONALITY_CHECK.should_restart(
        np.array([1.0, 0.0]), np.array([0.05, 1.0]), 1, 2
    )
    assert not RestartMethod.NO_RESTART.should_restart(G, G, 100, 2)


def test_n_step_restart_schedule():
    strategy = ConjugateGradientDirection(
        ConjugateGradientMethod.FLETCHER_REEVES, RestartMethod.N_STEP, dimension=2
    )
    g0 = np.array([1.0, 0.0])
    d0 = strategy.compute(g0, None, None)
    assert strategy.restarted
    assert strategy.steps_since_restart == 0
    np.testing.assert_allclose(d0, -g0)

    g1 = np.array([0.0, 1.0])
    d1 = strategy.compute(g1, g0, d0)
    assert not strategy.restarted
    assert strategy.steps_since_restart == 1
    assert strategy.last_beta == pytest.approx(1.0)
    np.testing.assert_allclose(d1, [-1.0, -1.0])

    g2 = np.array([0.5, 0.5])
    d2 = strategy.compute(g2, g1, d1)
    assert strategy.restarted
    assert strategy.steps_since_restart == 0
    np.testing.assert_allclose(d2, -g2)


def test_non_descent_direction_is_reset():
    strategy = ConjugateGradientDirection(
        ConjugateGradientMethod.FLETCHER_REEVES, RestartMethod.NO_RESTART, dimension=2
    )
    g = np.array([1.0, 0.0])
    g_prev = np.array([0.0, 1.0])
    # -g + 1 * d_prev is the zero vector, which is not a descent direction.
    direction = strategy.compute(g, g_prev, np.array([1.0, 0.0]))
    assert strategy.restarted
    np.testing.assert_allclose(direction, -g)


def collect(strategy, n):
    return [int(np.argmax(strategy.next_direction())) for _ in range(n)]


def test_cycle_order():
    strategy = CoordinateDirection(CoordinateMethod.CYCLE, 3, np.zeros(3))
    assert collect(strategy, 7) == [0, 1, 2, 0, 1, 2, 0]


def test_back_and_forth_order():
    strategy = CoordinateDirection(CoordinateMethod.BACK_AND_FORTH, 3, np.zeros(3))
    assert collect(strategy, 9) == [0, 1, 2, 1, 0, 1, 2, 1, 0]


def test_back_and_forth_single_coordinate():
    strategy = CoordinateDirection(CoordinateMethod.BACK_AND_FORTH, 1, np.zeros(1))
    assert collect(strategy, 3) == [0, 0, 0]


def test_cycle_and_join_endpoints():
    strategy = CoordinateDirection(CoordinateMethod.CYCLE_AND_JOIN_ENDPOINTS, 2, np.zeros(2))
    np.testing.assert_allclose(strategy.next_direction(), [1.0, 0.0])
    strategy.after_point_update(np.array([1.0, 0.0]))
    np.testing.assert_allclose(strategy.next_direction(), [0.0, 1.0])
    strategy.after_point_update(np.array([1.0, 2.0]))
    np.testing.assert_allclose(strategy.next_direction(), [1.0, 2.0])
    strategy.after_point_update(np.array([1.5, 3.0]))
    # The next cycle starts from the point reached by the joining step.
    np.testing.assert_allclose(strategy.next_direction(), [1.0, 0.0])
    strategy.after_point_update(np.array([2.0, 3.0]))
    strategy.next_direction()
    strategy.after_point_update(np.array([2.0, 4.0]))
    np.testing.assert_allclose(strategy.next_direction(), [0.5, 1.0])


def test_orient_flips_uphill_coordinates():
    objective = LinearObjective(np.array([1.0, -1.0]))
    strategy = CoordinateDirection(CoordinateMethod.CYCLE, 2, np.zeros(2))
    point = np.zeros(2)
    value = objective.value(point)
    np.testing.assert_allclose(
        strategy.orient(np.array([1.0, 0.0]), point, value, objective), [-1.0, 0.0]
    )
    np.testing.assert_allclose(
        strategy.orient(np.array([0.0, 1.0]), point, value, objective), [0.0, 1.0]
    )
