import dataclasses

import numpy as np
import pytest

from descentkit import (
    BoxConstraints,
    ConjugateGradientMethod,
    RestartMethod,
    SolverConfig,
    StepSizeInitialization,
    StepSizeSchedule,
    StochasticMethod,
    StochasticSolverConfig,
)


def test_solver_config_defaults():
    config = SolverConfig()
    assert config.c1 == 1e-4
    assert config.c2 == 0.1
    assert config.a_max == 10.0
    assert config.method is ConjugateGradientMethod.POLAK_RIBIERE_PLUS
    assert config.restart_method is RestartMethod.GRADIENTS_ORTHOGONALITY_CHECK
    assert config.step_size_initialization is StepSizeInitialization.CONSERVE_FIRST_ORDER_CHANGE
    assert config.maximum_iterations == 10000
    assert config.lower_bound is None and config.upper_bound is None


def test_stochastic_config_defaults():
    config = StochasticSolverConfig()
    assert config.batch_size == 100
    assert config.step_size_schedule is StepSizeSchedule.SCALED
    assert config.step_size_parameters == (10.0, 0.75)
    assert config.method is StochasticMethod.GRADIENT_DESCENT
    assert not config.use_l1_regularization
    assert not config.use_l2_regularization


def test_enum_values_are_coerced():
    config = SolverConfig(restart_method="n_step", step_size_initialization="unit")
    assert config.restart_method is RestartMethod.N_STEP
    assert config.step_size_initialization is StepSizeInitialization.UNIT
    stochastic = StochasticSolverConfig(method="adagrad", step_size_schedule="constant", step_size_parameters=[1])
    assert stochastic.method is StochasticMethod.ADAGRAD
    assert stochastic.step_size_parameters == (1.0,)


def test_configs_are_frozen():
    config = SolverConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.c1 = 0.5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"c1": 0.0},
        {"c1": 0.2, "c2": 0.1},
        {"c2": 1.0},
        {"a_max": -1.0},
        {"maximum_iterations": -1},
        {"point_change_tolerance": -1.0},
        {"maximum_iterations_with_no_point_change": 0},
        {"maximum_iterations_with_no_objective_change": 0},
        {"gradient_tolerance": -1e-6},
        {"lower_bound": 1.0, "upper_bound": 0.0},
        {"lower_bound": [[0.0]]},
        {"upper_bound": [0.0, float("nan")]},
        {"method": "fletcher_reeves"},
        {"custom_convergence_predicate": 3},
        {"log_every": -1},
    ],
)
def test_solver_config_validation(kwargs):
    with pytest.raises(ValueError):
        SolverConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"batch_size": 0},
        {"l1_regularization_weight": -0.1},
        {"l2_regularization_weight": -0.1},
        {"adagrad_epsilon": 0.0},
        {"step_size_parameters": (1.0,)},
        {"step_size_schedule": StepSizeSchedule.CONSTANT, "step_size_parameters": (-1.0,)},
    ],
)
def test_stochastic_config_validation(kwargs):
    with pytest.raises(ValueError):
        StochasticSolverConfig(**kwargs)


def test_box_constraints_clamp_and_are_idempotent():
    box = BoxConstraints(lower=[-1.0, 0.0], upper=1.0, dim=2)
    point = np.array([-3.0, 0.5])
    clamped = box.apply(point)
    np.testing.assert_array_equal(clamped, [-1.0, 0.5])
    np.testing.assert_array_equal(box.apply(clamped), clamped)
    np.testing.assert_array_equal(point, [-3.0, 0.5])
    assert box.active


def test_box_constraints_one_sided():
    box = BoxConstraints(upper=0.0)
    np.testing.assert_array_equal(box.apply(np.array([1.0, -1.0])), [0.0, -1.0])
    assert not BoxConstraints().active


def test_box_constraints_dimension_check():
    with pytest.raises(ValueError):
        BoxConstraints(lower=[0.0, 0.0, 0.0], dim=2)
    with pytest.raises(ValueError):
        BoxConstraints(lower=[0.0, 2.0], upper=[1.0, 1.0])
