"""descentkit - line-search and stochastic descent solvers for NumPy objectives.

Example
-------
>>> import numpy as np
>>> from descentkit import ConjugateGradientMethod, RosenbrockObjective, SolverConfig, minimize
>>> config = SolverConfig(method=ConjugateGradientMethod.FLETCHER_REEVES)
>>> res = minimize(RosenbrockObjective(), np.array([-1.2, 1.0]), config)
>>> bool(np.allclose(res.x, [1.0, 1.0], atol=1e-2))
True
"""

__version__ = "0.1.0"

from .api import create_solver, minimize, solve
from .bounds import BoxConstraints
from .config import IterationConfig, SolverConfig, StochasticMethod, StochasticSolverConfig
from .conjugate_gradient import NonlinearConjugateGradientSolver
from .coordinate_descent import CoordinateDescentSolver
from .core import ATOL, NonSmoothFunctionError, OptimizeResult, check_convergence
from .directions import (
    ConjugateGradientDirection,
    ConjugateGradientMethod,
    CoordinateDirection,
    CoordinateMethod,
    RestartMethod,
)
from .gradient import GradientDescentSolver
from .line_search import (
    BacktrackingLineSearch,
    ExactLineSearch,
    LineSearch,
    StepSizeInitialization,
    StrongWolfeInterpolationLineSearch,
    perform_cubic_interpolation,
)
from .logging import configure_logging, get_logger, set_log_level
from .objectives import (
    FunctionObjective,
    LeastSquaresObjective,
    LinearObjective,
    LogisticLossObjective,
    Objective,
    QuadraticObjective,
    RosenbrockObjective,
    StochasticObjective,
)
from .sampling import MiniBatchSampler
from .schedules import StepSizeSchedule
from .solver import AbstractLineSearchSolver
from .stochastic import AbstractStochasticSolver, AdaGradSolver, StochasticGradientDescentSolver
from .utils import approx_grad, is_pos_def

__all__ = [
    "ATOL",
    "AbstractLineSearchSolver",
    "AbstractStochasticSolver",
    "AdaGradSolver",
    "BacktrackingLineSearch",
    "BoxConstraints",
    "ConjugateGradientDirection",
    "ConjugateGradientMethod",
    "CoordinateDescentSolver",
    "CoordinateDirection",
    "CoordinateMethod",
    "ExactLineSearch",
    "FunctionObjective",
    "GradientDescentSolver",
    "IterationConfig",
    "LeastSquaresObjective",
    "LineSearch",
    "LinearObjective",
    "LogisticLossObjective",
    "MiniBatchSampler",
    "NonSmoothFunctionError",
    "NonlinearConjugateGradientSolver",
    "Objective",
    "OptimizeResult",
    "QuadraticObjective",
    "RestartMethod",
    "RosenbrockObjective",
    "SolverConfig",
    "StepSizeInitialization",
    "StepSizeSchedule",
    "StochasticGradientDescentSolver",
    "StochasticMethod",
    "StochasticObjective",
    "StochasticSolverConfig",
    "StrongWolfeInterpolationLineSearch",
    "approx_grad",
    "check_convergence",
    "configure_logging",
    "create_solver",
    "get_logger",
    "is_pos_def",
    "minimize",
    "perform_cubic_interpolation",
    "set_log_level",
    "solve",
]
