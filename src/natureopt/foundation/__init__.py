"""Building blocks shared by every strategy: RNG streams, problems, evaluation, metrics."""

from .exceptions import (
    BoundsError,
    ConfigurationError,
    EvaluationError,
    InvalidAlgorithmError,
    InvalidBackendError,
    InvalidParameterError,
    InvalidTerminationError,
    NatureOptError,
    OptimizationError,
    ProblemError,
    SolverStateError,
)
from .logging import configure_natureopt_logging
from .observer import LoggingObserver, Observer, RunInfo
from .problem import Bounds, Problem, ProblemProtocol, as_problem
from .random import DRIVER_STREAM, Rng, RngRoot, seed

__all__ = [
    "BoundsError",
    "ConfigurationError",
    "EvaluationError",
    "InvalidAlgorithmError",
    "InvalidBackendError",
    "InvalidParameterError",
    "InvalidTerminationError",
    "NatureOptError",
    "OptimizationError",
    "ProblemError",
    "SolverStateError",
    "configure_natureopt_logging",
    "LoggingObserver",
    "Observer",
    "RunInfo",
    "Bounds",
    "Problem",
    "ProblemProtocol",
    "as_problem",
    "DRIVER_STREAM",
    "Rng",
    "RngRoot",
    "seed",
]
