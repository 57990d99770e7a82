"""natureopt: population-based metaheuristics over bounded real parameter spaces."""

from .optimize import optimize
from .engine import (
    Context,
    ContextView,
    FitnessThreshold,
    GenerationSnapshot,
    Individual,
    MaxGenerations,
    NoImprovement,
    ParetoFront,
    Predicate,
    SolveResult,
    Solver,
    SolverState,
    Termination,
    TimeLimit,
    gaussian_pool,
    lhs_pool,
    parse_termination,
    uniform_by,
    uniform_pool,
)
from .engine.algorithm import (
    DE,
    FA,
    PSO,
    RGA,
    TLBO,
    Algorithm,
    DEConfig,
    FAConfig,
    PSOConfig,
    RGAConfig,
    TLBOConfig,
    available_algorithms,
    build_algorithm,
)
from .foundation import (
    Bounds,
    ConfigurationError,
    EvaluationError,
    LoggingObserver,
    NatureOptError,
    Observer,
    Problem,
    ProblemProtocol,
    SolverStateError,
    configure_natureopt_logging,
    seed,
)
from .foundation.eval import available_eval_backends, resolve_eval_backend

__version__ = "0.1.0"

__all__ = [
    "optimize",
    "Solver",
    "SolverState",
    "SolveResult",
    "GenerationSnapshot",
    "Context",
    "ContextView",
    "Individual",
    "ParetoFront",
    "Termination",
    "MaxGenerations",
    "FitnessThreshold",
    "Predicate",
    "NoImprovement",
    "TimeLimit",
    "parse_termination",
    "uniform_pool",
    "uniform_by",
    "gaussian_pool",
    "lhs_pool",
    "Algorithm",
    "RGA",
    "DE",
    "PSO",
    "FA",
    "TLBO",
    "RGAConfig",
    "DEConfig",
    "PSOConfig",
    "FAConfig",
    "TLBOConfig",
    "available_algorithms",
    "build_algorithm",
    "Bounds",
    "Problem",
    "ProblemProtocol",
    "seed",
    "NatureOptError",
    "ConfigurationError",
    "EvaluationError",
    "SolverStateError",
    "Observer",
    "LoggingObserver",
    "configure_natureopt_logging",
    "available_eval_backends",
    "resolve_eval_backend",
]
