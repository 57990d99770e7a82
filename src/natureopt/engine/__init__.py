"""Search engine: context, trackers, strategies, termination and the solver loop."""

from .archive import ParetoFront, SingleBest
from .context import Context, ContextView, Individual
from .initializers import gaussian_pool, lhs_pool, uniform_by, uniform_pool
from .results import GenerationSnapshot, SolveResult
from .solver import Solver, SolverState
from .termination import (
    FitnessThreshold,
    MaxGenerations,
    NoImprovement,
    Predicate,
    Termination,
    TimeLimit,
    parse_termination,
)

__all__ = [
    "Context",
    "ContextView",
    "Individual",
    "ParetoFront",
    "SingleBest",
    "gaussian_pool",
    "lhs_pool",
    "uniform_by",
    "uniform_pool",
    "GenerationSnapshot",
    "SolveResult",
    "Solver",
    "SolverState",
    "FitnessThreshold",
    "MaxGenerations",
    "NoImprovement",
    "Predicate",
    "Termination",
    "TimeLimit",
    "parse_termination",
]
