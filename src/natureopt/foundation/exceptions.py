"""
natureopt exception hierarchy.

Provides user-friendly exceptions with helpful error messages and suggestions.
All natureopt-specific exceptions inherit from NatureOptError for easy catching.

Example:
    try:
        result = Solver.build("de", problem, termination=50).solve()
    except NatureOptError as e:
        print(f"Optimization failed: {e}")
        print(f"Suggestion: {e.suggestion}")
"""

from __future__ import annotations

from typing import Any


class NatureOptError(Exception):
    """
    Base exception for all natureopt errors.

    Attributes:
        message: Human-readable error description
        suggestion: Optional suggestion for fixing the error
        details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with suggestion."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(NatureOptError):
    """Raised when settings are invalid or incomplete."""

    pass


class InvalidParameterError(ConfigurationError):
    """Raised when a strategy or solver setting is out of its valid range."""

    def __init__(self, name: str, value: Any, expected: str, owner: str | None = None) -> None:
        where = f" for {owner}" if owner else ""
        message = f"Invalid value {value!r} for '{name}'{where}."
        suggestion = f"'{name}' must be {expected}"
        super().__init__(message, suggestion, {"name": name, "value": value, "owner": owner})


class InvalidAlgorithmError(ConfigurationError):
    """Raised when an unknown algorithm is specified."""

    def __init__(
        self, algorithm: str, available: list[str] | None = None, close_matches: list[str] | None = None
    ) -> None:
        available = available or ["rga", "de", "pso", "fa", "tlbo"]
        message = f"Unknown algorithm '{algorithm}'."
        suggestion = f"Available algorithms: {', '.join(available)}"
        if close_matches:
            suggestion += ". Did you mean " + " or ".join(f"'{name}'" for name in close_matches) + "?"
        super().__init__(message, suggestion, {"algorithm": algorithm, "available": available})


class InvalidBackendError(ConfigurationError):
    """Raised when an unknown evaluation backend is specified."""

    def __init__(self, backend: str, available: list[str] | None = None) -> None:
        available = available or ["serial", "threads", "joblib"]
        message = f"Unknown evaluation backend '{backend}'."
        suggestion = f"Available backends: {', '.join(available)}"
        super().__init__(message, suggestion, {"backend": backend, "available": available})


class InvalidTerminationError(ConfigurationError):
    """Raised when a termination criterion cannot be interpreted."""

    def __init__(self, termination: Any, reason: str | None = None) -> None:
        message = f"Unsupported termination criterion {termination!r}."
        if reason:
            message += f" {reason}"
        suggestion = (
            "Use an int (max generations), a callable predicate, a Termination instance, "
            "or one of ('max_gen', n), ('min_fit', target), ('time', seconds), ('stall', n)"
        )
        super().__init__(message, suggestion, {"termination": termination})


# =============================================================================
# Problem Errors
# =============================================================================


class ProblemError(NatureOptError):
    """Base class for problem-related errors."""

    pass


class BoundsError(ProblemError):
    """Raised when bounds are invalid or inconsistent."""

    def __init__(self, message: str) -> None:
        suggestion = "Ensure bounds are finite (low, high) pairs with low <= high for every dimension"
        super().__init__(message, suggestion)


# =============================================================================
# Runtime Errors
# =============================================================================


class OptimizationError(NatureOptError):
    """Raised when optimization fails during execution."""

    pass


class EvaluationError(OptimizationError):
    """Raised when objective evaluation fails."""

    def __init__(self, message: str, solution: Any = None) -> None:
        suggestion = "Check your objective function: it must return one float or a fixed-length sequence of floats"
        super().__init__(message, suggestion, {"solution": solution})


class SolverStateError(OptimizationError):
    """Raised when the solver is used out of order (e.g. solve() called twice)."""

    def __init__(self, message: str, state: Any = None) -> None:
        suggestion = "Build a new Solver for every run and read the result only after solve() returns"
        super().__init__(message, suggestion, {"state": state})


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Base
    "NatureOptError",
    # Configuration
    "ConfigurationError",
    "InvalidParameterError",
    "InvalidAlgorithmError",
    "InvalidBackendError",
    "InvalidTerminationError",
    # Problem
    "ProblemError",
    "BoundsError",
    # Runtime
    "OptimizationError",
    "EvaluationError",
    "SolverStateError",
]
