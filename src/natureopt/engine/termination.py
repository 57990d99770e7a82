"""
Termination policies.

A policy is checked once per generation, after the snapshot for that
generation has been recorded, so the history always contains the generation
on which the run stopped. ``start`` is called once before the first
generation with the view of the evaluated initial population.
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import numpy as np

from natureopt.foundation.exceptions import ConfigurationError, InvalidParameterError, InvalidTerminationError

DEFAULT_MAX_GENERATIONS = 200
DEFAULT_SAFETY_GENERATIONS = 1000


def _positive_int(name: str, value: Any, owner: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or int(value) <= 0:
        raise InvalidParameterError(name, value, "a positive integer", owner=owner)
    return int(value)


class Termination(ABC):
    """Base policy. ``max_generations`` is an optional safety bound shared by all policies."""

    name = "termination"

    def __init__(self, max_generations: int | None = None) -> None:
        self.max_generations = (
            None if max_generations is None else _positive_int("max_generations", max_generations, self.name)
        )

    def check_objectives(self, n_obj: int | None) -> None:
        """Reject objective counts the policy cannot handle; ``None`` means not yet known."""

    def start(self, view: Any) -> None:
        """Reset per-run state; called with the view of the initial population."""
        self.check_objectives(view.n_obj)

    @abstractmethod
    def should_stop(self, view: Any) -> bool:
        """True when the run should end after the current generation."""

    def __call__(self, view: Any) -> bool:
        if self.should_stop(view):
            return True
        return self.max_generations is not None and view.generation >= self.max_generations

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_generations={self.max_generations})"


class MaxGenerations(Termination):
    """Stop once ``n`` generations have completed."""

    name = "max_gen"

    def __init__(self, n: int) -> None:
        super().__init__(_positive_int("n", n, "max_gen"))

    def should_stop(self, view: Any) -> bool:
        return False

    def __repr__(self) -> str:
        return f"MaxGenerations({self.max_generations})"


class FitnessThreshold(Termination):
    """
    Stop when the best fitness is ``<= target``.

    Only meaningful for single-objective problems; ``max_generations`` bounds
    runs that never reach the target.
    """

    name = "min_fit"

    def __init__(self, target: float, max_generations: int = DEFAULT_SAFETY_GENERATIONS) -> None:
        target = float(target)
        if math.isnan(target):
            raise InvalidParameterError("target", target, "a number", owner=self.name)
        super().__init__(max_generations)
        self.target = target

    def check_objectives(self, n_obj: int | None) -> None:
        if n_obj is not None and n_obj > 1:
            raise ConfigurationError(
                f"FitnessThreshold needs a single-objective problem; the problem has {n_obj} objectives.",
                "Use MaxGenerations, NoImprovement or a Predicate for multi-objective runs",
            )

    def should_stop(self, view: Any) -> bool:
        return view.best_f is not None and view.best_f <= self.target

    def __repr__(self) -> str:
        return f"FitnessThreshold({self.target!r}, max_generations={self.max_generations})"


class Predicate(Termination):
    """Stop when ``fn(view)`` returns a truthy value."""

    name = "predicate"

    def __init__(self, fn: Callable[[Any], bool], max_generations: int | None = None) -> None:
        if not callable(fn):
            raise InvalidTerminationError(fn, "Predicate needs a callable.")
        super().__init__(max_generations)
        self.fn = fn

    def should_stop(self, view: Any) -> bool:
        return bool(self.fn(view))


class NoImprovement(Termination):
    """
    Stop after ``n_generations`` consecutive generations without improvement.

    Single-objective runs compare the best fitness with tolerance ``tol``;
    multi-objective runs count a generation as improving when the front changes.
    """

    name = "stall"

    def __init__(self, n_generations: int, tol: float = 0.0, max_generations: int | None = None) -> None:
        super().__init__(max_generations)
        self.n_generations = _positive_int("n_generations", n_generations, self.name)
        tol = float(tol)
        if not math.isfinite(tol) or tol < 0.0:
            raise InvalidParameterError("tol", tol, "a finite number >= 0", owner=self.name)
        self.tol = tol
        self._best: Any = None
        self._stalled = 0

    def _marker(self, view: Any) -> Any:
        if view.is_multi_objective:
            return None if view.front_F is None else np.array(view.front_F, copy=True)
        return view.best_f

    def start(self, view: Any) -> None:
        self._best = self._marker(view)
        self._stalled = 0

    def _improved(self, current: Any) -> bool:
        if self._best is None:
            return current is not None
        if isinstance(current, np.ndarray):
            return current.shape != self._best.shape or not np.array_equal(current, self._best)
        return current < self._best - self.tol

    def should_stop(self, view: Any) -> bool:
        current = self._marker(view)
        if self._improved(current):
            self._best = current
            self._stalled = 0
        else:
            self._stalled += 1
        return self._stalled >= self.n_generations


class TimeLimit(Termination):
    """Stop at the first generation boundary after ``seconds`` of wall-clock time."""

    name = "time"

    def __init__(self, seconds: float, max_generations: int | None = None) -> None:
        seconds = float(seconds)
        if not math.isfinite(seconds) or seconds <= 0.0:
            raise InvalidParameterError("seconds", seconds, "a positive finite number", owner=self.name)
        super().__init__(max_generations)
        self.seconds = seconds
        self._t0: float | None = None

    def start(self, view: Any) -> None:
        self._t0 = time.perf_counter()

    def should_stop(self, view: Any) -> bool:
        if self._t0 is None:
            self._t0 = time.perf_counter()
        return time.perf_counter() - self._t0 >= self.seconds


def parse_termination(termination: Any) -> Termination:
    """
    Normalize the accepted termination spellings into one policy.

    Parameters
    ----------
    termination : Termination, int, callable, tuple or None
        - ``None``: ``MaxGenerations(200)``
        - ``int``: max generations
        - callable: predicate over the generation view
        - ``("max_gen", n)``, ``("min_fit", target)``, ``("time", seconds)``,
          ``("stall", n)``

    Raises
    ------
    InvalidTerminationError
        If the value cannot be interpreted.
    """
    if termination is None:
        return MaxGenerations(DEFAULT_MAX_GENERATIONS)
    if isinstance(termination, Termination):
        return termination
    if isinstance(termination, bool):
        raise InvalidTerminationError(termination)
    if isinstance(termination, (int, np.integer)):
        return MaxGenerations(int(termination))
    if isinstance(termination, tuple):
        if len(termination) != 2:
            raise InvalidTerminationError(termination, "Expected a (type, value) pair.")
        kind, value = termination
        if kind in ("max_gen", "n_gen"):
            return MaxGenerations(value)
        if kind == "min_fit":
            return FitnessThreshold(value)
        if kind == "time":
            return TimeLimit(value)
        if kind == "stall":
            return NoImprovement(value)
        raise InvalidTerminationError(termination, f"Unknown type '{kind}'.")
    if callable(termination):
        return Predicate(termination)
    raise InvalidTerminationError(termination)


__all__ = [
    "DEFAULT_MAX_GENERATIONS",
    "FitnessThreshold",
    "MaxGenerations",
    "NoImprovement",
    "Predicate",
    "Termination",
    "TimeLimit",
    "parse_termination",
]
