"""Box bounds and the objective-function wrapper."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterator, Protocol, Sequence, runtime_checkable

import numpy as np

from natureopt.foundation.exceptions import BoundsError, EvaluationError

Objective = Callable[[np.ndarray], Any]


class Bounds:
    """Immutable ``(low, high)`` pairs, one per dimension."""

    __slots__ = ("lower", "upper")

    def __init__(self, pairs: Sequence[Sequence[float]] | np.ndarray) -> None:
        try:
            arr = np.asarray(pairs, dtype=float)
        except (TypeError, ValueError) as exc:
            raise BoundsError(f"Bounds must be numeric (low, high) pairs: {exc}") from exc
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise BoundsError(f"Bounds must have shape (n_var, 2), got {arr.shape}.")
        if arr.shape[0] == 0:
            raise BoundsError("Bounds must cover at least one dimension.")
        if not np.all(np.isfinite(arr)):
            raise BoundsError("Bounds must be finite.")
        inverted = np.flatnonzero(arr[:, 0] > arr[:, 1])
        if inverted.size:
            raise BoundsError(f"Inverted bounds (low > high) in dimension(s) {inverted.tolist()}.")
        lower = np.ascontiguousarray(arr[:, 0])
        upper = np.ascontiguousarray(arr[:, 1])
        lower.flags.writeable = False
        upper.flags.writeable = False
        self.lower = lower
        self.upper = upper

    @classmethod
    def from_arrays(cls, xl: Any, xu: Any, n_var: int | None = None) -> "Bounds":
        """Build from separate lower/upper arrays; scalars broadcast to ``n_var``."""
        lower = np.asarray(xl, dtype=float)
        upper = np.asarray(xu, dtype=float)
        if lower.ndim == 0 or upper.ndim == 0:
            if n_var is None:
                n_var = max(lower.size, upper.size)
            lower = np.broadcast_to(lower, (n_var,))
            upper = np.broadcast_to(upper, (n_var,))
        if lower.shape != upper.shape:
            raise BoundsError(f"Lower and upper bounds differ in shape: {lower.shape} vs {upper.shape}.")
        return cls(np.column_stack([lower, upper]))

    @property
    def dim(self) -> int:
        return int(self.lower.shape[0])

    @property
    def span(self) -> np.ndarray:
        return self.upper - self.lower

    def clip(self, X: np.ndarray) -> np.ndarray:
        return np.clip(X, self.lower, self.upper)

    def contains(self, X: np.ndarray) -> bool:
        X = np.asarray(X, dtype=float)
        return bool(np.all((X >= self.lower) & (X <= self.upper)))

    def __len__(self) -> int:
        return self.dim

    def __iter__(self) -> Iterator[tuple[float, float]]:
        for low, high in zip(self.lower, self.upper):
            yield float(low), float(high)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return np.array_equal(self.lower, other.lower) and np.array_equal(self.upper, other.upper)

    def __hash__(self) -> int:
        return hash((self.lower.tobytes(), self.upper.tobytes()))

    def __repr__(self) -> str:
        return f"Bounds({list(self)})"


@runtime_checkable
class ProblemProtocol(Protocol):
    """Anything the solver can optimize: bounds plus a batch evaluator."""

    bounds: Bounds

    def evaluate(self, X: np.ndarray) -> np.ndarray: ...


class Problem:
    """
    Objective callable bound to its search box.

    The objective receives one parameter vector (1-D float array) and returns
    either one float or a fixed-length sequence of floats, all minimized.
    ``+inf`` marks an infeasible point.

    With ``returns_product=True`` the objective returns ``(fitness, product)``
    instead. The product is an arbitrary payload (a fitted model, a decoded
    schedule) that travels with the fitness and is kept only for best-so-far
    points; it never takes part in comparisons.

    Example:
        >>> problem = Problem([(-5, 5), (-5, 5)], lambda x: float(x @ x), name="sphere")
        >>> problem.evaluate(np.zeros((1, 2)))
        array([[0.]])
    """

    def __init__(
        self,
        bounds: Bounds | Sequence[Sequence[float]] | np.ndarray,
        objective: Objective,
        *,
        n_obj: int | None = None,
        name: str | None = None,
        returns_product: bool = False,
    ) -> None:
        if not callable(objective):
            raise TypeError("objective must be callable.")
        self.bounds = bounds if isinstance(bounds, Bounds) else Bounds(bounds)
        if n_obj is not None and int(n_obj) <= 0:
            raise ValueError("n_obj must be positive when provided.")
        self.n_obj = None if n_obj is None else int(n_obj)
        self.objective = objective
        self.name = name or getattr(objective, "__name__", "objective")
        self.returns_product = bool(returns_product)

    @property
    def n_var(self) -> int:
        return self.bounds.dim

    def _call(self, x: np.ndarray) -> tuple[Any, Any]:
        try:
            raw = self.objective(x)
        except Exception as exc:
            raise EvaluationError(f"Objective '{self.name}' raised {type(exc).__name__}: {exc}", solution=x) from exc
        if not self.returns_product:
            return raw, None
        if not isinstance(raw, tuple) or len(raw) != 2:
            raise EvaluationError(
                f"Objective '{self.name}' is flagged returns_product and must return (fitness, product), got {raw!r}.",
                solution=x,
            )
        return raw

    def evaluate_one(self, x: np.ndarray) -> np.ndarray:
        """Evaluate a single parameter vector into a 1-D fitness array."""
        return self._fitness_row(x, self._call(x)[0])

    def _fitness_row(self, x: np.ndarray, raw: Any) -> np.ndarray:
        try:
            y = np.atleast_1d(np.asarray(raw, dtype=float))
        except (TypeError, ValueError) as exc:
            raise EvaluationError(f"Objective '{self.name}' returned a non-numeric value {raw!r}.", solution=x) from exc
        if y.ndim != 1 or y.size == 0:
            raise EvaluationError(
                f"Objective '{self.name}' must return a float or a flat sequence, got shape {y.shape}.", solution=x
            )
        return y

    def evaluate(self, X: np.ndarray) -> np.ndarray:
        """Evaluate every row of ``X``; returns an ``(n, n_obj)`` array."""
        return self.evaluate_products(X)[0]

    def evaluate_products(self, X: np.ndarray) -> tuple[np.ndarray, list[Any] | None]:
        """Like :meth:`evaluate`, also returning one product per row (None when not flagged)."""
        X = np.asarray(X, dtype=float)
        rows = []
        products = []
        for i in range(X.shape[0]):
            x = X[i].copy()
            raw, product = self._call(x)
            rows.append(self._fitness_row(x, raw))
            products.append(product)
        return self._stack(X, rows), (products if self.returns_product else None)

    def _stack(self, X: np.ndarray, rows: list[np.ndarray]) -> np.ndarray:
        if not rows:
            return np.empty((0, self.n_obj or 1), dtype=float)
        width = rows[0].size
        for i, row in enumerate(rows):
            if row.size != width:
                raise EvaluationError(
                    f"Objective '{self.name}' returned {row.size} values for row {i}, expected {width}.",
                    solution=X[i],
                )
        if self.n_obj is not None and width != self.n_obj:
            raise EvaluationError(f"Objective '{self.name}' returned {width} values, declared n_obj={self.n_obj}.")
        return np.vstack(rows)

    def __repr__(self) -> str:
        return f"Problem(name={self.name!r}, n_var={self.n_var}, n_obj={self.n_obj})"


def as_problem(problem: Any) -> ProblemProtocol:
    """Coerce a ``Problem``, a protocol object, or a ``(bounds, objective)`` pair."""
    if isinstance(problem, Problem):
        return problem
    if isinstance(problem, tuple) and len(problem) == 2 and callable(problem[1]):
        return Problem(problem[0], problem[1])
    bounds = getattr(problem, "bounds", None)
    if isinstance(bounds, Bounds) and callable(getattr(problem, "evaluate", None)):
        return problem
    raise TypeError(
        "problem must be a Problem, an object with 'bounds' (Bounds) and 'evaluate(X)', "
        "or a (bounds, objective) tuple."
    )


def sanitize_fitness(F: np.ndarray) -> tuple[np.ndarray, int]:
    """Replace NaN and ``-inf`` by ``+inf``; returns the array and the count replaced."""
    F = np.array(F, dtype=float, copy=True)
    bad = np.isnan(F) | np.isneginf(F)
    n_bad = int(bad.sum())
    if n_bad:
        F[bad] = math.inf
    return F, n_bad


__all__ = [
    "Bounds",
    "Objective",
    "Problem",
    "ProblemProtocol",
    "as_problem",
    "sanitize_fitness",
]
