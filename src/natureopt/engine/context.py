"""
Mutable state threaded through the generation loop.

The Context owns the population (``X``), its fitness (``F``), a stale mask
marking rows whose fitness no longer matches their parameters, the run's RNG
root with per-individual streams, and the best-so-far tracker (single
incumbent or Pareto front). Every write goes through :meth:`Context.replace`
or :meth:`Context.set_positions`, which clip to the bounds, so stored
individuals never leave the box.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

import numpy as np

from natureopt.engine.archive import ParetoFront, SingleBest
from natureopt.foundation.eval import SerialEvalBackend
from natureopt.foundation.exceptions import ConfigurationError, EvaluationError, InvalidParameterError
from natureopt.foundation.problem import Bounds, sanitize_fitness
from natureopt.foundation.random import Rng, RngRoot, seed as make_root

if TYPE_CHECKING:
    from natureopt.foundation.eval import EvaluationBackend
    from natureopt.foundation.problem import ProblemProtocol

_logger = logging.getLogger(__name__)

Initializer = Callable[["Context"], np.ndarray]


def _readonly(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, copy=True)
    out.flags.writeable = False
    return out


def check_population(
    X: Any, F: Any, pop_size: int, bounds: Bounds, n_obj: int | None = None
) -> tuple[np.ndarray, np.ndarray]:
    """Validate an already evaluated population ``(X, F)``; 1-D ``F`` is one objective."""
    try:
        X = np.array(X, dtype=float)
        F = np.array(F, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Initial population must be numeric: {exc}") from exc
    expected = (int(pop_size), bounds.dim)
    if X.shape != expected:
        raise ConfigurationError(
            f"Initial population has shape {X.shape}, expected {expected}.",
            "Pass one row per individual and one column per dimension",
        )
    if F.ndim == 1:
        F = F.reshape(-1, 1)
    if F.ndim != 2 or F.shape[0] != expected[0] or F.shape[1] == 0:
        raise ConfigurationError(
            f"Initial fitness has shape {F.shape}, expected {expected[0]} rows.",
            "Pass one fitness row per individual",
        )
    if n_obj is not None and F.shape[1] != n_obj:
        raise ConfigurationError(f"Initial fitness has {F.shape[1]} objective(s), declared n_obj={n_obj}.")
    if not bounds.contains(X):
        raise ConfigurationError(
            "Initial population has rows outside the bounds.",
            "Clip the rows before evaluating them so the fitness matches the stored positions",
        )
    return X, F


@dataclass(frozen=True, eq=False)
class Individual:
    """Snapshot of one population member."""

    x: np.ndarray
    f: np.ndarray | None
    aux: Mapping[str, np.ndarray] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class ContextView:
    """Read-only snapshot handed to callbacks, predicates and observers."""

    generation: int
    n_eval: int
    pop_size: int
    bounds: Bounds
    X: np.ndarray
    F: np.ndarray | None
    n_obj: int | None
    best_x: np.ndarray | None
    best_f: Any
    front_X: np.ndarray | None
    front_F: np.ndarray | None

    @property
    def is_multi_objective(self) -> bool:
        return self.n_obj is not None and self.n_obj > 1


class Context:
    """Population, fitness, RNG streams and best-so-far for one solve."""

    def __init__(
        self,
        problem: "ProblemProtocol",
        pop_size: int,
        rng: RngRoot,
        *,
        eval_backend: "EvaluationBackend | None" = None,
        front_limit: int | None = None,
    ) -> None:
        if int(pop_size) <= 1:
            raise InvalidParameterError("pop_size", pop_size, "an integer > 1")
        self.problem = problem
        self.bounds: Bounds = problem.bounds
        self.rng = rng
        self.eval_backend = eval_backend or SerialEvalBackend()
        self.front_limit = front_limit
        self.generation = 0
        self.n_eval = 0
        self.aux: dict[str, Any] = {}
        self._pop_size = int(pop_size)
        self._X = np.empty((self._pop_size, self.bounds.dim), dtype=float)
        self._F: np.ndarray | None = None
        self._stale = np.ones(self._pop_size, dtype=bool)
        self._n_obj: int | None = getattr(problem, "n_obj", None)
        self._tracker: SingleBest | ParetoFront | None = None
        self._pending: list[tuple[np.ndarray, np.ndarray, list[Any] | None]] = []
        self._streams: dict[int, Rng] = {}
        self._driver: Rng | None = None
        self._non_finite = 0

    @classmethod
    def init(
        cls,
        problem: "ProblemProtocol",
        pop_size: int,
        seed: int | RngRoot | None = None,
        *,
        eval_backend: "EvaluationBackend | None" = None,
        initializer: Initializer | None = None,
        front_limit: int | None = None,
        population: tuple[Any, Any] | None = None,
    ) -> "Context":
        """Create a Context and sample its initial population (fitness left stale).

        ``population=(X, F)`` starts from rows that are already evaluated
        instead; they are not evaluated again.
        """
        from natureopt.engine.initializers import uniform_pool

        if population is not None and initializer is not None:
            raise ConfigurationError("Pass either an initializer or an initial population, not both.")
        root = seed if isinstance(seed, RngRoot) else make_root(seed)
        ctx = cls(problem, pop_size, root, eval_backend=eval_backend, front_limit=front_limit)
        if population is not None:
            ctx.seed_population(*population)
            return ctx
        pool = np.asarray((initializer or uniform_pool)(ctx), dtype=float)
        if pool.shape != ctx._X.shape:
            raise ConfigurationError(
                f"Initializer returned shape {pool.shape}, expected {ctx._X.shape}.",
                "Return one row per individual and one column per dimension",
            )
        ctx.set_positions(pool)
        return ctx

    # ------------------------------------------------------------------
    # Shape and state
    # ------------------------------------------------------------------

    @property
    def pop_size(self) -> int:
        return self._pop_size

    @property
    def dim(self) -> int:
        return self.bounds.dim

    @property
    def n_obj(self) -> int | None:
        return self._n_obj if self._tracker is not None else None

    @property
    def is_multi_objective(self) -> bool:
        return self._tracker is not None and self._n_obj is not None and self._n_obj > 1

    @property
    def X(self) -> np.ndarray:
        v = self._X.view()
        v.flags.writeable = False
        return v

    @property
    def F(self) -> np.ndarray:
        if self._F is None:
            raise LookupError("Population has not been evaluated yet.")
        v = self._F.view()
        v.flags.writeable = False
        return v

    @property
    def stale(self) -> np.ndarray:
        return self._stale.copy()

    # ------------------------------------------------------------------
    # Random streams
    # ------------------------------------------------------------------

    def stream(self, i: int) -> Rng:
        """Stream owned by individual ``i``; derived lazily and kept for the run."""
        rng = self._streams.get(i)
        if rng is None:
            rng = self.rng.stream(i)
            self._streams[i] = rng
        return rng

    @property
    def driver_rng(self) -> Rng:
        if self._driver is None:
            self._driver = self.rng.driver()
        return self._driver

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _register_width(self, width: int) -> None:
        if self._tracker is not None:
            if width != self._n_obj:
                raise EvaluationError(f"Objective returned {width} values, earlier evaluations returned {self._n_obj}.")
            return
        if self._n_obj is not None and width != self._n_obj:
            raise EvaluationError(f"Objective returned {width} values, declared n_obj={self._n_obj}.")
        self._n_obj = width
        if width == 1:
            self._tracker = SingleBest(self.dim)
        else:
            self._tracker = ParetoFront(self.dim, width, limit=self.front_limit)
        _logger.debug("Detected %d objective(s)", width)

    def evaluate(self, X: np.ndarray) -> np.ndarray:
        """
        Evaluate candidate rows without storing them in the population.

        Rows are clipped to the box first. Results count toward ``n_eval`` and
        are queued for :meth:`update_best`. NaN and ``-inf`` become ``+inf``.
        """
        Xc = self.bounds.clip(np.asarray(X, dtype=float).reshape(-1, self.dim))
        if Xc.shape[0] == 0:
            return np.empty((0, self._n_obj or 1), dtype=float)
        result = self.eval_backend.evaluate(Xc, self.problem)
        raw = np.asarray(result.F, dtype=float)
        if raw.ndim == 1:
            raw = raw.reshape(Xc.shape[0], -1)
        if raw.shape[0] != Xc.shape[0]:
            raise EvaluationError(f"Evaluation returned {raw.shape[0]} rows for {Xc.shape[0]} candidates.")
        products = getattr(result, "products", None)
        if products is not None and len(products) != Xc.shape[0]:
            raise EvaluationError(f"Evaluation returned {len(products)} products for {Xc.shape[0]} candidates.")
        self._register_width(raw.shape[1])
        F = self._sanitize(raw)
        self.n_eval += Xc.shape[0]
        self._pending.append((Xc, F, products))
        return F.copy()

    def _sanitize(self, raw: np.ndarray) -> np.ndarray:
        F, n_bad = sanitize_fitness(raw)
        if n_bad:
            if not self._non_finite:
                _logger.warning(
                    "Objective returned %d non-finite value(s) other than +inf; treating them as +inf", n_bad
                )
            self._non_finite += n_bad
        return F

    def seed_population(self, X: Any, F: Any) -> None:
        """Install an evaluated population as-is; ``n_eval`` is left unchanged.

        The rows are queued for :meth:`update_best` like fresh evaluations.
        """
        declared = self._n_obj if self._tracker is None else None
        X, F = check_population(X, F, self._pop_size, self.bounds, declared)
        self._register_width(F.shape[1])
        F = self._sanitize(F)
        self._X[:] = X
        self._F = F.copy()
        self._stale[:] = False
        self._pending.append((X, F, None))
        _logger.debug("Seeded %d pre-evaluated individual(s)", self._pop_size)

    def evaluate_all(self) -> int:
        """Evaluate every stale individual; returns how many were evaluated."""
        idx = np.flatnonzero(self._stale)
        if idx.size == 0:
            return 0
        F = self.evaluate(self._X[idx])
        if self._F is None:
            self._F = np.full((self._pop_size, F.shape[1]), np.inf, dtype=float)
        self._F[idx] = F
        self._stale[idx] = False
        return int(idx.size)

    def update_best(self) -> None:
        """Fold every evaluation made since the last call into the tracker."""
        if self._tracker is None:
            self._pending.clear()
            return
        for X, F, products in self._pending:
            self._tracker.offer_many(X, F, products)
        self._pending.clear()

    @property
    def non_finite_count(self) -> int:
        return self._non_finite

    # ------------------------------------------------------------------
    # Population writes
    # ------------------------------------------------------------------

    def replace(self, indices: Any, X: np.ndarray, F: np.ndarray) -> None:
        """Overwrite rows with parameters and their (already computed) fitness."""
        idx = np.atleast_1d(np.asarray(indices, dtype=np.intp))
        if idx.size == 0:
            return
        if self._F is None:
            raise LookupError("replace() needs an evaluated population; call evaluate_all() first.")
        X = np.asarray(X, dtype=float).reshape(idx.size, self.dim)
        F = np.asarray(F, dtype=float).reshape(idx.size, -1)
        self._X[idx] = self.bounds.clip(X)
        self._F[idx] = F
        self._stale[idx] = False

    def set_positions(self, X: np.ndarray, indices: Any = None) -> None:
        """Move rows (all rows when ``indices`` is None); their fitness becomes stale."""
        if indices is None:
            idx = np.arange(self._pop_size)
        else:
            idx = np.atleast_1d(np.asarray(indices, dtype=np.intp))
        X = np.asarray(X, dtype=float).reshape(idx.size, self.dim)
        self._X[idx] = self.bounds.clip(X)
        self._stale[idx] = True

    def complete_generation(self) -> int:
        self.generation += 1
        return self.generation

    # ------------------------------------------------------------------
    # Best-so-far
    # ------------------------------------------------------------------

    @property
    def front(self) -> ParetoFront | None:
        return self._tracker if isinstance(self._tracker, ParetoFront) else None

    @property
    def has_best(self) -> bool:
        if isinstance(self._tracker, ParetoFront):
            return len(self._tracker) > 0
        return self._tracker is not None and not self._tracker.empty

    @property
    def best_x(self) -> np.ndarray:
        if isinstance(self._tracker, ParetoFront):
            return self._tracker.representative()[0]
        if self._tracker is None or self._tracker.empty:
            raise LookupError("No evaluated solution yet.")
        return self._tracker.x

    @property
    def best_f(self) -> Any:
        """Scalar for single-objective runs, the representative's vector otherwise."""
        if isinstance(self._tracker, ParetoFront):
            return self._tracker.representative()[1]
        if self._tracker is None or self._tracker.empty:
            raise LookupError("No evaluated solution yet.")
        return self._tracker.f

    @property
    def best_product(self) -> Any:
        """Product of the best point (the representative when multi-objective); None if none was returned."""
        if isinstance(self._tracker, ParetoFront):
            return self._tracker.representative_product()
        if self._tracker is None or self._tracker.empty:
            raise LookupError("No evaluated solution yet.")
        return self._tracker.product

    def sample_leader(self, rng: Rng) -> np.ndarray:
        """Best point, or a random front member when multi-objective."""
        front = self.front
        if front is not None and len(front):
            return front.sample(rng)[0]
        return self.best_x

    def individual(self, i: int) -> Individual:
        f = None if self._F is None or self._stale[i] else self._F[i].copy()
        aux = {
            key: np.array(value[i], copy=True)
            for key, value in self.aux.items()
            if isinstance(value, np.ndarray) and value.ndim >= 1 and value.shape[0] == self._pop_size
        }
        return Individual(x=self._X[i].copy(), f=f, aux=MappingProxyType(aux))

    def view(self) -> ContextView:
        has_best = self.has_best
        front = self.front
        return ContextView(
            generation=self.generation,
            n_eval=self.n_eval,
            pop_size=self._pop_size,
            bounds=self.bounds,
            X=_readonly(self._X),
            F=None if self._F is None else _readonly(self._F),
            n_obj=self.n_obj,
            best_x=_readonly(self.best_x) if has_best else None,
            best_f=(_readonly(self.best_f) if front is not None else self.best_f) if has_best else None,
            front_X=None if front is None else _readonly(front.X),
            front_F=None if front is None else _readonly(front.F),
        )


__all__ = ["Context", "ContextView", "Individual", "Initializer", "check_population"]
