"""
Generation-loop driver.

One Solver runs one solve. Per generation it calls ``algorithm.step``,
evaluates every stale individual, folds all evaluations into the best/front
tracker, records a snapshot, calls the user callback and observers, and
finally checks termination, so the history always holds the generation on
which the run stopped.

Example:
    >>> solver = Solver.build("de", ([(-5, 5), (-5, 5)], lambda x: float(x @ x)), termination=50, seed=1)
    >>> result = solver.solve()
    >>> len(result.history)
    50
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

import numpy as np

from natureopt.engine.algorithm import Algorithm, build_algorithm
from natureopt.engine.context import Context, ContextView, Initializer, check_population
from natureopt.engine.results import GenerationSnapshot, SolveResult
from natureopt.engine.termination import Termination, parse_termination
from natureopt.foundation.eval import EvaluationBackend, resolve_eval_backend
from natureopt.foundation.exceptions import ConfigurationError, InvalidParameterError, SolverStateError
from natureopt.foundation.observer import Observer, RunInfo
from natureopt.foundation.problem import ProblemProtocol, as_problem
from natureopt.foundation.random import RngRoot, seed as make_root

_logger = logging.getLogger(__name__)

Callback = Callable[[ContextView], Any]


class SolverState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    TERMINATED = "terminated"
    RESULT_AVAILABLE = "result_available"


def _readonly(arr: Any) -> Any:
    if arr is None:
        return None
    out = np.array(arr, dtype=float, copy=True)
    out.flags.writeable = False
    return out


def _as_tuple(values: np.ndarray) -> tuple[float, ...]:
    return tuple(float(v) for v in np.asarray(values, dtype=float).reshape(-1))


class Solver:
    """
    Drives one algorithm over one problem until the termination policy fires.

    Use :meth:`build` to construct; every setting is validated there, before
    any generation runs.
    """

    def __init__(
        self,
        algorithm: Algorithm,
        problem: ProblemProtocol,
        *,
        termination: Termination,
        rng: RngRoot,
        eval_backend: EvaluationBackend,
        backend_name: str = "serial",
        owns_backend: bool = True,
        callback: Callback | None = None,
        observers: Sequence[Observer] = (),
        initializer: Initializer | None = None,
        front_limit: int | None = None,
        record: Callback | None = None,
        initial_population: tuple[np.ndarray, np.ndarray] | None = None,
    ) -> None:
        self.algorithm = algorithm
        self.problem = problem
        self.termination = termination
        self.rng = rng
        self.eval_backend = eval_backend
        self.backend_name = backend_name
        self._owns_backend = owns_backend
        self.callback = callback
        self.observers = tuple(observers)
        self.initializer = initializer
        self.front_limit = front_limit
        self.record = record
        self.initial_population = initial_population
        self._state = SolverState.UNINITIALIZED
        self._result: SolveResult | None = None
        self._history: list[GenerationSnapshot] = []

    @classmethod
    def build(
        cls,
        algorithm: Any,
        problem: Any,
        *,
        termination: Any = None,
        seed: int | RngRoot | None = None,
        eval_backend: str | EvaluationBackend | None = "serial",
        n_workers: int | None = None,
        callback: Callback | None = None,
        observers: Iterable[Observer] = (),
        initializer: Initializer | None = None,
        front_limit: int | None = None,
        record: Callback | None = None,
        initial_population: tuple[Any, Any] | None = None,
        **settings: Any,
    ) -> "Solver":
        """
        Validate everything and return a ready-to-run Solver.

        Parameters
        ----------
        algorithm : str, Algorithm or *ConfigData
            Strategy to run. Extra keyword ``settings`` (for example
            ``pop_size=40``) are applied on top of its configuration.
        problem : Problem, ProblemProtocol or (bounds, objective)
            What to minimize.
        termination : Termination, int, callable or tuple, optional
            See :func:`natureopt.engine.termination.parse_termination`.
            Defaults to 200 generations.
        seed : int, optional
            Run seed; ``None`` draws one from OS entropy and records it in the result.
        eval_backend : str or EvaluationBackend
            ``"serial"``, ``"threads"`` or ``"joblib"``, or a backend instance
            (which the caller then owns and closes).
        n_workers : int, optional
            Worker count for pooled backends.
        callback : callable, optional
            Called once per generation with a read-only ``ContextView``.
        observers : iterable of Observer
            Lifecycle hooks (``on_start``, ``on_generation``, ``on_end``).
        initializer : callable, optional
            ``init(ctx) -> X`` for the initial population; uniform by default.
        front_limit : int, optional
            Maximum Pareto front size for multi-objective runs.
        record : callable, optional
            ``record(view)`` whose return value is stored in each snapshot.
        initial_population : (X, F), optional
            Warm start from ``pop_size`` rows whose fitness is already known.
            They are not evaluated again. Excludes ``initializer``.
        """
        algo = build_algorithm(algorithm, **settings)
        prob = as_problem(problem)
        policy = parse_termination(termination)
        declared = getattr(prob, "n_obj", None)
        policy.check_objectives(declared)
        root = seed if isinstance(seed, RngRoot) else make_root(seed)
        if callback is not None and not callable(callback):
            raise ConfigurationError("callback must be callable.", "Pass a function taking the generation view")
        if record is not None and not callable(record):
            raise ConfigurationError("record must be callable.", "Pass a function taking the generation view")
        if initializer is not None and not callable(initializer):
            raise ConfigurationError("initializer must be callable.", "Pass a function ctx -> X")
        if initial_population is not None:
            if initializer is not None:
                raise ConfigurationError("Pass either an initializer or an initial population, not both.")
            try:
                X0, F0 = initial_population
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    "initial_population must be an (X, F) pair.", "Pass the positions and their fitness"
                ) from exc
            initial_population = check_population(X0, F0, algo.pop_size, prob.bounds, declared)
            policy.check_objectives(initial_population[1].shape[1])
        if front_limit is not None and (
            isinstance(front_limit, bool) or not isinstance(front_limit, (int, np.integer)) or front_limit <= 0
        ):
            raise InvalidParameterError("front_limit", front_limit, "a positive integer or None")
        if n_workers is not None and int(n_workers) <= 0:
            raise InvalidParameterError("n_workers", n_workers, "a positive integer or None")
        observers = tuple(observers)
        for obs in observers:
            if not isinstance(obs, Observer):
                raise ConfigurationError(
                    f"{type(obs).__name__} is not an Observer.", "Implement on_start, on_generation and on_end"
                )
        backend = resolve_eval_backend(eval_backend, n_workers=n_workers)
        owns = eval_backend is None or isinstance(eval_backend, str)
        name = (eval_backend or "serial").lower() if owns else type(backend).__name__
        return cls(
            algo,
            prob,
            termination=policy,
            rng=root,
            eval_backend=backend,
            backend_name=name,
            owns_backend=owns,
            callback=callback,
            observers=observers,
            initializer=initializer,
            front_limit=None if front_limit is None else int(front_limit),
            record=record,
            initial_population=initial_population,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SolverState:
        return self._state

    @property
    def seed(self) -> int:
        return self.rng.seed

    @property
    def result(self) -> SolveResult:
        if self._state is not SolverState.RESULT_AVAILABLE or self._result is None:
            raise SolverStateError(f"No result available in state '{self._state.value}'.", self._state)
        return self._result

    @property
    def history(self) -> tuple[GenerationSnapshot, ...]:
        return tuple(self._history)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def solve(self) -> SolveResult:
        """Run the generation loop once and return the immutable result."""
        if self._state is not SolverState.UNINITIALIZED:
            raise SolverStateError("solve() can only be called once per Solver.", self._state)
        t0 = time.perf_counter()
        try:
            ctx = Context.init(
                self.problem,
                self.algorithm.pop_size,
                self.rng,
                eval_backend=self.eval_backend,
                initializer=self.initializer,
                front_limit=self.front_limit,
                population=self.initial_population,
            )
            ctx.evaluate_all()
            ctx.update_best()
            self._state = SolverState.INITIALIZED
            self.algorithm.initialize(ctx)
            self.termination.start(ctx.view())

            run = RunInfo(
                problem=self.problem,
                algorithm=self.algorithm.name,
                settings=self.algorithm.settings.to_dict(),
                seed=self.rng.seed,
                pop_size=ctx.pop_size,
                eval_backend=self.backend_name,
            )
            _logger.info(
                "Starting %s (pop_size=%d, dim=%d, n_obj=%s, seed=%d, backend=%s, termination=%r)",
                self.algorithm.name,
                ctx.pop_size,
                ctx.dim,
                ctx.n_obj,
                self.rng.seed,
                self.backend_name,
                self.termination,
            )
            for obs in self.observers:
                obs.on_start(run)

            self._state = SolverState.RUNNING
            while True:
                self.algorithm.step(ctx)
                ctx.evaluate_all()
                ctx.update_best()
                ctx.complete_generation()
                view = ctx.view()
                snap = self._snapshot(ctx, view, t0)
                self._history.append(snap)
                _logger.debug(
                    "gen %d | evals %d | best %s | front %d", snap.generation, snap.n_eval, snap.best_f, snap.front_size
                )
                if self.callback is not None:
                    self.callback(view)
                for obs in self.observers:
                    obs.on_generation(view)
                if self.termination(view):
                    break
            self._state = SolverState.TERMINATED
            result = self._build_result(ctx)
        except BaseException:
            self._state = SolverState.TERMINATED
            _logger.debug("Solve aborted after %d generation(s)", len(self._history))
            raise
        finally:
            if self._owns_backend:
                self.eval_backend.close()

        if ctx.non_finite_count:
            _logger.warning("%d non-finite objective value(s) were treated as +inf", ctx.non_finite_count)
        self._result = result
        self._state = SolverState.RESULT_AVAILABLE
        _logger.info(
            "Finished %s after %d generations and %d evaluations (%.3fs)",
            self.algorithm.name,
            result.generations,
            result.n_eval,
            time.perf_counter() - t0,
        )
        for obs in self.observers:
            obs.on_end(result)
        return result

    def _snapshot(self, ctx: Context, view: ContextView, t0: float) -> GenerationSnapshot:
        front = ctx.front
        F = ctx.F
        if front is None:
            best_f: Any = float(ctx.best_f)
            mean_f: Any = float(np.mean(F[:, 0]))
        else:
            best_f = _as_tuple(ctx.best_f)
            mean_f = _as_tuple(np.mean(F, axis=0))
        return GenerationSnapshot(
            generation=ctx.generation,
            n_eval=ctx.n_eval,
            best_f=best_f,
            mean_f=mean_f,
            front_size=0 if front is None else len(front),
            record=None if self.record is None else self.record(view),
            elapsed=time.perf_counter() - t0,
        )

    def _build_result(self, ctx: Context) -> SolveResult:
        front = ctx.front
        if front is None:
            best_f: Any = float(ctx.best_f)
        else:
            best_f = _readonly(ctx.best_f)
        return SolveResult(
            best_x=_readonly(ctx.best_x),
            best_f=best_f,
            front_X=None if front is None else _readonly(front.X),
            front_F=None if front is None else _readonly(front.F),
            history=tuple(self._history),
            n_eval=ctx.n_eval,
            n_obj=int(ctx.n_obj or 1),
            seed=self.rng.seed,
            generations=ctx.generation,
            algorithm=self.algorithm.name,
            product=ctx.best_product,
            front_products=None if front is None else tuple(front.products),
        )


__all__ = ["Callback", "Solver", "SolverState"]
