from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

_logger = logging.getLogger("natureopt.progress")


@dataclass(frozen=True)
class RunInfo:
    """
    Static facts about a solve.
    Passed to on_start events.
    """

    problem: Any
    algorithm: str
    settings: dict[str, Any]
    seed: int
    pop_size: int
    eval_backend: str = "serial"


@runtime_checkable
class Observer(Protocol):
    """
    Reacts to lifecycle events of a solve.

    Observers receive read-only data and must not change search state.
    """

    def on_start(self, run: RunInfo) -> None:
        """Called once, after the initial population has been evaluated."""
        ...

    def on_generation(self, view: Any) -> None:
        """Called once per completed generation with a read-only context view."""
        ...

    def on_end(self, result: Any) -> None:
        """Called once with the final result."""
        ...


class LoggingObserver:
    """Logs run progress every ``every`` generations through the ``natureopt`` logger."""

    def __init__(self, every: int = 10, level: int = logging.INFO, logger: logging.Logger | None = None) -> None:
        if every <= 0:
            raise ValueError("every must be positive.")
        self.every = int(every)
        self.level = level
        self.logger = logger or _logger

    def on_start(self, run: RunInfo) -> None:
        self.logger.log(
            self.level,
            "Starting %s on %s (pop_size=%d, seed=%d, backend=%s)",
            run.algorithm,
            getattr(run.problem, "name", type(run.problem).__name__),
            run.pop_size,
            run.seed,
            run.eval_backend,
        )

    def on_generation(self, view: Any) -> None:
        if view.generation % self.every:
            return
        if view.is_multi_objective:
            self.logger.log(
                self.level, "gen %5d | evals %7d | front %d", view.generation, view.n_eval, len(view.front_F)
            )
        else:
            self.logger.log(self.level, "gen %5d | evals %7d | best %.6g", view.generation, view.n_eval, view.best_f)

    def on_end(self, result: Any) -> None:
        self.logger.log(
            self.level,
            "Finished after %d generations and %d evaluations",
            result.generations,
            result.n_eval,
        )


__all__ = ["LoggingObserver", "Observer", "RunInfo"]
