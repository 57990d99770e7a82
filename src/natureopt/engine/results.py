from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True)
class GenerationSnapshot:
    """
    Summary of one completed generation.

    ``best_f`` is the best fitness for single-objective runs and the front
    representative's objective tuple otherwise. ``elapsed`` is wall-clock time
    since the solve started and is ignored by equality.
    """

    generation: int
    n_eval: int
    best_f: Any
    mean_f: Any
    front_size: int = 0
    record: Any = None
    elapsed: float = field(default=0.0, compare=False)


@dataclass(frozen=True, eq=False)
class SolveResult:
    """
    Immutable outcome of a solve.

    Arrays are read-only copies. ``front_X``/``front_F`` are ``None`` for
    single-objective runs. ``product`` is the payload the objective returned
    for ``best_x`` when the problem is flagged ``returns_product``;
    ``front_products`` holds one per front row.
    """

    best_x: np.ndarray
    best_f: Any
    front_X: np.ndarray | None
    front_F: np.ndarray | None
    history: tuple[GenerationSnapshot, ...]
    n_eval: int
    n_obj: int
    seed: int
    generations: int
    algorithm: str
    product: Any = None
    front_products: tuple[Any, ...] | None = None

    @property
    def is_multi_objective(self) -> bool:
        return self.n_obj > 1

    @property
    def best_fitness_or_front(self) -> Any:
        """Best fitness (single-objective) or ``(front_X, front_F)`` (multi-objective)."""
        if self.is_multi_objective:
            return self.front_X, self.front_F
        return self.best_f

    def best_history(self) -> np.ndarray:
        """Per-generation ``best_f`` as an array (one row per generation)."""
        return np.asarray([snap.best_f for snap in self.history], dtype=float)

    def summary(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "algorithm": self.algorithm,
            "seed": self.seed,
            "generations": self.generations,
            "n_eval": self.n_eval,
            "n_obj": self.n_obj,
        }
        if self.is_multi_objective:
            out["front_size"] = 0 if self.front_F is None else int(self.front_F.shape[0])
        else:
            out["best_f"] = float(self.best_f)
        return out


__all__ = ["GenerationSnapshot", "SolveResult"]
