from __future__ import annotations

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Optional

import numpy as np
from joblib import Parallel, delayed  # type: ignore[import-untyped]

from natureopt.foundation.exceptions import EvaluationError, InvalidBackendError
from . import EvaluationBackend, EvaluationResult

_logger = logging.getLogger(__name__)


Block = tuple[np.ndarray, Optional[list[Any]]]


def _eval_chunk(problem: Any, X_chunk: np.ndarray) -> Block:
    """Worker helper: each chunk touches only its own rows."""
    if getattr(problem, "returns_product", False):
        F, products = problem.evaluate_products(X_chunk)
        return np.asarray(F, dtype=float), list(products)
    return np.asarray(problem.evaluate(X_chunk), dtype=float), None


def _chunk_slices(n: int, n_workers: int, chunk_size: Optional[int]) -> list[tuple[int, int]]:
    if chunk_size is not None and chunk_size > 0:
        size = chunk_size
    else:
        size = max(1, math.ceil(n / n_workers))
    return [(i, min(i + size, n)) for i in range(0, n, size)]


def _stitch(n: int, parts: list[tuple[int, Block]]) -> EvaluationResult:
    """Restore original row order from (start, block) pairs."""
    width = parts[0][1][0].shape[1]
    F = np.empty((n, width), dtype=float)
    products: list[Any] | None = None
    for start, (part, part_products) in sorted(parts, key=lambda p: p[0]):
        if part.shape[1] != width:
            raise EvaluationError(
                f"Objective returned {part.shape[1]} values for rows starting at {start}, expected {width}."
            )
        F[start : start + part.shape[0]] = part
        if part_products is not None:
            if products is None:
                products = [None] * n
            products[start : start + part.shape[0]] = part_products
    return EvaluationResult(F=F, products=products)


class SerialEvalBackend(EvaluationBackend):
    """Synchronous in-process evaluation (default)."""

    def evaluate(self, X: np.ndarray, problem: Any) -> EvaluationResult:
        F, products = _eval_chunk(problem, X)
        return EvaluationResult(F=F, products=products)

    def close(self) -> None:
        return None


class ThreadEvalBackend(EvaluationBackend):
    """
    Parallel evaluation over a thread pool.

    Notes:
        - The objective must be safe to call concurrently on disjoint inputs.
        - Rows are split into contiguous chunks and stitched back in order, so the
          output is identical to serial evaluation.
        - Best suited for objectives that release the GIL (NumPy, I/O, native code).
    """

    def __init__(self, n_workers: Optional[int] = None, chunk_size: Optional[int] = None):
        self.n_workers = max(1, n_workers or os.cpu_count() or 1)
        self.chunk_size = chunk_size
        self._executor: ThreadPoolExecutor | None = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.n_workers, thread_name_prefix="natureopt-eval")
        return self._executor

    def evaluate(self, X: np.ndarray, problem: Any) -> EvaluationResult:
        n = X.shape[0]
        if self.n_workers <= 1 or n <= 1:
            return SerialEvalBackend().evaluate(X, problem)

        slices = _chunk_slices(n, self.n_workers, self.chunk_size)
        pool = self._pool()
        future_map = {pool.submit(_eval_chunk, problem, X[start:end]): start for start, end in slices}
        parts: list[tuple[int, Block]] = []
        for fut in as_completed(future_map):
            parts.append((future_map[fut], fut.result()))
        return _stitch(n, parts)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


class JoblibEvalBackend(EvaluationBackend):
    """
    Parallel evaluation through ``joblib.Parallel``.

    Notes:
        - ``prefer="threads"`` (default) needs no pickling; ``prefer="processes"``
          requires a picklable problem and objective.
        - Results come back in submission order, matching serial evaluation.
    """

    def __init__(self, n_jobs: Optional[int] = None, prefer: str = "threads", chunk_size: Optional[int] = None):
        self.n_jobs = max(1, n_jobs or os.cpu_count() or 1)
        if prefer not in {"threads", "processes"}:
            raise ValueError("prefer must be 'threads' or 'processes'.")
        self.prefer = prefer
        self.chunk_size = chunk_size

    def evaluate(self, X: np.ndarray, problem: Any) -> EvaluationResult:
        n = X.shape[0]
        if self.n_jobs <= 1 or n <= 1:
            return SerialEvalBackend().evaluate(X, problem)
        slices = _chunk_slices(n, self.n_jobs, self.chunk_size)
        blocks = Parallel(n_jobs=self.n_jobs, prefer=self.prefer)(
            delayed(_eval_chunk)(problem, X[start:end]) for start, end in slices
        )
        return _stitch(n, [(start, block) for (start, _), block in zip(slices, blocks)])

    def close(self) -> None:
        return None


_BACKENDS = ("serial", "threads", "joblib")


def available_eval_backends() -> list[str]:
    return list(_BACKENDS)


def resolve_eval_backend(
    name: str | EvaluationBackend | None,
    *,
    n_workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> EvaluationBackend:
    """Map a backend name (or pass through an instance) to a backend object."""
    if name is not None and not isinstance(name, str):
        if not callable(getattr(name, "evaluate", None)):
            raise InvalidBackendError(repr(name), available_eval_backends())
        return name
    key = (name or "serial").lower()
    _logger.debug("Resolving evaluation backend %r (n_workers=%s)", key, n_workers)
    if key == "serial":
        return SerialEvalBackend()
    if key in {"threads", "thread", "threading"}:
        return ThreadEvalBackend(n_workers=n_workers, chunk_size=chunk_size)
    if key == "joblib":
        return JoblibEvalBackend(n_jobs=n_workers, chunk_size=chunk_size)
    raise InvalidBackendError(str(name), available_eval_backends())


__all__ = [
    "SerialEvalBackend",
    "ThreadEvalBackend",
    "JoblibEvalBackend",
    "available_eval_backends",
    "resolve_eval_backend",
]
