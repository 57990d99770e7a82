from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

import numpy as np


@dataclass
class EvaluationResult:
    """Container for objective evaluation outputs, one row per input row.

    ``products`` is set only for problems flagged ``returns_product``.
    """

    F: np.ndarray
    products: Optional[list[Any]] = None


class EvaluationBackend(Protocol):
    """Protocol for evaluation backends."""

    def evaluate(self, X: np.ndarray, problem: Any) -> EvaluationResult: ...

    def close(self) -> None:  # pragma: no cover - optional for pooled backends
        """Clean up any resources (executors, pools)."""
        return None


from .backends import (  # noqa: E402
    JoblibEvalBackend,
    SerialEvalBackend,
    ThreadEvalBackend,
    available_eval_backends,
    resolve_eval_backend,
)

__all__ = [
    "EvaluationBackend",
    "EvaluationResult",
    "JoblibEvalBackend",
    "SerialEvalBackend",
    "ThreadEvalBackend",
    "available_eval_backends",
    "resolve_eval_backend",
]
