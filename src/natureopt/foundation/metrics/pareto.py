from __future__ import annotations

import numpy as np


def dominates(a: np.ndarray, b: np.ndarray) -> bool:
    """True when fitness ``a`` Pareto-dominates ``b`` (minimization)."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return bool(np.all(a <= b) and np.any(a < b))


def is_not_worse(a: np.ndarray, b: np.ndarray) -> bool:
    """True when ``b`` does not dominate ``a``; for scalars this is ``a <= b``.

    ``+inf`` versus ``+inf`` counts as not worse, so an infeasible candidate can
    still replace an infeasible incumbent.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.size == 1:
        return bool(a.reshape(-1)[0] <= b.reshape(-1)[0])
    return not dominates(b, a)


def not_worse_rows(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Row-wise :func:`is_not_worse`: ``out[i]`` is True when ``B[i]`` does not dominate ``A[i]``."""
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float).reshape(A.shape)
    if A.ndim == 1:
        return A <= B
    return ~(np.all(B <= A, axis=1) & np.any(B < A, axis=1))


def dominates_rows(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Boolean mask: which rows of ``A`` dominate the single vector ``b``."""
    A = np.asarray(A, dtype=float)
    return np.all(A <= b, axis=1) & np.any(A < b, axis=1)


def dominated_by_rows(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Boolean mask: which rows of ``A`` are dominated by the single vector ``b``."""
    A = np.asarray(A, dtype=float)
    return np.all(b <= A, axis=1) & np.any(b < A, axis=1)


def crowding_distance(F: np.ndarray) -> np.ndarray:
    """Crowding distance of a single non-dominated set; extremes get ``inf``."""
    F = np.asarray(F, dtype=float)
    n = F.shape[0]
    if n == 0:
        return np.empty(0, dtype=float)
    if n <= 2:
        return np.full(n, np.inf)

    d = np.zeros(n, dtype=float)
    for m in range(F.shape[1]):
        order = np.argsort(F[:, m], kind="mergesort")
        sorted_vals = F[order, m]
        d[order[0]] = np.inf
        d[order[-1]] = np.inf
        span = sorted_vals[-1] - sorted_vals[0]
        if not np.isfinite(span) or span <= 0.0:
            continue
        contrib = (sorted_vals[2:] - sorted_vals[:-2]) / span
        d[order[1:-1]] += contrib
    return d


__all__ = [
    "crowding_distance",
    "dominated_by_rows",
    "dominates",
    "dominates_rows",
    "is_not_worse",
    "not_worse_rows",
]
