"""Best-solution trackers: a single incumbent, or an incremental Pareto front.

The front keeps the maximal non-dominated subset of every point offered to it.
A member only leaves when a newly offered point dominates it, or, when a
``limit`` is set, when it is the most crowded member of an oversized front.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np

from natureopt.foundation.metrics.pareto import crowding_distance, dominated_by_rows, dominates_rows

_logger = logging.getLogger(__name__)


class SingleBest:
    """Incumbent for single-objective runs; keeps the strictly smallest fitness.

    An optional product rides along with the incumbent and is replaced with it.
    """

    def __init__(self, n_var: int) -> None:
        self._n_var = int(n_var)
        self._x: np.ndarray | None = None
        self._f: float = np.inf
        self._product: Any = None

    @property
    def empty(self) -> bool:
        return self._x is None

    @property
    def x(self) -> np.ndarray:
        if self._x is None:
            raise LookupError("No solution has been offered yet.")
        return self._x.copy()

    @property
    def f(self) -> float:
        return self._f

    @property
    def product(self) -> Any:
        return self._product

    def offer(self, x: np.ndarray, f: Any, product: Any = None) -> bool:
        value = float(np.asarray(f, dtype=float).reshape(-1)[0])
        if self._x is None or value < self._f:
            self._x = np.array(x, dtype=float, copy=True)
            self._f = value
            self._product = product
            return True
        return False

    def offer_many(self, X: np.ndarray, F: np.ndarray, products: Sequence[Any] | None = None) -> int:
        X = np.asarray(X, dtype=float)
        F = np.asarray(F, dtype=float).reshape(X.shape[0], -1)
        if X.shape[0] == 0:
            return 0
        # First occurrence of the minimum keeps offer order deterministic.
        i = int(np.argmin(F[:, 0]))
        return int(self.offer(X[i], F[i], None if products is None else products[i]))


class ParetoFront:
    """
    Incremental non-dominated set.

    Parameters
    ----------
    n_var, n_obj : int
        Row widths for stored parameters and fitness.
    limit : int, optional
        Maximum size. When exceeded, the member with the smallest crowding
        distance is dropped (boundary members are never dropped first).

    Examples
    --------
    >>> front = ParetoFront(n_var=1, n_obj=2)
    >>> front.offer(np.array([0.2]), np.array([0.2, -0.2]))
    True
    >>> front.offer(np.array([0.3]), np.array([0.3, -0.1]))
    False
    """

    def __init__(self, n_var: int, n_obj: int, limit: int | None = None) -> None:
        if limit is not None and int(limit) <= 0:
            raise ValueError("front limit must be positive.")
        self._n_var = int(n_var)
        self._n_obj = int(n_obj)
        self.limit = None if limit is None else int(limit)
        self._X = np.empty((0, self._n_var), dtype=float)
        self._F = np.empty((0, self._n_obj), dtype=float)
        self._products: list[Any] = []
        self._crowding: np.ndarray | None = None

    def __len__(self) -> int:
        return int(self._F.shape[0])

    @property
    def n_obj(self) -> int:
        return self._n_obj

    @property
    def X(self) -> np.ndarray:
        return self._X.copy()

    @property
    def F(self) -> np.ndarray:
        return self._F.copy()

    @property
    def products(self) -> list[Any]:
        """Products aligned with the rows of :attr:`X` (None where none was given)."""
        return list(self._products)

    def offer(self, x: np.ndarray, f: np.ndarray, product: Any = None) -> bool:
        """Try to insert one evaluated point; returns True when it enters the front."""
        x = np.asarray(x, dtype=float).reshape(self._n_var)
        f = np.asarray(f, dtype=float).reshape(self._n_obj)
        if len(self):
            if np.any(dominates_rows(self._F, f)):
                return False
            same = np.all(self._F == f, axis=1) & np.all(self._X == x, axis=1)
            if np.any(same):
                return False
            keep = ~dominated_by_rows(self._F, f)
            self._X = self._X[keep]
            self._F = self._F[keep]
            self._products = [p for p, k in zip(self._products, keep) if k]
        self._X = np.vstack([self._X, x[None, :]])
        self._F = np.vstack([self._F, f[None, :]])
        self._products.append(product)
        self._crowding = None
        if self.limit is not None and len(self) > self.limit:
            self._truncate()
        return True

    def offer_many(self, X: np.ndarray, F: np.ndarray, products: Sequence[Any] | None = None) -> int:
        """Offer rows in order; returns how many entered the front."""
        X = np.asarray(X, dtype=float).reshape(-1, self._n_var)
        F = np.asarray(F, dtype=float).reshape(-1, self._n_obj)
        return sum(
            self.offer(X[i], F[i], None if products is None else products[i]) for i in range(X.shape[0])
        )

    def _crowding_cached(self) -> np.ndarray:
        # Cleared whenever membership changes.
        if self._crowding is None:
            self._crowding = crowding_distance(self._F)
        return self._crowding

    def crowding(self) -> np.ndarray:
        return self._crowding_cached().copy()

    def _truncate(self) -> None:
        while len(self) > self.limit:
            d = self._crowding_cached()
            # Last of the most crowded rows; the newest member loses ties.
            drop = int(np.flatnonzero(d == d.min())[-1])
            self._X = np.delete(self._X, drop, axis=0)
            self._F = np.delete(self._F, drop, axis=0)
            del self._products[drop]
            self._crowding = None
            _logger.debug("Front above limit %d; dropped member %d", self.limit, drop)

    def _representative_index(self) -> int:
        if not len(self):
            raise LookupError("The Pareto front is empty.")
        return int(np.argmin(self._F.sum(axis=1)))

    def representative(self) -> tuple[np.ndarray, np.ndarray]:
        """Member with the smallest objective sum (first on ties)."""
        i = self._representative_index()
        return self._X[i].copy(), self._F[i].copy()

    def representative_product(self) -> Any:
        return self._products[self._representative_index()]

    def sample(self, rng: Any) -> tuple[np.ndarray, np.ndarray]:
        """Uniform random member, drawn with ``rng.index``."""
        if not len(self):
            raise LookupError("The Pareto front is empty.")
        i = rng.index(len(self))
        return self._X[i].copy(), self._F[i].copy()

    def tournament(self, rng: Any) -> np.ndarray:
        """Binary tournament on crowding distance; the less crowded member wins.

        Crowding is computed once per membership change, so repeated draws
        between offers cost O(1) each.
        """
        if not len(self):
            raise LookupError("The Pareto front is empty.")
        n = len(self)
        a, b = rng.index(n), rng.index(n)
        if a != b:
            d = self._crowding_cached()
            if d[b] > d[a]:
                a = b
        return self._X[a].copy()


__all__ = ["ParetoFront", "SingleBest"]
