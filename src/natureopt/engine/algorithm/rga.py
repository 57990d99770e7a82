"""Real-coded genetic algorithm.

Each generation the driver stream shuffles the population into pairs. A pair
crosses with probability ``cross`` (SBX or BLX-alpha), both children are
mutated gene-wise with probability ``mutate``, and all changed children are
evaluated in one batch. The children then compete with their own parents:
the better child first, each child replaces the weaker parent of its pair
when it is not worse than that parent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from natureopt.engine.algorithm.base import Algorithm
from natureopt.engine.algorithm.config import RGAConfig
from natureopt.engine.operators import blx_pair, gaussian_mutation, polynomial_mutation, sbx_pair
from natureopt.foundation.metrics import dominates, is_not_worse

if TYPE_CHECKING:
    from natureopt.engine.context import Context

_logger = logging.getLogger(__name__)


def _weaker(f_a: np.ndarray, f_b: np.ndarray) -> int:
    """0 when ``a`` is the weaker of the two, 1 otherwise (objective sum breaks ties)."""
    if dominates(f_a, f_b):
        return 1
    if dominates(f_b, f_a):
        return 0
    return 0 if float(np.sum(f_a)) > float(np.sum(f_b)) else 1


class RGA(Algorithm):
    """Elitist real-coded GA with pairwise parent replacement."""

    name = "rga"
    builder_cls = RGAConfig

    def _cross(self, ctx: "Context", p1: np.ndarray, p2: np.ndarray, rng: np.random.Generator):
        cfg = self.settings
        lower, upper = ctx.bounds.lower, ctx.bounds.upper
        if cfg.crossover == "blx":
            return blx_pair(p1, p2, lower, upper, rng, alpha=cfg.alpha)
        return sbx_pair(p1, p2, lower, upper, rng, eta=cfg.eta)

    def _mutate(self, ctx: "Context", x: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        cfg = self.settings
        lower, upper = ctx.bounds.lower, ctx.bounds.upper
        if cfg.mutation == "gaussian":
            return gaussian_mutation(x, lower, upper, rng, prob=cfg.mutate, sigma=cfg.sigma)
        return polynomial_mutation(x, lower, upper, rng, prob=cfg.mutate, eta=cfg.eta_m)

    def step(self, ctx: "Context") -> None:
        cfg = self.settings
        n = ctx.pop_size
        order = np.arange(n)
        ctx.driver_rng.shuffle(order)
        X = ctx.X

        pairs: list[tuple[int, int]] = []
        children: list[np.ndarray] = []
        for k in range(n // 2):
            a, b = int(order[2 * k]), int(order[2 * k + 1])
            rng_a = ctx.stream(a)
            rng_b = ctx.stream(b)
            if rng_a.maybe(cfg.cross):
                c1, c2 = self._cross(ctx, X[a], X[b], rng_a.generator)
            else:
                c1, c2 = X[a].copy(), X[b].copy()
            c1 = self._mutate(ctx, c1, rng_a.generator)
            c2 = self._mutate(ctx, c2, rng_b.generator)
            if np.array_equal(c1, X[a]) and np.array_equal(c2, X[b]):
                continue
            pairs.append((a, b))
            children.extend((c1, c2))

        if not pairs:
            _logger.debug("RGA generation %d produced no new children", ctx.generation)
            return
        C = ctx.bounds.clip(np.vstack(children))
        FC = ctx.evaluate(C)

        for k, (a, b) in enumerate(pairs):
            slots = (a, b)
            kids = [(C[2 * k], FC[2 * k]), (C[2 * k + 1], FC[2 * k + 1])]
            if not is_not_worse(kids[0][1], kids[1][1]):
                kids.reverse()
            for x_child, f_child in kids:
                F = ctx.F
                loser = slots[_weaker(F[a], F[b])]
                if is_not_worse(f_child, F[loser]):
                    ctx.replace([loser], x_child[None, :], f_child[None, :])


__all__ = ["RGA"]
