"""Firefly algorithm.

Every firefly builds one candidate per strictly brighter firefly, moving
toward it with attraction ``beta0 * exp(-gamma * r^2)`` plus a random step of
``alpha_g`` times the span, where ``alpha_g = alpha * alpha_decay**generation``.
The brightest fireflies take a single random-walk candidate instead. All
candidates are evaluated in one batch; each firefly then walks through its
own candidates in order and keeps any that is not worse than its current
position.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from natureopt.engine.algorithm.base import Algorithm
from natureopt.engine.algorithm.config import FAConfig
from natureopt.foundation.metrics import dominates_rows, is_not_worse

if TYPE_CHECKING:
    from natureopt.engine.context import Context


class FA(Algorithm):
    name = "fa"
    builder_cls = FAConfig

    def step(self, ctx: "Context") -> None:
        cfg = self.settings
        X = np.array(ctx.X, copy=True)
        F = np.array(ctx.F, copy=True)
        span = ctx.bounds.span
        alpha_g = cfg.alpha * cfg.alpha_decay**ctx.generation

        candidates: list[np.ndarray] = []
        owners: list[int] = []
        for i in range(ctx.pop_size):
            rng = ctx.stream(i)
            brighter = np.flatnonzero(dominates_rows(F, F[i]))
            if brighter.size == 0:
                candidates.append(X[i] + alpha_g * span * (rng.random(ctx.dim) - 0.5))
                owners.append(i)
                continue
            for j in brighter:
                r2 = float(np.sum((X[j] - X[i]) ** 2))
                beta = cfg.beta0 * np.exp(-cfg.gamma * r2)
                step = alpha_g * span * (rng.random(ctx.dim) - 0.5)
                candidates.append(X[i] + beta * (X[j] - X[i]) + step)
                owners.append(i)

        C = ctx.bounds.clip(np.vstack(candidates))
        FC = ctx.evaluate(C)

        owner = np.asarray(owners, dtype=np.intp)
        for i in range(ctx.pop_size):
            x_cur, f_cur = X[i], F[i]
            moved = False
            for k in np.flatnonzero(owner == i):
                if is_not_worse(FC[k], f_cur):
                    x_cur, f_cur = C[k], FC[k]
                    moved = True
            if moved:
                ctx.replace([i], x_cur[None, :], f_cur[None, :])


__all__ = ["FA"]
