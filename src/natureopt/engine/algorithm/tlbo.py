"""Teaching-learning-based optimization.

Teacher phase: every learner moves by ``r * (teacher - TF * mean)`` where the
teacher is the best-so-far point (a random front member when
multi-objective), ``TF`` is 1 or 2 and ``r`` is uniform per gene.
Learner phase: every learner moves toward a random partner that dominates it,
or away from one that does not. Each phase is evaluated in one batch and
accepted greedily.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from natureopt.engine.algorithm.base import Algorithm, accept
from natureopt.engine.algorithm.config import TLBOConfig
from natureopt.foundation.metrics import dominates

if TYPE_CHECKING:
    from natureopt.engine.context import Context


class TLBO(Algorithm):
    name = "tlbo"
    builder_cls = TLBOConfig

    def _teacher_phase(self, ctx: "Context") -> None:
        X = ctx.X
        mean = X.mean(axis=0)
        new = np.empty_like(X)
        for i in range(ctx.pop_size):
            rng = ctx.stream(i)
            teacher = ctx.sample_leader(rng)
            tf = 1 + rng.index(2)
            r = rng.random(ctx.dim)
            new[i] = X[i] + r * (teacher - tf * mean)
        new = ctx.bounds.clip(new)
        accept(ctx, np.arange(ctx.pop_size), new, ctx.evaluate(new))

    def _learner_phase(self, ctx: "Context") -> None:
        X = np.array(ctx.X, copy=True)
        F = np.array(ctx.F, copy=True)
        new = np.empty_like(X)
        for i in range(ctx.pop_size):
            rng = ctx.stream(i)
            j = int(rng.distinct(ctx.pop_size, 1, exclude=i)[0])
            r = rng.random(ctx.dim)
            if dominates(F[j], F[i]):
                new[i] = X[i] + r * (X[j] - X[i])
            else:
                new[i] = X[i] + r * (X[i] - X[j])
        new = ctx.bounds.clip(new)
        accept(ctx, np.arange(ctx.pop_size), new, ctx.evaluate(new))

    def step(self, ctx: "Context") -> None:
        self._teacher_phase(ctx)
        self._learner_phase(ctx)


__all__ = ["TLBO"]
