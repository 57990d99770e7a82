"""Particle swarm optimization.

Velocities and personal bests live in ``ctx.aux``. Each particle follows its
personal best and a leader: the global best for single-objective runs, or a
binary crowding tournament winner from the Pareto front otherwise.
Velocities are clamped to ``vmax_fraction`` of each dimension's span.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from natureopt.engine.algorithm.base import Algorithm
from natureopt.engine.algorithm.config import PSOConfig
from natureopt.foundation.metrics import not_worse_rows

if TYPE_CHECKING:
    from natureopt.engine.context import Context


class PSO(Algorithm):
    """Inertia-weight PSO with velocity clamping."""

    name = "pso"
    builder_cls = PSOConfig

    def initialize(self, ctx: "Context") -> None:
        ctx.aux["velocity"] = np.zeros((ctx.pop_size, ctx.dim), dtype=float)
        ctx.aux["pbest_X"] = np.array(ctx.X, copy=True)
        ctx.aux["pbest_F"] = np.array(ctx.F, copy=True)

    def _update_personal_bests(self, ctx: "Context") -> None:
        pbest_X = ctx.aux["pbest_X"]
        pbest_F = ctx.aux["pbest_F"]
        F = ctx.F
        better = not_worse_rows(F, pbest_F)
        pbest_X[better] = ctx.X[better]
        pbest_F[better] = F[better]

    def _leader(self, ctx: "Context", rng) -> np.ndarray:
        front = ctx.front
        if front is not None and len(front):
            return front.tournament(rng)
        return ctx.best_x

    def step(self, ctx: "Context") -> None:
        if "velocity" not in ctx.aux:
            self.initialize(ctx)
        # Fold in the fitness computed at the end of the previous generation.
        self._update_personal_bests(ctx)

        cfg = self.settings
        vmax = cfg.vmax_fraction * ctx.bounds.span
        V = ctx.aux["velocity"]
        P = ctx.aux["pbest_X"]
        X = ctx.X
        X_new = np.empty_like(X)
        for i in range(ctx.pop_size):
            rng = ctx.stream(i)
            leader = self._leader(ctx, rng)
            r1 = rng.random(ctx.dim)
            r2 = rng.random(ctx.dim)
            v = cfg.inertia * V[i] + cfg.c1 * r1 * (P[i] - X[i]) + cfg.c2 * r2 * (leader - X[i])
            V[i] = np.clip(v, -vmax, vmax)
            X_new[i] = X[i] + V[i]
        ctx.set_positions(X_new)


__all__ = ["PSO"]
