"""Differential evolution.

All trial vectors of a generation are built from the same population
snapshot, evaluated in one batch, and then each trial replaces its target
when it is not worse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from natureopt.engine.algorithm.base import Algorithm, accept
from natureopt.engine.algorithm.config import DEConfig
from natureopt.foundation.random import Rng

if TYPE_CHECKING:
    from natureopt.engine.context import Context


class DE(Algorithm):
    """Classic DE with five mutant formulas and binomial or exponential crossover."""

    name = "de"
    builder_cls = DEConfig

    def _mutant(self, ctx: "Context", X: np.ndarray, i: int, rng: Rng) -> np.ndarray:
        cfg = self.settings
        f = cfg.f
        v = X[rng.distinct(ctx.pop_size, cfg.n_donors, exclude=i)]
        strategy = cfg.strategy
        if strategy == "rand1":
            return v[0] + f * (v[1] - v[2])
        if strategy == "rand2":
            return v[4] + f * (v[0] + v[1] - v[2] - v[3])
        best = ctx.sample_leader(rng)
        if strategy == "best1":
            return best + f * (v[0] - v[1])
        if strategy == "current_to_best1":
            return X[i] + f * (best - X[i] + v[0] - v[1])
        return best + f * (v[0] + v[1] - v[2] - v[3])

    def _crossover(self, target: np.ndarray, mutant: np.ndarray, rng: Rng) -> np.ndarray:
        cross = self.settings.cross
        dim = target.shape[0]
        if self.settings.crossover == "exp":
            start = rng.index(dim)
            length = 1
            while length < dim and rng.random() < cross:
                length += 1
            take = np.zeros(dim, dtype=bool)
            take[(start + np.arange(length)) % dim] = True
        else:
            j_rand = rng.index(dim)
            take = rng.random(dim) < cross
            take[j_rand] = True
        return np.where(take, mutant, target)

    def step(self, ctx: "Context") -> None:
        n = ctx.pop_size
        X = ctx.X
        trials = np.empty_like(X)
        for i in range(n):
            rng = ctx.stream(i)
            mutant = self._mutant(ctx, X, i, rng)
            trials[i] = self._crossover(X[i], mutant, rng)
        trials = ctx.bounds.clip(trials)
        F_trial = ctx.evaluate(trials)
        accept(ctx, np.arange(n), trials, F_trial)


__all__ = ["DE"]
