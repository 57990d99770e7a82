"""Initial population samplers.

An initializer is any callable ``init(ctx) -> X`` returning one row per
individual. Stored rows are clipped to the bounds by the Context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from natureopt.foundation.exceptions import ConfigurationError, InvalidParameterError

if TYPE_CHECKING:
    from natureopt.engine.context import Context


def uniform_pool(ctx: "Context") -> np.ndarray:
    """Uniform sample inside the box; row ``i`` comes from stream ``i``."""
    lower, upper = ctx.bounds.lower, ctx.bounds.upper
    X = np.empty((ctx.pop_size, ctx.dim), dtype=float)
    for i in range(ctx.pop_size):
        X[i] = ctx.stream(i).uniform(lower, upper)
    return X


def uniform_by(accept: Callable[[np.ndarray], bool], max_tries: int = 10_000) -> Callable[["Context"], np.ndarray]:
    """
    Build an initializer that samples uniformly and keeps only accepted rows.

    Row ``i`` is redrawn from stream ``i`` until ``accept(x)`` is truthy, so
    the pool is reproducible per seed. More than ``max_tries`` rejections for
    a single row raise :class:`ConfigurationError`.
    """
    if not callable(accept):
        raise ConfigurationError("uniform_by needs a callable filter.", "Pass a function x -> bool")
    if isinstance(max_tries, bool) or not isinstance(max_tries, (int, np.integer)) or max_tries <= 0:
        raise InvalidParameterError("max_tries", max_tries, "a positive integer")

    def _init(ctx: "Context") -> np.ndarray:
        lower, upper = ctx.bounds.lower, ctx.bounds.upper
        X = np.empty((ctx.pop_size, ctx.dim), dtype=float)
        for i in range(ctx.pop_size):
            rng = ctx.stream(i)
            for _ in range(max_tries):
                x = rng.uniform(lower, upper)
                if accept(x.copy()):
                    X[i] = x
                    break
            else:
                raise ConfigurationError(
                    f"uniform_by filter rejected {max_tries} samples for individual {i}.",
                    "Loosen the filter or tighten the bounds around the accepted region",
                )
        return X

    return _init


def gaussian_pool(mean: Any, std: Any) -> Callable[["Context"], np.ndarray]:
    """
    Build an initializer sampling ``N(mean, std)`` per dimension.

    ``mean`` and ``std`` broadcast against the problem dimension. Samples
    outside the box are clipped when stored.
    """
    mean_arr = np.asarray(mean, dtype=float)
    std_arr = np.asarray(std, dtype=float)
    if np.any(std_arr < 0.0) or not np.all(np.isfinite(std_arr)):
        raise InvalidParameterError("std", std, "finite values >= 0")
    if not np.all(np.isfinite(mean_arr)):
        raise InvalidParameterError("mean", mean, "finite values")

    def _init(ctx: "Context") -> np.ndarray:
        mu = np.broadcast_to(mean_arr, (ctx.dim,))
        sd = np.broadcast_to(std_arr, (ctx.dim,))
        X = np.empty((ctx.pop_size, ctx.dim), dtype=float)
        for i in range(ctx.pop_size):
            X[i] = ctx.stream(i).normal(mu, sd)
        return ctx.bounds.clip(X)

    return _init


def lhs_pool(ctx: "Context") -> np.ndarray:
    """Latin hypercube sample; strata offsets and shuffles come from the driver stream."""
    rng = ctx.driver_rng.generator
    n = ctx.pop_size
    samples = np.empty((n, ctx.dim), dtype=float)
    for j in range(ctx.dim):
        strata = (np.arange(n, dtype=float) + rng.random(n)) / n
        rng.shuffle(strata)
        samples[:, j] = strata
    return ctx.bounds.lower + samples * ctx.bounds.span


__all__ = ["gaussian_pool", "lhs_pool", "uniform_by", "uniform_pool"]
