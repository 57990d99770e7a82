"""Real-coded variation operators.

Each operator works on one pair or one row and draws from the generator it is
given. Callers pass an individual's own stream so that results do not depend
on evaluation scheduling.
"""

from __future__ import annotations

import numpy as np

_EPS = 1.0e-14


def sbx_pair(
    parent1: np.ndarray,
    parent2: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
    *,
    eta: float = 15.0,
    prob_var: float = 0.5,
) -> tuple[np.ndarray, np.ndarray]:
    """Simulated Binary Crossover (bounded variant) for one pair of parents."""
    p1 = np.asarray(parent1, dtype=float)
    p2 = np.asarray(parent2, dtype=float)
    n_var = p1.shape[0]

    # Fixed draw order: variable mask, spread, swap.
    var_rand = rng.random(n_var)
    rand = rng.random(n_var)
    swap = rng.random(n_var)

    y1 = np.minimum(p1, p2)
    y2 = np.maximum(p1, p2)
    diff = y2 - y1
    active = (diff > _EPS) & (var_rand <= prob_var)
    child1 = p1.copy()
    child2 = p2.copy()
    if not np.any(active):
        return child1, child2

    inv_eta = 1.0 / (eta + 1.0)
    safe = diff.clip(min=_EPS)

    def _betaq(beta: np.ndarray) -> np.ndarray:
        beta = np.maximum(beta, _EPS)
        alpha = np.maximum(2.0 - np.power(beta, -(eta + 1.0)), _EPS)
        out = np.empty_like(rand)
        term = rand <= (1.0 / alpha)
        out[term] = np.power(rand[term] * alpha[term], inv_eta)
        out[~term] = np.power(1.0 / (2.0 - rand[~term] * alpha[~term]), inv_eta)
        return out

    c1 = 0.5 * ((y1 + y2) - _betaq(1.0 + 2.0 * (y1 - lower) / safe) * diff)
    c2 = 0.5 * ((y1 + y2) + _betaq(1.0 + 2.0 * (upper - y2) / safe) * diff)
    np.clip(c1, lower, upper, out=c1)
    np.clip(c2, lower, upper, out=c2)

    swap_mask = (swap <= 0.5) & active
    child1 = np.where(active, np.where(swap_mask, c2, c1), p1)
    child2 = np.where(active, np.where(swap_mask, c1, c2), p2)
    return child1, child2


def blx_pair(
    parent1: np.ndarray,
    parent2: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
    *,
    alpha: float = 0.5,
) -> tuple[np.ndarray, np.ndarray]:
    """Blend crossover (BLX-alpha); children are clipped into the box."""
    p1 = np.asarray(parent1, dtype=float)
    p2 = np.asarray(parent2, dtype=float)
    low = np.minimum(p1, p2)
    high = np.maximum(p1, p2)
    spread = alpha * (high - low)
    u = rng.random((2, p1.shape[0]))
    span = (high + spread) - (low - spread)
    children = (low - spread) + u * span
    np.clip(children, lower, upper, out=children)
    return children[0], children[1]


def polynomial_mutation(
    x: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
    *,
    prob: float,
    eta: float = 20.0,
) -> np.ndarray:
    """Standard polynomial mutation, gene-wise with probability ``prob``."""
    y = np.array(x, dtype=float, copy=True)
    # Full grids keep stream consumption independent of which genes fire.
    rnd_mask = rng.random(y.shape)
    rnd_delta = rng.random(y.shape)
    mask = rnd_mask < prob
    if not np.any(mask):
        return y

    mut_pow = 1.0 / (eta + 1.0)
    for j in np.flatnonzero(mask):
        yl = lower[j]
        yu = upper[j]
        if yu <= yl:
            continue
        delta1 = (y[j] - yl) / (yu - yl)
        delta2 = (yu - y[j]) / (yu - yl)
        rnd = rnd_delta[j]
        if rnd <= 0.5:
            xy = 1.0 - delta1
            val = 2.0 * rnd + (1.0 - 2.0 * rnd) * (xy ** (eta + 1.0))
            deltaq = val**mut_pow - 1.0
        else:
            xy = 1.0 - delta2
            val = 2.0 * (1.0 - rnd) + 2.0 * (rnd - 0.5) * (xy ** (eta + 1.0))
            deltaq = 1.0 - val**mut_pow
        y[j] = min(max(y[j] + deltaq * (yu - yl), yl), yu)
    return y


def gaussian_mutation(
    x: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    rng: np.random.Generator,
    *,
    prob: float,
    sigma: float = 0.1,
) -> np.ndarray:
    """Add N(0, sigma * span) noise to genes selected with probability ``prob``."""
    y = np.array(x, dtype=float, copy=True)
    rnd_mask = rng.random(y.shape)
    noise = rng.normal(0.0, 1.0, y.shape)
    mask = rnd_mask < prob
    y[mask] += noise[mask] * sigma * (upper - lower)[mask]
    np.clip(y, lower, upper, out=y)
    return y


__all__ = ["blx_pair", "gaussian_mutation", "polynomial_mutation", "sbx_pair"]
