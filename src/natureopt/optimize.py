from __future__ import annotations

from typing import Any

from natureopt.engine.results import SolveResult
from natureopt.engine.solver import Solver


def optimize(
    algorithm: Any,
    problem: Any,
    termination: Any = None,
    seed: int | None = None,
    **kwargs: Any,
) -> SolveResult:
    """
    Build a Solver and run it once.

    Args:
        algorithm: Strategy name ("rga", "de", "pso", "fa", "tlbo"), an Algorithm, or a frozen config.
        problem: A Problem, any object with ``bounds`` and ``evaluate(X)``, or a ``(bounds, objective)`` pair.
        termination: Termination policy or shorthand, e.g. ``100`` or ``("min_fit", 1e-6)``.
        seed: RNG seed; ``None`` draws one and records it in the result.
        **kwargs: Forwarded to :meth:`Solver.build` (``eval_backend``, ``callback``, ``pop_size``, ...).

    Example:
        >>> result = optimize("tlbo", ([(-5, 5), (-5, 5)], lambda x: float(x @ x)), termination=20, seed=0, pop_size=10)
        >>> result.best_f < 1e-3
        True
    """
    return Solver.build(algorithm, problem, termination=termination, seed=seed, **kwargs).solve()


__all__ = ["optimize"]
