"""
Algorithm registry.

Maps strategy names to Algorithm classes so the solver avoids hard-coded
conditionals, and maps config dataclasses back to their strategy.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any

from natureopt.foundation.exceptions import ConfigurationError, InvalidAlgorithmError
from natureopt.foundation.registry import Registry

from .base import Algorithm
from .de import DE
from .fa import FA
from .pso import PSO
from .rga import RGA
from .tlbo import TLBO

_ALGORITHMS: Registry[type[Algorithm]] | None = None


def _suggest_names(name: str, options: list[str]) -> list[str]:
    if not name or not options:
        return []
    return get_close_matches(name.lower(), options, n=3, cutoff=0.6)


def get_algorithms_registry() -> Registry[type[Algorithm]]:
    global _ALGORITHMS
    if _ALGORITHMS is None:
        registry: Registry[type[Algorithm]] = Registry("Algorithms")
        for cls in (RGA, DE, PSO, FA, TLBO):
            registry.register(cls.name, cls)
        _ALGORITHMS = registry
    return _ALGORITHMS


def available_algorithms() -> list[str]:
    return get_algorithms_registry().list()


def resolve_algorithm(name: str) -> type[Algorithm]:
    registry = get_algorithms_registry()
    try:
        return registry[name]
    except KeyError as exc:
        options = registry.list()
        raise InvalidAlgorithmError(name, options, _suggest_names(name, options)) from exc


def build_algorithm(algorithm: Any, **overrides: Any) -> Algorithm:
    """
    Build a strategy from an instance, a name, or a frozen config dataclass.

    ``overrides`` are settings applied on top (for example ``pop_size=50``).
    An Algorithm instance is returned unchanged when there are no overrides.
    """
    if isinstance(algorithm, Algorithm):
        if not overrides:
            return algorithm
        return type(algorithm)(algorithm.settings, **overrides)
    if isinstance(algorithm, str):
        return resolve_algorithm(algorithm)(**overrides)
    registry = get_algorithms_registry()
    for key in registry:
        cls = registry[key]
        if isinstance(algorithm, cls.builder_cls._data_cls):
            return cls(algorithm, **overrides)
    raise ConfigurationError(
        f"Cannot build an algorithm from {type(algorithm).__name__}.",
        "Pass an algorithm name, an Algorithm instance, or a frozen *ConfigData from the config builders",
    )


__all__ = ["available_algorithms", "build_algorithm", "get_algorithms_registry", "resolve_algorithm"]
