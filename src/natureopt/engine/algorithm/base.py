"""
Strategy interface shared by every algorithm.

An Algorithm holds validated settings only. Everything that changes during a
run lives on the Context (population, fitness, ``ctx.aux``), so one instance
can drive any number of solves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Mapping

import numpy as np

from natureopt.foundation.exceptions import ConfigurationError
from natureopt.foundation.metrics import not_worse_rows

if TYPE_CHECKING:
    from natureopt.engine.context import Context


class Algorithm(ABC):
    """
    Base class for generation-based strategies.

    Subclasses set ``name`` and ``builder_cls`` and implement :meth:`step`.

    Parameters
    ----------
    config : ConfigData or mapping, optional
        Frozen settings from the matching builder, or a mapping of field names.
        Defaults are used when omitted.
    **overrides
        Individual settings applied on top of ``config``.
    """

    name: ClassVar[str] = "algorithm"
    builder_cls: ClassVar[type]

    def __init__(self, config: Any = None, **overrides: Any) -> None:
        data_cls = self.builder_cls._data_cls
        if config is None:
            settings = self.builder_cls.from_dict(overrides)
        elif isinstance(config, data_cls):
            settings = self.builder_cls.from_dict({**config.to_dict(), **overrides}) if overrides else config
        elif isinstance(config, Mapping):
            settings = self.builder_cls.from_dict({**config, **overrides})
        else:
            raise ConfigurationError(
                f"{type(self).__name__} cannot use settings of type {type(config).__name__}.",
                f"Pass a {data_cls.__name__}, a mapping, or keyword settings",
            )
        self.settings = settings

    @property
    def pop_size(self) -> int:
        return self.settings.pop_size

    def initialize(self, ctx: "Context") -> None:
        """Set up per-run state after the initial population has been evaluated."""

    @abstractmethod
    def step(self, ctx: "Context") -> None:
        """Advance the population by one generation."""

    def to_dict(self) -> dict[str, Any]:
        return {"algorithm": self.name, **self.settings.to_dict()}

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self.settings.to_dict().items())
        return f"{type(self).__name__}({items})"


def accept(ctx: "Context", indices: np.ndarray, X_new: np.ndarray, F_new: np.ndarray) -> np.ndarray:
    """
    Greedy replacement: row ``indices[k]`` takes ``X_new[k]`` when it is not worse.

    Returns the boolean acceptance mask.
    """
    idx = np.asarray(indices, dtype=np.intp)
    mask = not_worse_rows(F_new, ctx.F[idx])
    if np.any(mask):
        ctx.replace(idx[mask], X_new[mask], F_new[mask])
    return mask


__all__ = ["Algorithm", "accept"]
