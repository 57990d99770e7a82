"""Differential evolution configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import _ConfigBuilder, _SerializableConfig

# Donor vectors drawn per target (excluding the target itself).
STRATEGY_DONORS = {
    "rand1": 3,
    "best1": 2,
    "current_to_best1": 2,
    "best2": 4,
    "rand2": 5,
}
CROSSOVERS = ("bin", "exp")


@dataclass(frozen=True)
class DEConfigData(_SerializableConfig):
    """
    Differential evolution settings.

    Mutant formulas (``v*`` are distinct donors, none equal to the target):

    - ``rand1``: v0 + F * (v1 - v2)
    - ``best1``: best + F * (v0 - v1)
    - ``current_to_best1``: x + F * (best - x + v0 - v1)
    - ``best2``: best + F * (v0 + v1 - v2 - v3)
    - ``rand2``: v4 + F * (v0 + v1 - v2 - v3)

    ``bin`` crossover takes each gene from the mutant with probability
    ``cross`` and always takes one random gene; ``exp`` copies a contiguous
    (circular) run of genes starting at a random position.
    """

    name: ClassVar[str] = "de"

    pop_size: int = 200
    f: float = 0.6
    cross: float = 0.9
    strategy: str = "rand1"
    crossover: str = "bin"

    def __post_init__(self) -> None:
        self._check_choice("strategy", tuple(STRATEGY_DONORS))
        self._check_choice("crossover", CROSSOVERS)
        self._check_pop_size(STRATEGY_DONORS[self.strategy] + 1)
        self._check_number("f", positive=True, at_most=2.0)
        self._check_probability("cross")

    @property
    def n_donors(self) -> int:
        return STRATEGY_DONORS[self.strategy]


class DEConfig(_ConfigBuilder):
    """Declarative configuration holder for differential evolution."""

    _data_cls = DEConfigData

    def f(self, value: float) -> "DEConfig":
        return self._set("f", value)

    def cross(self, value: float) -> "DEConfig":
        return self._set("cross", value)

    def strategy(self, value: str) -> "DEConfig":
        return self._set("strategy", value)

    def crossover(self, value: str) -> "DEConfig":
        return self._set("crossover", value)

    def fixed(self) -> DEConfigData:
        return DEConfigData(**self._cfg)
