"""Particle swarm configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import _ConfigBuilder, _SerializableConfig


@dataclass(frozen=True)
class PSOConfigData(_SerializableConfig):
    name: ClassVar[str] = "pso"

    pop_size: int = 200
    inertia: float = 0.5
    c1: float = 1.5
    c2: float = 1.5
    vmax_fraction: float = 0.5

    def __post_init__(self) -> None:
        self._check_pop_size()
        self._check_number("inertia", non_negative=True)
        self._check_number("c1", non_negative=True)
        self._check_number("c2", non_negative=True)
        self._check_number("vmax_fraction", positive=True, at_most=1.0)


class PSOConfig(_ConfigBuilder):
    """Declarative configuration holder for particle swarm settings."""

    _data_cls = PSOConfigData

    def inertia(self, value: float) -> "PSOConfig":
        return self._set("inertia", value)

    def c1(self, value: float) -> "PSOConfig":
        return self._set("c1", value)

    def c2(self, value: float) -> "PSOConfig":
        return self._set("c2", value)

    def vmax_fraction(self, value: float) -> "PSOConfig":
        return self._set("vmax_fraction", value)

    def fixed(self) -> PSOConfigData:
        return PSOConfigData(**self._cfg)
