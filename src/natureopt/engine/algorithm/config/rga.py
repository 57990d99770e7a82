"""Real-coded GA configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import _ConfigBuilder, _SerializableConfig

CROSSOVERS = ("sbx", "blx")
MUTATIONS = ("pm", "gaussian")


@dataclass(frozen=True)
class RGAConfigData(_SerializableConfig):
    name: ClassVar[str] = "rga"

    pop_size: int = 200
    cross: float = 0.95
    mutate: float = 0.05
    crossover: str = "sbx"
    eta: float = 15.0
    alpha: float = 0.5
    mutation: str = "pm"
    eta_m: float = 20.0
    sigma: float = 0.1

    def __post_init__(self) -> None:
        self._check_pop_size()
        self._check_probability("cross")
        self._check_probability("mutate")
        self._check_choice("crossover", CROSSOVERS)
        self._check_choice("mutation", MUTATIONS)
        self._check_number("eta", non_negative=True)
        self._check_number("alpha", non_negative=True)
        self._check_number("eta_m", non_negative=True)
        self._check_number("sigma", positive=True)


class RGAConfig(_ConfigBuilder):
    """
    Declarative configuration holder for the real-coded GA.

    Examples:
        cfg = RGAConfig().pop_size(100).crossover("blx", alpha=0.3).mutation("gaussian", sigma=0.05).fixed()
    """

    _data_cls = RGAConfigData

    def cross(self, value: float) -> "RGAConfig":
        return self._set("cross", value)

    def mutate(self, value: float) -> "RGAConfig":
        return self._set("mutate", value)

    def crossover(self, method: str, *, eta: float | None = None, alpha: float | None = None) -> "RGAConfig":
        self._set("crossover", method)
        if eta is not None:
            self._set("eta", eta)
        if alpha is not None:
            self._set("alpha", alpha)
        return self

    def mutation(self, method: str, *, eta: float | None = None, sigma: float | None = None) -> "RGAConfig":
        self._set("mutation", method)
        if eta is not None:
            self._set("eta_m", eta)
        if sigma is not None:
            self._set("sigma", sigma)
        return self

    def fixed(self) -> RGAConfigData:
        return RGAConfigData(**self._cfg)
