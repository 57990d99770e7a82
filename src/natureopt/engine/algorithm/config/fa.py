"""Firefly algorithm configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import _ConfigBuilder, _SerializableConfig


@dataclass(frozen=True)
class FAConfigData(_SerializableConfig):
    """
    Firefly settings.

    ``alpha`` scales the random step as a fraction of each dimension's span and
    shrinks by ``alpha_decay`` every generation. ``beta0`` is the attraction at
    distance zero and ``gamma`` the light absorption coefficient.
    """

    name: ClassVar[str] = "fa"

    pop_size: int = 80
    alpha: float = 1.0
    beta0: float = 1.0
    gamma: float = 0.01
    alpha_decay: float = 0.95

    def __post_init__(self) -> None:
        self._check_pop_size()
        self._check_number("alpha", non_negative=True)
        self._check_number("beta0", non_negative=True)
        self._check_number("gamma", non_negative=True)
        self._check_number("alpha_decay", positive=True, at_most=1.0)


class FAConfig(_ConfigBuilder):
    """Declarative configuration holder for firefly settings."""

    _data_cls = FAConfigData

    def alpha(self, value: float) -> "FAConfig":
        return self._set("alpha", value)

    def beta0(self, value: float) -> "FAConfig":
        return self._set("beta0", value)

    def gamma(self, value: float) -> "FAConfig":
        return self._set("gamma", value)

    def alpha_decay(self, value: float) -> "FAConfig":
        return self._set("alpha_decay", value)

    def fixed(self) -> FAConfigData:
        return FAConfigData(**self._cfg)
