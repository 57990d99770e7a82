"""Teaching-learning configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .base import _ConfigBuilder, _SerializableConfig


@dataclass(frozen=True)
class TLBOConfigData(_SerializableConfig):
    name: ClassVar[str] = "tlbo"

    pop_size: int = 200

    def __post_init__(self) -> None:
        self._check_pop_size()


class TLBOConfig(_ConfigBuilder):
    """TLBO has no coefficients besides the class size."""

    _data_cls = TLBOConfigData

    def fixed(self) -> TLBOConfigData:
        return TLBOConfigData(**self._cfg)
