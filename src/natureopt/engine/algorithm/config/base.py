"""Base utilities for algorithm configuration."""

from __future__ import annotations

import math
from dataclasses import asdict, fields
from typing import Any, ClassVar, Dict, Iterable, Mapping

import numpy as np

from natureopt.foundation.exceptions import InvalidParameterError


class _SerializableConfig:
    """Mixin giving frozen config dataclasses a plain-dict view."""

    name: ClassVar[str] = "algorithm"
    min_pop_size: ClassVar[int] = 2

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # Validation helpers; called from __post_init__ so bad values fail at construction.

    def _coerce(self, key: str, value: Any) -> None:
        object.__setattr__(self, key, value)

    def _check_pop_size(self, minimum: int | None = None) -> None:
        value = self.pop_size  # type: ignore[attr-defined]
        minimum = max(2, minimum if minimum is not None else self.min_pop_size)
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or int(value) < minimum:
            raise InvalidParameterError("pop_size", value, f"an integer >= {minimum}", owner=self.name)
        self._coerce("pop_size", int(value))

    def _check_probability(self, key: str) -> None:
        value = self._as_float(key)
        if not 0.0 <= value <= 1.0:
            raise InvalidParameterError(key, value, "a probability in [0, 1]", owner=self.name)

    def _check_number(
        self,
        key: str,
        *,
        positive: bool = False,
        non_negative: bool = False,
        at_most: float | None = None,
    ) -> None:
        value = self._as_float(key)
        if positive and value <= 0.0:
            raise InvalidParameterError(key, value, "a finite number > 0", owner=self.name)
        if non_negative and value < 0.0:
            raise InvalidParameterError(key, value, "a finite number >= 0", owner=self.name)
        if at_most is not None and value > at_most:
            raise InvalidParameterError(key, value, f"a finite number <= {at_most}", owner=self.name)

    def _check_choice(self, key: str, choices: Iterable[str]) -> None:
        value = getattr(self, key)
        options = tuple(choices)
        if not isinstance(value, str) or value.lower() not in options:
            raise InvalidParameterError(key, value, f"one of {', '.join(options)}", owner=self.name)
        self._coerce(key, value.lower())

    def _as_float(self, key: str) -> float:
        raw = getattr(self, key)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise InvalidParameterError(key, raw, "a finite number", owner=self.name) from None
        if isinstance(raw, bool) or not math.isfinite(value):
            raise InvalidParameterError(key, raw, "a finite number", owner=self.name)
        self._coerce(key, value)
        return value


class _ConfigBuilder:
    """Fluent builder collecting keyword settings until :meth:`fixed` freezes them."""

    _data_cls: ClassVar[type]

    def __init__(self) -> None:
        self._cfg: Dict[str, Any] = {}

    def _set(self, key: str, value: Any) -> Any:
        self._cfg[key] = value
        return self

    def pop_size(self, value: int) -> Any:
        return self._set("pop_size", value)

    @classmethod
    def default(cls, **overrides: Any) -> Any:
        """Frozen settings with every default, optionally overriding some keys."""
        return cls.from_dict(overrides)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Any:
        """Create frozen settings from a mapping of field names to values."""
        known = {f.name for f in fields(cls._data_cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise InvalidParameterError(
                unknown[0], config[unknown[0]], f"one of the known settings ({', '.join(sorted(known))})",
                owner=cls._data_cls.name,
            )
        builder = cls()
        for key, value in config.items():
            builder._set(key, value)
        return builder.fixed()

    def fixed(self) -> Any:
        return self._data_cls(**self._cfg)


__all__ = ["_ConfigBuilder", "_SerializableConfig"]
