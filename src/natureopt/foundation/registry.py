"""
Generic registry for named components (strategies, backends).
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class Registry(Generic[T]):
    """
    A small registry mapping lower-case names to items.

    Supports usage as a decorator.
    """

    def __init__(self, name: str = "Registry") -> None:
        self._name = name
        self._items: dict[str, T] = {}

    def register(self, key: str, item: T | None = None, *, override: bool = False) -> Callable[[T], T] | T:
        """
        Register an item under ``key``; without ``item`` returns a decorator.

        Raises ValueError on a duplicate key unless ``override`` is set.
        """
        key = key.lower()

        def _do_register(obj: T) -> T:
            if key in self._items and not override:
                raise ValueError(f"Key '{key}' already exists in registry '{self._name}'")
            self._items[key] = obj
            return obj

        if item is None:
            return _do_register
        return _do_register(item)

    def get(self, key: str, default: Any = ...) -> T:
        key = key.lower()
        if key not in self._items:
            if default is not ...:
                return default
            raise KeyError(f"Key '{key}' not found in registry '{self._name}'")
        return self._items[key]

    def list(self) -> list[str]:
        """Registered keys in insertion order."""
        return list(self._items)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __getitem__(self, key: str) -> T:
        return self.get(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["Registry"]
