"""Keyed handler tables (type subscriptions and lifecycle listeners)."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

Unsubscribe = Callable[[], None]


class HandlerRegistry:
    """Map a key to an insertion-ordered set of callables."""

    def __init__(self) -> None:
        self._table: dict[str, dict[Callable[..., Any], None]] = {}

    def add(self, key: str, fn: Callable[..., Any]) -> Unsubscribe:
        self._table.setdefault(key, {})[fn] = None

        def unsubscribe() -> None:
            self.remove(key, fn)

        return unsubscribe

    def remove(self, key: str, fn: Callable[..., Any]) -> None:
        handlers = self._table.get(key)
        if handlers is None:
            return
        handlers.pop(fn, None)
        if not handlers:
            del self._table[key]

    def snapshot(self, key: str) -> list[Callable[..., Any]]:
        # Copy so handlers may unsubscribe while being dispatched.
        return list(self._table.get(key, ()))

    def count(self, key: str | None = None) -> int:
        if key is not None:
            return len(self._table.get(key, ()))
        return sum(len(handlers) for handlers in self._table.values())


__all__ = ["HandlerRegistry", "Unsubscribe"]
