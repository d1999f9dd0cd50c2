"""Environment parsing helpers for config constants."""

from __future__ import annotations

import os

_DISABLED_VALUES = {"", "none", "null", "disabled", "disable", "off", "unbounded"}
_TRUE_VALUES = {"1", "true", "yes", "on"}


def env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        value = float(raw) if raw else float(default)
    except ValueError:
        value = float(default)
    return max(minimum, value)


def env_int_or_none(name: str, default: int | None = None) -> int | None:
    raw = (os.getenv(name) or "").strip()
    if raw.lower() in _DISABLED_VALUES:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


def env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


__all__ = ["env_bool", "env_float", "env_int_or_none", "env_list"]
