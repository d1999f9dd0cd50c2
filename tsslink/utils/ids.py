"""Request id generation."""

from __future__ import annotations

import time
import itertools
from collections.abc import Callable, Iterator

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    out: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def request_id_factory(now_ms: Callable[[], int] | None = None) -> Callable[[], str]:
    """Return a generator of `<ms timestamp>-<counter>` ids, both in base 36.

    The counter is monotonic per factory, so ids never repeat for the lifetime
    of the owning connection even when the clock stalls or steps back.
    """
    clock = now_ms or (lambda: time.time_ns() // 1_000_000)
    counter: Iterator[int] = itertools.count(1)

    def next_id() -> str:
        return f"{to_base36(clock())}-{to_base36(next(counter))}"

    return next_id


__all__ = ["request_id_factory", "to_base36"]
