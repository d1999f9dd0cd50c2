"""Reconnect backoff policy."""

from __future__ import annotations

import random
from collections.abc import Callable

from tsslink.state.settings import BackoffSettings
from tsslink.config.transport import BACKOFF_MAX_EXPONENT

BackoffFn = Callable[[int], float]


def default_backoff(
    attempt: int,
    settings: BackoffSettings | None = None,
    *,
    rand: Callable[[], float] = random.random,
) -> float:
    """Delay in seconds before reconnect attempt `attempt` (0-indexed).

    `min(cap, base * 2**attempt)` plus a jitter in `[0, jitter_s)`.
    """
    cfg = settings or BackoffSettings()
    exponent = min(max(0, int(attempt)), BACKOFF_MAX_EXPONENT)
    delay = min(cfg.cap_s, cfg.base_s * (2**exponent))
    return delay + rand() * cfg.jitter_s


def make_backoff(settings: BackoffSettings) -> BackoffFn:
    def backoff(attempt: int) -> float:
        return default_backoff(attempt, settings)

    return backoff


__all__ = ["BackoffFn", "default_backoff", "make_backoff"]
