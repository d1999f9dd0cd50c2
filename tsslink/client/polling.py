"""Periodic enrollment status polling."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from collections.abc import Callable, Awaitable

from tsslink.errors import TssLinkError

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class StatusPoller:
    """Fire `poll()` once per interval while `is_connected()` holds.

    Polls are not serialized: a slow poll does not delay the next tick. Poll
    failures are logged and polling continues.
    """

    def __init__(
        self,
        poll: Callable[[], Awaitable[Any]],
        *,
        is_connected: Callable[[], bool],
        interval_s: float,
        sleep_fn: SleepFn = asyncio.sleep,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._poll = poll
        self._is_connected = is_connected
        self._interval_s = float(interval_s)
        self._sleep = sleep_fn
        self._task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def start(self) -> Callable[[], None]:
        if not self.running:
            self._task = asyncio.create_task(self._loop())
        return self.stop

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        inflight, self._inflight = self._inflight, set()
        for poll_task in inflight:
            poll_task.cancel()

    async def _loop(self) -> None:
        while True:
            await self._sleep(self._interval_s)
            if not self._is_connected():
                continue
            task = asyncio.create_task(self._poll_once())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _poll_once(self) -> None:
        try:
            await self._poll()
        except TssLinkError as exc:
            logger.info("status poll failed: %s", exc)
        except Exception:
            logger.exception("status poll raised")


__all__ = ["SleepFn", "StatusPoller"]
