"""Application-level keep-alive task."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

logger = logging.getLogger(__name__)


class Heartbeat:
    """Call `send_ping` every `interval_s` until stopped. An interval of 0 disables it."""

    def __init__(self, send_ping: Callable[[], Awaitable[None]], *, interval_s: float) -> None:
        self._send_ping = send_ping
        self._interval_s = max(0.0, float(interval_s))
        self._task: asyncio.Task | None = None

    @property
    def enabled(self) -> bool:
        return self._interval_s > 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task | None:
        if not self.enabled:
            return None
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
        return self._task

    def cancel(self) -> asyncio.Task | None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        return task

    async def stop(self) -> None:
        task = self.cancel()
        if task is None or task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval_s)
            try:
                await self._send_ping()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.debug("heartbeat ping failed; stopping", exc_info=True)
                return


__all__ = ["Heartbeat"]
