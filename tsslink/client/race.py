"""First-of-N event wait with a deadline, released exactly once."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from functools import partial
from collections.abc import Callable, Sequence

from tsslink.errors import RequestTimeoutError
from tsslink.protocol.events import MatchedEvent
from tsslink.transport.socket import MessageSocket
from tsslink.transport.registry import Unsubscribe
from tsslink.transport.context import HandlerContext

logger = logging.getLogger(__name__)

AcceptFn = Callable[[str, Any], bool]


class EventRace:
    """Subscribe to every type in `types` and settle on the first accepted event.

    The first match (or the deadline) cancels the timer and drops every
    subscription in one step; later events are ignored. With a single awaited
    type the result is the bare payload, otherwise a `MatchedEvent`.
    """

    def __init__(
        self,
        socket: MessageSocket,
        types: Sequence[str],
        *,
        timeout_s: float,
        accept: AcceptFn | None = None,
    ) -> None:
        self._types = tuple(dict.fromkeys(types))
        if not self._types:
            raise ValueError("EventRace needs at least one event type")
        self._socket = socket
        self._timeout_s = float(timeout_s)
        self._accept = accept
        self._future: asyncio.Future[Any] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._unsubscribes: list[Unsubscribe] = []

    @property
    def types(self) -> tuple[str, ...]:
        return self._types

    @property
    def armed(self) -> bool:
        return bool(self._unsubscribes) or self._timer is not None

    @property
    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def arm(self) -> EventRace:
        if self._future is not None:
            raise RuntimeError("EventRace already armed")
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        for msg_type in self._types:
            self._unsubscribes.append(self._socket.on_type(msg_type, partial(self._on_event, msg_type)))
        self._timer = loop.call_later(self._timeout_s, self._expire)
        return self

    async def wait(self) -> Any:
        if self._future is None:
            self.arm()
        try:
            return await self._future
        finally:
            self.cancel()

    def cancel(self) -> None:
        self._release()
        if self._future is not None and not self._future.done():
            self._future.cancel()

    def _on_event(self, msg_type: str, payload: Any, _ctx: HandlerContext) -> None:
        future = self._future
        if future is None or future.done():
            return
        if self._accept is not None:
            try:
                accepted = self._accept(msg_type, payload)
            except Exception:
                logger.debug("event predicate raised for %s; treating as no match", msg_type, exc_info=True)
                return
            if not accepted:
                return
        self._release()
        future.set_result(payload if len(self._types) == 1 else MatchedEvent(type=msg_type, payload=payload))

    def _expire(self) -> None:
        self._timer = None
        future = self._future
        if future is None or future.done():
            return
        self._release()
        future.set_exception(
            RequestTimeoutError(
                message=f"timed out waiting for {', '.join(self._types)}",
                timeout_s=self._timeout_s,
                waiting_for=self._types,
            )
        )

    def _release(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        unsubscribes, self._unsubscribes = self._unsubscribes, []
        for unsubscribe in unsubscribes:
            unsubscribe()


__all__ = ["AcceptFn", "EventRace"]
