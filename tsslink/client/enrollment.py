"""Enrollment workflow client for one manager or device endpoint.

Each operation sends one flattened method frame and waits for the classified
event(s) that answer it. The waiter is armed before the frame goes out, so a
reply that arrives before `send()` returns is still observed.
"""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import replace
from collections.abc import Callable, Sequence

from tsslink.transport.backoff import BackoffFn
from tsslink.transport.registry import Unsubscribe
from tsslink.transport.context import HandlerContext
from tsslink.transport.socket import ConnectFn, MessageSocket
from tsslink.protocol.codec import decode_inbound, encode_outbound
from tsslink.state.settings import WorkflowSettings, TransportSettings
from tsslink.protocol.events import (
    ManagerInfo,
    MatchedEvent,
    EnrollmentResult,
    EnrollmentStatus,
)
from tsslink.config.protocol import (
    METHOD_SIGN,
    EVENT_UNKNOWN,
    EVENT_PIN_SERIAL,
    EVENT_WRONG_PIN,
    METHOD_CHECK_PIN,
    METHOD_ENROLLMENT,
    EVENT_SIGN_RESULT,
    EVENT_MANAGER_INFO,
    MARKER_SIGNATURE_ADDED,
    MARKER_SIGNATURE_ENDED,
    METHOD_INFO_ENROLLMENT,
    EVENT_ENROLLMENT_RESULT,
    EVENT_ENROLLMENT_STATUS,
)

from .race import EventRace
from .polling import StatusPoller

logger = logging.getLogger(__name__)

EventCallback = Callable[[Any], Any]
StatusPredicate = Callable[[EnrollmentStatus], bool]

SIGN_EVENTS = (EVENT_SIGN_RESULT, MARKER_SIGNATURE_ADDED, MARKER_SIGNATURE_ENDED)
CHECK_PIN_EVENTS = (EVENT_PIN_SERIAL, EVENT_WRONG_PIN)
WAIT_FOR_EVENTS = (EVENT_ENROLLMENT_STATUS, EVENT_ENROLLMENT_RESULT)


class EnrollmentClient:
    """Typed enrollment operations over a `MessageSocket`.

    The socket runs without an application heartbeat and with tolerant
    decoding: the service speaks no envelope dialect, every inbound frame is
    classified and dispatched by its event tag.
    """

    def __init__(
        self,
        url: str,
        settings: WorkflowSettings | None = None,
        *,
        label: str | None = None,
        transport_settings: TransportSettings | None = None,
        connect_fn: ConnectFn | None = None,
        auto_reconnect: bool | None = None,
        subprotocols: Sequence[str] | None = None,
        backoff: BackoffFn | None = None,
    ) -> None:
        base = transport_settings or TransportSettings()
        overrides: dict[str, Any] = {"heartbeat": replace(base.heartbeat, interval_s=0.0)}
        if auto_reconnect is not None:
            overrides["auto_reconnect"] = auto_reconnect

        self._settings = settings or WorkflowSettings()
        self._label = label or url
        self._poller: StatusPoller | None = None
        self._socket = MessageSocket(
            url,
            settings=replace(base, **overrides),
            connect_fn=connect_fn,
            subprotocols=subprotocols,
            backoff=backoff,
            encode=encode_outbound,
            decode=decode_inbound,
            tolerant_decode=True,
        )

    @property
    def url(self) -> str:
        return self._socket.url

    @property
    def label(self) -> str:
        return self._label

    @property
    def settings(self) -> WorkflowSettings:
        return self._settings

    @property
    def socket(self) -> MessageSocket:
        return self._socket

    @property
    def is_connected(self) -> bool:
        return self._socket.is_connected

    @property
    def is_reconnecting(self) -> bool:
        return self._socket.is_reconnecting

    @property
    def is_polling(self) -> bool:
        return self._poller is not None and self._poller.running

    async def __aenter__(self) -> EnrollmentClient:
        await self.connect()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    async def connect(self) -> None:
        await self._socket.connect()

    async def close(self) -> None:
        self.stop_status_polling()
        await self._socket.close()

    def on(self, event: str, listener: Callable[..., Any]) -> Unsubscribe:
        return self._socket.on(event, listener)

    # ------------------------------------------------------------ operations

    async def _exchange(self, method: str, params: Any, awaited: Sequence[str], timeout_s: float) -> Any:
        race = EventRace(self._socket, awaited, timeout_s=timeout_s).arm()
        logger.debug("%s: sending %s, awaiting %s", self._label, method, ", ".join(awaited))
        try:
            await self._socket.send(method, params)
        except BaseException:
            race.cancel()
            raise
        return await race.wait()

    def _timeout(self, override: float | None, default: float) -> float:
        return default if override is None else float(override)

    async def request_manager_info(self, params: Any = None, *, timeout_s: float | None = None) -> ManagerInfo:
        return await self._exchange(
            METHOD_INFO_ENROLLMENT,
            params,
            (EVENT_MANAGER_INFO,),
            self._timeout(timeout_s, self._settings.manager_info_timeout_s),
        )

    async def enroll(self, params: Any = None, *, timeout_s: float | None = None) -> EnrollmentResult:
        return await self._exchange(
            METHOD_ENROLLMENT,
            params,
            (EVENT_ENROLLMENT_RESULT,),
            self._timeout(timeout_s, self._settings.enroll_timeout_s),
        )

    async def sign(self, params: Any = None, *, timeout_s: float | None = None) -> MatchedEvent:
        """Send `Sign`; resolves with the first signature event as a `MatchedEvent`."""
        return await self._exchange(
            METHOD_SIGN,
            params,
            SIGN_EVENTS,
            self._timeout(timeout_s, self._settings.sign_timeout_s),
        )

    async def check_pin(self, params: Any, *, timeout_s: float | None = None) -> MatchedEvent:
        """Send `CheckPIN`; the match is either a `PinSerial` or a `WrongPin`."""
        return await self._exchange(
            METHOD_CHECK_PIN,
            params,
            CHECK_PIN_EVENTS,
            self._timeout(timeout_s, self._settings.check_pin_timeout_s),
        )

    async def send_status(self, params: Any = None, *, timeout_s: float | None = None) -> EnrollmentStatus:
        return await self._exchange(
            METHOD_INFO_ENROLLMENT,
            params,
            (EVENT_ENROLLMENT_STATUS,),
            self._timeout(timeout_s, self._settings.send_status_timeout_s),
        )

    async def wait_for(
        self,
        predicate: StatusPredicate,
        timeout_s: float | None = None,
    ) -> EnrollmentStatus | EnrollmentResult:
        """Resolve on the first status satisfying `predicate`, or on any enrollment result."""

        def accept(msg_type: str, event: Any) -> bool:
            return msg_type == EVENT_ENROLLMENT_RESULT or bool(predicate(event))

        race = EventRace(
            self._socket,
            WAIT_FOR_EVENTS,
            timeout_s=self._timeout(timeout_s, self._settings.wait_for_timeout_s),
            accept=accept,
        )
        matched: MatchedEvent = await race.wait()
        return matched.payload

    # --------------------------------------------------------------- polling

    def start_status_polling(self, params: Any = None, interval_s: float | None = None) -> Callable[[], None]:
        """Call `send_status(params)` once per interval while connected. Replaces any running poller."""
        self.stop_status_polling()
        self._poller = StatusPoller(
            lambda: self.send_status(params),
            is_connected=lambda: self._socket.is_connected,
            interval_s=self._timeout(interval_s, self._settings.status_poll_interval_s),
        )
        return self._poller.start()

    def stop_status_polling(self) -> None:
        poller, self._poller = self._poller, None
        if poller is not None:
            poller.stop()

    # --------------------------------------------------------- subscriptions

    def _subscribe(self, event_type: str, callback: EventCallback) -> Unsubscribe:
        def handler(event: Any, _ctx: HandlerContext) -> Any:
            return callback(event)

        return self._socket.on_type(event_type, handler)

    def on_manager_info(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_MANAGER_INFO, callback)

    def on_enrollment_status(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_ENROLLMENT_STATUS, callback)

    def on_enrollment_result(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_ENROLLMENT_RESULT, callback)

    def on_sign_result(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_SIGN_RESULT, callback)

    def on_pin_serial(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_PIN_SERIAL, callback)

    def on_wrong_pin(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_WRONG_PIN, callback)

    def on_unknown(self, callback: EventCallback) -> Unsubscribe:
        return self._subscribe(EVENT_UNKNOWN, callback)


__all__ = [
    "CHECK_PIN_EVENTS",
    "EnrollmentClient",
    "EventCallback",
    "SIGN_EVENTS",
    "StatusPredicate",
    "WAIT_FOR_EVENTS",
]
