"""Reconnecting WebSocket wrapper with request/response correlation and typed events.

One `MessageSocket` owns one connection: its reader task, heartbeat, pending
request table and subscription tables. It knows nothing about the payloads it
carries; the encode/decode hooks turn envelopes into frames and back.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import contextlib
from typing import Any
from functools import partial
from collections.abc import Callable, Sequence, Awaitable

import websockets
from websockets.exceptions import ConnectionClosed

from tsslink.utils.ids import request_id_factory
from tsslink.state.settings import TransportSettings
from tsslink.utils.network import set_query_param
from tsslink.state.envelope import Envelope, ErrorInfo
from tsslink.errors import (
    DecodeError,
    ProtocolError,
    TransportError,
    RequestTimeoutError,
    ConnectionClosedError,
)
from tsslink.state.connection import ConnectionState, DisconnectInfo, PendingRequest, ReconnectInfo
from tsslink.config.transport import (
    EVENT_ERROR,
    CLOSE_WAIT_S,
    LIFECYCLE_EVENTS,
    EVENT_CONNECTED,
    WS_PING_TIMEOUT_S,
    DEFAULT_TOKEN_PARAM,
    EVENT_RECONNECTING,
    WS_PING_INTERVAL_S,
    EVENT_DISCONNECTED,
    WS_CLOSE_NORMAL_CODE,
    ERROR_HANDLER_FAILED,
    WS_MAX_MESSAGE_BYTES,
    SOCKET_CLOSED_MESSAGE,
    SOCKET_NOT_OPEN_MESSAGE,
    WS_CLOSE_INVALID_DATA_CODE,
    ERROR_HANDLER_FAILED_MESSAGE,
)

from .heartbeat import Heartbeat
from .context import HandlerContext
from .backoff import BackoffFn, make_backoff
from .registry import Unsubscribe, HandlerRegistry
from .codec import DecodeFn, EncodeFn, json_decode, json_encode

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Awaitable[Any]]
TokenSource = str | Callable[[], Any] | None
TypeHandler = Callable[[Any, HandlerContext], Any]


class MessageSocket:
    """Persistent message channel over a WebSocket.

    - `request()` correlates replies by id; every pending request settles
      exactly once (reply, timeout, or connection close) and is removed from
      the table exactly once.
    - On close, all pending requests fail with `ConnectionClosedError` before
      a reconnect is scheduled. Nothing is replayed after reconnecting.
    - Undecodable frames are reported through the `error` event unless
      `tolerant_decode=False`.
    """

    def __init__(
        self,
        url: str,
        *,
        settings: TransportSettings | None = None,
        connect_fn: ConnectFn | None = None,
        subprotocols: Sequence[str] | None = None,
        token: TokenSource = None,
        token_param: str = DEFAULT_TOKEN_PARAM,
        backoff: BackoffFn | None = None,
        encode: EncodeFn | None = None,
        decode: DecodeFn | None = None,
        tolerant_decode: bool = True,
    ) -> None:
        self._url = url
        self._settings = settings or TransportSettings()
        self._connect_fn = connect_fn or websockets.connect
        self._subprotocols = list(subprotocols) if subprotocols else None
        self._token = token
        self._token_param = token_param
        self._backoff = backoff or make_backoff(self._settings.backoff)
        self._encode = encode or json_encode
        self._decode = decode or json_decode
        self._tolerant_decode = tolerant_decode

        self._ws: Any = None
        self._state = ConnectionState.DISCONNECTED
        self._auto_reconnect = self._settings.auto_reconnect
        self._reconnect_attempts = 0
        self._reconnect_task: asyncio.Task | None = None
        self._open_task: asyncio.Task | None = None
        self._reader_task: asyncio.Task | None = None
        self._pending: dict[str, PendingRequest] = {}
        self._handlers = HandlerRegistry()
        self._listeners = HandlerRegistry()
        self._tasks: set[asyncio.Task] = set()
        self._next_id = request_id_factory()
        self._heartbeat = Heartbeat(self._send_ping, interval_s=self._settings.heartbeat.interval_s)

    # ------------------------------------------------------------------ state

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._ws is not None

    @property
    def is_reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def heartbeat_running(self) -> bool:
        return self._heartbeat.running

    async def __aenter__(self) -> MessageSocket:
        await self.connect()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    # -------------------------------------------------------------- lifecycle

    async def connect(self) -> None:
        """Open the socket. Raises `TransportError` if it fails before opening.

        Concurrent callers share one in-flight open. A `close()` issued while
        the open is in flight abandons it and `connect()` returns unconnected.
        """
        if self.is_connected:
            return
        self._auto_reconnect = self._settings.auto_reconnect
        await self._cancel_reconnect()
        opening = self._open_task
        if opening is not None and not opening.done():
            await self._await_open(opening, shield=True)
            return
        if self.is_connected:
            return
        await self._run_open()

    async def close(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        """Close for good: no reconnect, pending requests failed on return. Idempotent."""
        self._auto_reconnect = False
        await self._cancel_reconnect()
        await self._cancel_open()
        await self._heartbeat.stop()
        ws = self._ws
        if ws is None:
            return
        self._state = ConnectionState.CLOSING
        try:
            await ws.close(code=code, reason=reason)
        except Exception:
            logger.debug("socket close raised url=%s", self._url, exc_info=True)

        reader = self._reader_task
        if reader is None or reader is asyncio.current_task():
            self._handle_closed(ws)
            return
        done, _ = await asyncio.wait({reader}, timeout=CLOSE_WAIT_S)
        if not done:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader

    async def _run_open(self) -> None:
        task = asyncio.create_task(self._open())
        self._open_task = task
        await self._await_open(task, shield=False)

    async def _await_open(self, task: asyncio.Task, *, shield: bool) -> None:
        try:
            await (asyncio.shield(task) if shield else task)
        except asyncio.CancelledError:
            # Cancelled by close(), not by our caller: the open was abandoned.
            current = asyncio.current_task()
            if task.cancelled() and current is not None and not current.cancelling():
                logger.debug("open abandoned by close url=%s", self._url)
                return
            raise

    async def _cancel_open(self) -> None:
        task, self._open_task = self._open_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    async def _open(self) -> None:
        self._state = ConnectionState.CONNECTING
        try:
            url = await self._resolve_url()
            ws = await self._connect_fn(url, **self._connect_options())
        except asyncio.CancelledError:
            self._state = ConnectionState.DISCONNECTED
            raise
        except Exception as exc:
            self._state = ConnectionState.DISCONNECTED
            self._emit(EVENT_ERROR, exc)
            raise TransportError(message=f"could not open {self._url}: {exc}") from exc

        self._ws = ws
        self._state = ConnectionState.CONNECTED
        self._reconnect_attempts = 0
        self._reader_task = asyncio.create_task(self._read_loop(ws))
        self._heartbeat.start()
        logger.info("socket connected url=%s", self._url)
        self._emit(EVENT_CONNECTED)

    def _connect_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "ping_interval": WS_PING_INTERVAL_S,
            "ping_timeout": WS_PING_TIMEOUT_S,
            "max_size": WS_MAX_MESSAGE_BYTES,
        }
        if self._subprotocols:
            options["subprotocols"] = self._subprotocols
        return options

    async def _resolve_url(self) -> str:
        token = self._token() if callable(self._token) else self._token
        if inspect.isawaitable(token):
            token = await token
        if not token:
            return self._url
        return set_query_param(self._url, self._token_param, str(token))

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                await self._handle_frame(raw)
        except ConnectionClosed:
            pass
        except DecodeError as exc:
            logger.warning("closing socket after undecodable frame url=%s: %s", self._url, exc)
            self._emit(EVENT_ERROR, exc)
            with contextlib.suppress(Exception):
                await ws.close(code=WS_CLOSE_INVALID_DATA_CODE, reason="undecodable frame")
        except Exception:
            logger.exception("socket reader failed url=%s", self._url)
            with contextlib.suppress(Exception):
                await ws.close()
        finally:
            self._handle_closed(ws)

    def _handle_closed(self, ws: Any) -> None:
        if ws is not self._ws:
            return
        self._ws = None
        self._reader_task = None
        self._state = ConnectionState.DISCONNECTED
        self._heartbeat.cancel()

        code = getattr(ws, "close_code", None)
        reason = getattr(ws, "close_reason", None) or ""
        logger.info("socket closed url=%s code=%s reason=%s", self._url, code, reason)

        self._fail_all_pending(ConnectionClosedError(message=SOCKET_CLOSED_MESSAGE, code=code, reason=reason))
        self._emit(EVENT_DISCONNECTED, DisconnectInfo(code=code, reason=reason))
        if self._auto_reconnect:
            self._schedule_reconnect()

    # ------------------------------------------------------------- reconnect

    def _schedule_reconnect(self) -> None:
        limit = self._settings.max_reconnects
        if limit is not None and self._reconnect_attempts >= limit:
            logger.warning("reconnect attempts exhausted url=%s attempts=%s", self._url, self._reconnect_attempts)
            return
        attempt = self._reconnect_attempts
        self._reconnect_attempts += 1
        delay_s = max(0.0, float(self._backoff(attempt)))
        logger.info("reconnecting url=%s attempt=%s in %.3fs", self._url, attempt, delay_s)
        self._emit(EVENT_RECONNECTING, ReconnectInfo(attempt=attempt, delay_s=delay_s))
        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay_s))

    async def _reconnect_after(self, delay_s: float) -> None:
        await asyncio.sleep(delay_s)
        if not self._auto_reconnect or self._state is not ConnectionState.DISCONNECTED:
            return
        try:
            await self._run_open()
        except TransportError as exc:
            logger.info("reconnect failed url=%s: %s", self._url, exc)
            if self._auto_reconnect:
                self._schedule_reconnect()

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task

    # ------------------------------------------------------------------ send

    def _require_open(self) -> Any:
        if not self.is_connected:
            raise TransportError(message=SOCKET_NOT_OPEN_MESSAGE)
        return self._ws

    async def _write(self, ws: Any, envelope: Envelope) -> None:
        frame = self._encode(envelope)
        try:
            await ws.send(frame)
        except ConnectionClosed as exc:
            raise ConnectionClosedError(
                message=SOCKET_CLOSED_MESSAGE,
                code=getattr(ws, "close_code", None),
                reason=getattr(ws, "close_reason", None) or "",
            ) from exc

    async def send(self, msg_type: str, payload: Any = None) -> None:
        """Fire-and-forget. Raises `TransportError` when the socket is not open."""
        ws = self._require_open()
        await self._write(ws, Envelope(type=msg_type, payload=payload))

    async def request(self, msg_type: str, payload: Any = None, timeout_s: float | None = None) -> Any:
        """Send `msg_type` with a fresh id and return the payload of the matching reply."""
        ws = self._require_open()
        timeout = self._settings.request_timeout_s if timeout_s is None else float(timeout_s)
        request_id = self._next_id()

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        entry = PendingRequest(request_type=msg_type, future=future)
        entry.timer = loop.call_later(timeout, self._expire_request, request_id, timeout)
        self._pending[request_id] = entry
        try:
            try:
                await self._write(ws, Envelope(type=msg_type, id=request_id, payload=payload))
            except TransportError:
                # The reader may already have failed this future on close.
                if future.done() and not future.cancelled():
                    future.exception()
                raise
            return await future
        finally:
            self._discard_pending(request_id)

    def _expire_request(self, request_id: str, timeout_s: float) -> None:
        entry = self._pending.pop(request_id, None)
        if entry is None or entry.future.done():
            return
        entry.future.set_exception(
            RequestTimeoutError(
                message=f"request timeout for {entry.request_type} ({request_id})",
                timeout_s=timeout_s,
                waiting_for=(entry.request_type,),
            )
        )

    def _resolve_reply(self, envelope: Envelope) -> None:
        entry = self._pending.pop(envelope.reply_to or "", None)
        if entry is None:
            logger.debug("reply for unknown request id=%s url=%s", envelope.reply_to, self._url)
            return
        if entry.timer is not None:
            entry.timer.cancel()
        if entry.future.done():
            return
        if envelope.error is not None:
            entry.future.set_exception(
                ProtocolError(
                    message=envelope.error.message,
                    code=envelope.error.code,
                    details=envelope.error.details,
                )
            )
            return
        entry.future.set_result(envelope.payload)

    def _discard_pending(self, request_id: str) -> None:
        entry = self._pending.pop(request_id, None)
        if entry is None:
            return
        if entry.timer is not None:
            entry.timer.cancel()
        if not entry.future.done():
            entry.future.cancel()

    def _fail_all_pending(self, error: Exception) -> None:
        pending, self._pending = self._pending, {}
        for entry in pending.values():
            if entry.timer is not None:
                entry.timer.cancel()
            if not entry.future.done():
                entry.future.set_exception(error)

    async def _send_ping(self) -> None:
        if not self.is_connected:
            return
        await self.send(self._settings.heartbeat.ping_type)

    # --------------------------------------------------------------- inbound

    async def _handle_frame(self, raw: Any) -> None:
        try:
            envelope = self._decode(raw)
        except DecodeError as exc:
            if not self._tolerant_decode:
                raise
            error = exc
        except Exception as exc:
            if not self._tolerant_decode:
                raise DecodeError(message=f"decode failed: {exc}", raw=raw) from exc
            error = DecodeError(message=f"decode failed: {exc}", raw=raw)
        else:
            error = None

        if error is not None:
            logger.debug("dropping undecodable frame url=%s: %s", self._url, error)
            self._emit(EVENT_ERROR, error)
            return

        if envelope is None:
            return
        if envelope.is_reply:
            self._resolve_reply(envelope)
            return
        if envelope.type == self._settings.heartbeat.pong_type:
            return
        await self._dispatch(envelope)

    async def _dispatch(self, envelope: Envelope) -> None:
        for handler in self._handlers.snapshot(envelope.type):
            ctx = HandlerContext(
                envelope=envelope,
                reply=partial(self._reply, envelope),
                reply_error=partial(self._reply_error, envelope),
            )
            try:
                result = handler(envelope.payload, ctx)
            except Exception as exc:
                await self._handler_failed(envelope, exc)
                continue
            if inspect.isawaitable(result):
                task = self._spawn(result)
                task.add_done_callback(partial(self._on_handler_done, envelope))

    def _on_handler_done(self, envelope: Envelope, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._spawn(self._handler_failed(envelope, exc))

    async def _handler_failed(self, envelope: Envelope, exc: BaseException) -> None:
        if not envelope.needs_reply:
            logger.error("handler for %s failed url=%s", envelope.type, self._url, exc_info=exc)
            return
        logger.debug("handler for %s failed; replying with error", envelope.type, exc_info=exc)
        await self._reply_error(envelope, str(exc) or ERROR_HANDLER_FAILED_MESSAGE, ERROR_HANDLER_FAILED)

    async def _reply(self, envelope: Envelope, payload: Any = None) -> bool:
        return await self._send_reply(envelope.reply(payload=payload))

    async def _reply_error(
        self,
        envelope: Envelope,
        message: str,
        code: str | None = None,
        details: Any = None,
    ) -> bool:
        return await self._send_reply(envelope.reply(error=ErrorInfo(message=message, code=code, details=details)))

    async def _send_reply(self, reply: Envelope) -> bool:
        # A reply is only meaningful for an envelope that carried an id.
        if reply.reply_to is None or not self.is_connected:
            return False
        try:
            await self._write(self._ws, reply)
        except TransportError:
            logger.debug("reply %s dropped; socket closed", reply.type)
            return False
        return True

    def _spawn(self, aw: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(aw)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # --------------------------------------------------------- subscriptions

    def on_type(self, msg_type: str, handler: TypeHandler) -> Unsubscribe:
        """Subscribe `handler(payload, ctx)` to `msg_type`; returns the unsubscribe callable."""
        return self._handlers.add(msg_type, handler)

    def off_type(self, msg_type: str, handler: TypeHandler) -> None:
        self._handlers.remove(msg_type, handler)

    def handler_count(self, msg_type: str | None = None) -> int:
        return self._handlers.count(msg_type)

    def on(self, event: str, listener: Callable[..., Any]) -> Unsubscribe:
        if event not in LIFECYCLE_EVENTS:
            raise ValueError(f"unknown lifecycle event '{event}'")
        return self._listeners.add(event, listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        self._listeners.remove(event, listener)

    def _emit(self, event: str, *args: Any) -> None:
        for listener in self._listeners.snapshot(event):
            try:
                result = listener(*args)
            except Exception:
                logger.exception("%s listener failed url=%s", event, self._url)
                continue
            if inspect.isawaitable(result):
                self._spawn(result)


__all__ = ["ConnectFn", "MessageSocket", "TokenSource", "TypeHandler"]
