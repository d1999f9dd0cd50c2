from __future__ import annotations

import asyncio
from typing import Any

import orjson
import pytest

from tsslink.client import EnrollmentClient
from tsslink.state.settings import WorkflowSettings
from tsslink.errors import TransportError, RequestTimeoutError
from tsslink.protocol import (
    Unknown,
    WrongPin,
    SignResult,
    ManagerInfo,
    MatchedEvent,
    EnrollmentResult,
    EnrollmentStatus,
)
from tests.utils import FakeWebSocket, FakeConnector, settle, no_backoff, wait_until

URL = "ws://manager.test/ws"
HASH = "0f" * 32


def _service(ws: FakeWebSocket, frame: Any) -> None:
    """Answer like the enrollment service: bare text or service-shaped JSON, no envelope."""
    msg = orjson.loads(frame)
    method = msg.get("Method")
    if method == "Enrollment":
        ws.feed("SUCCESS.ENROLL")
    elif method == "Info_Enrollment":
        ws.feed({"ParticipantsEnrolled": msg.get("Enrolled", 0), "Total": 3})
    elif method == "Sign":
        ws.feed(HASH)
    elif method == "CheckPIN":
        ws.feed("ERROR.WRONG_PIN")


def _client(conn: FakeConnector, **kwargs: Any) -> EnrollmentClient:
    return EnrollmentClient(URL, connect_fn=conn, backoff=no_backoff, **kwargs)


@pytest.mark.asyncio
async def test_enroll_sends_flattened_method_and_resolves() -> None:
    conn = FakeConnector(responder=_service)
    client = _client(conn)
    async with client:
        result = await client.enroll({"WalletId": "w1"})
        assert not client.socket.heartbeat_running

    assert isinstance(result, EnrollmentResult)
    assert result.message == "SUCCESS.ENROLL"
    assert conn.latest.sent_json() == [{"Method": "Enrollment", "WalletId": "w1"}]


@pytest.mark.asyncio
async def test_request_manager_info_and_send_status() -> None:
    conn = FakeConnector(responder=_service)
    async with _client(conn) as client:
        info = await client.request_manager_info({"WalletId": "w1"})
        status = await client.send_status({"WalletId": "w1", "Enrolled": 2})

    assert isinstance(info, ManagerInfo)
    assert info.payload == {"ParticipantsEnrolled": 0, "Total": 3}
    assert isinstance(status, EnrollmentStatus)
    assert status.participants_enrolled == 2
    assert conn.latest.sent_json()[0] == {"Method": "Info_Enrollment", "WalletId": "w1"}


@pytest.mark.asyncio
async def test_sign_and_check_pin_return_matched_event() -> None:
    conn = FakeConnector(responder=_service)
    async with _client(conn) as client:
        signed = await client.sign({"Tx": "raw"})
        pin = await client.check_pin({"PIN": "MTIzNA==", "Method": "CheckPIN"})

    assert isinstance(signed, MatchedEvent)
    assert signed.type == "SIGN_RESULT"
    assert isinstance(signed.payload, SignResult)
    assert signed.payload.tx_hash == HASH
    assert pin.type == "ERROR.WRONG_PIN"
    assert isinstance(pin.payload, WrongPin)
    assert conn.latest.sent_json()[0] == {"Tx": "raw"}


@pytest.mark.asyncio
async def test_operation_timeout_releases_subscriptions() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:
        with pytest.raises(RequestTimeoutError) as exc:
            await client.enroll({"WalletId": "w1"}, timeout_s=0.05)
        assert exc.value.waiting_for == ("ENROLLMENT_RESULT",)
        assert client.socket.handler_count() == 0
        assert client.is_connected


@pytest.mark.asyncio
async def test_settings_timeout_applies_without_override() -> None:
    conn = FakeConnector()
    settings = WorkflowSettings(check_pin_timeout_s=0.05)
    async with _client(conn, settings=settings) as client:
        with pytest.raises(RequestTimeoutError) as exc:
            await client.check_pin({"PIN": "x"})
    assert exc.value.timeout_s == pytest.approx(0.05)
    assert exc.value.waiting_for == ("SUCCESS.PIN_SERIAL", "ERROR.WRONG_PIN")


@pytest.mark.asyncio
async def test_operation_while_disconnected_raises_and_leaves_nothing_armed() -> None:
    client = _client(FakeConnector())
    with pytest.raises(TransportError):
        await client.enroll({"WalletId": "w1"})
    assert client.socket.handler_count() == 0


@pytest.mark.asyncio
async def test_fast_reply_is_not_missed() -> None:
    # The responder answers synchronously inside send(), before send() returns.
    conn = FakeConnector(responder=_service)
    async with _client(conn) as client:
        result = await client.enroll(timeout_s=1.0)
    assert isinstance(result, EnrollmentResult)


@pytest.mark.asyncio
async def test_wait_for_resolves_once_on_back_to_back_statuses() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:
        calls: list[int] = []

        def ready(event: EnrollmentStatus) -> bool:
            calls.append(event.participants_enrolled)
            return event.participants_enrolled >= 2

        task = asyncio.create_task(client.wait_for(ready, timeout_s=1.0))
        await settle()
        ws = conn.latest
        ws.feed({"ParticipantsEnrolled": 1})
        ws.feed({"ParticipantsEnrolled": 2})
        ws.feed({"ParticipantsEnrolled": 3})

        result = await task
        await settle()
        assert isinstance(result, EnrollmentStatus)
        assert result.participants_enrolled == 2
        assert calls == [1, 2]
        assert client.socket.handler_count() == 0


@pytest.mark.asyncio
async def test_wait_for_resolves_on_enrollment_result() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:
        task = asyncio.create_task(client.wait_for(lambda _event: False, timeout_s=1.0))
        await settle()
        conn.latest.feed({"ParticipantsEnrolled": 1})
        conn.latest.feed("SUCCESS.ENROLL")
        result = await task
    assert isinstance(result, EnrollmentResult)


@pytest.mark.asyncio
async def test_wait_for_predicate_errors_count_as_unsatisfied() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:

        def flaky(event: EnrollmentStatus) -> bool:
            if event.participants_enrolled == 1:
                raise KeyError("missing")
            return True

        task = asyncio.create_task(client.wait_for(flaky, timeout_s=1.0))
        await settle()
        conn.latest.feed({"ParticipantsEnrolled": 1})
        conn.latest.feed({"ParticipantsEnrolled": 2})
        result = await task
    assert result.participants_enrolled == 2


@pytest.mark.asyncio
async def test_wait_for_times_out() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:
        with pytest.raises(RequestTimeoutError) as exc:
            await client.wait_for(lambda _event: True, timeout_s=0.05)
        assert exc.value.waiting_for == ("ENROLLMENT_STATUS", "ENROLLMENT_RESULT")
        assert client.socket.handler_count() == 0


@pytest.mark.asyncio
async def test_event_subscriptions_receive_classified_events() -> None:
    conn = FakeConnector()
    async with _client(conn) as client:
        wrong: list[Any] = []
        unknown: list[Any] = []
        statuses: list[Any] = []
        off_wrong = client.on_wrong_pin(wrong.append)
        client.on_unknown(unknown.append)

        async def on_status(event: Any) -> None:
            statuses.append(event)

        client.on_enrollment_status(on_status)

        conn.latest.feed("ERROR.WRONG_PIN")
        conn.latest.feed({"foo": "bar"})
        conn.latest.feed({"ParticipantsEnrolled": 2})
        await wait_until(lambda: len(statuses) == 1)

        off_wrong()
        conn.latest.feed("ERROR.WRONG_PIN")
        await settle()

    assert len(wrong) == 1
    assert isinstance(wrong[0], WrongPin)
    assert isinstance(unknown[0], Unknown)
    assert unknown[0].payload == {"foo": "bar"}


@pytest.mark.asyncio
async def test_status_polling_runs_while_connected_and_stops() -> None:
    conn = FakeConnector(responder=_service)
    client = _client(conn)
    await client.connect()

    cancel = client.start_status_polling({"WalletId": "w1", "Enrolled": 1}, interval_s=0.01)
    assert client.is_polling
    await wait_until(lambda: len(conn.latest.sent) >= 3)

    cancel()
    assert not client.is_polling
    sent = len(conn.latest.sent)
    await asyncio.sleep(0.05)
    assert len(conn.latest.sent) == sent
    assert all(frame == {"Method": "Info_Enrollment", "WalletId": "w1", "Enrolled": 1} for frame in conn.latest.sent_json())
    await client.close()


@pytest.mark.asyncio
async def test_close_stops_polling() -> None:
    conn = FakeConnector(responder=_service)
    client = _client(conn)
    await client.connect()
    client.start_status_polling(interval_s=0.01)
    await client.close()
    assert not client.is_polling
    assert not client.is_connected
