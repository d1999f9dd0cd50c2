from __future__ import annotations

from typing import Any

import orjson
import pytest

from tsslink.protocol import WrongPin, PinSerial
from tsslink.errors import TransportError, DeviceLockedError
from tsslink.client import ColdWalletSession, encode_pin
from tsslink.state.settings import DeviceEndpoint, EndpointSettings
from tests.utils import FakeWebSocket, FakeConnector, no_backoff

GOOD_PIN = "1234"
SERIALS = {"ws://d1.test/ws": "SN-0001", "ws://d2.test/ws": "SN-0002"}

ENDPOINTS = EndpointSettings(
    manager_url="ws://manager.test/ws",
    devices=(
        DeviceEndpoint(label="Toughkey 1", url="ws://d1.test/ws"),
        DeviceEndpoint(label="Toughkey 2", url="ws://d2.test/ws"),
    ),
)


def _device(ws: FakeWebSocket, frame: Any) -> None:
    msg = orjson.loads(frame)
    if msg.get("Method") != "CheckPIN":
        return
    if msg.get("PIN") == encode_pin(GOOD_PIN):
        ws.feed({"SerialNumber": SERIALS[ws.url]})
    else:
        ws.feed("ERROR.WRONG_PIN")


def _session(conn: FakeConnector) -> ColdWalletSession:
    return ColdWalletSession(ENDPOINTS, connect_fn=conn, backoff=no_backoff)


def test_encode_pin() -> None:
    assert encode_pin("1234") == "MTIzNA=="
    assert encode_pin("") == ""


def test_session_builds_clients_from_endpoints() -> None:
    session = _session(FakeConnector())
    assert session.manager.url == "ws://manager.test/ws"
    assert [client.label for client in session.devices] == ["Toughkey 1", "Toughkey 2"]
    assert len(session.clients) == 3
    with pytest.raises(IndexError):
        session.device(2)


@pytest.mark.asyncio
async def test_connect_all_and_close_all() -> None:
    conn = FakeConnector()
    session = _session(conn)
    async with session:
        assert all(client.is_connected for client in session.clients)
        assert sorted(conn.urls) == sorted([ENDPOINTS.manager_url, *SERIALS])
    assert not any(client.is_connected for client in session.clients)

    await session.close_all()


@pytest.mark.asyncio
async def test_connect_all_failure_closes_opened_clients() -> None:
    conn = FakeConnector(failures=1)
    session = _session(conn)

    with pytest.raises(TransportError):
        await session.connect_all()
    assert len(conn.urls) == 3
    assert not any(client.is_connected for client in session.clients)
    assert all(ws.closed for ws in conn.sockets)


@pytest.mark.asyncio
async def test_check_device_pin_sends_encoded_pin() -> None:
    conn = FakeConnector(responder=_device)
    async with _session(conn) as session:
        ok = await session.check_device_pin(0, GOOD_PIN)
        wrong = await session.check_device_pin(1, "0000")

    assert isinstance(ok, PinSerial)
    assert ok.serial_number == "SN-0001"
    assert isinstance(wrong, WrongPin)

    device_ws = next(ws for ws in conn.sockets if ws.url == "ws://d1.test/ws")
    assert device_ws.sent_json() == [{"PIN": "MTIzNA==", "Method": "CheckPIN"}]


@pytest.mark.asyncio
async def test_unlock_devices_retries_wrong_pin() -> None:
    conn = FakeConnector(responder=_device)
    asked: list[tuple[str, int]] = []

    async def pin_provider(label: str, attempt: int) -> str:
        asked.append((label, attempt))
        return GOOD_PIN if attempt == 2 else "9999"

    async with _session(conn) as session:
        serials = await session.unlock_devices(pin_provider)

    assert serials == ["SN-0001", "SN-0002"]
    assert asked == [("Toughkey 1", 1), ("Toughkey 1", 2), ("Toughkey 2", 1), ("Toughkey 2", 2)]


@pytest.mark.asyncio
async def test_unlock_devices_raises_when_attempts_exhausted() -> None:
    conn = FakeConnector(responder=_device)

    async def pin_provider(_label: str, _attempt: int) -> str:
        return "0000"

    async with _session(conn) as session:
        with pytest.raises(DeviceLockedError) as exc:
            await session.unlock_devices(pin_provider, max_attempts=2)
        with pytest.raises(ValueError):
            await session.unlock_devices(pin_provider, max_attempts=0)

    assert exc.value.label == "Toughkey 1"
    assert exc.value.attempts == 2
