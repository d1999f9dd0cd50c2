"""Per-connection state shared between the transport and its listeners."""

from __future__ import annotations

import enum
import asyncio
from typing import Any
from dataclasses import dataclass


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"


@dataclass(frozen=True, slots=True)
class ReconnectInfo:
    attempt: int
    delay_s: float


@dataclass(frozen=True, slots=True)
class DisconnectInfo:
    code: int | None
    reason: str


@dataclass(slots=True)
class PendingRequest:
    request_type: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None


__all__ = ["ConnectionState", "DisconnectInfo", "PendingRequest", "ReconnectInfo"]
