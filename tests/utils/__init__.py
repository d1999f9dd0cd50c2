"""Test helpers.

Focused modules:
- fake_socket.py: scripted in-memory WebSocket connection
- fake_connector.py: `connect_fn` that hands out fake sockets
- waiting.py: event-loop settling and polling helpers
"""

from __future__ import annotations

from .fake_socket import FakeWebSocket
from .fake_connector import Responder, FakeConnector
from .waiting import settle, no_backoff, wait_until

__all__ = [
    "FakeConnector",
    "FakeWebSocket",
    "Responder",
    "no_backoff",
    "settle",
    "wait_until",
]
