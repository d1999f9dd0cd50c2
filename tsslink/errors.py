"""Shared error types for the tss-link transport and workflow clients."""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass


@dataclass(eq=False, slots=True)
class TssLinkError(Exception):
    """Base class for every error raised by this package."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False, slots=True)
class TransportError(TssLinkError):
    """Raised when an operation needs an open socket and there is none."""


@dataclass(eq=False, slots=True)
class ConnectionClosedError(TransportError):
    """Raised for every pending request when the socket closes under it."""

    code: int | None = None
    reason: str = ""


@dataclass(eq=False, slots=True)
class RequestTimeoutError(TssLinkError):
    """Raised when a request or event wait exceeds its deadline."""

    timeout_s: float = 0.0
    waiting_for: tuple[str, ...] = ()


@dataclass(eq=False, slots=True)
class ProtocolError(TssLinkError):
    """Raised when a reply envelope carries a structured error."""

    code: str | None = None
    details: Any = None


@dataclass(eq=False, slots=True)
class DecodeError(TssLinkError):
    """Raised by decode hooks; surfaced through the `error` event in tolerant mode."""

    raw: Any = field(default=None, repr=False)


@dataclass(eq=False, slots=True)
class DeviceLockedError(TssLinkError):
    """Raised when a device rejected every PIN attempt."""

    label: str = ""
    attempts: int = 0


__all__ = [
    "TssLinkError",
    "TransportError",
    "ConnectionClosedError",
    "RequestTimeoutError",
    "ProtocolError",
    "DecodeError",
    "DeviceLockedError",
]
