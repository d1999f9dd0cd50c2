"""Classified inbound events (closed tagged union, dataclasses only)."""

from __future__ import annotations

from typing import Any, ClassVar
from dataclasses import dataclass

from tsslink.config.protocol import (
    EVENT_UNKNOWN,
    EVENT_PIN_SERIAL,
    EVENT_WRONG_PIN,
    EVENT_SIGN_RESULT,
    EVENT_MANAGER_INFO,
    EVENT_ENROLLMENT_RESULT,
    EVENT_ENROLLMENT_STATUS,
)


@dataclass(frozen=True, slots=True)
class ManagerInfo:
    tag: ClassVar[str] = EVENT_MANAGER_INFO

    payload: dict[str, Any]
    participants_enrolled: int = 0


@dataclass(frozen=True, slots=True)
class EnrollmentStatus:
    tag: ClassVar[str] = EVENT_ENROLLMENT_STATUS

    payload: dict[str, Any]
    participants_enrolled: int = 0


@dataclass(frozen=True, slots=True)
class EnrollmentResult:
    tag: ClassVar[str] = EVENT_ENROLLMENT_RESULT

    payload: dict[str, Any]
    message: str = ""


@dataclass(frozen=True, slots=True)
class SignResult:
    tag: ClassVar[str] = EVENT_SIGN_RESULT

    payload: dict[str, Any]
    message: str = ""
    tx_hash: str | None = None


@dataclass(frozen=True, slots=True)
class PinSerial:
    tag: ClassVar[str] = EVENT_PIN_SERIAL

    payload: dict[str, Any]
    serial_number: str = ""


@dataclass(frozen=True, slots=True)
class WrongPin:
    """The device rejected the PIN. A normal outcome: ask for the PIN again."""

    tag: ClassVar[str] = EVENT_WRONG_PIN

    payload: dict[str, Any]
    message: str = ""


@dataclass(frozen=True, slots=True)
class Unknown:
    tag: ClassVar[str] = EVENT_UNKNOWN

    payload: dict[str, Any]
    message: str = ""


@dataclass(frozen=True, slots=True)
class MatchedEvent:
    """Result of a wait on several event types: which type fired, and its payload."""

    type: str
    payload: Any


ClassifiedEvent = ManagerInfo | EnrollmentStatus | EnrollmentResult | SignResult | PinSerial | WrongPin | Unknown

__all__ = [
    "ClassifiedEvent",
    "EnrollmentResult",
    "EnrollmentStatus",
    "ManagerInfo",
    "MatchedEvent",
    "PinSerial",
    "SignResult",
    "Unknown",
    "WrongPin",
]
