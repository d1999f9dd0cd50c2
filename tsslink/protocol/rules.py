"""Ordered classification rules for inbound enrollment-service frames.

Each rule is a pure ``(predicate, builder)`` pair over `FrameFacts`. The chain
is evaluated in order and the first matching predicate wins; the last rule
always matches.
"""

from __future__ import annotations

import re
import math
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

from tsslink.config.protocol import (
    KEY_MESSAGE,
    TX_HASH_KEYS,
    MARKER_WRONG_PIN,
    KEY_SERIAL_NUMBER,
    MARKER_ENROLL_SUCCESS,
    MARKER_SIGNATURE_ADDED,
    MARKER_SIGNATURE_ENDED,
    MARKER_SIGNATURE_PREFIX,
    KEY_PARTICIPANTS_ENROLLED,
)

from .frames import normalize_frame
from .events import (
    Unknown,
    WrongPin,
    PinSerial,
    SignResult,
    ManagerInfo,
    ClassifiedEvent,
    EnrollmentResult,
    EnrollmentStatus,
)

HEX_HASH_RE = re.compile(r"(?:0x)?[0-9a-fA-F]{64}")


@dataclass(frozen=True, slots=True)
class FrameFacts:
    msg: dict[str, Any]
    text: str
    marker: str
    participants: float | None
    tx_hash: str | None
    serial_number: str | None
    is_hex_hash: bool


def participants_count(value: Any) -> float | None:
    """Numeric `ParticipantsEnrolled`, accepting numeric strings. Booleans are not counts."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        count = float(value)
    elif isinstance(value, str):
        try:
            count = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return count if math.isfinite(count) else None


def message_text(msg: dict[str, Any]) -> str:
    value = msg.get(KEY_MESSAGE)
    return value.strip() if isinstance(value, str) else ""


def tx_hash_field(msg: dict[str, Any]) -> str | None:
    for key in TX_HASH_KEYS:
        value = msg.get(key)
        if value:
            return str(value)
    return None


def extract_facts(msg: dict[str, Any]) -> FrameFacts:
    text = message_text(msg)
    serial = msg.get(KEY_SERIAL_NUMBER)
    return FrameFacts(
        msg=msg,
        text=text,
        marker=text.upper(),
        participants=participants_count(msg.get(KEY_PARTICIPANTS_ENROLLED)),
        tx_hash=tx_hash_field(msg),
        serial_number=serial if isinstance(serial, str) and serial else None,
        is_hex_hash=HEX_HASH_RE.fullmatch(text) is not None,
    )


# Predicates


def is_manager_info(facts: FrameFacts) -> bool:
    return facts.participants is not None and facts.participants == 0


def is_enrollment_status(facts: FrameFacts) -> bool:
    return facts.participants is not None and facts.participants > 0


def is_enroll_success(facts: FrameFacts) -> bool:
    return facts.marker == MARKER_ENROLL_SUCCESS


def is_signature_marker(facts: FrameFacts) -> bool:
    return facts.marker in (MARKER_SIGNATURE_ADDED, MARKER_SIGNATURE_ENDED)


def is_transaction_hash(facts: FrameFacts) -> bool:
    return facts.is_hex_hash or facts.tx_hash is not None


def has_serial_number(facts: FrameFacts) -> bool:
    return facts.serial_number is not None


def is_bare_serial(facts: FrameFacts) -> bool:
    if not facts.text or facts.is_hex_hash:
        return False
    if facts.marker in (MARKER_WRONG_PIN, MARKER_ENROLL_SUCCESS):
        return False
    return not facts.marker.startswith(MARKER_SIGNATURE_PREFIX)


def is_wrong_pin(facts: FrameFacts) -> bool:
    return facts.marker == MARKER_WRONG_PIN


def always(_facts: FrameFacts) -> bool:
    return True


# Builders


def _manager_info(facts: FrameFacts) -> ClassifiedEvent:
    return ManagerInfo(payload=facts.msg, participants_enrolled=0)


def _enrollment_status(facts: FrameFacts) -> ClassifiedEvent:
    return EnrollmentStatus(payload=facts.msg, participants_enrolled=int(facts.participants or 0))


def _enrollment_result(facts: FrameFacts) -> ClassifiedEvent:
    return EnrollmentResult(payload=facts.msg, message=facts.text)


def _sign_result(facts: FrameFacts) -> ClassifiedEvent:
    tx_hash = facts.tx_hash or (facts.text if facts.is_hex_hash else None)
    return SignResult(payload=facts.msg, message=facts.text, tx_hash=tx_hash)


def _pin_serial(facts: FrameFacts) -> ClassifiedEvent:
    return PinSerial(payload=facts.msg, serial_number=facts.serial_number or "")


def _bare_serial(facts: FrameFacts) -> ClassifiedEvent:
    payload = {KEY_SERIAL_NUMBER: facts.text, KEY_MESSAGE: facts.text}
    return PinSerial(payload=payload, serial_number=facts.text)


def _wrong_pin(facts: FrameFacts) -> ClassifiedEvent:
    return WrongPin(payload=facts.msg, message=facts.text)


def _unknown(facts: FrameFacts) -> ClassifiedEvent:
    return Unknown(payload=facts.msg, message=facts.text)


Rule = tuple[Callable[[FrameFacts], bool], Callable[[FrameFacts], ClassifiedEvent]]

RULES: tuple[Rule, ...] = (
    (is_manager_info, _manager_info),
    (is_enrollment_status, _enrollment_status),
    (is_enroll_success, _enrollment_result),
    (is_signature_marker, _sign_result),
    (is_transaction_hash, _sign_result),
    (has_serial_number, _pin_serial),
    (is_bare_serial, _bare_serial),
    (is_wrong_pin, _wrong_pin),
    (always, _unknown),
)


def classify(msg: dict[str, Any]) -> ClassifiedEvent:
    """Classify a normalized frame dict. Total: falls through to `Unknown`."""
    facts = extract_facts(msg)
    for predicate, build in RULES:
        if predicate(facts):
            return build(facts)
    return _unknown(facts)


def classify_frame(raw: Any) -> ClassifiedEvent:
    return classify(normalize_frame(raw))


__all__ = [
    "FrameFacts",
    "RULES",
    "Rule",
    "always",
    "classify",
    "classify_frame",
    "extract_facts",
    "has_serial_number",
    "is_bare_serial",
    "is_enroll_success",
    "is_enrollment_status",
    "is_manager_info",
    "is_signature_marker",
    "is_transaction_hash",
    "is_wrong_pin",
    "message_text",
    "participants_count",
    "tx_hash_field",
]
