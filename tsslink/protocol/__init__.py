from .frames import normalize_frame
from .codec import decode_inbound, encode_outbound
from .rules import RULES, FrameFacts, classify, extract_facts, classify_frame
from .events import (
    Unknown,
    WrongPin,
    PinSerial,
    SignResult,
    ManagerInfo,
    MatchedEvent,
    ClassifiedEvent,
    EnrollmentResult,
    EnrollmentStatus,
)

__all__ = [
    "ClassifiedEvent",
    "EnrollmentResult",
    "EnrollmentStatus",
    "FrameFacts",
    "ManagerInfo",
    "MatchedEvent",
    "PinSerial",
    "RULES",
    "SignResult",
    "Unknown",
    "WrongPin",
    "classify",
    "classify_frame",
    "decode_inbound",
    "encode_outbound",
    "extract_facts",
    "normalize_frame",
]
