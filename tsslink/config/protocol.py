"""Enrollment protocol constants: outbound methods, inbound markers, event tags."""

from __future__ import annotations

# Outbound message types
METHOD_INFO_MANAGER_FOR_ENROLL = "Info_ManagerForEnroll"
METHOD_INFO_ENROLLMENT = "Info_Enrollment"
METHOD_ENROLLMENT = "Enrollment"
METHOD_SIGN = "Sign"
METHOD_CHECK_PIN = "CheckPIN"

# Types sent in the service's flattened {"Method": ..., **payload} dialect
FLATTENED_METHODS = frozenset({
    METHOD_INFO_MANAGER_FOR_ENROLL,
    METHOD_ENROLLMENT,
    METHOD_INFO_ENROLLMENT,
})

# Inbound payload keys
KEY_METHOD = "Method"
KEY_MESSAGE = "Message"
KEY_PARTICIPANTS_ENROLLED = "ParticipantsEnrolled"
KEY_SERIAL_NUMBER = "SerialNumber"
KEY_PIN = "PIN"
KEY_VALUE = "Value"
TX_HASH_KEYS = ("TxHash", "txHash", "txid", "TxId", "TransactionId")

# Inbound message markers (compared upper-cased)
MARKER_ENROLL_SUCCESS = "SUCCESS.ENROLL"
MARKER_SIGNATURE_ADDED = "SUCCESS.SIGNATURE_ADDED"
MARKER_SIGNATURE_ENDED = "SUCCESS.SIGNATURE_ENDED"
MARKER_SIGNATURE_PREFIX = "SUCCESS.SIGNATURE_"
MARKER_WRONG_PIN = "ERROR.WRONG_PIN"

# Classified event tags (transport dispatch keys)
EVENT_MANAGER_INFO = "MANAGER_INFO"
EVENT_ENROLLMENT_STATUS = "ENROLLMENT_STATUS"
EVENT_ENROLLMENT_RESULT = "ENROLLMENT_RESULT"
EVENT_SIGN_RESULT = "SIGN_RESULT"
EVENT_PIN_SERIAL = "SUCCESS.PIN_SERIAL"
EVENT_WRONG_PIN = "ERROR.WRONG_PIN"
EVENT_UNKNOWN = "UNKNOWN"

__all__ = [
    "METHOD_INFO_MANAGER_FOR_ENROLL",
    "METHOD_INFO_ENROLLMENT",
    "METHOD_ENROLLMENT",
    "METHOD_SIGN",
    "METHOD_CHECK_PIN",
    "FLATTENED_METHODS",
    "KEY_METHOD",
    "KEY_MESSAGE",
    "KEY_PARTICIPANTS_ENROLLED",
    "KEY_SERIAL_NUMBER",
    "KEY_PIN",
    "KEY_VALUE",
    "TX_HASH_KEYS",
    "MARKER_ENROLL_SUCCESS",
    "MARKER_SIGNATURE_ADDED",
    "MARKER_SIGNATURE_ENDED",
    "MARKER_SIGNATURE_PREFIX",
    "MARKER_WRONG_PIN",
    "EVENT_MANAGER_INFO",
    "EVENT_ENROLLMENT_STATUS",
    "EVENT_ENROLLMENT_RESULT",
    "EVENT_SIGN_RESULT",
    "EVENT_PIN_SERIAL",
    "EVENT_WRONG_PIN",
    "EVENT_UNKNOWN",
]
