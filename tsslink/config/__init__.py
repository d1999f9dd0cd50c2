"""Configuration module exports (env-resolved constants only)."""

from .transport import REQUEST_TIMEOUT_S, HEARTBEAT_INTERVAL_S
from .endpoints import WS_DEVICE_URLS, WS_MANAGER_URL
from .workflow import (
    SIGN_TIMEOUT_S,
    ENROLL_TIMEOUT_S,
    WAIT_FOR_TIMEOUT_S,
    CHECK_PIN_TIMEOUT_S,
    SEND_STATUS_TIMEOUT_S,
    MANAGER_INFO_TIMEOUT_S,
    STATUS_POLL_INTERVAL_S,
)

__all__ = [
    "REQUEST_TIMEOUT_S",
    "HEARTBEAT_INTERVAL_S",
    "WS_DEVICE_URLS",
    "WS_MANAGER_URL",
    "SIGN_TIMEOUT_S",
    "ENROLL_TIMEOUT_S",
    "WAIT_FOR_TIMEOUT_S",
    "CHECK_PIN_TIMEOUT_S",
    "SEND_STATUS_TIMEOUT_S",
    "MANAGER_INFO_TIMEOUT_S",
    "STATUS_POLL_INTERVAL_S",
]
