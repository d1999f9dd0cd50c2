"""Workflow step timeouts and polling cadence (env-resolved constants only)."""

from __future__ import annotations

from .env import env_float

MANAGER_INFO_TIMEOUT_S = env_float("TSS_MANAGER_INFO_TIMEOUT_S", 60.0)
ENROLL_TIMEOUT_S = env_float("TSS_ENROLL_TIMEOUT_S", 200.0)
SIGN_TIMEOUT_S = env_float("TSS_SIGN_TIMEOUT_S", 300.0)
CHECK_PIN_TIMEOUT_S = env_float("TSS_CHECK_PIN_TIMEOUT_S", 300.0)
SEND_STATUS_TIMEOUT_S = env_float("TSS_SEND_STATUS_TIMEOUT_S", 10.0)
STATUS_POLL_INTERVAL_S = env_float("TSS_STATUS_POLL_INTERVAL_S", 5.0)
WAIT_FOR_TIMEOUT_S = env_float("TSS_WAIT_FOR_TIMEOUT_S", 300.0)

# Device PIN entry
PIN_MAX_ATTEMPTS = 3

__all__ = [
    "MANAGER_INFO_TIMEOUT_S",
    "ENROLL_TIMEOUT_S",
    "SIGN_TIMEOUT_S",
    "CHECK_PIN_TIMEOUT_S",
    "SEND_STATUS_TIMEOUT_S",
    "STATUS_POLL_INTERVAL_S",
    "WAIT_FOR_TIMEOUT_S",
    "PIN_MAX_ATTEMPTS",
]
