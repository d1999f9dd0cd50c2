"""Transport configuration and envelope constants."""

from __future__ import annotations

from .env import env_bool, env_float, env_int_or_none

# Envelope keys
ENV_KEY_TYPE = "type"
ENV_KEY_ID = "id"
ENV_KEY_REPLY_TO = "replyTo"
ENV_KEY_PAYLOAD = "payload"
ENV_KEY_ERROR = "error"

REPLY_TYPE_SUFFIX = ":REPLY"

# Error payload keys and codes
ERR_KEY_CODE = "code"
ERR_KEY_MESSAGE = "message"
ERR_KEY_DETAILS = "details"

ERROR_HANDLER_FAILED = "handler_error"
ERROR_HANDLER_FAILED_MESSAGE = "handler error"

# Lifecycle events
EVENT_CONNECTED = "connected"
EVENT_DISCONNECTED = "disconnected"
EVENT_RECONNECTING = "reconnecting"
EVENT_ERROR = "error"
LIFECYCLE_EVENTS = frozenset({EVENT_CONNECTED, EVENT_DISCONNECTED, EVENT_RECONNECTING, EVENT_ERROR})

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_INVALID_DATA_CODE = 1007

# Upper bound on waiting for the reader to drain after close()
CLOSE_WAIT_S = 5.0

SOCKET_CLOSED_MESSAGE = "socket closed"
SOCKET_NOT_OPEN_MESSAGE = "socket not open"

# Query parameter carrying the optional auth token
DEFAULT_TOKEN_PARAM = "token"

# Requests
REQUEST_TIMEOUT_S = env_float("TSS_REQUEST_TIMEOUT_S", 15.0)

# Heartbeat (0 disables)
HEARTBEAT_INTERVAL_S = env_float("TSS_HEARTBEAT_INTERVAL_S", 25.0)
HEARTBEAT_PING_TYPE = "PING"
HEARTBEAT_PONG_TYPE = "PONG"

# Reconnect backoff: min(cap, base * 2**attempt) + jitter
BACKOFF_BASE_S = env_float("TSS_BACKOFF_BASE_S", 0.5)
BACKOFF_CAP_S = env_float("TSS_BACKOFF_CAP_S", 30.0)
BACKOFF_JITTER_S = env_float("TSS_BACKOFF_JITTER_S", 0.25)
BACKOFF_MAX_EXPONENT = 32

AUTO_RECONNECT = env_bool("TSS_AUTO_RECONNECT", True)
MAX_RECONNECTS: int | None = env_int_or_none("TSS_MAX_RECONNECTS")

# Disable websockets library keepalive; keep-alive is an application frame.
WS_PING_INTERVAL_S: float | None = None
WS_PING_TIMEOUT_S: float | None = None
WS_MAX_MESSAGE_BYTES = 4 * 1024 * 1024

__all__ = [
    "ENV_KEY_TYPE",
    "ENV_KEY_ID",
    "ENV_KEY_REPLY_TO",
    "ENV_KEY_PAYLOAD",
    "ENV_KEY_ERROR",
    "REPLY_TYPE_SUFFIX",
    "ERR_KEY_CODE",
    "ERR_KEY_MESSAGE",
    "ERR_KEY_DETAILS",
    "ERROR_HANDLER_FAILED",
    "ERROR_HANDLER_FAILED_MESSAGE",
    "EVENT_CONNECTED",
    "EVENT_DISCONNECTED",
    "EVENT_RECONNECTING",
    "EVENT_ERROR",
    "LIFECYCLE_EVENTS",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_INVALID_DATA_CODE",
    "CLOSE_WAIT_S",
    "SOCKET_CLOSED_MESSAGE",
    "SOCKET_NOT_OPEN_MESSAGE",
    "DEFAULT_TOKEN_PARAM",
    "REQUEST_TIMEOUT_S",
    "HEARTBEAT_INTERVAL_S",
    "HEARTBEAT_PING_TYPE",
    "HEARTBEAT_PONG_TYPE",
    "BACKOFF_BASE_S",
    "BACKOFF_CAP_S",
    "BACKOFF_JITTER_S",
    "BACKOFF_MAX_EXPONENT",
    "AUTO_RECONNECT",
    "MAX_RECONNECTS",
    "WS_PING_INTERVAL_S",
    "WS_PING_TIMEOUT_S",
    "WS_MAX_MESSAGE_BYTES",
]
