"""Manager and device WebSocket endpoints."""

from __future__ import annotations

import os

from .env import env_list

ENV_WS_MANAGER_URL = "TSS_WS_MANAGER_URL"
ENV_WS_DEVICE_URLS = "TSS_WS_DEVICE_URLS"
ENV_WS_DEVICE_LABELS = "TSS_WS_DEVICE_LABELS"

DEFAULT_WS_MANAGER_URL = "ws://localhost:8081/ws"
DEFAULT_WS_DEVICE_URLS = (
    "ws://localhost:8082/ws",
    "ws://localhost:8083/ws",
    "ws://localhost:8084/ws",
)
DEVICE_LABEL_PREFIX = "Toughkey"

WS_MANAGER_URL = (os.getenv(ENV_WS_MANAGER_URL) or "").strip() or DEFAULT_WS_MANAGER_URL
WS_DEVICE_URLS = env_list(ENV_WS_DEVICE_URLS, DEFAULT_WS_DEVICE_URLS)
WS_DEVICE_LABELS = env_list(ENV_WS_DEVICE_LABELS, ())

__all__ = [
    "ENV_WS_MANAGER_URL",
    "ENV_WS_DEVICE_URLS",
    "ENV_WS_DEVICE_LABELS",
    "DEFAULT_WS_MANAGER_URL",
    "DEFAULT_WS_DEVICE_URLS",
    "DEVICE_LABEL_PREFIX",
    "WS_MANAGER_URL",
    "WS_DEVICE_URLS",
    "WS_DEVICE_LABELS",
]
