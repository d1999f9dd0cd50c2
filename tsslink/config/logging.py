"""Logging configuration (env-resolved constants only)."""

from __future__ import annotations

import os

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

ENV_SHOW_WEBSOCKETS_LOGS = "SHOW_WEBSOCKETS_LOGS"
QUIET_LOGGERS = ("websockets", "websockets.client")

__all__ = ["LOG_LEVEL", "LOG_FORMAT", "ENV_SHOW_WEBSOCKETS_LOGS", "QUIET_LOGGERS"]
