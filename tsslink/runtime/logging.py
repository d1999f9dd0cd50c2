"""Logging initialization."""

from __future__ import annotations

import os
import logging

from tsslink.config.logging import LOG_LEVEL, LOG_FORMAT, QUIET_LOGGERS, ENV_SHOW_WEBSOCKETS_LOGS


def configure_logging() -> None:
    # websockets logs every handshake and close at INFO. Keep it tame unless explicitly enabled.
    if (os.getenv(ENV_SHOW_WEBSOCKETS_LOGS) or "").strip().lower() not in {"1", "true", "yes"}:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
