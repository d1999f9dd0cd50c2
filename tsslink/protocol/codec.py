"""Encode/decode hooks that adapt `MessageSocket` to the enrollment service dialect."""

from __future__ import annotations

import logging
from typing import Any

import orjson

from tsslink.state.envelope import Envelope
from tsslink.config.protocol import KEY_METHOD, FLATTENED_METHODS

from .rules import classify
from .frames import normalize_frame

logger = logging.getLogger(__name__)


def _dumps(value: Any) -> str:
    return orjson.dumps(value).decode("utf-8")


def encode_outbound(envelope: Envelope) -> str:
    """Flatten enrollment methods to ``{"Method": type, **payload}``; send other payloads unwrapped."""
    if envelope.type in FLATTENED_METHODS:
        body: dict[str, Any] = {KEY_METHOD: envelope.type}
        if isinstance(envelope.payload, dict):
            body.update(envelope.payload)
        return _dumps(body)
    if envelope.payload is not None:
        return _dumps(envelope.payload)
    return _dumps(envelope.to_wire())


def decode_inbound(raw: Any) -> Envelope:
    msg = normalize_frame(raw)
    event = classify(msg)
    logger.debug("inbound frame %s classified as %s", msg, event.tag)
    return Envelope(type=event.tag, payload=event)


__all__ = ["decode_inbound", "encode_outbound"]
