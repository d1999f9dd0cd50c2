"""Default JSON codec for envelopes (text frames out; text or UTF-8 binary in)."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

import orjson

from tsslink.errors import DecodeError
from tsslink.state.envelope import Envelope

Frame = str | bytes
EncodeFn = Callable[[Envelope], Frame]
DecodeFn = Callable[[Any], "Envelope | None"]


def json_encode(envelope: Envelope) -> str:
    return orjson.dumps(envelope.to_wire()).decode("utf-8")


def json_decode(raw: Any) -> Envelope | None:
    try:
        if isinstance(raw, memoryview):
            raw = raw.tobytes()
        data = orjson.loads(raw)
    except (orjson.JSONDecodeError, TypeError) as exc:
        raise DecodeError(message=f"invalid JSON frame: {exc}", raw=raw) from exc
    return Envelope.from_wire(data)


__all__ = ["DecodeFn", "EncodeFn", "Frame", "json_decode", "json_encode"]
