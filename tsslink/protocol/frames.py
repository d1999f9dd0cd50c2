"""Tolerant normalization of raw enrollment-service frames into dicts."""

from __future__ import annotations

from typing import Any

import orjson

from tsslink.config.protocol import KEY_VALUE, KEY_MESSAGE


def _frame_text(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    return raw if isinstance(raw, str) else str(raw)


def _looks_like_json(text: str) -> bool:
    return (text.startswith("{") and text.endswith("}")) or (text.startswith("[") and text.endswith("]"))


def normalize_frame(raw: Any) -> dict[str, Any]:
    """Turn one inbound frame into a dict. Never raises.

    - text that is not JSON becomes ``{"Message": text}``
    - a JSON string that itself looks like JSON is parsed again
    - any other JSON string becomes ``{"Message": stripped}``
    - a JSON value that is not an object becomes ``{"Value": value}``
    """
    text = _frame_text(raw)
    try:
        value = orjson.loads(text)
    except orjson.JSONDecodeError:
        return {KEY_MESSAGE: text}

    if isinstance(value, str):
        inner = value.strip()
        if not _looks_like_json(inner):
            return {KEY_MESSAGE: inner}
        try:
            value = orjson.loads(inner)
        except orjson.JSONDecodeError:
            return {KEY_MESSAGE: inner}

    if isinstance(value, dict):
        return value
    return {KEY_VALUE: value}


__all__ = ["normalize_frame"]
