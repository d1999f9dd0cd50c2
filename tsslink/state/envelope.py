"""Generic wire envelope used by the transport's request/response layer."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

from tsslink.config.transport import (
    ENV_KEY_ID,
    ENV_KEY_TYPE,
    ENV_KEY_ERROR,
    ERR_KEY_CODE,
    ENV_KEY_PAYLOAD,
    ERR_KEY_DETAILS,
    ERR_KEY_MESSAGE,
    ENV_KEY_REPLY_TO,
    REPLY_TYPE_SUFFIX,
)


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    message: str
    code: str | None = None
    details: Any = None

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {ERR_KEY_MESSAGE: self.message}
        if self.code is not None:
            data[ERR_KEY_CODE] = self.code
        if self.details is not None:
            data[ERR_KEY_DETAILS] = self.details
        return data

    @classmethod
    def from_wire(cls, data: Any) -> ErrorInfo:
        if not isinstance(data, dict):
            return cls(message=str(data))
        code = data.get(ERR_KEY_CODE)
        return cls(
            message=str(data.get(ERR_KEY_MESSAGE) or "error"),
            code=str(code) if code is not None else None,
            details=data.get(ERR_KEY_DETAILS),
        )


@dataclass(frozen=True, slots=True)
class Envelope:
    type: str
    id: str | None = None
    reply_to: str | None = None
    payload: Any = None
    error: ErrorInfo | None = None

    @property
    def is_reply(self) -> bool:
        return self.reply_to is not None

    @property
    def needs_reply(self) -> bool:
        return self.id is not None and self.reply_to is None

    def reply(self, payload: Any = None, error: ErrorInfo | None = None) -> Envelope:
        return Envelope(type=f"{self.type}{REPLY_TYPE_SUFFIX}", reply_to=self.id, payload=payload, error=error)

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {ENV_KEY_TYPE: self.type}
        if self.id is not None:
            data[ENV_KEY_ID] = self.id
        if self.reply_to is not None:
            data[ENV_KEY_REPLY_TO] = self.reply_to
        if self.payload is not None:
            data[ENV_KEY_PAYLOAD] = self.payload
        if self.error is not None:
            data[ENV_KEY_ERROR] = self.error.to_wire()
        return data

    @classmethod
    def from_wire(cls, data: Any) -> Envelope | None:
        """Build an envelope from a decoded frame; None when it carries no string type."""
        if not isinstance(data, dict):
            return None
        msg_type = data.get(ENV_KEY_TYPE)
        if not isinstance(msg_type, str):
            return None
        msg_id = data.get(ENV_KEY_ID)
        reply_to = data.get(ENV_KEY_REPLY_TO)
        error = data.get(ENV_KEY_ERROR)
        return cls(
            type=msg_type,
            id=str(msg_id) if msg_id is not None else None,
            reply_to=str(reply_to) if reply_to else None,
            payload=data.get(ENV_KEY_PAYLOAD),
            error=ErrorInfo.from_wire(error) if error else None,
        )


__all__ = ["Envelope", "ErrorInfo"]
