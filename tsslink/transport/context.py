"""Context handed to type-subscribed handlers."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass
from collections.abc import Callable, Awaitable

from tsslink.state.envelope import Envelope


@dataclass(frozen=True, slots=True)
class HandlerContext:
    envelope: Envelope
    reply: Callable[[Any], Awaitable[bool]]
    reply_error: Callable[..., Awaitable[bool]]


__all__ = ["HandlerContext"]
