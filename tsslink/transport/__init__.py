from .heartbeat import Heartbeat
from .context import HandlerContext
from .registry import Unsubscribe, HandlerRegistry
from .backoff import BackoffFn, make_backoff, default_backoff
from .codec import DecodeFn, EncodeFn, json_decode, json_encode
from .socket import ConnectFn, TokenSource, TypeHandler, MessageSocket

__all__ = [
    "BackoffFn",
    "ConnectFn",
    "DecodeFn",
    "EncodeFn",
    "HandlerContext",
    "HandlerRegistry",
    "Heartbeat",
    "MessageSocket",
    "TokenSource",
    "TypeHandler",
    "Unsubscribe",
    "default_backoff",
    "json_decode",
    "json_encode",
    "make_backoff",
]
