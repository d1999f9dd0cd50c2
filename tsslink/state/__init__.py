from .envelope import Envelope, ErrorInfo
from .connection import ConnectionState, DisconnectInfo, PendingRequest, ReconnectInfo
from .settings import (
    AppSettings,
    DeviceEndpoint,
    BackoffSettings,
    EndpointSettings,
    WorkflowSettings,
    HeartbeatSettings,
    TransportSettings,
)

__all__ = [
    "AppSettings",
    "BackoffSettings",
    "ConnectionState",
    "DeviceEndpoint",
    "DisconnectInfo",
    "EndpointSettings",
    "Envelope",
    "ErrorInfo",
    "HeartbeatSettings",
    "PendingRequest",
    "ReconnectInfo",
    "TransportSettings",
    "WorkflowSettings",
]
