"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HeartbeatSettings:
    interval_s: float = 25.0
    ping_type: str = "PING"
    pong_type: str = "PONG"


@dataclass(frozen=True, slots=True)
class BackoffSettings:
    base_s: float = 0.5
    cap_s: float = 30.0
    jitter_s: float = 0.25


@dataclass(frozen=True, slots=True)
class TransportSettings:
    request_timeout_s: float = 15.0
    auto_reconnect: bool = True
    max_reconnects: int | None = None
    heartbeat: HeartbeatSettings = HeartbeatSettings()
    backoff: BackoffSettings = BackoffSettings()


@dataclass(frozen=True, slots=True)
class WorkflowSettings:
    manager_info_timeout_s: float = 60.0
    enroll_timeout_s: float = 200.0
    sign_timeout_s: float = 300.0
    check_pin_timeout_s: float = 300.0
    send_status_timeout_s: float = 10.0
    status_poll_interval_s: float = 5.0
    wait_for_timeout_s: float = 300.0
    pin_max_attempts: int = 3


@dataclass(frozen=True, slots=True)
class DeviceEndpoint:
    label: str
    url: str


@dataclass(frozen=True, slots=True)
class EndpointSettings:
    manager_url: str
    devices: tuple[DeviceEndpoint, ...]


@dataclass(frozen=True, slots=True)
class AppSettings:
    endpoints: EndpointSettings
    transport: TransportSettings
    workflow: WorkflowSettings


__all__ = [
    "AppSettings",
    "BackoffSettings",
    "DeviceEndpoint",
    "EndpointSettings",
    "HeartbeatSettings",
    "TransportSettings",
    "WorkflowSettings",
]
