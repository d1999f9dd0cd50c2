"""Load runtime settings.

Configuration values are resolved from the environment in `tsslink/config/*`
and exposed here as structured dataclasses. Clients take these settings as
constructor arguments; nothing reads them from ambient global state.
"""

from __future__ import annotations

from tsslink.state.settings import (
    AppSettings,
    DeviceEndpoint,
    BackoffSettings,
    EndpointSettings,
    WorkflowSettings,
    HeartbeatSettings,
    TransportSettings,
)
from tsslink.config.endpoints import (
    WS_DEVICE_URLS,
    WS_MANAGER_URL,
    WS_DEVICE_LABELS,
    DEVICE_LABEL_PREFIX,
)
from tsslink.config.workflow import (
    SIGN_TIMEOUT_S,
    ENROLL_TIMEOUT_S,
    PIN_MAX_ATTEMPTS,
    WAIT_FOR_TIMEOUT_S,
    CHECK_PIN_TIMEOUT_S,
    SEND_STATUS_TIMEOUT_S,
    MANAGER_INFO_TIMEOUT_S,
    STATUS_POLL_INTERVAL_S,
)
from tsslink.config.transport import (
    BACKOFF_CAP_S,
    AUTO_RECONNECT,
    BACKOFF_BASE_S,
    MAX_RECONNECTS,
    BACKOFF_JITTER_S,
    REQUEST_TIMEOUT_S,
    HEARTBEAT_PING_TYPE,
    HEARTBEAT_PONG_TYPE,
    HEARTBEAT_INTERVAL_S,
)


def build_device_endpoints(urls: tuple[str, ...], labels: tuple[str, ...] = ()) -> tuple[DeviceEndpoint, ...]:
    devices: list[DeviceEndpoint] = []
    for idx, url in enumerate(urls):
        label = labels[idx] if idx < len(labels) else f"{DEVICE_LABEL_PREFIX} {idx + 1}"
        devices.append(DeviceEndpoint(label=label, url=url))
    return tuple(devices)


def load_settings() -> AppSettings:
    return AppSettings(
        endpoints=EndpointSettings(
            manager_url=WS_MANAGER_URL,
            devices=build_device_endpoints(WS_DEVICE_URLS, WS_DEVICE_LABELS),
        ),
        transport=TransportSettings(
            request_timeout_s=REQUEST_TIMEOUT_S,
            auto_reconnect=AUTO_RECONNECT,
            max_reconnects=MAX_RECONNECTS,
            heartbeat=HeartbeatSettings(
                interval_s=HEARTBEAT_INTERVAL_S,
                ping_type=HEARTBEAT_PING_TYPE,
                pong_type=HEARTBEAT_PONG_TYPE,
            ),
            backoff=BackoffSettings(
                base_s=BACKOFF_BASE_S,
                cap_s=BACKOFF_CAP_S,
                jitter_s=BACKOFF_JITTER_S,
            ),
        ),
        workflow=WorkflowSettings(
            manager_info_timeout_s=MANAGER_INFO_TIMEOUT_S,
            enroll_timeout_s=ENROLL_TIMEOUT_S,
            sign_timeout_s=SIGN_TIMEOUT_S,
            check_pin_timeout_s=CHECK_PIN_TIMEOUT_S,
            send_status_timeout_s=SEND_STATUS_TIMEOUT_S,
            status_poll_interval_s=STATUS_POLL_INTERVAL_S,
            wait_for_timeout_s=WAIT_FOR_TIMEOUT_S,
            pin_max_attempts=PIN_MAX_ATTEMPTS,
        ),
    )


__all__ = ["build_device_endpoints", "load_settings"]
