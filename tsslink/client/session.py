"""Cold-wallet session: one manager client plus an ordered set of device clients."""

from __future__ import annotations

import base64
import asyncio
import logging
from typing import Any
from collections.abc import Callable, Awaitable

from tsslink.errors import DeviceLockedError
from tsslink.protocol.events import WrongPin, PinSerial
from tsslink.config.protocol import KEY_PIN, KEY_METHOD, METHOD_CHECK_PIN
from tsslink.state.settings import EndpointSettings, WorkflowSettings

from .enrollment import EnrollmentClient

logger = logging.getLogger(__name__)

PinProvider = Callable[[str, int], Awaitable[str]]
ClientFactory = Callable[..., EnrollmentClient]


def encode_pin(pin: str) -> str:
    """Base64 of the UTF-8 PIN, the form devices expect in `CheckPIN`."""
    return base64.b64encode(pin.encode("utf-8")).decode("ascii")


class ColdWalletSession:
    """Owns the manager and device clients of one cold-wallet page."""

    def __init__(
        self,
        endpoints: EndpointSettings,
        settings: WorkflowSettings | None = None,
        *,
        client_factory: ClientFactory = EnrollmentClient,
        **client_options: Any,
    ) -> None:
        self._settings = settings or WorkflowSettings()
        self._manager = client_factory(
            endpoints.manager_url,
            self._settings,
            label="manager",
            **client_options,
        )
        self._devices = tuple(
            client_factory(device.url, self._settings, label=device.label, **client_options)
            for device in endpoints.devices
        )

    @property
    def manager(self) -> EnrollmentClient:
        return self._manager

    @property
    def devices(self) -> tuple[EnrollmentClient, ...]:
        return self._devices

    @property
    def clients(self) -> tuple[EnrollmentClient, ...]:
        return (self._manager, *self._devices)

    def device(self, index: int) -> EnrollmentClient:
        if not 0 <= index < len(self._devices):
            raise IndexError(f"no device at index {index} ({len(self._devices)} configured)")
        return self._devices[index]

    async def __aenter__(self) -> ColdWalletSession:
        await self.connect_all()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close_all()

    async def connect_all(self) -> None:
        """Connect every client concurrently; on any failure close them all and re-raise."""
        results = await asyncio.gather(*(client.connect() for client in self.clients), return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if not failures:
            logger.info("session connected: manager + %d device(s)", len(self._devices))
            return
        await self.close_all()
        raise failures[0]

    async def close_all(self) -> None:
        results = await asyncio.gather(*(client.close() for client in self.clients), return_exceptions=True)
        for client, result in zip(self.clients, results):
            if isinstance(result, BaseException):
                logger.warning("closing %s failed: %s", client.label, result)

    async def check_device_pin(self, index: int, pin: str, *, timeout_s: float | None = None) -> PinSerial | WrongPin:
        """Check `pin` on device `index`. A rejected PIN comes back as `WrongPin`, not an error."""
        payload = {KEY_PIN: encode_pin(pin), KEY_METHOD: METHOD_CHECK_PIN}
        matched = await self.device(index).check_pin(payload, timeout_s=timeout_s)
        return matched.payload

    async def unlock_devices(self, pin_provider: PinProvider, max_attempts: int | None = None) -> list[str]:
        """Unlock each device in order, asking `pin_provider(label, attempt)` for PINs.

        Returns the serial numbers in device order. Raises `DeviceLockedError`
        when a device rejects `max_attempts` PINs in a row.
        """
        limit = self._settings.pin_max_attempts if max_attempts is None else max_attempts
        if limit < 1:
            raise ValueError("max_attempts must be at least 1")

        serials: list[str] = []
        for index, device in enumerate(self._devices):
            for attempt in range(1, limit + 1):
                pin = await pin_provider(device.label, attempt)
                event = await self.check_device_pin(index, pin)
                if isinstance(event, PinSerial):
                    logger.info("%s unlocked serial=%s", device.label, event.serial_number)
                    serials.append(event.serial_number)
                    break
                logger.info("%s rejected PIN (attempt %d/%d)", device.label, attempt, limit)
            else:
                raise DeviceLockedError(
                    message=f"{device.label}: PIN rejected {limit} times",
                    label=device.label,
                    attempts=limit,
                )
        return serials


__all__ = ["ClientFactory", "ColdWalletSession", "PinProvider", "encode_pin"]
