"""Connector abstraction for the upstream appliance cloud."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Protocol, runtime_checkable

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeviceRef:
    """Identify an appliance towards the connector."""

    ha_id: str
    name: str
    appliance_type: str


@runtime_checkable
class ApplianceConnector(Protocol):
    """Calls a connector must accept; all are fire-and-forget."""

    def initialize_status(self, device: DeviceRef) -> None:
        """Request the current status, settings and active program."""

    def get_available_programs(self, device: DeviceRef) -> None:
        """Request the list of programs the appliance offers."""

    def start_program(
        self,
        device: DeviceRef,
        program_key: str,
        options: list[dict[str, Any]] | None = None,
    ) -> None:
        """Start ``program_key`` with the given option payloads."""

    def stop_program(self, device: DeviceRef) -> None:
        """Stop the active program."""

    def set_setting(self, device: DeviceRef, setting_key: str, value: Any) -> None:
        """Write an appliance setting."""

    def set_selected_program_option(
        self, device: DeviceRef, option_key: str, value: Any
    ) -> None:
        """Write an option of the selected program."""

    def set_power_state(self, device: DeviceRef, on: bool) -> None:
        """Switch the appliance on or off."""

    def send_command(self, device: DeviceRef, command_key: str) -> None:
        """Send a vendor command."""


class NullConnector:
    """Connector used when no upstream connector is available."""

    def initialize_status(self, device: DeviceRef) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; skipping status refresh", device.name)

    def get_available_programs(self, device: DeviceRef) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; skipping program fetch", device.name)

    def start_program(
        self,
        device: DeviceRef,
        program_key: str,
        options: list[dict[str, Any]] | None = None,
    ) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping start %s", device.name, program_key)

    def stop_program(self, device: DeviceRef) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping stop", device.name)

    def set_setting(self, device: DeviceRef, setting_key: str, value: Any) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping %s", device.name, setting_key)

    def set_selected_program_option(
        self, device: DeviceRef, option_key: str, value: Any
    ) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping %s", device.name, option_key)

    def set_power_state(self, device: DeviceRef, on: bool) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping power change", device.name)

    def send_command(self, device: DeviceRef, command_key: str) -> None:
        """Ignore the request."""

        _LOGGER.debug("%s: No connector; dropping %s", device.name, command_key)


__all__ = ["ApplianceConnector", "DeviceRef", "NullConnector"]
