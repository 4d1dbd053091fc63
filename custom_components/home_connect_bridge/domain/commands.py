"""Outbound command types sent to the appliance connector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..backend.base import ApplianceConnector, DeviceRef


@dataclass(frozen=True, slots=True)
class VendorOption:
    """Key/value/unit triple configuring a program parameter."""

    key: str
    value: Any
    unit: str | None = None

    def as_payload(self) -> dict[str, Any]:
        """Return the wire representation of the option."""

        payload: dict[str, Any] = {"key": self.key, "value": self.value}
        if self.unit is not None:
            payload["unit"] = self.unit
        return payload


@dataclass(frozen=True, slots=True)
class BaseDispatch:
    """Base type for connector calls."""

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Invoke the matching connector method."""

        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class StartProgram(BaseDispatch):
    """Start a program, optionally with options."""

    program_key: str
    options: tuple[VendorOption, ...] = ()

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Start the program on the appliance."""

        if self.options:
            connector.start_program(
                device,
                self.program_key,
                [option.as_payload() for option in self.options],
            )
        else:
            connector.start_program(device, self.program_key)


@dataclass(frozen=True, slots=True)
class StopProgram(BaseDispatch):
    """Stop the active program."""

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Stop the running program."""

        connector.stop_program(device)


@dataclass(frozen=True, slots=True)
class SetSetting(BaseDispatch):
    """Write an appliance setting."""

    setting_key: str
    value: Any

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Write the setting."""

        connector.set_setting(device, self.setting_key, self.value)


@dataclass(frozen=True, slots=True)
class SetSelectedProgramOption(BaseDispatch):
    """Change an option of the selected program."""

    option_key: str
    value: Any

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Write the program option."""

        connector.set_selected_program_option(device, self.option_key, self.value)


@dataclass(frozen=True, slots=True)
class SetPowerState(BaseDispatch):
    """Switch the appliance on or off."""

    on: bool

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Change the power state."""

        connector.set_power_state(device, self.on)


@dataclass(frozen=True, slots=True)
class SendCommand(BaseDispatch):
    """Issue a vendor command such as pause or resume."""

    command_key: str

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Send the command."""

        connector.send_command(device, self.command_key)


@dataclass(frozen=True, slots=True)
class FetchPrograms(BaseDispatch):
    """Ask the connector for the appliance's available programs."""

    def send(self, connector: ApplianceConnector, device: DeviceRef) -> None:
        """Request the program list."""

        connector.get_available_programs(device)


@dataclass(slots=True)
class CommandPlan:
    """Result of translating a semantic command."""

    command: str
    params: dict[str, Any] = field(default_factory=dict)
    dispatches: list[BaseDispatch] = field(default_factory=list)
    last_program: str | None = None
    description: str | None = None

    @property
    def summary(self) -> str:
        """Return the ``lastCommandSent`` text for the plan."""

        params = {key: value for key, value in self.params.items() if value is not None}
        if not params:
            return self.command
        rendered = ", ".join(f"{key}:{value}" for key, value in params.items())
        return f"{self.command}: [{rendered}]"


__all__ = [
    "BaseDispatch",
    "CommandPlan",
    "FetchPrograms",
    "SendCommand",
    "SetPowerState",
    "SetSelectedProgramOption",
    "SetSetting",
    "StartProgram",
    "StopProgram",
    "VendorOption",
]
