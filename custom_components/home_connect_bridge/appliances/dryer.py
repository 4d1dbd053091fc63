"""Tumble dryer vocabulary, event rules and command translation."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Final

from ..codecs.common import (
    coerce_int,
    extract_enum,
    format_duration,
    minutes_to_seconds,
    to_bool,
)
from ..codecs.models import RawEvent
from ..const import APPLIANCE_DRYER
from ..domain.catalog import ProgramCatalog
from ..domain.commands import (
    CommandPlan,
    SendCommand,
    SetSelectedProgramOption,
    StartProgram,
    VendorOption,
)
from ..domain.router import EventHandler, EventRouter, EventRule, PatternRule
from ..domain.snapshot import SnapshotField
from .base import (
    COMMON_RULES,
    UNHANDLED_RULE,
    ApplianceDevice,
    ApplianceOptions,
    handle_generic_option,
    require_value,
)

_LOGGER = logging.getLogger(__name__)

DRYER_NAMESPACE: Final = "LaundryCare.Dryer"

DRYER_PROGRAMS: Final[Mapping[str, str]] = {
    "Cotton": "LaundryCare.Dryer.Program.Cotton",
    "Synthetics": "LaundryCare.Dryer.Program.Synthetic",
    "Delicates": "LaundryCare.Dryer.Program.Delicates",
    "Wool": "LaundryCare.Dryer.Program.Wool",
    "Outdoor": "LaundryCare.Dryer.Program.Outdoor",
    "Towels": "LaundryCare.Dryer.Program.Towels",
    "BusinessShirts": "LaundryCare.Dryer.Program.BusinessShirts",
    "Bedlinens": "LaundryCare.Dryer.Program.Bedlinens",
    "TimedDry": "LaundryCare.Dryer.Program.TimeDrying",
    "Super40": "LaundryCare.Dryer.Program.Super40",
    "Hygiene": "LaundryCare.Dryer.Program.Hygiene",
    "Shirts": "LaundryCare.Dryer.Program.Shirts15",
    "Jeans": "LaundryCare.Dryer.Program.Jeans",
    "Sportswear": "LaundryCare.Dryer.Program.Sportswear",
    "DownFeathers": "LaundryCare.Dryer.Program.DownFeathers",
    "Mix": "LaundryCare.Dryer.Program.Mix",
    "Refresh": "LaundryCare.Dryer.Program.Refresh",
    "QuickDry": "LaundryCare.Dryer.Program.QuickDry40",
}

DRYING_TARGETS: Final[Mapping[str, str]] = {
    "IronDry": "LaundryCare.Dryer.EnumType.DryingTarget.IronDry",
    "CupboardDry": "LaundryCare.Dryer.EnumType.DryingTarget.CupboardDry",
    "CupboardDryPlus": "LaundryCare.Dryer.EnumType.DryingTarget.CupboardDryPlus",
    "ExtraDry": "LaundryCare.Dryer.EnumType.DryingTarget.ExtraDry",
}

DRYER_TEMPS: Final[Mapping[str, str]] = {
    "Low": "LaundryCare.Dryer.EnumType.Temperature.Low",
    "Medium": "LaundryCare.Dryer.EnumType.Temperature.Medium",
    "High": "LaundryCare.Dryer.EnumType.Temperature.High",
}

PROGRAM_PHASES: Final[Mapping[str, str]] = {
    "Drying": "Drying",
    "Cooling": "Cooling",
    "AntiCrease": "Anti-Crease",
    "Finished": "Finished",
    "WrinkleGuard": "Wrinkle Guard",
    "Heating": "Heating",
}

FRIENDLY_DRYING_TARGETS: Final[Mapping[str, str]] = {
    "IronDry": "Iron Dry",
    "CupboardDry": "Cupboard Dry",
    "CupboardDryPlus": "Cupboard Dry+",
    "ExtraDry": "Extra Dry",
}

OPTION_DRYING_TARGET: Final = "LaundryCare.Dryer.Option.DryingTarget"
OPTION_TEMPERATURE: Final = "LaundryCare.Dryer.Option.Temperature"
OPTION_WRINKLE_GUARD: Final = "LaundryCare.Dryer.Option.WrinkleGuard"
OPTION_DURATION: Final = "BSH.Common.Option.Duration"
OPTION_START_IN_RELATIVE: Final = "BSH.Common.Option.StartInRelative"
COMMAND_PAUSE: Final = "BSH.Common.Command.PauseProgram"
COMMAND_RESUME: Final = "BSH.Common.Command.ResumeProgram"

IDLE_STATES: Final = frozenset({"Ready", "Inactive", "Finished"})

BUTTON_CYCLE_COMPLETE: Final = 1
BUTTON_LINT_FILTER: Final = 2
BUTTON_CONDENSER: Final = 3
NUMBER_OF_BUTTONS: Final = 3


# --- Derived state ---


def derive_friendly_status(attributes: Mapping[str, Any]) -> str:
    """Return the dryer status shown to users."""

    op_state = attributes.get("operationState")
    phase = attributes.get("programPhase")
    raw_progress = attributes.get("programProgress")
    progress = coerce_int(raw_progress) if raw_progress is not None else 0
    program = attributes.get("activeProgram")
    suffix = f" ({progress}%)" if progress else ""

    if op_state in ("Ready", "Inactive"):
        return "Ready"
    if op_state == "DelayedStart":
        delay = attributes.get("startInRelativeFormatted")
        return f"Starting in {delay}" if delay else "Delayed Start"
    if op_state == "Run":
        if phase and phase != "null":
            return f"{phase}{suffix}"
        if program:
            return f"{program}{suffix}"
        return "Drying"
    if op_state == "Pause":
        return "Paused"
    if op_state == "Finished":
        return "Done - Ready to Unload"
    if op_state == "ActionRequired":
        return "Action Required"
    if op_state == "Aborting":
        return "Stopping"
    if op_state == "Error":
        return "Error"
    return str(op_state) if op_state else "Unknown"


def friendly_drying_target(target: str) -> str:
    """Return the display label for a drying target enumeration."""

    return FRIENDLY_DRYING_TARGETS.get(target, target)


# --- Event rules ---


def reset_program_state(device: ApplianceDevice) -> None:
    """Zero every progress and remaining-time attribute."""

    _LOGGER.debug("%s: Resetting program state", device.name)
    device.attributes.update(
        {
            "remainingProgramTime": 0,
            "remainingProgramTimeFormatted": "00:00",
            "elapsedProgramTime": 0,
            "elapsedProgramTimeFormatted": "00:00",
            "programProgress": 0,
            "progressBar": "0%",
            "estimatedEndTimeFormatted": "",
            "programPhase": "",
        }
    )


def handle_operation_state(device: ApplianceDevice, event: RawEvent) -> None:
    """Track the operation state, completion pulse and idle reset."""

    op_state = extract_enum(require_value(event))
    previous = device.get_attr("operationState")
    device.set_attr("operationState", op_state)
    if op_state == "Finished" and previous == "Run":
        device.push_button(BUTTON_CYCLE_COMPLETE, "Drying cycle complete")
    device.set_attr("switch", "on" if op_state == "Run" else "off")
    if op_state in IDLE_STATES:
        reset_program_state(device)


def handle_door_state(device: ApplianceDevice, event: RawEvent) -> None:
    """Track the door and mirror it as a contact sensor."""

    door_state = extract_enum(require_value(event))
    device.set_attr("doorState", door_state)
    device.set_attr("contact", "open" if door_state == "Open" else "closed")


def handle_remaining_time(device: ApplianceDevice, event: RawEvent) -> None:
    """Track remaining time and the estimated completion clock time."""

    seconds = coerce_int(require_value(event))
    device.set_attr("remainingProgramTime", seconds)
    device.set_attr("remainingProgramTimeFormatted", format_duration(seconds))
    if seconds > 0:
        device.set_attr("estimatedEndTimeFormatted", device.estimated_end(seconds))


def handle_elapsed_time(device: ApplianceDevice, event: RawEvent) -> None:
    """Track elapsed program time."""

    seconds = coerce_int(require_value(event))
    device.set_attr("elapsedProgramTime", seconds)
    device.set_attr("elapsedProgramTimeFormatted", format_duration(seconds))


def handle_program_progress(device: ApplianceDevice, event: RawEvent) -> None:
    """Track program progress as a number and a percentage label."""

    progress = coerce_int(require_value(event))
    device.set_attr("programProgress", progress)
    device.set_attr("progressBar", f"{progress}%")


def handle_start_in_relative(device: ApplianceDevice, event: RawEvent) -> None:
    """Track the delayed start countdown."""

    seconds = coerce_int(require_value(event))
    device.set_attr("startInRelative", seconds)
    device.set_attr("startInRelativeFormatted", format_duration(seconds))


def handle_drying_target(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the friendly drying target label."""

    device.set_attr(
        "dryingTarget", friendly_drying_target(extract_enum(require_value(event)))
    )


def handle_temperature(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the heat level."""

    device.set_attr("temperature", extract_enum(require_value(event)))


def handle_wrinkle_guard(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the wrinkle guard state as On/Off."""

    device.set_attr("wrinkleGuard", "On" if to_bool(event.value) else "Off")


def handle_program_phase(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the friendly program phase."""

    phase = extract_enum(require_value(event))
    device.set_attr("programPhase", PROGRAM_PHASES.get(phase, phase))


def _alert_handler(
    attribute: str,
    button: int,
    description: str,
    alert_type: str,
    message: str,
) -> EventHandler:
    """Build a rule handler for a maintenance reminder."""

    def _handle(device: ApplianceDevice, event: RawEvent) -> None:
        value = extract_enum(require_value(event))
        device.set_attr(attribute, value)
        if value == "Present":
            device.push_button(button, description)
            device.send_alert(alert_type, message)

    return _handle


DRYER_RULES: Final[Mapping[str, EventRule]] = {
    **COMMON_RULES,
    "BSH.Common.Status.OperationState": EventRule(
        "operation_state", handle_operation_state, derived=True, snapshot=True
    ),
    "BSH.Common.Status.DoorState": EventRule(
        "door_state", handle_door_state, snapshot=True
    ),
    "BSH.Common.Option.RemainingProgramTime": EventRule(
        "remaining_program_time", handle_remaining_time, snapshot=True
    ),
    "BSH.Common.Option.ElapsedProgramTime": EventRule(
        "elapsed_program_time", handle_elapsed_time
    ),
    "BSH.Common.Option.ProgramProgress": EventRule(
        "program_progress", handle_program_progress, derived=True, snapshot=True
    ),
    OPTION_START_IN_RELATIVE: EventRule(
        "start_in_relative", handle_start_in_relative, derived=True
    ),
    OPTION_DRYING_TARGET: EventRule(
        "drying_target", handle_drying_target, snapshot=True
    ),
    OPTION_TEMPERATURE: EventRule("temperature", handle_temperature, snapshot=True),
    OPTION_WRINKLE_GUARD: EventRule(
        "wrinkle_guard", handle_wrinkle_guard, snapshot=True
    ),
    "LaundryCare.Common.Status.ProgramPhase": EventRule(
        "program_phase", handle_program_phase, derived=True, snapshot=True
    ),
    "LaundryCare.Dryer.Event.LintFilterReminder": EventRule(
        "lint_filter_reminder",
        _alert_handler(
            "lintFilterAlert",
            BUTTON_LINT_FILTER,
            "Clean lint filter",
            "LintFilter",
            "Lint filter needs cleaning",
        ),
        snapshot=True,
    ),
    "LaundryCare.Dryer.Event.CondenserFilterReminder": EventRule(
        "condenser_filter_reminder",
        _alert_handler(
            "condenserAlert",
            BUTTON_CONDENSER,
            "Clean condenser",
            "Condenser",
            "Condenser filter needs cleaning",
        ),
        snapshot=True,
    ),
    "LaundryCare.Dryer.Event.ContainerFull": EventRule(
        "container_full",
        _alert_handler(
            "containerFull",
            BUTTON_CONDENSER,
            "Empty water container",
            "ContainerFull",
            "Water container is full - please empty",
        ),
        snapshot=True,
    ),
}

DRYER_ROUTER: Final[EventRouter[Any]] = EventRouter(
    DRYER_RULES,
    [
        PatternRule.prefix(
            "LaundryCare.Dryer.Option",
            EventRule("dryer_option", handle_generic_option),
        )
    ],
    UNHANDLED_RULE,
)

DRYER_SNAPSHOT_FIELDS: Final[tuple[SnapshotField, ...]] = (
    SnapshotField("operationState"),
    SnapshotField("doorState"),
    SnapshotField("powerState"),
    SnapshotField("friendlyStatus"),
    SnapshotField("activeProgram"),
    SnapshotField("programProgress"),
    SnapshotField("programPhase"),
    SnapshotField("dryingTarget"),
    SnapshotField("temperature"),
    SnapshotField("wrinkleGuard", transform=lambda value: value == "On"),
    SnapshotField("remainingProgramTime"),
    SnapshotField("remainingProgramTimeFormatted"),
    SnapshotField("estimatedEndTime", "estimatedEndTimeFormatted"),
    SnapshotField("remoteControlStartAllowed"),
    SnapshotField("lintFilterAlert"),
    SnapshotField("condenserAlert"),
    SnapshotField("containerFull"),
    SnapshotField("lastAlert"),
)


# --- Command translation ---


def translate_start_program(
    catalog: ProgramCatalog, options: ApplianceOptions, program: str | None = None
) -> CommandPlan:
    """Start a program by name, falling back to the default program."""

    selected = program or options.default_program
    key = catalog.resolve_key(selected)
    return CommandPlan(
        "startProgram",
        {"program": selected, "key": key},
        [StartProgram(key)],
        last_program=selected,
        description=f"Starting program: {selected}",
    )


def translate_start_program_by_key(program_key: str) -> CommandPlan:
    """Start a program by its vendor key."""

    return CommandPlan(
        "startProgramByKey",
        {"key": program_key},
        [StartProgram(program_key)],
        last_program=extract_enum(program_key),
        description=f"Starting program by key: {program_key}",
    )


def translate_start_program_with_options(
    catalog: ProgramCatalog,
    options: ApplianceOptions,
    program: str,
    drying_target: str | None = None,
    temperature: str | None = None,
) -> CommandPlan:
    """Start a program with a drying target and optional heat level.

    Unknown targets or temperatures are left out of the option list.
    """

    key = catalog.resolve_key(program)
    target = drying_target or options.default_drying_target
    vendor_options: list[VendorOption] = []
    if target in DRYING_TARGETS:
        vendor_options.append(VendorOption(OPTION_DRYING_TARGET, DRYING_TARGETS[target]))
    if temperature and temperature in DRYER_TEMPS:
        vendor_options.append(VendorOption(OPTION_TEMPERATURE, DRYER_TEMPS[temperature]))
    description = f"Starting {program}: target={target}"
    if temperature:
        description += f", temp={temperature}"
    return CommandPlan(
        "startProgramWithOptions",
        {"program": program, "target": target, "temp": temperature},
        [StartProgram(key, tuple(vendor_options))],
        last_program=program,
        description=description,
    )


def translate_start(catalog: ProgramCatalog, options: ApplianceOptions) -> CommandPlan:
    """Start the default program with the default drying target."""

    return translate_start_program_with_options(
        catalog, options, options.default_program, options.default_drying_target
    )


def translate_start_timed_dry(minutes: Any, temperature: str | None = None) -> CommandPlan:
    """Start the timed drying program for ``minutes``."""

    vendor_options = [
        VendorOption(OPTION_DURATION, minutes_to_seconds(minutes), "seconds")
    ]
    if temperature and temperature in DRYER_TEMPS:
        vendor_options.append(VendorOption(OPTION_TEMPERATURE, DRYER_TEMPS[temperature]))
    description = f"Starting timed dry: {minutes} minutes"
    if temperature:
        description += f" at {temperature}"
    return CommandPlan(
        "startTimedDry",
        {"minutes": minutes, "temp": temperature},
        [StartProgram(DRYER_PROGRAMS["TimedDry"], tuple(vendor_options))],
        last_program="TimedDry",
        description=description,
    )


def translate_start_delayed(
    catalog: ProgramCatalog, program: str, delay_minutes: Any
) -> CommandPlan:
    """Start ``program`` after ``delay_minutes``."""

    key = catalog.resolve_key(program)
    delay = VendorOption(
        OPTION_START_IN_RELATIVE, minutes_to_seconds(delay_minutes), "seconds"
    )
    return CommandPlan(
        "startDelayed",
        {"program": program, "delay": delay_minutes},
        [StartProgram(key, (delay,))],
        last_program=program,
        description=f"Starting {program} in {delay_minutes} minutes",
    )


def translate_set_drying_target(target: str) -> CommandPlan | None:
    """Change the drying target of the selected program."""

    if target not in DRYING_TARGETS:
        _LOGGER.warning("Unknown drying target: %s", target)
        return None
    return CommandPlan(
        "setDryingTarget",
        {"target": target},
        [SetSelectedProgramOption(OPTION_DRYING_TARGET, DRYING_TARGETS[target])],
        description=f"Setting drying target: {target}",
    )


def translate_set_wrinkle_guard(state: str) -> CommandPlan:
    """Enable or disable wrinkle guard for the selected program."""

    on = str(state).lower() == "on"
    return CommandPlan(
        "setWrinkleGuard",
        {"state": state},
        [SetSelectedProgramOption(OPTION_WRINKLE_GUARD, on)],
        description=f"Setting wrinkle guard: {'ON' if on else 'OFF'}",
    )


def translate_pause_program() -> CommandPlan:
    """Pause the running program."""

    return CommandPlan(
        "pauseProgram", dispatches=[SendCommand(COMMAND_PAUSE)], description="Pausing program"
    )


def translate_resume_program() -> CommandPlan:
    """Resume a paused program."""

    return CommandPlan(
        "resumeProgram",
        dispatches=[SendCommand(COMMAND_RESUME)],
        description="Resuming program",
    )


class DryerDevice(ApplianceDevice):
    """Home Connect tumble dryer."""

    APPLIANCE_TYPE = APPLIANCE_DRYER
    NAMESPACE = DRYER_NAMESPACE
    STATIC_PROGRAMS = DRYER_PROGRAMS
    SNAPSHOT_FIELDS = DRYER_SNAPSHOT_FIELDS
    ROUTER = DRYER_ROUTER
    INITIAL_ATTRIBUTES = {
        "numberOfButtons": NUMBER_OF_BUTTONS,
        "switch": "off",
        "contact": "closed",
    }
    COMMANDS = frozenset(
        {
            "get_available_programs",
            "start",
            "start_program",
            "start_program_by_key",
            "start_program_with_options",
            "start_timed_dry",
            "start_delayed",
            "stop_program",
            "pause_program",
            "resume_program",
            "set_drying_target",
            "set_wrinkle_guard",
            "set_power",
            "turn_on",
            "turn_off",
        }
    )

    def derive_friendly_status(self, attributes: Mapping[str, Any]) -> str:
        """Return the dryer status shown to users."""

        return derive_friendly_status(attributes)

    def turn_on(self) -> bool:
        """Power the dryer on."""

        return self.set_power("on")

    def turn_off(self) -> bool:
        """Power the dryer off."""

        return self.set_power("off")

    def start(self) -> bool:
        """Start the configured default program."""

        return self.execute(translate_start(self.catalog, self.options))

    def start_program(self, program: str | None = None) -> bool:
        """Start ``program`` or the default program."""

        return self.execute(translate_start_program(self.catalog, self.options, program))

    def start_program_by_key(self, program_key: str) -> bool:
        """Start a program by vendor key."""

        return self.execute(translate_start_program_by_key(program_key))

    def start_program_with_options(
        self,
        program: str,
        drying_target: str | None = None,
        temperature: str | None = None,
    ) -> bool:
        """Start a program with drying target and heat level."""

        return self.execute(
            translate_start_program_with_options(
                self.catalog, self.options, program, drying_target, temperature
            )
        )

    def start_timed_dry(self, minutes: Any, temperature: str | None = None) -> bool:
        """Start timed drying."""

        return self.execute(translate_start_timed_dry(minutes, temperature))

    def start_delayed(self, program: str, delay_minutes: Any) -> bool:
        """Start a program after a delay."""

        return self.execute(translate_start_delayed(self.catalog, program, delay_minutes))

    def pause_program(self) -> bool:
        """Pause the running program."""

        return self.execute(translate_pause_program())

    def resume_program(self) -> bool:
        """Resume the paused program."""

        return self.execute(translate_resume_program())

    def set_drying_target(self, target: str) -> bool:
        """Change the drying target."""

        return self.execute(translate_set_drying_target(target))

    def set_wrinkle_guard(self, state: str) -> bool:
        """Toggle wrinkle guard."""

        return self.execute(translate_set_wrinkle_guard(state))


__all__ = [
    "DRYER_PROGRAMS",
    "DRYER_ROUTER",
    "DRYER_RULES",
    "DRYER_SNAPSHOT_FIELDS",
    "DRYER_TEMPS",
    "DRYING_TARGETS",
    "PROGRAM_PHASES",
    "DryerDevice",
    "derive_friendly_status",
    "friendly_drying_target",
    "translate_set_drying_target",
    "translate_start",
    "translate_start_delayed",
    "translate_start_program",
    "translate_start_program_by_key",
    "translate_start_program_with_options",
    "translate_start_timed_dry",
]
