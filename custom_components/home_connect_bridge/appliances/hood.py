"""Range hood vocabulary, event rules and command translation."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import re
from typing import Any, Final

from ..codecs.common import (
    coerce_int,
    extract_enum,
    format_duration,
    minutes_to_seconds,
    to_bool,
)
from ..codecs.models import RawEvent
from ..const import APPLIANCE_HOOD
from ..domain.catalog import ProgramCatalog
from ..domain.commands import (
    CommandPlan,
    SetSetting,
    StartProgram,
    StopProgram,
    VendorOption,
)
from ..domain.router import EventRouter, EventRule, PatternRule
from ..domain.snapshot import SnapshotField
from .base import (
    COMMON_RULES,
    UNHANDLED_RULE,
    ApplianceDevice,
    handle_generic_option,
    require_value,
)

_LOGGER = logging.getLogger(__name__)

HOOD_NAMESPACE: Final = "Cooking.Hood"

HOOD_PROGRAMS: Final[Mapping[str, str]] = {
    "Automatic": "Cooking.Hood.Program.Automatic",
    "Venting": "Cooking.Hood.Program.Venting",
    "DelayedShutOff": "Cooking.Hood.Program.DelayedShutOff",
}

FAN_SPEEDS: Final[Mapping[str, str]] = {
    "off": "Cooking.Hood.EnumType.Stage.FanOff",
    "low": "Cooking.Hood.EnumType.Stage.FanStage01",
    "medium": "Cooking.Hood.EnumType.Stage.FanStage03",
    "high": "Cooking.Hood.EnumType.Stage.FanStage05",
    "auto": "Cooking.Hood.EnumType.Stage.FanStage03",
    "Fan1": "Cooking.Hood.EnumType.Stage.FanStage01",
    "Fan2": "Cooking.Hood.EnumType.Stage.FanStage02",
    "Fan3": "Cooking.Hood.EnumType.Stage.FanStage03",
    "Fan4": "Cooking.Hood.EnumType.Stage.FanStage04",
    "Fan5": "Cooking.Hood.EnumType.Stage.FanStage05",
    "FanIntensive": "Cooking.Hood.EnumType.IntensiveStage.IntensiveStage1",
}

VENTING_LEVELS: Final[Mapping[str, tuple[str, int]]] = {
    "FanOff": ("off", 0),
    "FanStage01": ("low", 1),
    "FanStage02": ("medium-low", 2),
    "FanStage03": ("medium", 3),
    "FanStage04": ("medium-high", 4),
    "FanStage05": ("high", 5),
}

AMBIENT_LIGHT_COLOR_PREFIX: Final = "Cooking.Hood.EnumType.AmbientLightColor"
AMBIENT_LIGHT_COLOR_PATTERN: Final = re.compile(r"CustomColor|Color\d+")

SETTING_VENTING_LEVEL: Final = "Cooking.Hood.Setting.VentingLevel"
SETTING_INTENSIVE_LEVEL: Final = "Cooking.Hood.Setting.IntensiveLevel"
SETTING_LIGHTING: Final = "Cooking.Common.Setting.Lighting"
SETTING_LIGHTING_BRIGHTNESS: Final = "Cooking.Common.Setting.LightingBrightness"
SETTING_AMBIENT_ENABLED: Final = "Cooking.Hood.Setting.AmbientLightEnabled"
SETTING_AMBIENT_BRIGHTNESS: Final = "Cooking.Hood.Setting.AmbientLightBrightness"
SETTING_AMBIENT_COLOR: Final = "Cooking.Hood.Setting.AmbientLightColor"
OPTION_DURATION: Final = "BSH.Common.Option.Duration"

INTENSIVE_OFF: Final = "IntensiveStageOff"
INTENSIVE_FAN_LEVEL: Final = 6
MAX_FAN_LEVEL: Final = 5
MAX_BRIGHTNESS: Final = 100


# --- Derived state ---


def derive_friendly_status(attributes: Mapping[str, Any]) -> str:
    """Return the hood status shown to users."""

    raw_level = attributes.get("fanLevel")
    fan_level = coerce_int(raw_level) if raw_level is not None else 0
    if fan_level >= INTENSIVE_FAN_LEVEL:
        return "Intensive"
    if fan_level >= 5:
        return "High"
    if fan_level >= 3:
        return "Medium"
    if fan_level > 0:
        return "Low"
    if attributes.get("functionalLightState") == "On":
        return "Light Only"
    return "Off"


# --- Event rules ---


def handle_operation_state(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the operation state."""

    device.set_attr("operationState", extract_enum(require_value(event)))


def handle_venting_level(device: ApplianceDevice, event: RawEvent) -> None:
    """Map the venting stage to speed, level and switch attributes."""

    vent_level = extract_enum(require_value(event))
    device.set_attr("ventingLevel", vent_level)
    mapping = VENTING_LEVELS.get(vent_level)
    if mapping is None:
        _LOGGER.debug("%s: Unknown venting level %s", device.name, vent_level)
        return
    speed, level = mapping
    device.attributes.update(
        {
            "speed": speed,
            "fanSpeed": speed,
            "fanLevel": level,
            "switch": "on" if level > 0 else "off",
        }
    )


def handle_intensive_level(device: ApplianceDevice, event: RawEvent) -> None:
    """Track the intensive stage, which overrides the venting stage."""

    intensive = extract_enum(require_value(event))
    device.set_attr("intensiveLevel", intensive)
    if intensive != INTENSIVE_OFF:
        device.attributes.update(
            {
                "fanSpeed": "intensive",
                "speed": "high",
                "fanLevel": INTENSIVE_FAN_LEVEL,
                "switch": "on",
            }
        )


def handle_lighting(device: ApplianceDevice, event: RawEvent) -> None:
    device.set_attr("functionalLightState", "On" if to_bool(event.value) else "Off")


def handle_lighting_brightness(device: ApplianceDevice, event: RawEvent) -> None:
    brightness = coerce_int(require_value(event))
    device.set_attr("functionalLightBrightness", brightness)
    device.set_attr("level", brightness)


def handle_ambient_enabled(device: ApplianceDevice, event: RawEvent) -> None:
    device.set_attr("ambientLightState", "On" if to_bool(event.value) else "Off")


def handle_ambient_brightness(device: ApplianceDevice, event: RawEvent) -> None:
    device.set_attr("ambientLightBrightness", coerce_int(require_value(event)))


def handle_ambient_color(device: ApplianceDevice, event: RawEvent) -> None:
    device.set_attr("ambientLightColor", extract_enum(require_value(event)))


def handle_remaining_time(device: ApplianceDevice, event: RawEvent) -> None:
    """Track the delayed shut-off countdown."""

    seconds = coerce_int(require_value(event))
    device.set_attr("delayedShutOffRemaining", seconds)
    device.set_attr("delayedShutOffRemainingFormatted", format_duration(seconds))


HOOD_RULES: Final[Mapping[str, EventRule]] = {
    **COMMON_RULES,
    "BSH.Common.Status.OperationState": EventRule(
        "operation_state", handle_operation_state, derived=True, snapshot=True
    ),
    SETTING_VENTING_LEVEL: EventRule(
        "venting_level", handle_venting_level, derived=True, snapshot=True
    ),
    SETTING_INTENSIVE_LEVEL: EventRule(
        "intensive_level", handle_intensive_level, derived=True, snapshot=True
    ),
    SETTING_LIGHTING: EventRule(
        "lighting", handle_lighting, derived=True, snapshot=True
    ),
    SETTING_LIGHTING_BRIGHTNESS: EventRule(
        "lighting_brightness", handle_lighting_brightness, snapshot=True
    ),
    SETTING_AMBIENT_ENABLED: EventRule(
        "ambient_light_enabled", handle_ambient_enabled, snapshot=True
    ),
    SETTING_AMBIENT_BRIGHTNESS: EventRule(
        "ambient_light_brightness", handle_ambient_brightness, snapshot=True
    ),
    SETTING_AMBIENT_COLOR: EventRule(
        "ambient_light_color", handle_ambient_color, snapshot=True
    ),
    "BSH.Common.Option.RemainingProgramTime": EventRule(
        "remaining_program_time", handle_remaining_time, snapshot=True
    ),
}

HOOD_ROUTER: Final[EventRouter[Any]] = EventRouter(
    HOOD_RULES,
    [
        PatternRule.prefix(
            "Cooking.Hood.Setting",
            EventRule("hood_setting", handle_generic_option),
        )
    ],
    UNHANDLED_RULE,
)

HOOD_SNAPSHOT_FIELDS: Final[tuple[SnapshotField, ...]] = (
    SnapshotField("operationState"),
    SnapshotField("powerState"),
    SnapshotField("friendlyStatus"),
    SnapshotField("fanSpeed"),
    SnapshotField("fanLevel"),
    SnapshotField("ventingLevel"),
    SnapshotField("intensiveLevel"),
    SnapshotField("functionalLightState"),
    SnapshotField("functionalLightBrightness"),
    SnapshotField("ambientLightState"),
    SnapshotField("ambientLightBrightness"),
    SnapshotField("ambientLightColor"),
    SnapshotField("activeProgram"),
    SnapshotField("delayedShutOffRemaining"),
    SnapshotField("remoteControlStartAllowed"),
)


# --- Command translation ---


def _clamp(value: Any, upper: int) -> int:
    """Truncate ``value`` to an integer within ``0..upper``."""

    return min(max(coerce_int(value), 0), upper)


def translate_set_fan_speed(speed: str) -> CommandPlan | None:
    """Set the venting stage, or the intensive stage for ``FanIntensive``."""

    if speed not in FAN_SPEEDS:
        _LOGGER.warning("Unknown fan speed: %s", speed)
        return None
    setting = SETTING_INTENSIVE_LEVEL if speed == "FanIntensive" else SETTING_VENTING_LEVEL
    return CommandPlan(
        "setFanSpeed",
        {"speed": speed},
        [SetSetting(setting, FAN_SPEEDS[speed])],
        description=f"Setting fan speed: {speed}",
    )


def translate_set_fan_level(level: Any) -> CommandPlan | None:
    """Set the fan by numeric stage, clamped to ``0..5``."""

    stage = _clamp(level, MAX_FAN_LEVEL)
    return translate_set_fan_speed("off" if stage == 0 else f"Fan{stage}")


def translate_start_program(catalog: ProgramCatalog, program: str | None = None) -> CommandPlan:
    """Start a hood program, venting by default."""

    selected = program or "Venting"
    key = catalog.resolve_key(selected)
    return CommandPlan(
        "startProgram",
        {"program": selected, "key": key},
        [StartProgram(key)],
        description=f"Starting program: {selected}",
    )


def _switch_plan(command: str, setting: str, state: str, label: str) -> CommandPlan:
    on = str(state).lower() == "on"
    return CommandPlan(
        command,
        {"state": state},
        [SetSetting(setting, on)],
        description=f"Setting {label}: {'ON' if on else 'OFF'}",
    )


def translate_set_light(state: str) -> CommandPlan:
    """Switch the functional light."""

    return _switch_plan("setLight", SETTING_LIGHTING, state, "functional light")


def translate_set_ambient_light(state: str) -> CommandPlan:
    """Switch the ambient light."""

    return _switch_plan("setAmbientLight", SETTING_AMBIENT_ENABLED, state, "ambient light")


def translate_set_light_brightness(brightness: Any) -> CommandPlan:
    """Set the functional light brightness, clamped to ``0..100``."""

    level = _clamp(brightness, MAX_BRIGHTNESS)
    return CommandPlan(
        "setLightBrightness",
        {"brightness": level},
        [SetSetting(SETTING_LIGHTING_BRIGHTNESS, level)],
        description=f"Setting functional light brightness: {level}%",
    )


def translate_set_ambient_light_brightness(brightness: Any) -> CommandPlan:
    """Set the ambient light brightness, clamped to ``0..100``."""

    level = _clamp(brightness, MAX_BRIGHTNESS)
    return CommandPlan(
        "setAmbientLightBrightness",
        {"brightness": level},
        [SetSetting(SETTING_AMBIENT_BRIGHTNESS, level)],
        description=f"Setting ambient light brightness: {level}%",
    )


def translate_set_ambient_light_color(color: str) -> CommandPlan | None:
    """Set the ambient light colour."""

    color = str(color).strip()
    if not AMBIENT_LIGHT_COLOR_PATTERN.fullmatch(color):
        _LOGGER.warning("Unknown ambient light color: %s", color)
        return None
    return CommandPlan(
        "setAmbientLightColor",
        {"color": color},
        [SetSetting(SETTING_AMBIENT_COLOR, f"{AMBIENT_LIGHT_COLOR_PREFIX}.{color}")],
        description=f"Setting ambient light color: {color}",
    )


def translate_set_delayed_shut_off(catalog: ProgramCatalog, minutes: Any) -> CommandPlan:
    """Run the fan for ``minutes`` then switch off; zero cancels."""

    seconds = minutes_to_seconds(minutes)
    if seconds > 0:
        dispatch = StartProgram(
            catalog.resolve_key("DelayedShutOff"),
            (VendorOption(OPTION_DURATION, seconds, "seconds"),),
        )
    else:
        dispatch = StopProgram()
    return CommandPlan(
        "setDelayedShutOff",
        {"minutes": minutes},
        [dispatch],
        description=f"Setting delayed shut-off: {minutes} minutes",
    )


class HoodDevice(ApplianceDevice):
    """Home Connect range hood."""

    APPLIANCE_TYPE = APPLIANCE_HOOD
    NAMESPACE = HOOD_NAMESPACE
    STATIC_PROGRAMS = HOOD_PROGRAMS
    SNAPSHOT_FIELDS = HOOD_SNAPSHOT_FIELDS
    ROUTER = HOOD_ROUTER
    INITIAL_ATTRIBUTES = {"fanLevel": 0, "speed": "off"}
    COMMANDS = frozenset(
        {
            "get_available_programs",
            "set_fan_speed",
            "set_speed",
            "fan_off",
            "fan_low",
            "fan_medium",
            "fan_high",
            "fan_intensive",
            "fan_auto",
            "set_fan_level",
            "start_program",
            "stop_program",
            "set_light",
            "set_light_brightness",
            "set_level",
            "set_ambient_light",
            "set_ambient_light_brightness",
            "set_ambient_light_color",
            "set_delayed_shut_off",
            "set_power",
            "turn_on",
            "turn_off",
        }
    )

    def derive_friendly_status(self, attributes: Mapping[str, Any]) -> str:
        return derive_friendly_status(attributes)

    def set_fan_speed(self, speed: str) -> bool:
        """Set the fan by speed name."""

        return self.execute(translate_set_fan_speed(speed))

    def set_speed(self, speed: str) -> bool:
        return self.set_fan_speed(speed)

    def fan_off(self) -> bool:
        return self.set_fan_speed("off")

    def fan_low(self) -> bool:
        return self.set_fan_speed("Fan1")

    def fan_medium(self) -> bool:
        return self.set_fan_speed("Fan3")

    def fan_high(self) -> bool:
        return self.set_fan_speed("Fan5")

    def fan_intensive(self) -> bool:
        return self.set_fan_speed("FanIntensive")

    def fan_auto(self) -> bool:
        return self.set_fan_speed("Fan3")

    def turn_on(self) -> bool:
        """Switch the fan on at the lowest stage."""

        return self.fan_low()

    def turn_off(self) -> bool:
        """Switch the fan off."""

        return self.fan_off()

    def set_fan_level(self, level: Any) -> bool:
        """Set the fan by numeric stage."""

        return self.execute(translate_set_fan_level(level))

    def start_program(self, program: str | None = None) -> bool:
        """Start a hood program."""

        return self.execute(translate_start_program(self.catalog, program))

    def set_light(self, state: str) -> bool:
        return self.execute(translate_set_light(state))

    def set_light_brightness(self, brightness: Any) -> bool:
        return self.execute(translate_set_light_brightness(brightness))

    def set_level(self, level: Any, duration: Any = None) -> bool:
        """Dimmer entry point; controls the functional light brightness."""

        return self.set_light_brightness(level)

    def set_ambient_light(self, state: str) -> bool:
        return self.execute(translate_set_ambient_light(state))

    def set_ambient_light_brightness(self, brightness: Any) -> bool:
        return self.execute(translate_set_ambient_light_brightness(brightness))

    def set_ambient_light_color(self, color: str) -> bool:
        return self.execute(translate_set_ambient_light_color(color))

    def set_delayed_shut_off(self, minutes: Any) -> bool:
        """Schedule the fan to switch off after ``minutes``."""

        return self.execute(translate_set_delayed_shut_off(self.catalog, minutes))


__all__ = [
    "AMBIENT_LIGHT_COLOR_PATTERN",
    "FAN_SPEEDS",
    "HOOD_PROGRAMS",
    "HOOD_ROUTER",
    "HOOD_RULES",
    "HOOD_SNAPSHOT_FIELDS",
    "VENTING_LEVELS",
    "HoodDevice",
    "derive_friendly_status",
    "translate_set_ambient_light_color",
    "translate_set_delayed_shut_off",
    "translate_set_fan_level",
    "translate_set_fan_speed",
    "translate_set_light_brightness",
    "translate_start_program",
]
