"""Appliance device base shared by every vocabulary."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, tzinfo
import inspect
import logging
from typing import Any, ClassVar

from homeassistant.util import dt as dt_util

from ..backend.base import ApplianceConnector, DeviceRef, NullConnector
from ..codecs.common import CoercionError, extract_enum, truncate
from ..codecs.events import (
    active_program_name,
    active_program_options,
    decode_active_program,
    decode_event_batch,
    decode_item_list,
    decode_program_list,
)
from ..codecs.models import RawEvent
from ..const import (
    ATTRIBUTE_TEXT_LIMIT,
    CONF_DEFAULT_DRYING_TARGET,
    CONF_DEFAULT_PROGRAM,
    CONF_LOG_RAW_EVENTS,
    CONF_MAX_RECENT_EVENTS,
    DEFAULT_MAX_RECENT_EVENTS,
    DEFAULT_RECENT_EVENTS_DUMP,
    DRIVER_VERSION,
    MAX_RECENT_EVENTS_LIMIT,
    PROGRAM_FETCH_DELAY,
    TIMESTAMP_FORMAT,
)
from ..domain.catalog import ProgramCatalog
from ..domain.commands import CommandPlan, FetchPrograms, SetPowerState, StopProgram
from ..domain.router import EventRouter, EventRule
from ..domain.snapshot import SnapshotField, serialize_snapshot
from ..domain.state import AttributeStore, AttributeValue, DeviceState

_LOGGER = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]
UpdateListener = Callable[[], None]


@dataclass(frozen=True, slots=True)
class ButtonPush:
    """One-shot pulse signal emitted for completions and alerts."""

    index: int
    description: str


PushListener = Callable[[ButtonPush], None]


@dataclass(frozen=True, slots=True)
class ApplianceOptions:
    """User-tunable behaviour of a device."""

    max_recent_events: int = DEFAULT_MAX_RECENT_EVENTS
    log_raw_events: bool = False
    default_program: str = "Cotton"
    default_drying_target: str = "CupboardDry"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> ApplianceOptions:
        """Build options from a config entry options mapping."""

        options = cls()
        if not data:
            return options
        raw_max = data.get(CONF_MAX_RECENT_EVENTS)
        if raw_max is not None:
            try:
                max_events = int(raw_max)
            except (TypeError, ValueError):
                max_events = DEFAULT_MAX_RECENT_EVENTS
            options = replace(
                options,
                max_recent_events=min(max(max_events, 0), MAX_RECENT_EVENTS_LIMIT),
            )
        if CONF_LOG_RAW_EVENTS in data:
            options = replace(options, log_raw_events=bool(data[CONF_LOG_RAW_EVENTS]))
        if data.get(CONF_DEFAULT_PROGRAM):
            options = replace(options, default_program=str(data[CONF_DEFAULT_PROGRAM]))
        if data.get(CONF_DEFAULT_DRYING_TARGET):
            options = replace(
                options,
                default_drying_target=str(data[CONF_DEFAULT_DRYING_TARGET]),
            )
        return options


def value_text(value: Any) -> str:
    """Render a raw scalar the way the vendor API spells it."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def require_value(event: RawEvent) -> Any:
    """Return the event value, rejecting ``None``."""

    if event.value is None:
        raise CoercionError(f"{event.key} has no value")
    return event.value


def lower_first(name: str) -> str:
    """Lower-case the first character of an attribute name."""

    return name[:1].lower() + name[1:]


# --- Rules shared by every appliance ---


def handle_remote_start_allowed(device: ApplianceDevice, event: RawEvent) -> None:
    """Mirror whether a remote start is currently allowed."""

    device.set_attr("remoteControlStartAllowed", value_text(require_value(event)))


def handle_remote_control_active(device: ApplianceDevice, event: RawEvent) -> None:
    """Mirror whether remote control is enabled."""

    device.set_attr("remoteControlActive", value_text(require_value(event)))


def handle_local_control_active(device: ApplianceDevice, event: RawEvent) -> None:
    """Mirror whether the appliance is being operated locally."""

    device.set_attr("localControlActive", value_text(require_value(event)))


def handle_power_state(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the power state enumeration."""

    device.set_attr("powerState", extract_enum(require_value(event)))


def handle_active_program(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the active program display name."""

    device.set_attr(
        "activeProgram", event.displayvalue or extract_enum(require_value(event))
    )


def handle_selected_program(device: ApplianceDevice, event: RawEvent) -> None:
    """Store the selected program display name."""

    device.set_attr(
        "selectedProgram", event.displayvalue or extract_enum(require_value(event))
    )


def handle_generic_option(device: ApplianceDevice, event: RawEvent) -> None:
    """Write a same-named attribute for options without a dedicated rule."""

    assert event.key is not None
    name = lower_first(extract_enum(event.key))
    value = require_value(event)
    if isinstance(value, str):
        value = extract_enum(value)
    elif not isinstance(value, (int, float, bool)):
        value = str(value)
    _LOGGER.debug("%s: Option %s = %s", device.name, name, value)
    device.set_attr(name, value)


def handle_unhandled(device: ApplianceDevice, event: RawEvent) -> None:
    """Record an event no rule understands."""

    key = event.key or ""
    _LOGGER.debug("%s: Unhandled event: %s = %s", device.name, key, event.value)
    device.set_attr(
        "lastUnhandledEvent",
        truncate(f"{key}={value_text(event.value)}", ATTRIBUTE_TEXT_LIMIT),
    )
    device.set_attr("lastUnhandledEventTime", device.timestamp())
    if "Event." in key or "Status." in key:
        _LOGGER.info(
            "%s: UNHANDLED SIGNIFICANT EVENT: %s = %s - Please report this",
            device.name,
            key,
            event.value,
        )


COMMON_RULES: Mapping[str, EventRule] = {
    "BSH.Common.Status.RemoteControlStartAllowed": EventRule(
        "remote_start_allowed", handle_remote_start_allowed, snapshot=True
    ),
    "BSH.Common.Status.RemoteControlActive": EventRule(
        "remote_control_active", handle_remote_control_active
    ),
    "BSH.Common.Status.LocalControlActive": EventRule(
        "local_control_active", handle_local_control_active
    ),
    "BSH.Common.Setting.PowerState": EventRule(
        "power_state", handle_power_state, snapshot=True
    ),
    "BSH.Common.Root.ActiveProgram": EventRule(
        "active_program", handle_active_program, derived=True, snapshot=True
    ),
    "BSH.Common.Root.SelectedProgram": EventRule(
        "selected_program", handle_selected_program
    ),
}

UNHANDLED_RULE = EventRule("unhandled", handle_unhandled)


class ApplianceDevice:
    """Device actor owning one appliance's state.

    Every public method is an entry point that runs to completion; callers
    must not invoke them concurrently for the same device.
    """

    APPLIANCE_TYPE: ClassVar[str] = ""
    NAMESPACE: ClassVar[str] = ""
    STATIC_PROGRAMS: ClassVar[Mapping[str, str]] = {}
    SNAPSHOT_FIELDS: ClassVar[tuple[SnapshotField, ...]] = ()
    ROUTER: ClassVar[EventRouter[Any]]
    COMMANDS: ClassVar[frozenset[str]] = frozenset()
    INITIAL_ATTRIBUTES: ClassVar[Mapping[str, AttributeValue]] = {}

    def __init__(
        self,
        ha_id: str,
        name: str,
        *,
        connector: ApplianceConnector | None = None,
        options: ApplianceOptions | None = None,
        clock: Callable[[], datetime] | None = None,
        time_zone: tzinfo | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialise the device with empty state."""

        self._ref = DeviceRef(ha_id=ha_id, name=name, appliance_type=self.APPLIANCE_TYPE)
        self._connector: ApplianceConnector = connector or NullConnector()
        self._options = options or ApplianceOptions()
        self._clock = clock or dt_util.utcnow
        self._time_zone = time_zone
        self._scheduler = scheduler
        self._state = DeviceState(
            catalog=ProgramCatalog(self.NAMESPACE, self.STATIC_PROGRAMS),
            max_recent_events=self._options.max_recent_events,
        )
        self._listeners: list[UpdateListener] = []
        self._push_listeners: list[PushListener] = []

    # --- Properties ---

    @property
    def name(self) -> str:
        """Return the display name."""

        return self._ref.name

    @property
    def ref(self) -> DeviceRef:
        """Return the connector-facing device reference."""

        return self._ref

    @property
    def state(self) -> DeviceState:
        """Return the device state aggregate."""

        self._state.ensure_initialized()
        return self._state

    @property
    def attributes(self) -> AttributeStore:
        """Return the attribute store."""

        attributes = self.state.attributes
        assert attributes is not None
        return attributes

    @property
    def catalog(self) -> ProgramCatalog:
        """Return the program catalog."""

        return self._state.catalog

    @property
    def options(self) -> ApplianceOptions:
        """Return the active options."""

        return self._options

    @property
    def connector(self) -> ApplianceConnector:
        """Return the connector used for outbound calls."""

        return self._connector

    @connector.setter
    def connector(self, connector: ApplianceConnector | None) -> None:
        """Swap the connector; ``None`` installs the no-op connector."""

        self._connector = connector or NullConnector()

    @property
    def time_zone(self) -> tzinfo:
        """Return the configured time zone, falling back to the hub default."""

        return self._time_zone or dt_util.DEFAULT_TIME_ZONE

    # --- Listener registration ---

    def add_listener(self, listener: UpdateListener) -> Callable[[], None]:
        """Register a callback run after every state-changing entry point."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def add_push_listener(self, listener: PushListener) -> Callable[[], None]:
        """Register a callback receiving button pulses."""

        self._push_listeners.append(listener)

        def _remove() -> None:
            if listener in self._push_listeners:
                self._push_listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        """Tell listeners the state changed."""

        for listener in list(self._listeners):
            listener()

    # --- Helpers used by rules ---

    def now(self) -> datetime:
        """Return the current time in the configured zone."""

        return self._clock().astimezone(self.time_zone)

    def timestamp(self) -> str:
        """Return the current time formatted for attributes."""

        return self.now().strftime(TIMESTAMP_FORMAT)

    def get_attr(self, name: str, default: Any = None) -> Any:
        """Return an attribute value."""

        return self.attributes.get(name, default)

    def set_attr(self, name: str, value: AttributeValue | None) -> None:
        """Write an attribute value."""

        self.attributes.set(name, value)

    def push_button(self, index: int, description: str) -> None:
        """Emit a one-shot button pulse."""

        _LOGGER.info("%s: %s - pushing button %d", self.name, description, index)
        push = ButtonPush(index=index, description=description)
        for listener in list(self._push_listeners):
            listener(push)

    def send_alert(self, alert_type: str, message: str) -> None:
        """Record the most recent alert."""

        self.set_attr("lastAlert", f"{alert_type}: {message}")
        self.set_attr("lastAlertTime", self.timestamp())
        _LOGGER.info("%s: Alert: %s - %s", self.name, alert_type, message)

    def estimated_end(self, remaining_seconds: int) -> str:
        """Return the wall-clock completion time for ``remaining_seconds``."""

        end = self.now() + timedelta(seconds=remaining_seconds)
        return end.strftime("%I:%M %p").lstrip("0")

    # --- Routing context ---

    def record_event(self, event: RawEvent) -> None:
        """Record the raw event in the diagnostic bookkeeping."""

        telemetry = self.state.telemetry
        assert telemetry is not None
        telemetry.record(event.key, event.value, event.displayvalue, self.timestamp())

    def refresh_derived_state(self) -> None:
        """Recompute ``friendlyStatus`` from the current attributes."""

        try:
            self.set_attr("friendlyStatus", self.derive_friendly_status(self.attributes))
        except Exception:  # noqa: BLE001
            _LOGGER.warning("%s: Error updating derived state", self.name, exc_info=True)

    def refresh_snapshot(self) -> None:
        """Re-serialise the ``jsonState`` snapshot."""

        try:
            self.set_attr(
                "jsonState",
                serialize_snapshot(self.attributes, self.SNAPSHOT_FIELDS, self.now()),
            )
        except Exception:  # noqa: BLE001
            _LOGGER.warning("%s: Error updating JSON state", self.name, exc_info=True)

    def derive_friendly_status(self, attributes: Mapping[str, Any]) -> str:
        """Return the human readable status for ``attributes``."""

        raise NotImplementedError

    # --- Lifecycle ---

    def installed(self) -> None:
        """Initialise a freshly added device."""

        _LOGGER.info("%s: Installed", self.name)
        self.state.ensure_initialized()
        self.set_attr("driverVersion", DRIVER_VERSION)
        self.set_attr("eventPresentState", "Off")
        self.attributes.update(self.INITIAL_ATTRIBUTES)
        self._notify()

    def updated(self, options: ApplianceOptions | None = None) -> None:
        """Apply changed options."""

        _LOGGER.info("%s: Updated", self.name)
        if options is not None:
            self._options = options
            self._state.max_recent_events = options.max_recent_events
        self.state.ensure_initialized()
        self.set_attr("driverVersion", DRIVER_VERSION)
        self._notify()

    def configure(self) -> None:
        """Re-initialise bookkeeping structures."""

        _LOGGER.info("%s: Configuring", self.name)
        self.state.ensure_initialized()
        self.set_attr("driverVersion", DRIVER_VERSION)
        self._notify()

    def initialize(self) -> Callable[[], None] | None:
        """Request a status refresh and schedule the program catalog fetch.

        Returns the scheduler's cancel handle for the pending fetch, if any.
        """

        _LOGGER.info("%s: Initializing", self.name)
        self.state.ensure_initialized()
        self._connector.initialize_status(self._ref)
        if self._scheduler is None:
            _LOGGER.debug("%s: No scheduler; program fetch not scheduled", self.name)
            return None
        cancel = self._scheduler(PROGRAM_FETCH_DELAY, self.get_available_programs)
        return cancel if callable(cancel) else None

    def refresh(self) -> None:
        """Request status and programs immediately."""

        _LOGGER.info("%s: Refreshing", self.name)
        self.state.ensure_initialized()
        self._connector.initialize_status(self._ref)
        self.get_available_programs()

    def restore(self, data: Mapping[str, Any] | None) -> None:
        """Load persisted state."""

        self._state.restore(data)
        self._notify()

    # --- Inbound events ---

    def _route(self, events: Iterable[RawEvent]) -> int:
        """Route events in order and return how many were processed."""

        self.state.ensure_initialized()
        count = 0
        for event in events:
            if self._options.log_raw_events:
                _LOGGER.debug("%s: RAW EVENT: %r", self.name, event)
            _LOGGER.debug("%s: Event: %s = %s", self.name, event.key, event.value)
            if self.ROUTER.route(self, event) is not None:
                count += 1
        return count

    def parse_event(self, raw: Any) -> int:
        """Process one event, or a batch expanded into single events."""

        count = self._route(decode_event_batch(raw))
        if count:
            self._notify()
        return count

    def parse_status(self, raw: Any) -> int:
        """Process a status item list."""

        _LOGGER.debug("%s: Parsing status", self.name)
        count = self._route(decode_item_list(raw))
        if count:
            self._notify()
        return count

    def parse_settings(self, raw: Any) -> int:
        """Process a settings item list."""

        _LOGGER.debug("%s: Parsing settings", self.name)
        count = self._route(decode_item_list(raw))
        if count:
            self._notify()
        return count

    def parse_available_programs(self, raw: Any) -> list[str]:
        """Replace the discovered program catalog."""

        _LOGGER.debug("%s: Parsing available programs", self.name)
        programs = decode_program_list(raw)
        names = self.catalog.replace_discovered(
            (program.name, program.key) for program in programs
        )
        _LOGGER.info(
            "%s: Found %d available programs: %s",
            self.name,
            len(names),
            ", ".join(names),
        )
        self.set_attr("availableProgramsList", ", ".join(names))
        self._notify()
        return names

    def parse_available_options(self, raw: Any) -> None:
        """Log the options offered for a program."""

        _LOGGER.debug("%s: Parsing available options: %.500s", self.name, raw)

    def parse_active_program(self, raw: Any) -> None:
        """Process an active-program payload and its options."""

        _LOGGER.debug("%s: Parsing active program", self.name)
        payload = decode_active_program(raw)
        if payload is None:
            return
        name = active_program_name(payload)
        if name:
            self.set_attr("activeProgram", name)
        self._route(active_program_options(payload))
        self.refresh_derived_state()
        self.refresh_snapshot()
        self._notify()

    def update_event_stream_status(self, status: str) -> None:
        """Store the connector's event stream status."""

        _LOGGER.debug("%s: Event stream status: %s", self.name, status)
        self.set_attr("eventStreamStatus", status)
        self._notify()

    def update_event_present_state(self, event_state: str) -> None:
        """Store the connector's event presence state."""

        self.set_attr("eventPresentState", event_state)
        self._notify()

    def update_command_status(self, status: str) -> None:
        """Store the outcome the connector reported for the last command."""

        self.set_attr("lastCommandStatus", truncate(status, ATTRIBUTE_TEXT_LIMIT))
        self._notify()

    def device_log(self, level: str, message: str) -> None:
        """Log a message on behalf of the connector."""

        log_level = logging.getLevelName(str(level).upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
        _LOGGER.log(log_level, "%s: %s", self.name, message)

    # --- Commands ---

    def execute(self, plan: CommandPlan | None) -> bool:
        """Record and dispatch a translated command.

        Returns ``False`` when translation rejected the command.
        """

        if plan is None:
            return False
        if plan.description:
            _LOGGER.info("%s: %s", self.name, plan.description)
        self.set_attr("lastCommandSent", truncate(plan.summary, ATTRIBUTE_TEXT_LIMIT))
        self.set_attr("lastCommandTime", self.timestamp())
        _LOGGER.debug("%s: Command sent: %s", self.name, plan.summary)
        if plan.last_program:
            self.set_attr("lastProgram", plan.last_program)
        self._notify()
        for dispatch in plan.dispatches:
            dispatch.send(self._connector, self._ref)
        return True

    def run_command(self, command: str, parameters: Mapping[str, Any] | None = None) -> bool:
        """Invoke a named user command with keyword parameters."""

        if command not in self.COMMANDS:
            raise ValueError(f"Unsupported command for {self.APPLIANCE_TYPE}: {command}")
        method = getattr(self, command)
        kwargs = dict(parameters or {})
        try:
            inspect.signature(method).bind(**kwargs)
        except TypeError as err:
            raise ValueError(f"Invalid parameters for {command}: {err}") from err
        return bool(method(**kwargs))

    def get_available_programs(self) -> bool:
        """Ask the connector for the program list."""

        return self.execute(
            CommandPlan(
                "getAvailablePrograms",
                dispatches=[FetchPrograms()],
                description="Fetching available programs",
            )
        )

    def stop_program(self) -> bool:
        """Stop the active program."""

        return self.execute(
            CommandPlan(
                "stopProgram", dispatches=[StopProgram()], description="Stopping program"
            )
        )

    def set_power(self, state: str) -> bool:
        """Switch the appliance on (``"on"``) or off."""

        on = state == "on"
        return self.execute(
            CommandPlan(
                "setPower",
                {"state": state},
                [SetPowerState(on)],
                description=f"Setting power: {'ON' if on else 'OFF'}",
            )
        )

    # --- Diagnostics ---

    def dump_state(self) -> dict[str, Any]:
        """Log and return every current attribute and bookkeeping summary."""

        state = self.state
        assert state.telemetry is not None
        dump = {
            "driver_version": DRIVER_VERSION,
            "ha_id": self._ref.ha_id,
            "appliance_type": self.APPLIANCE_TYPE,
            "attributes": self.attributes.as_dict(),
            "program_map": {
                entry.name: entry.vendor_key for entry in self.catalog.discovered_entries
            },
            "program_names": self.catalog.discovered_names,
            "discovered_keys_count": len(state.telemetry.discovered_keys),
            "recent_events_count": len(state.telemetry.recent_events),
            "options": {
                "max_recent_events": self._options.max_recent_events,
                "log_raw_events": self._options.log_raw_events,
                "default_program": self._options.default_program,
                "default_drying_target": self._options.default_drying_target,
            },
        }
        _LOGGER.info("%s: === DEVICE STATE DUMP ===", self.name)
        for attr_name, value in sorted(dump["attributes"].items()):
            _LOGGER.info("%s:   %s: %s", self.name, attr_name, value)
        _LOGGER.info(
            "%s:   programNames: %s",
            self.name,
            ", ".join(dump["program_names"]) or "none",
        )
        _LOGGER.info(
            "%s:   discoveredKeys count: %d, recentEvents count: %d",
            self.name,
            dump["discovered_keys_count"],
            dump["recent_events_count"],
        )
        _LOGGER.info("%s: === END STATE DUMP ===", self.name)
        return dump

    def discovered_keys(self) -> list[dict[str, Any]]:
        """Return discovered key statistics sorted by key."""

        telemetry = self.state.telemetry
        assert telemetry is not None
        return [
            telemetry.discovered_keys[key].as_dict()
            for key in sorted(telemetry.discovered_keys)
        ]

    def get_discovered_keys(self) -> list[dict[str, Any]]:
        """Log the discovered keys and publish their count."""

        keys = self.discovered_keys()
        _LOGGER.info("%s: === DISCOVERED EVENT KEYS (%d) ===", self.name, len(keys))
        for stat in keys:
            _LOGGER.info(
                "%s:   %s last=%s count=%d first=%s last_seen=%s",
                self.name,
                stat["key"],
                stat["last_value"],
                stat["count"],
                stat["first_seen"],
                stat["last_seen"],
            )
        self.set_attr("discoveredKeysCount", len(keys))
        self._notify()
        return keys

    def clear_discovered_keys(self) -> None:
        """Forget every discovered key."""

        _LOGGER.info("%s: Clearing discovered keys", self.name)
        telemetry = self.state.telemetry
        assert telemetry is not None
        telemetry.clear_discovered()
        self.set_attr("discoveredKeysCount", 0)
        self._notify()

    def recent_events(self, count: int | None = DEFAULT_RECENT_EVENTS_DUMP) -> list[dict[str, Any]]:
        """Log and return the ``count`` most recent raw events."""

        telemetry = self.state.telemetry
        assert telemetry is not None
        num = int(count) if count else DEFAULT_RECENT_EVENTS_DUMP
        events = telemetry.recent_events
        shown = [record.as_dict() for record in events[:num]]
        _LOGGER.info("%s: === RECENT EVENTS (last %d) ===", self.name, num)
        for idx, record in enumerate(shown, start=1):
            _LOGGER.info(
                "%s: %d. [%s] %s = %s",
                self.name,
                idx,
                record["time"],
                record["key"],
                record["value"],
            )
        if len(events) > num:
            _LOGGER.info("%s: ... and %d more events stored", self.name, len(events) - num)
        return shown


__all__ = [
    "COMMON_RULES",
    "UNHANDLED_RULE",
    "ApplianceDevice",
    "ApplianceOptions",
    "ButtonPush",
    "PushListener",
    "Scheduler",
    "handle_generic_option",
    "lower_first",
    "require_value",
    "value_text",
]
