"""Constants for the Home Connect Bridge integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

# Domain
DOMAIN: Final = "home_connect_bridge"
DRIVER_VERSION: Final = "3.0.1"

# Config entry keys
CONF_APPLIANCE_TYPE: Final = "appliance_type"
CONF_HA_ID: Final = "ha_id"
CONF_NAME: Final = "name"

# Options
CONF_MAX_RECENT_EVENTS: Final = "max_recent_events"
CONF_LOG_RAW_EVENTS: Final = "log_raw_events"
CONF_DEFAULT_PROGRAM: Final = "default_program"
CONF_DEFAULT_DRYING_TARGET: Final = "default_drying_target"

APPLIANCE_DRYER: Final = "Dryer"
APPLIANCE_HOOD: Final = "Hood"

APPLIANCE_LABELS: Final[Mapping[str, str]] = {
    APPLIANCE_DRYER: "Tumble dryer",
    APPLIANCE_HOOD: "Range hood",
}

# Bookkeeping limits
MAX_DISCOVERED_KEYS: Final = 100
DEFAULT_MAX_RECENT_EVENTS: Final = 20
MAX_RECENT_EVENTS_LIMIT: Final = 100
DEFAULT_RECENT_EVENTS_DUMP: Final = 10
DISCOVERED_VALUE_LIMIT: Final = 100
RECENT_VALUE_LIMIT: Final = 100
RECENT_DISPLAY_LIMIT: Final = 50
ATTRIBUTE_TEXT_LIMIT: Final = 200

# One-shot program catalog fetch after initialize()
PROGRAM_FETCH_DELAY: Final = 5  # seconds

TIMESTAMP_FORMAT: Final = "%Y-%m-%d %H:%M:%S"

# Persistence
STORAGE_VERSION: Final = 1
STORAGE_SAVE_DELAY: Final = 10  # seconds

# Events
EVENT_BUTTON_PUSHED: Final = f"{DOMAIN}_button_pushed"

# Services
SERVICE_PARSE_EVENT: Final = "parse_event"
SERVICE_SEND_COMMAND: Final = "send_command"
SERVICE_DUMP_STATE: Final = "dump_state"
SERVICE_GET_DISCOVERED_KEYS: Final = "get_discovered_keys"
SERVICE_CLEAR_DISCOVERED_KEYS: Final = "clear_discovered_keys"
SERVICE_GET_RECENT_EVENTS: Final = "get_recent_events"

ATTR_ENTRY_ID: Final = "entry_id"
ATTR_EVENTS: Final = "events"
ATTR_COMMAND: Final = "command"
ATTR_PARAMETERS: Final = "parameters"
ATTR_COUNT: Final = "count"

# hass.data keys
DATA_CONNECTOR: Final = "connector"
DATA_SERVICES_REGISTERED: Final = "services_registered"

PLATFORMS: Final = ["sensor"]


# --- Dispatcher signal helpers (connector → devices) ---


def signal_appliance_event(ha_id: str) -> str:
    """Signal name for raw appliance events pushed by a connector."""

    return f"{DOMAIN}_{ha_id}_event"


def signal_appliance_update(entry_id: str) -> str:
    """Signal name for attribute updates dispatched to platforms."""

    return f"{DOMAIN}_{entry_id}_update"
