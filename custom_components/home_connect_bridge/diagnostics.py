"""Diagnostics support for the Home Connect Bridge integration."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import platform
from typing import Any, Final

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_APPLIANCE_TYPE, DOMAIN, DRIVER_VERSION
from .runtime import require_runtime

_LOGGER = logging.getLogger(__name__)

SENSITIVE_FIELDS: Final = {"ha_id", "haId"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> Mapping[str, Any]:
    """Return a diagnostics payload for ``entry``."""

    runtime = require_runtime(hass, entry.entry_id)
    device = runtime.device
    state = device.state.as_dict()

    hass_config = getattr(hass, "config", None)
    time_zone = getattr(hass_config, "time_zone", None)

    diagnostics: dict[str, Any] = {
        "integration": {
            "domain": DOMAIN,
            "version": DRIVER_VERSION,
            "appliance_type": entry.data.get(CONF_APPLIANCE_TYPE),
        },
        "home_assistant": {
            "version": str(getattr(hass, "version", "unknown")),
            "python_version": platform.python_version(),
        },
        "entry": {
            "ha_id": device.ref.ha_id,
            "options": dict(entry.options),
        },
        "device": {
            "connector": type(device.connector).__name__,
            "attributes": state["attributes"],
            "catalog": state["catalog"],
            "discovered_keys": state["discovered_keys"],
            "recent_events": state["recent_events"],
        },
    }
    if time_zone not in (None, ""):
        diagnostics["home_assistant"]["time_zone"] = str(time_zone)

    _LOGGER.debug(
        "Diagnostics for %s: %d attributes, %d discovered keys",
        entry.entry_id,
        len(state["attributes"]),
        len(state["discovered_keys"]),
    )
    return async_redact_data(diagnostics, SENSITIVE_FIELDS)
