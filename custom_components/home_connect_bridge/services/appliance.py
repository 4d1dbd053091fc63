"""Diagnostic and command services for loaded appliances."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import Any

from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
import homeassistant.helpers.config_validation as cv
import voluptuous as vol

from custom_components.home_connect_bridge.const import (
    ATTR_COMMAND,
    ATTR_COUNT,
    ATTR_ENTRY_ID,
    ATTR_EVENTS,
    ATTR_PARAMETERS,
    DATA_SERVICES_REGISTERED,
    DEFAULT_RECENT_EVENTS_DUMP,
    DOMAIN,
    MAX_RECENT_EVENTS_LIMIT,
    SERVICE_CLEAR_DISCOVERED_KEYS,
    SERVICE_DUMP_STATE,
    SERVICE_GET_DISCOVERED_KEYS,
    SERVICE_GET_RECENT_EVENTS,
    SERVICE_PARSE_EVENT,
    SERVICE_SEND_COMMAND,
)
from custom_components.home_connect_bridge.runtime import (
    EntryRuntime,
    domain_data,
    require_runtime,
)

_LOGGER = logging.getLogger(__name__)

ENTRY_SCHEMA = vol.Schema({vol.Required(ATTR_ENTRY_ID): cv.string})

PARSE_EVENT_SCHEMA = ENTRY_SCHEMA.extend(
    {vol.Required(ATTR_EVENTS): vol.Any(dict, list, cv.string)}
)

SEND_COMMAND_SCHEMA = ENTRY_SCHEMA.extend(
    {
        vol.Required(ATTR_COMMAND): cv.string,
        vol.Optional(ATTR_PARAMETERS, default={}): dict,
    }
)

RECENT_EVENTS_SCHEMA = ENTRY_SCHEMA.extend(
    {
        vol.Optional(ATTR_COUNT, default=DEFAULT_RECENT_EVENTS_DUMP): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=MAX_RECENT_EVENTS_LIMIT)
        ),
    }
)


def _runtime_for_call(hass: HomeAssistant, call: ServiceCall) -> EntryRuntime:
    """Return the runtime targeted by ``call``."""

    entry_id = call.data[ATTR_ENTRY_ID]
    try:
        return require_runtime(hass, entry_id)
    except LookupError as err:
        raise HomeAssistantError(str(err)) from err


async def async_register_appliance_services(hass: HomeAssistant) -> None:
    """Register the integration services once per Home Assistant instance."""

    data = domain_data(hass)
    if data.get(DATA_SERVICES_REGISTERED):
        return

    async def _async_parse_event(call: ServiceCall) -> ServiceResponse:
        """Feed raw appliance events into a device."""

        runtime = _runtime_for_call(hass, call)
        processed = runtime.device.parse_event(call.data[ATTR_EVENTS])
        _LOGGER.debug(
            "parse_event: %d event(s) processed for %s", processed, runtime.device.name
        )
        return {"processed": processed}

    async def _async_send_command(call: ServiceCall) -> ServiceResponse:
        """Run a named appliance command."""

        runtime = _runtime_for_call(hass, call)
        command = call.data[ATTR_COMMAND]
        try:
            accepted = runtime.device.run_command(command, call.data[ATTR_PARAMETERS])
        except ValueError as err:
            raise ServiceValidationError(str(err)) from err
        return {"accepted": accepted}

    async def _async_dump_state(call: ServiceCall) -> ServiceResponse:
        """Log and return the device state."""

        return _runtime_for_call(hass, call).device.dump_state()

    async def _async_get_discovered_keys(call: ServiceCall) -> ServiceResponse:
        """Log and return the discovered event keys."""

        keys = _runtime_for_call(hass, call).device.get_discovered_keys()
        return {"count": len(keys), "keys": keys}

    async def _async_clear_discovered_keys(call: ServiceCall) -> None:
        """Forget the discovered event keys."""

        _runtime_for_call(hass, call).device.clear_discovered_keys()

    async def _async_get_recent_events(call: ServiceCall) -> ServiceResponse:
        """Log and return the most recent raw events."""

        runtime = _runtime_for_call(hass, call)
        return {"events": runtime.device.recent_events(call.data[ATTR_COUNT])}

    registrations: list[
        tuple[str, Callable[[ServiceCall], Awaitable[Any]], vol.Schema, SupportsResponse]
    ] = [
        (
            SERVICE_PARSE_EVENT,
            _async_parse_event,
            PARSE_EVENT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            SERVICE_SEND_COMMAND,
            _async_send_command,
            SEND_COMMAND_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            SERVICE_DUMP_STATE,
            _async_dump_state,
            ENTRY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            SERVICE_GET_DISCOVERED_KEYS,
            _async_get_discovered_keys,
            ENTRY_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            SERVICE_CLEAR_DISCOVERED_KEYS,
            _async_clear_discovered_keys,
            ENTRY_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            SERVICE_GET_RECENT_EVENTS,
            _async_get_recent_events,
            RECENT_EVENTS_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
    ]
    for service, handler, schema, supports_response in registrations:
        hass.services.async_register(
            DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )
    data[DATA_SERVICES_REGISTERED] = True


__all__ = [
    "PARSE_EVENT_SCHEMA",
    "RECENT_EVENTS_SCHEMA",
    "SEND_COMMAND_SCHEMA",
    "async_register_appliance_services",
]
