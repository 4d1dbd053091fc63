"""Home Assistant entry point for the Home Connect Bridge integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from .appliances import ApplianceOptions, create_device
from .backend import ApplianceConnector
from .const import (
    CONF_APPLIANCE_TYPE,
    CONF_HA_ID,
    CONF_NAME,
    DATA_CONNECTOR,
    DOMAIN,
    DRIVER_VERSION,
    PLATFORMS,
    signal_appliance_event,
)
from .runtime import (
    EntryRuntime,
    create_scheduler,
    create_store,
    current_connector,
    domain_data,
    iter_runtimes,
    require_runtime,
)
from .services.appliance import async_register_appliance_services

_LOGGER = logging.getLogger(__name__)


@callback
def async_register_connector(
    hass: HomeAssistant, connector: ApplianceConnector | None
) -> None:
    """Install the connector used by every loaded and future appliance."""

    domain_data(hass)[DATA_CONNECTOR] = connector
    for runtime in iter_runtimes(hass):
        runtime.device.connector = connector
    _LOGGER.info(
        "Connector %s registered", type(connector).__name__ if connector else "None"
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up one appliance from a config entry."""

    appliance_type = entry.data[CONF_APPLIANCE_TYPE]
    ha_id = entry.data[CONF_HA_ID]
    name = entry.data.get(CONF_NAME) or ha_id

    try:
        device = create_device(
            appliance_type,
            ha_id,
            name,
            connector=current_connector(hass),
            options=ApplianceOptions.from_mapping(entry.options),
            scheduler=create_scheduler(hass),
        )
    except ValueError as err:
        raise ConfigEntryError(str(err)) from err

    runtime = EntryRuntime(
        hass=hass,
        config_entry=entry,
        device=device,
        store=create_store(hass, entry.entry_id),
    )
    if await runtime.async_restore():
        device.updated(device.options)
    else:
        device.installed()

    runtime.unsubscribers.append(device.add_listener(runtime.handle_update))
    runtime.unsubscribers.append(device.add_push_listener(runtime.handle_push))

    @callback
    def _handle_appliance_event(payload: Any) -> None:
        """Route events a connector pushed for this appliance."""

        device.parse_event(payload)

    runtime.unsubscribers.append(
        async_dispatcher_connect(
            hass, signal_appliance_event(ha_id), _handle_appliance_event
        )
    )
    domain_data(hass)[entry.entry_id] = runtime
    entry.async_on_unload(entry.add_update_listener(async_update_entry_options))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    await async_register_appliance_services(hass)

    cancel_fetch = device.initialize()
    if cancel_fetch is not None:
        runtime.unsubscribers.append(cancel_fetch)
    _LOGGER.info("%s: %s setup complete (v%s)", name, appliance_type, DRIVER_VERSION)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry and flush its state."""

    try:
        runtime = require_runtime(hass, entry.entry_id)
    except LookupError:
        return True

    ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if ok:
        runtime.shutdown()
        await runtime.async_save()
        domain_data(hass).pop(entry.entry_id, None)
    return ok


async def async_update_entry_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply changed options to the loaded device."""

    runtime = require_runtime(hass, entry.entry_id)
    runtime.device.updated(ApplianceOptions.from_mapping(entry.options))


__all__ = [
    "async_register_connector",
    "async_setup_entry",
    "async_unload_entry",
    "async_update_entry_options",
]
