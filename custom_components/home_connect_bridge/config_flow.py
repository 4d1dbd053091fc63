"""Config flow handlers for the Home Connect Bridge integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant import config_entries
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
import voluptuous as vol

from .appliances.dryer import DRYER_PROGRAMS, DRYING_TARGETS
from .const import (
    APPLIANCE_DRYER,
    APPLIANCE_LABELS,
    CONF_APPLIANCE_TYPE,
    CONF_DEFAULT_DRYING_TARGET,
    CONF_DEFAULT_PROGRAM,
    CONF_HA_ID,
    CONF_LOG_RAW_EVENTS,
    CONF_MAX_RECENT_EVENTS,
    CONF_NAME,
    DEFAULT_MAX_RECENT_EVENTS,
    DOMAIN,
    MAX_RECENT_EVENTS_LIMIT,
)

_LOGGER = logging.getLogger(__name__)


def _appliance_schema(defaults: dict[str, Any] | None = None) -> vol.Schema:
    """Build the appliance form schema with provided defaults."""

    defaults = defaults or {}
    return vol.Schema(
        {
            vol.Required(
                CONF_APPLIANCE_TYPE,
                default=defaults.get(CONF_APPLIANCE_TYPE, APPLIANCE_DRYER),
            ): vol.In(APPLIANCE_LABELS),
            vol.Required(CONF_HA_ID, default=defaults.get(CONF_HA_ID, "")): str,
            vol.Optional(CONF_NAME, default=defaults.get(CONF_NAME, "")): str,
        }
    )


def options_schema(appliance_type: str, current: dict[str, Any]) -> vol.Schema:
    """Build the options schema for ``appliance_type``."""

    fields: dict[Any, Any] = {
        vol.Optional(
            CONF_MAX_RECENT_EVENTS,
            default=current.get(CONF_MAX_RECENT_EVENTS, DEFAULT_MAX_RECENT_EVENTS),
        ): vol.All(vol.Coerce(int), vol.Range(min=0, max=MAX_RECENT_EVENTS_LIMIT)),
        vol.Optional(
            CONF_LOG_RAW_EVENTS,
            default=bool(current.get(CONF_LOG_RAW_EVENTS, False)),
        ): bool,
    }
    if appliance_type == APPLIANCE_DRYER:
        fields[
            vol.Optional(
                CONF_DEFAULT_PROGRAM,
                default=current.get(CONF_DEFAULT_PROGRAM, "Cotton"),
            )
        ] = vol.In(list(DRYER_PROGRAMS))
        fields[
            vol.Optional(
                CONF_DEFAULT_DRYING_TARGET,
                default=current.get(CONF_DEFAULT_DRYING_TARGET, "CupboardDry"),
            )
        ] = vol.In(list(DRYING_TARGETS))
    return vol.Schema(fields)


class HomeConnectBridgeConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Add one appliance per config entry."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Collect the appliance type and identifier."""

        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=_appliance_schema())

        ha_id = str(user_input.get(CONF_HA_ID, "")).strip()
        appliance_type = user_input.get(CONF_APPLIANCE_TYPE, APPLIANCE_DRYER)
        name = str(user_input.get(CONF_NAME) or "").strip()
        if not ha_id:
            return self.async_show_form(
                step_id="user",
                data_schema=_appliance_schema(user_input),
                errors={CONF_HA_ID: "invalid_ha_id"},
            )

        await self.async_set_unique_id(ha_id)
        self._abort_if_unique_id_configured()

        title = name or f"{APPLIANCE_LABELS[appliance_type]} ({ha_id})"
        _LOGGER.info("Adding %s %s", appliance_type, ha_id)
        return self.async_create_entry(
            title=title,
            data={
                CONF_APPLIANCE_TYPE: appliance_type,
                CONF_HA_ID: ha_id,
                CONF_NAME: title,
            },
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> HomeConnectBridgeOptionsFlow:
        """Return the options flow handler for this config entry."""

        return HomeConnectBridgeOptionsFlow(config_entry)


class HomeConnectBridgeOptionsFlow(config_entries.OptionsFlow):
    """Options flow for diagnostics bounds and dryer defaults."""

    def __init__(self, entry: ConfigEntry) -> None:
        """Store the entry being configured."""

        self.entry = entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Show or process the options form."""

        appliance_type = self.entry.data.get(CONF_APPLIANCE_TYPE, APPLIANCE_DRYER)
        if user_input is not None:
            return self.async_create_entry(title="", data=dict(user_input))

        return self.async_show_form(
            step_id="init",
            data_schema=options_schema(appliance_type, dict(self.entry.options)),
        )


__all__ = [
    "HomeConnectBridgeConfigFlow",
    "HomeConnectBridgeOptionsFlow",
    "options_schema",
]
