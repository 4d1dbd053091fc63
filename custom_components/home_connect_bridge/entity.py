"""Entity base shared by Home Connect Bridge platforms."""

from __future__ import annotations

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import Entity

from .const import APPLIANCE_LABELS, DOMAIN, DRIVER_VERSION, signal_appliance_update
from .runtime import EntryRuntime


class ApplianceEntity(Entity):
    """Entity bound to one appliance device and refreshed on its updates."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(self, runtime: EntryRuntime, key: str) -> None:
        """Initialise the entity for ``runtime``."""

        self._runtime = runtime
        device = runtime.device
        self._attr_unique_id = f"{device.ref.ha_id}_{key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, device.ref.ha_id)},
            name=device.name,
            manufacturer="Home Connect",
            model=APPLIANCE_LABELS.get(device.APPLIANCE_TYPE, device.APPLIANCE_TYPE),
            sw_version=DRIVER_VERSION,
        )

    async def async_added_to_hass(self) -> None:
        """Subscribe to device updates when the entity is added."""

        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                signal_appliance_update(self._runtime.entry_id),
                self._handle_device_update,
            )
        )

    @callback
    def _handle_device_update(self) -> None:
        """Write the new state after a device update."""

        self.async_write_ha_state()
