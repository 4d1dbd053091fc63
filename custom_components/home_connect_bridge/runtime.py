"""Runtime container helpers for Home Connect Bridge config entries."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import async_call_later
from homeassistant.helpers.storage import Store

from .appliances import ApplianceDevice, ButtonPush
from .backend import ApplianceConnector
from .const import (
    DATA_CONNECTOR,
    DOMAIN,
    EVENT_BUTTON_PUSHED,
    STORAGE_SAVE_DELAY,
    STORAGE_VERSION,
    signal_appliance_update,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class EntryRuntime:
    """Runtime container for a configured appliance entry."""

    hass: HomeAssistant
    config_entry: ConfigEntry
    device: ApplianceDevice
    store: Store[dict[str, Any]]
    unsubscribers: list[Callable[[], None]] = field(default_factory=list)

    @property
    def entry_id(self) -> str:
        """Return the config entry identifier."""

        return self.config_entry.entry_id

    async def async_restore(self) -> bool:
        """Load persisted device state; return whether any was found."""

        data = await self.store.async_load()
        if data is None:
            _LOGGER.debug("%s: No stored state to restore", self.device.name)
            return False
        self.device.restore(data)
        _LOGGER.debug("%s: Restored stored state", self.device.name)
        return True

    @callback
    def schedule_save(self) -> None:
        """Persist device state after a short delay."""

        self.store.async_delay_save(self.device.state.as_dict, STORAGE_SAVE_DELAY)

    async def async_save(self) -> None:
        """Persist device state immediately."""

        await self.store.async_save(self.device.state.as_dict())
        _LOGGER.debug("%s: State saved", self.device.name)

    @callback
    def handle_update(self) -> None:
        """Propagate a device state change to storage and entities."""

        self.schedule_save()
        async_dispatcher_send(self.hass, signal_appliance_update(self.entry_id))

    @callback
    def handle_push(self, push: ButtonPush) -> None:
        """Fire a bus event for a device button pulse."""

        self.hass.bus.async_fire(
            EVENT_BUTTON_PUSHED,
            {
                "entry_id": self.entry_id,
                "ha_id": self.device.ref.ha_id,
                "name": self.device.name,
                "button": push.index,
                "description": push.description,
            },
        )

    @callback
    def shutdown(self) -> None:
        """Remove every listener registered for the entry."""

        while self.unsubscribers:
            unsub = self.unsubscribers.pop()
            unsub()


def create_store(hass: HomeAssistant, entry_id: str) -> Store[dict[str, Any]]:
    """Return the storage helper holding one entry's device state."""

    return Store(hass, STORAGE_VERSION, f"{DOMAIN}.{entry_id}")


def create_scheduler(hass: HomeAssistant) -> Callable[[float, Callable[[], None]], Any]:
    """Return a one-shot scheduler running callbacks on the event loop."""

    def _schedule(delay: float, action: Callable[[], None]) -> Callable[[], None]:
        @callback
        def _run(_now: Any) -> None:
            action()

        return async_call_later(hass, delay, _run)

    return _schedule


def domain_data(hass: HomeAssistant) -> dict[str, Any]:
    """Return the integration's ``hass.data`` bucket."""

    return hass.data.setdefault(DOMAIN, {})


def iter_runtimes(hass: HomeAssistant) -> list[EntryRuntime]:
    """Return every loaded entry runtime."""

    data = hass.data.get(DOMAIN)
    if not isinstance(data, dict):
        return []
    return [value for value in data.values() if isinstance(value, EntryRuntime)]


def require_runtime(hass: HomeAssistant, entry_id: str) -> EntryRuntime:
    """Return the runtime container stored for ``entry_id``."""

    data = hass.data.get(DOMAIN)
    if not isinstance(data, dict):
        raise LookupError("Home Connect Bridge runtime data is unavailable")
    runtime = data.get(entry_id)
    if isinstance(runtime, EntryRuntime):
        return runtime
    raise LookupError(f"No loaded appliance for config entry {entry_id}")


def find_device(hass: HomeAssistant, ha_id: str) -> ApplianceDevice | None:
    """Return the loaded device with vendor identifier ``ha_id``."""

    for runtime in iter_runtimes(hass):
        if runtime.device.ref.ha_id == ha_id:
            return runtime.device
    return None


def current_connector(hass: HomeAssistant) -> ApplianceConnector | None:
    """Return the registered connector, if any."""

    return domain_data(hass).get(DATA_CONNECTOR)


__all__ = [
    "EntryRuntime",
    "create_scheduler",
    "create_store",
    "current_connector",
    "domain_data",
    "find_device",
    "iter_runtimes",
    "require_runtime",
]
