"""Tests for config entry setup and unload."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

import custom_components.home_connect_bridge as integration
from custom_components.home_connect_bridge import runtime as runtime_module
from custom_components.home_connect_bridge.appliances import DryerDevice, HoodDevice
from custom_components.home_connect_bridge.backend import NullConnector
from custom_components.home_connect_bridge.const import (
    DOMAIN,
    PLATFORMS,
    signal_appliance_event,
)
from homeassistant.exceptions import ConfigEntryError


@pytest.fixture
def hass() -> MagicMock:
    hass = MagicMock()
    hass.data = {}
    hass.config_entries.async_forward_entry_setups = AsyncMock()
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    return hass


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock()
    store.async_load = AsyncMock(return_value=None)
    store.async_save = AsyncMock()
    return store


@pytest.fixture
def subscriptions(
    monkeypatch: pytest.MonkeyPatch, store: MagicMock
) -> dict[str, Any]:
    """Patch storage, scheduling and dispatcher helpers used during setup."""

    subscriptions: dict[str, Any] = {}

    def _connect(hass: Any, signal: str, target: Any) -> MagicMock:
        subscriptions[signal] = target
        return MagicMock()

    monkeypatch.setattr(integration, "async_dispatcher_connect", _connect)
    monkeypatch.setattr(integration, "create_store", lambda hass, entry_id: store)
    monkeypatch.setattr(integration, "create_scheduler", lambda hass: MagicMock())
    monkeypatch.setattr(
        integration, "async_register_appliance_services", AsyncMock()
    )
    monkeypatch.setattr(runtime_module, "async_dispatcher_send", MagicMock())
    return subscriptions


def _entry(appliance_type: str = "Dryer", **options: Any) -> MagicMock:
    entry = MagicMock()
    entry.entry_id = "entry-1"
    entry.data = {"appliance_type": appliance_type, "ha_id": "HA-1", "name": "Laundry"}
    entry.options = options
    return entry


@pytest.mark.asyncio
async def test_setup_entry_creates_installed_device(
    hass: MagicMock, subscriptions: dict[str, Any]
) -> None:
    entry = _entry(max_recent_events=5)

    assert await integration.async_setup_entry(hass, entry) is True

    runtime = hass.data[DOMAIN]["entry-1"]
    device = runtime.device
    assert isinstance(device, DryerDevice)
    assert isinstance(device.connector, NullConnector)
    assert device.options.max_recent_events == 5
    assert device.attributes["eventPresentState"] == "Off"
    hass.config_entries.async_forward_entry_setups.assert_awaited_once_with(
        entry, PLATFORMS
    )
    integration.async_register_appliance_services.assert_awaited_once_with(hass)

    subscriptions[signal_appliance_event("HA-1")](
        {"key": "BSH.Common.Status.DoorState", "value": "Open"}
    )
    assert device.attributes["doorState"] == "Open"


@pytest.mark.asyncio
async def test_setup_entry_restores_stored_state(
    hass: MagicMock, store: MagicMock, subscriptions: dict[str, Any]
) -> None:
    store.async_load.return_value = {"attributes": {"operationState": "Run"}}

    await integration.async_setup_entry(hass, _entry())

    device = hass.data[DOMAIN]["entry-1"].device
    assert device.attributes["operationState"] == "Run"
    assert "eventPresentState" not in device.attributes


@pytest.mark.asyncio
async def test_setup_entry_rejects_unknown_type(
    hass: MagicMock, subscriptions: dict[str, Any]
) -> None:
    with pytest.raises(ConfigEntryError):
        await integration.async_setup_entry(hass, _entry("Oven"))


@pytest.mark.asyncio
async def test_registered_connector_reaches_devices(
    hass: MagicMock, subscriptions: dict[str, Any]
) -> None:
    connector = MagicMock()
    await integration.async_setup_entry(hass, _entry("Hood"))
    device = hass.data[DOMAIN]["entry-1"].device
    assert isinstance(device, HoodDevice)

    integration.async_register_connector(hass, connector)
    device.fan_low()

    connector.set_setting.assert_called_once()
    assert device.connector is connector


@pytest.mark.asyncio
async def test_update_options_applies_to_device(
    hass: MagicMock, subscriptions: dict[str, Any]
) -> None:
    entry = _entry()
    await integration.async_setup_entry(hass, entry)

    entry.options = {"max_recent_events": 2, "default_program": "Wool"}
    await integration.async_update_entry_options(hass, entry)

    device = hass.data[DOMAIN]["entry-1"].device
    assert device.options.max_recent_events == 2
    assert device.options.default_program == "Wool"


@pytest.mark.asyncio
async def test_unload_entry_saves_and_drops_runtime(
    hass: MagicMock, store: MagicMock, subscriptions: dict[str, Any]
) -> None:
    entry = _entry()
    await integration.async_setup_entry(hass, entry)

    assert await integration.async_unload_entry(hass, entry) is True

    store.async_save.assert_awaited_once()
    assert "entry-1" not in hass.data[DOMAIN]
    assert await integration.async_unload_entry(hass, entry) is True


@pytest.mark.asyncio
async def test_unload_cancels_pending_program_fetch(
    hass: MagicMock,
    subscriptions: dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cancel_fetch = MagicMock()
    scheduler = MagicMock(return_value=cancel_fetch)
    monkeypatch.setattr(integration, "create_scheduler", lambda hass: scheduler)
    entry = _entry()
    await integration.async_setup_entry(hass, entry)

    device = hass.data[DOMAIN]["entry-1"].device
    scheduler.assert_called_once_with(5, device.get_available_programs)
    cancel_fetch.assert_not_called()

    assert await integration.async_unload_entry(hass, entry) is True

    cancel_fetch.assert_called_once_with()
