"""Tests for the integration services."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
import voluptuous as vol

from custom_components.home_connect_bridge.appliances import DryerDevice
from custom_components.home_connect_bridge.const import DOMAIN
from custom_components.home_connect_bridge.runtime import EntryRuntime
from custom_components.home_connect_bridge.services.appliance import (
    PARSE_EVENT_SCHEMA,
    RECENT_EVENTS_SCHEMA,
    SEND_COMMAND_SCHEMA,
    async_register_appliance_services,
)
from homeassistant.core import SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError


@pytest.fixture
def hass(dryer: DryerDevice) -> MagicMock:
    hass = MagicMock()
    runtime = EntryRuntime(
        hass=hass,
        config_entry=SimpleNamespace(entry_id="entry-1"),
        device=dryer,
        store=MagicMock(),
    )
    hass.data = {DOMAIN: {"entry-1": runtime}}
    return hass


async def _handlers(hass: MagicMock) -> dict[str, Any]:
    await async_register_appliance_services(hass)
    return {
        call.args[1]: call.args[2]
        for call in hass.services.async_register.call_args_list
    }


def _call(schema: vol.Schema, **data: Any) -> SimpleNamespace:
    return SimpleNamespace(data=schema({"entry_id": "entry-1", **data}))


@pytest.mark.asyncio
async def test_services_registered_once(hass: MagicMock) -> None:
    await async_register_appliance_services(hass)
    await async_register_appliance_services(hass)

    calls = hass.services.async_register.call_args_list
    assert sorted(call.args[1] for call in calls) == [
        "clear_discovered_keys",
        "dump_state",
        "get_discovered_keys",
        "get_recent_events",
        "parse_event",
        "send_command",
    ]
    responses = {call.args[1]: call.kwargs["supports_response"] for call in calls}
    assert responses["clear_discovered_keys"] is SupportsResponse.NONE
    assert responses["dump_state"] is SupportsResponse.OPTIONAL


@pytest.mark.asyncio
async def test_parse_event_service(hass: MagicMock, dryer: DryerDevice) -> None:
    handlers = await _handlers(hass)

    result = await handlers["parse_event"](
        _call(
            PARSE_EVENT_SCHEMA,
            events=[
                {"key": "BSH.Common.Status.DoorState", "value": "Open"},
                {"key": "BSH.Common.Option.ProgramProgress", "value": 5},
            ],
        )
    )

    assert result == {"processed": 2}
    assert dryer.attributes["doorState"] == "Open"


@pytest.mark.asyncio
async def test_send_command_service(hass: MagicMock, connector: MagicMock) -> None:
    handlers = await _handlers(hass)

    result = await handlers["send_command"](
        _call(SEND_COMMAND_SCHEMA, command="start_program", parameters={"program": "Wool"})
    )

    assert result == {"accepted": True}
    connector.start_program.assert_called_once()


@pytest.mark.asyncio
async def test_send_command_service_validation(hass: MagicMock) -> None:
    handlers = await _handlers(hass)

    with pytest.raises(ServiceValidationError):
        await handlers["send_command"](_call(SEND_COMMAND_SCHEMA, command="fan_high"))

    result = await handlers["send_command"](
        _call(SEND_COMMAND_SCHEMA, command="set_drying_target", parameters={"target": "Soggy"})
    )
    assert result == {"accepted": False}


@pytest.mark.asyncio
async def test_diagnostic_services(hass: MagicMock, dryer: DryerDevice) -> None:
    handlers = await _handlers(hass)
    dryer.parse_event([{"key": "A.B", "value": 1}, {"key": "C.D", "value": 2}])

    dump = await handlers["dump_state"](_call(vol.Schema({"entry_id": str})))
    keys = await handlers["get_discovered_keys"](_call(vol.Schema({"entry_id": str})))
    recent = await handlers["get_recent_events"](_call(RECENT_EVENTS_SCHEMA, count=1))
    await handlers["clear_discovered_keys"](_call(vol.Schema({"entry_id": str})))

    assert dump["ha_id"] == dryer.ref.ha_id
    assert keys["count"] == 2
    assert [stat["key"] for stat in keys["keys"]] == ["A.B", "C.D"]
    assert [record["key"] for record in recent["events"]] == ["C.D"]
    assert dryer.discovered_keys() == []


@pytest.mark.asyncio
async def test_unknown_entry_raises(hass: MagicMock) -> None:
    handlers = await _handlers(hass)

    with pytest.raises(HomeAssistantError):
        await handlers["dump_state"](SimpleNamespace(data={"entry_id": "missing"}))


def test_schemas_apply_defaults() -> None:
    assert SEND_COMMAND_SCHEMA({"entry_id": "e", "command": "start"})["parameters"] == {}
    assert RECENT_EVENTS_SCHEMA({"entry_id": "e"})["count"] == 10
    with pytest.raises(vol.Invalid):
        RECENT_EVENTS_SCHEMA({"entry_id": "e", "count": 0})
    assert PARSE_EVENT_SCHEMA({"entry_id": "e", "events": '{"key": "A"}'})["events"]
