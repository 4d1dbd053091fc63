"""Tests for config and options flow schemas."""

from __future__ import annotations

import pytest
import voluptuous as vol

from custom_components.home_connect_bridge.config_flow import (
    _appliance_schema,
    options_schema,
)


def test_appliance_schema_defaults() -> None:
    data = _appliance_schema()({"ha_id": "HA-1"})

    assert data == {"appliance_type": "Dryer", "ha_id": "HA-1", "name": ""}


def test_appliance_schema_rejects_unknown_type() -> None:
    with pytest.raises(vol.Invalid):
        _appliance_schema()({"appliance_type": "Oven", "ha_id": "HA-1"})


def test_dryer_options_schema() -> None:
    schema = options_schema("Dryer", {"default_program": "Wool"})

    data = schema({})

    assert data == {
        "max_recent_events": 20,
        "log_raw_events": False,
        "default_program": "Wool",
        "default_drying_target": "CupboardDry",
    }
    assert schema({"max_recent_events": "42"})["max_recent_events"] == 42
    with pytest.raises(vol.Invalid):
        schema({"max_recent_events": 101})
    with pytest.raises(vol.Invalid):
        schema({"default_drying_target": "Soggy"})


def test_hood_options_schema_has_no_program_defaults() -> None:
    data = options_schema("Hood", {"max_recent_events": 5})({})

    assert data == {"max_recent_events": 5, "log_raw_events": False}
