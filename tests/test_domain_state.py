"""Unit tests for the device state aggregate."""

from __future__ import annotations

from custom_components.home_connect_bridge.appliances.dryer import DRYER_PROGRAMS
from custom_components.home_connect_bridge.domain.catalog import ProgramCatalog
from custom_components.home_connect_bridge.domain.state import (
    AttributeStore,
    DeviceState,
)
from custom_components.home_connect_bridge.domain.telemetry import TelemetryRecorder


def _state(**kwargs: object) -> DeviceState:
    return DeviceState(catalog=ProgramCatalog("LaundryCare.Dryer", DRYER_PROGRAMS), **kwargs)


def test_attribute_store_ignores_none() -> None:
    store = AttributeStore({"a": 1})

    assert store.set("a", None) is False
    assert store["a"] == 1
    assert store.set("a", 2) is True
    assert store.set("a", 2) is False
    assert store.set("b", "x") is True
    assert store.as_dict() == {"a": 2, "b": "x"}
    assert len(store) == 2


def test_attribute_store_detects_type_change() -> None:
    store = AttributeStore({"flag": 1})

    assert store.set("flag", True) is True


def test_attribute_store_update_reports_change() -> None:
    store = AttributeStore()

    assert store.update({"a": 1, "b": None}) is True
    assert "b" not in store
    assert store.update({"a": 1}) is False


def test_ensure_initialized_recreates_missing_structures() -> None:
    state = _state(max_recent_events=5)
    state.attributes = None
    state.telemetry = None

    state.ensure_initialized()

    assert isinstance(state.attributes, AttributeStore)
    assert isinstance(state.telemetry, TelemetryRecorder)
    assert state.telemetry.max_recent_events == 5


def test_ensure_initialized_applies_changed_bound() -> None:
    state = _state(max_recent_events=5)
    state.max_recent_events = 1

    state.ensure_initialized()

    assert state.telemetry is not None
    assert state.telemetry.max_recent_events == 1


def test_as_dict_and_restore_round_trip() -> None:
    state = _state()
    assert state.attributes is not None and state.telemetry is not None
    state.attributes.update({"operationState": "Run", "programProgress": 42})
    state.catalog.replace_discovered([("Eco", "LaundryCare.Dryer.Program.Eco40")])
    state.telemetry.record("A.B", 1, None, "t")

    restored = _state()
    restored.restore(state.as_dict())

    assert restored.as_dict() == state.as_dict()


def test_restore_tolerates_partial_payloads() -> None:
    state = _state()

    state.restore(None)
    state.restore({"attributes": {"ok": "yes", "bad": {"nested": 1}}, "recent_events": "x"})

    assert state.attributes is not None
    assert state.attributes.as_dict() == {"ok": "yes"}
