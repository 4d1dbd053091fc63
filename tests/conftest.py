# ruff: noqa: D100,D101,D102,D103,D104,D105,D106,D107,INP001
from __future__ import annotations

import asyncio
from collections.abc import Callable
import datetime as dt
import inspect
from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_components.home_connect_bridge.appliances import (
    ApplianceOptions,
    DryerDevice,
    HoodDevice,
)
from homeassistant.util import dt as dt_util

FIXED_NOW = dt.datetime(2024, 1, 1, 12, 0, 0, tzinfo=dt.UTC)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom pytest markers used across the suite."""

    if not config.pluginmanager.hasplugin("pytest_asyncio"):
        config.addinivalue_line(
            "markers", "asyncio: mark test as requiring asyncio event loop support."
        )


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async tests when pytest-asyncio is unavailable."""

    if pyfuncitem.config.pluginmanager.hasplugin("pytest_asyncio"):
        return None

    testfunction = pyfuncitem.obj
    if not inspect.iscoroutinefunction(testfunction):
        return None

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    testargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }
    with asyncio.Runner(debug=False) as runner:
        runner.run(testfunction(**testargs))
    return True


@pytest.fixture
def connector() -> MagicMock:
    """Return a connector double recording every outbound call."""

    return MagicMock(name="connector")


@pytest.fixture
def scheduler() -> MagicMock:
    """Return a scheduler double recording deferred actions."""

    return MagicMock(name="scheduler")


@pytest.fixture
def clock() -> Callable[[], dt.datetime]:
    """Return a clock frozen at ``FIXED_NOW``."""

    return lambda: FIXED_NOW


@pytest.fixture
def device_factory(
    connector: MagicMock,
    scheduler: MagicMock,
    clock: Callable[[], dt.datetime],
) -> Callable[..., Any]:
    """Return a helper building installed devices with test doubles."""

    def _factory(
        device_cls: type[Any] = DryerDevice,
        *,
        ha_id: str = "SIEMENS-WT47XEH0GB-68A40E123456",
        name: str = "Test appliance",
        options: ApplianceOptions | None = None,
        install: bool = True,
    ) -> Any:
        device = device_cls(
            ha_id,
            name,
            connector=connector,
            options=options,
            clock=clock,
            time_zone=dt_util.UTC,
            scheduler=scheduler,
        )
        if install:
            device.installed()
        return device

    return _factory


@pytest.fixture
def dryer(device_factory: Callable[..., Any]) -> DryerDevice:
    """Return an installed dryer."""

    return device_factory(DryerDevice, name="Dryer")


@pytest.fixture
def hood(device_factory: Callable[..., Any]) -> HoodDevice:
    """Return an installed hood."""

    return device_factory(
        HoodDevice, ha_id="SIEMENS-LC98KLV60-68A40E654321", name="Hood"
    )


def event(key: str, value: Any, displayvalue: str | None = None) -> dict[str, Any]:
    """Build a raw event envelope."""

    payload: dict[str, Any] = {"key": key, "value": value}
    if displayvalue is not None:
        payload["displayvalue"] = displayvalue
    return payload
