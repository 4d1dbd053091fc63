"""Appliance device implementations."""

from __future__ import annotations

from typing import Any

from ..const import APPLIANCE_DRYER, APPLIANCE_HOOD
from .base import ApplianceDevice, ApplianceOptions, ButtonPush
from .dryer import DryerDevice
from .hood import HoodDevice

DEVICE_TYPES: dict[str, type[ApplianceDevice]] = {
    APPLIANCE_DRYER: DryerDevice,
    APPLIANCE_HOOD: HoodDevice,
}


def create_device(appliance_type: str, ha_id: str, name: str, **kwargs: Any) -> ApplianceDevice:
    """Instantiate the device class registered for ``appliance_type``."""

    try:
        device_cls = DEVICE_TYPES[appliance_type]
    except KeyError as err:
        raise ValueError(f"Unsupported appliance type: {appliance_type}") from err
    return device_cls(ha_id, name, **kwargs)


__all__ = [
    "DEVICE_TYPES",
    "ApplianceDevice",
    "ApplianceOptions",
    "ButtonPush",
    "DryerDevice",
    "HoodDevice",
    "create_device",
]
