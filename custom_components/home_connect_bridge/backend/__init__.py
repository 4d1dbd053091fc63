"""Connector interfaces used by appliance devices."""

from .base import ApplianceConnector, DeviceRef, NullConnector

__all__ = ["ApplianceConnector", "DeviceRef", "NullConnector"]
