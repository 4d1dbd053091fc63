"""Sensor platform exposing appliance state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import StateType

from .const import APPLIANCE_DRYER, APPLIANCE_HOOD
from .entity import ApplianceEntity
from .runtime import EntryRuntime, require_runtime

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ApplianceSensorDescription(SensorEntityDescription):
    """Describe a sensor reading one device attribute."""

    attribute: str
    include_attributes: bool = False
    appliance_types: frozenset[str] | None = None


SENSOR_DESCRIPTIONS: tuple[ApplianceSensorDescription, ...] = (
    ApplianceSensorDescription(
        key="status",
        translation_key="status",
        icon="mdi:state-machine",
        attribute="friendlyStatus",
        include_attributes=True,
    ),
    ApplianceSensorDescription(
        key="operation_state",
        translation_key="operation_state",
        icon="mdi:information-outline",
        attribute="operationState",
    ),
    ApplianceSensorDescription(
        key="program_progress",
        translation_key="program_progress",
        icon="mdi:progress-clock",
        native_unit_of_measurement="%",
        attribute="programProgress",
        appliance_types=frozenset({APPLIANCE_DRYER}),
    ),
    ApplianceSensorDescription(
        key="last_alert",
        translation_key="last_alert",
        icon="mdi:alert-outline",
        attribute="lastAlert",
        appliance_types=frozenset({APPLIANCE_DRYER}),
    ),
    ApplianceSensorDescription(
        key="fan_speed",
        translation_key="fan_speed",
        icon="mdi:fan",
        attribute="fanSpeed",
        appliance_types=frozenset({APPLIANCE_HOOD}),
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for one appliance entry."""

    runtime = require_runtime(hass, entry.entry_id)
    appliance_type = runtime.device.APPLIANCE_TYPE
    entities = [
        ApplianceAttributeSensor(runtime, description)
        for description in SENSOR_DESCRIPTIONS
        if description.appliance_types is None
        or appliance_type in description.appliance_types
    ]
    _LOGGER.debug("%s: adding %d sensors", runtime.device.name, len(entities))
    async_add_entities(entities)


class ApplianceAttributeSensor(ApplianceEntity, SensorEntity):
    """Sensor mirroring one normalised device attribute."""

    entity_description: ApplianceSensorDescription

    def __init__(
        self, runtime: EntryRuntime, description: ApplianceSensorDescription
    ) -> None:
        """Initialise the sensor for ``description``."""

        super().__init__(runtime, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> StateType:
        """Return the attribute value."""

        return self._runtime.device.attributes.get(self.entity_description.attribute)

    @property
    def extra_state_attributes(self) -> Mapping[str, Any] | None:
        """Return every device attribute on the status sensor."""

        if not self.entity_description.include_attributes:
            return None
        return self._runtime.device.attributes.as_dict()
