"""Per-device runtime state."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..const import DEFAULT_MAX_RECENT_EVENTS
from .catalog import ProgramCatalog
from .telemetry import TelemetryRecorder

AttributeValue = str | int | float | bool


class AttributeStore(Mapping[str, AttributeValue]):
    """Current value of every normalised device attribute.

    Values are freely overwritten but never deleted.
    """

    __slots__ = ("_values",)

    def __init__(self, initial: Mapping[str, AttributeValue] | None = None) -> None:
        """Initialise the store with optional starting values."""

        self._values: dict[str, AttributeValue] = {}
        if initial:
            for name, value in initial.items():
                self.set(name, value)

    def __getitem__(self, name: str) -> AttributeValue:
        """Return the value of ``name``."""

        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        """Iterate attribute names."""

        return iter(self._values)

    def __len__(self) -> int:
        """Return the number of attributes holding a value."""

        return len(self._values)

    def set(self, name: str, value: AttributeValue | None) -> bool:
        """Store ``value`` under ``name`` and return whether it changed.

        ``None`` is ignored so an attribute, once set, always has a value.
        """

        if value is None:
            return False
        previous = self._values.get(name)
        self._values[name] = value
        return previous != value or type(previous) is not type(value)

    def update(self, values: Mapping[str, AttributeValue | None]) -> bool:
        """Store several values, returning whether any changed."""

        changed = False
        for name, value in values.items():
            changed = self.set(name, value) or changed
        return changed

    def as_dict(self) -> dict[str, AttributeValue]:
        """Return a shallow copy of all attributes."""

        return dict(self._values)


@dataclass(slots=True)
class DeviceState:
    """Aggregate of attributes, diagnostic bookkeeping and program catalog."""

    catalog: ProgramCatalog
    attributes: AttributeStore | None = None
    telemetry: TelemetryRecorder | None = None
    max_recent_events: int = DEFAULT_MAX_RECENT_EVENTS

    def __post_init__(self) -> None:
        """Initialise any missing structure."""

        self.ensure_initialized()

    def ensure_initialized(self) -> None:
        """Re-create any bookkeeping structure found uninitialised."""

        if self.attributes is None:
            self.attributes = AttributeStore()
        if self.telemetry is None:
            self.telemetry = TelemetryRecorder(
                max_recent_events=self.max_recent_events
            )
        elif self.telemetry.max_recent_events != self.max_recent_events:
            self.telemetry.max_recent_events = self.max_recent_events

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable snapshot for persistence."""

        self.ensure_initialized()
        assert self.attributes is not None and self.telemetry is not None
        return {
            "attributes": self.attributes.as_dict(),
            "catalog": self.catalog.as_dict(),
            **self.telemetry.as_dict(),
        }

    def restore(self, data: Mapping[str, Any] | None) -> None:
        """Load persisted data into this state, tolerating partial payloads."""

        self.ensure_initialized()
        assert self.attributes is not None and self.telemetry is not None
        if not isinstance(data, Mapping):
            return

        attributes = data.get("attributes")
        if isinstance(attributes, Mapping):
            self.attributes.update(
                {
                    str(name): value
                    for name, value in attributes.items()
                    if isinstance(value, (str, int, float, bool))
                }
            )

        catalog = data.get("catalog")
        if isinstance(catalog, Mapping):
            self.catalog.restore(catalog)

        discovered = data.get("discovered_keys")
        recent = data.get("recent_events")
        self.telemetry.restore(
            discovered if isinstance(discovered, list) else [],
            recent if isinstance(recent, list) else [],
        )


__all__ = ["AttributeStore", "AttributeValue", "DeviceState"]
