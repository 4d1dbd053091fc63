"""Flat JSON snapshot of curated device attributes."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
import json
from typing import Any


@dataclass(frozen=True, slots=True)
class SnapshotField:
    """One output field of the snapshot and where its value comes from."""

    name: str
    attribute: str | None = None
    transform: Callable[[Any], Any] | None = None

    def read(self, attributes: Mapping[str, Any]) -> Any:
        """Return the field value from ``attributes``."""

        value = attributes.get(self.attribute or self.name)
        if self.transform is not None:
            return self.transform(value)
        return value


def build_snapshot(
    attributes: Mapping[str, Any],
    fields: Iterable[SnapshotField],
    now: datetime,
) -> dict[str, Any]:
    """Return the snapshot mapping, ending with ``lastUpdate``."""

    snapshot = {field.name: field.read(attributes) for field in fields}
    snapshot["lastUpdate"] = now.isoformat(timespec="milliseconds")
    return snapshot


def serialize_snapshot(
    attributes: Mapping[str, Any],
    fields: Iterable[SnapshotField],
    now: datetime,
) -> str:
    """Render the snapshot as compact JSON text."""

    return json.dumps(
        build_snapshot(attributes, fields, now),
        separators=(",", ":"),
        ensure_ascii=False,
    )


__all__ = ["SnapshotField", "build_snapshot", "serialize_snapshot"]
