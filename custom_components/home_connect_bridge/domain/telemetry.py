"""Bounded diagnostic bookkeeping of raw appliance events."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..codecs.common import truncate
from ..const import (
    DEFAULT_MAX_RECENT_EVENTS,
    DISCOVERED_VALUE_LIMIT,
    MAX_DISCOVERED_KEYS,
    RECENT_DISPLAY_LIMIT,
    RECENT_VALUE_LIMIT,
)


@dataclass(slots=True)
class DiscoveredKeyStat:
    """Statistics for one raw event key seen on the event stream."""

    key: str
    first_seen: str
    last_seen: str
    last_value: str | None
    count: int = 1

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation."""

        return {
            "key": self.key,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
            "last_value": self.last_value,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DiscoveredKeyStat:
        """Build a stat entry from persisted data."""

        count = data.get("count")
        return cls(
            key=str(data["key"]),
            first_seen=str(data.get("first_seen") or ""),
            last_seen=str(data.get("last_seen") or ""),
            last_value=truncate(data.get("last_value"), DISCOVERED_VALUE_LIMIT),
            count=count if isinstance(count, int) and count >= 1 else 1,
        )


@dataclass(frozen=True, slots=True)
class RecentEventRecord:
    """Raw event as stored in the most-recent-first log."""

    time: str
    key: str
    value: str | None
    displayvalue: str | None

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation."""

        return {
            "time": self.time,
            "key": self.key,
            "value": self.value,
            "displayvalue": self.displayvalue,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RecentEventRecord:
        """Build a record from persisted data."""

        return cls(
            time=str(data.get("time") or ""),
            key=str(data["key"]),
            value=truncate(data.get("value"), RECENT_VALUE_LIMIT),
            displayvalue=truncate(data.get("displayvalue"), RECENT_DISPLAY_LIMIT),
        )


class TelemetryRecorder:
    """Track every distinct event key and a bounded log of recent events.

    Discovered keys are capped at ``max_discovered_keys``: once the cap is
    reached new keys are ignored while known keys keep accumulating. The
    recent log is newest-first and truncated to ``max_recent_events``; a
    bound of zero disables it.
    """

    def __init__(
        self,
        *,
        max_recent_events: int = DEFAULT_MAX_RECENT_EVENTS,
        max_discovered_keys: int = MAX_DISCOVERED_KEYS,
    ) -> None:
        """Initialise empty bookkeeping structures."""

        self._max_recent_events = max(0, int(max_recent_events))
        self._max_discovered_keys = max_discovered_keys
        self._discovered: dict[str, DiscoveredKeyStat] = {}
        self._recent: list[RecentEventRecord] = []

    @property
    def max_recent_events(self) -> int:
        """Return the configured recent-event bound."""

        return self._max_recent_events

    @max_recent_events.setter
    def max_recent_events(self, value: int) -> None:
        """Change the recent-event bound, trimming the stored log."""

        self._max_recent_events = max(0, int(value))
        del self._recent[self._max_recent_events :]

    @property
    def discovered_keys(self) -> Mapping[str, DiscoveredKeyStat]:
        """Return discovered key statistics keyed by event key."""

        return self._discovered

    @property
    def recent_events(self) -> list[RecentEventRecord]:
        """Return a copy of the recent event log, newest first."""

        return list(self._recent)

    def record(
        self,
        key: str | None,
        value: Any,
        displayvalue: Any,
        timestamp: str,
    ) -> None:
        """Record one raw event in both bookkeeping structures."""

        if not key:
            return

        value_text = truncate(value, DISCOVERED_VALUE_LIMIT)
        stat = self._discovered.get(key)
        if stat is not None:
            stat.last_seen = timestamp
            stat.last_value = value_text
            stat.count += 1
        elif len(self._discovered) < self._max_discovered_keys:
            self._discovered[key] = DiscoveredKeyStat(
                key=key,
                first_seen=timestamp,
                last_seen=timestamp,
                last_value=value_text,
            )

        if self._max_recent_events <= 0:
            return
        self._recent.insert(
            0,
            RecentEventRecord(
                time=timestamp,
                key=key,
                value=truncate(value, RECENT_VALUE_LIMIT),
                displayvalue=truncate(displayvalue, RECENT_DISPLAY_LIMIT),
            ),
        )
        del self._recent[self._max_recent_events :]

    def clear_discovered(self) -> None:
        """Forget every discovered key."""

        self._discovered.clear()

    def restore(
        self,
        discovered: Iterable[Mapping[str, Any]],
        recent: Iterable[Mapping[str, Any]],
    ) -> None:
        """Replace bookkeeping with persisted entries, honouring the bounds."""

        self._discovered = {}
        for item in discovered:
            if len(self._discovered) >= self._max_discovered_keys:
                break
            if not isinstance(item, Mapping) or not item.get("key"):
                continue
            stat = DiscoveredKeyStat.from_dict(item)
            self._discovered.setdefault(stat.key, stat)

        self._recent = [
            RecentEventRecord.from_dict(item)
            for item in recent
            if isinstance(item, Mapping) and item.get("key")
        ][: self._max_recent_events]

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable snapshot of the bookkeeping."""

        return {
            "discovered_keys": [stat.as_dict() for stat in self._discovered.values()],
            "recent_events": [record.as_dict() for record in self._recent],
        }


__all__ = ["DiscoveredKeyStat", "RecentEventRecord", "TelemetryRecorder"]
