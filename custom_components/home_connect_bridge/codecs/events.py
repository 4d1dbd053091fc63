"""Decode helpers for connector events and program payloads."""

from __future__ import annotations

from collections.abc import Mapping
import json
import logging
from typing import Any

from pydantic import ValidationError

from .common import extract_enum
from .models import ActiveProgramPayload, ProgramEntry, ProgramOption, RawEvent

_LOGGER = logging.getLogger(__name__)

_LIST_KEYS = ("items", "status", "settings", "programs", "options")


def _load(raw: Any) -> Any:
    """Return ``raw`` decoded from JSON text when it is a string."""

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            _LOGGER.debug("Discarding undecodable payload: %.100s", text)
            return None
    return raw


def _unwrap_list(raw: Any) -> list[Any] | None:
    """Return the item list carried by ``raw`` in any supported shape."""

    if isinstance(raw, list):
        return raw
    if not isinstance(raw, Mapping):
        return None
    data = raw.get("data")
    if isinstance(data, (Mapping, list)):
        nested = _unwrap_list(data)
        if nested is not None:
            return nested
    for key in _LIST_KEYS:
        value = raw.get(key)
        if isinstance(value, list):
            return value
    return None


def decode_event(raw: Any) -> RawEvent | None:
    """Validate a single event envelope, returning ``None`` when malformed."""

    if isinstance(raw, RawEvent):
        return raw if raw.key else None
    raw = _load(raw)
    if not isinstance(raw, Mapping):
        return None
    try:
        event = RawEvent.model_validate(dict(raw))
    except ValidationError:
        _LOGGER.debug("Discarding malformed event: %r", raw)
        return None
    if not event.key:
        return None
    return event


def decode_event_batch(raw: Any) -> list[RawEvent]:
    """Expand a single event or a batch of events into validated events."""

    if isinstance(raw, RawEvent):
        return [raw] if raw.key else []
    raw = _load(raw)
    if isinstance(raw, Mapping) and "key" in raw:
        event = decode_event(raw)
        return [event] if event is not None else []
    items = _unwrap_list(raw)
    if items is None:
        return []
    events: list[RawEvent] = []
    for item in items:
        event = decode_event(item)
        if event is not None:
            events.append(event)
    return events


def decode_item_list(raw: Any) -> list[RawEvent]:
    """Decode a status/settings item list, defaulting display values."""

    events: list[RawEvent] = []
    for event in decode_event_batch(raw):
        if event.displayvalue is None and event.value is not None:
            event = event.model_copy(update={"displayvalue": str(event.value)})
        events.append(event)
    return events


def decode_program_list(raw: Any) -> list[ProgramEntry]:
    """Validate an available-programs payload, skipping unusable entries."""

    items = _unwrap_list(_load(raw))
    if items is None:
        return []
    programs: list[ProgramEntry] = []
    for item in items:
        if not isinstance(item, Mapping):
            _LOGGER.debug("Unexpected program item: %r", item)
            continue
        try:
            programs.append(ProgramEntry.model_validate(dict(item)))
        except ValidationError:
            _LOGGER.debug("Skipping program item without key: %r", item)
    return programs


def decode_active_program(raw: Any) -> ActiveProgramPayload | None:
    """Validate an active-program payload."""

    raw = _load(raw)
    if not isinstance(raw, Mapping):
        return None
    try:
        return ActiveProgramPayload.model_validate(dict(raw))
    except ValidationError:
        _LOGGER.debug("Discarding malformed active program payload: %r", raw)
        return None


def active_program_name(payload: ActiveProgramPayload) -> str | None:
    """Return the display name of an active program payload."""

    data = payload.data
    name = payload.name or (data.name if data is not None else None)
    if name:
        return name
    key = payload.key or (data.key if data is not None else None)
    return extract_enum(key) or None


def active_program_options(payload: ActiveProgramPayload) -> list[RawEvent]:
    """Return the options of an active program payload as events."""

    options: list[ProgramOption] | None = payload.options
    if options is None and payload.data is not None:
        options = payload.data.options
    events: list[RawEvent] = []
    for option in options or []:
        if not option.key:
            continue
        events.append(
            RawEvent(
                key=option.key,
                value=option.value,
                displayvalue=(
                    option.displayvalue
                    if option.displayvalue is not None
                    else (None if option.value is None else str(option.value))
                ),
                unit=option.unit,
            )
        )
    return events


__all__ = [
    "active_program_name",
    "active_program_options",
    "decode_active_program",
    "decode_event",
    "decode_event_batch",
    "decode_item_list",
    "decode_program_list",
]
