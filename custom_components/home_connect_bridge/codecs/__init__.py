"""Codecs translating Home Connect wire payloads."""

from .common import (
    CoercionError,
    coerce_int,
    extract_enum,
    format_duration,
    minutes_to_seconds,
    to_bool,
    truncate,
)
from .events import (
    active_program_name,
    active_program_options,
    decode_active_program,
    decode_event,
    decode_event_batch,
    decode_item_list,
    decode_program_list,
)
from .models import ActiveProgramPayload, ProgramEntry, RawEvent

__all__ = [
    "ActiveProgramPayload",
    "CoercionError",
    "ProgramEntry",
    "RawEvent",
    "active_program_name",
    "active_program_options",
    "coerce_int",
    "decode_active_program",
    "decode_event",
    "decode_event_batch",
    "decode_item_list",
    "decode_program_list",
    "extract_enum",
    "format_duration",
    "minutes_to_seconds",
    "to_bool",
    "truncate",
]
