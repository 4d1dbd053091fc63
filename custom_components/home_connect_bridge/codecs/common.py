"""Shared codec helpers for Home Connect vendor values."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import math
from typing import Any


class CoercionError(ValueError):
    """Raised when a raw vendor value cannot be coerced to the expected type."""


def extract_enum(value: Any) -> Any:
    """Return the terminal segment of a dotted vendor identifier.

    ``None`` and empty strings are returned unchanged, as is any string
    without a ``.`` separator.
    """

    if value is None:
        return None
    text = str(value)
    if not text:
        return text
    return text[text.rfind(".") + 1 :]


def to_bool(value: Any) -> bool:
    """Return ``True`` when ``value`` reads as ``"true"`` (case-insensitive)."""

    if value is None:
        raise CoercionError("Cannot coerce None to a boolean")
    return str(value).strip().lower() == "true"


def coerce_int(value: Any) -> int:
    """Coerce a raw numeric value into an integer, truncating fractions."""

    if value is None or isinstance(value, bool):
        raise CoercionError(f"Invalid integer value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CoercionError(f"Invalid integer value: {value!r}")
        return int(value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError as err:
        raise CoercionError(f"Invalid integer value: {value!r}") from err
    if not math.isfinite(number):
        raise CoercionError(f"Invalid integer value: {value!r}")
    return int(number)


def minutes_to_seconds(minutes: Any) -> int:
    """Convert a minute count to whole seconds, truncating fractions."""

    if minutes is None or isinstance(minutes, bool):
        raise CoercionError(f"Invalid minute value: {minutes!r}")
    # Decimal keeps 4.1 minutes at 246 seconds instead of 245.99...
    try:
        number = Decimal(str(minutes).strip())
    except InvalidOperation as err:
        raise CoercionError(f"Invalid minute value: {minutes!r}") from err
    if not number.is_finite():
        raise CoercionError(f"Invalid minute value: {minutes!r}")
    return int(number * 60)


def format_duration(seconds: int | None) -> str:
    """Format a second count as ``H:MM`` or ``MM:SS``."""

    if seconds is None or seconds <= 0:
        return "00:00"
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}"
    return f"{minutes:02d}:{secs:02d}"


def truncate(value: Any, limit: int) -> str | None:
    """Return ``value`` stringified and cut to ``limit`` characters."""

    if value is None:
        return None
    return str(value)[:limit]


__all__ = [
    "CoercionError",
    "coerce_int",
    "extract_enum",
    "format_duration",
    "minutes_to_seconds",
    "to_bool",
    "truncate",
]
