"""Tests for the shared value codecs."""

from __future__ import annotations

import math

import pytest

from custom_components.home_connect_bridge.codecs.common import (
    CoercionError,
    coerce_int,
    extract_enum,
    format_duration,
    minutes_to_seconds,
    to_bool,
    truncate,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("BSH.Common.EnumType.OperationState.Run", "Run"),
        ("Run", "Run"),
        ("", ""),
        (None, None),
        ("Trailing.", ""),
    ],
)
def test_extract_enum(raw: str | None, expected: str | None) -> None:
    assert extract_enum(raw) == expected


def test_extract_enum_stringifies_non_strings() -> None:
    assert extract_enum(42) == "42"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "00:00"),
        (None, "00:00"),
        (-5, "00:00"),
        (59, "00:59"),
        (75, "01:15"),
        (3600, "1:00"),
        (3661, "1:01"),
        (36000, "10:00"),
    ],
)
def test_format_duration(seconds: int | None, expected: str) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("TRUE", True),
        (True, True),
        ("false", False),
        (False, False),
        ("yes", False),
    ],
)
def test_to_bool(raw: object, expected: bool) -> None:
    assert to_bool(raw) is expected


def test_to_bool_rejects_none() -> None:
    with pytest.raises(CoercionError):
        to_bool(None)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(42, 42), (42.9, 42), ("17", 17), (" 8 ", 8), ("3.7", 3)],
)
def test_coerce_int(raw: object, expected: int) -> None:
    assert coerce_int(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "abc", math.inf, "nan"])
def test_coerce_int_rejects_invalid(raw: object) -> None:
    with pytest.raises(CoercionError):
        coerce_int(raw)


def test_coercion_error_is_value_error() -> None:
    """Routers treat coercion failures like any other ``ValueError``."""

    assert issubclass(CoercionError, ValueError)


def test_minutes_to_seconds() -> None:
    assert minutes_to_seconds(30) == 1800
    assert minutes_to_seconds("1.5") == 90
    assert minutes_to_seconds(0) == 0
    with pytest.raises(CoercionError):
        minutes_to_seconds(None)
    with pytest.raises(CoercionError):
        minutes_to_seconds("soon")


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(4.1, 246), ("4.1", 246), (0.35, 21), (2.999, 179)],
)
def test_minutes_to_seconds_is_exact(minutes: object, expected: int) -> None:
    assert minutes_to_seconds(minutes) == expected


@pytest.mark.parametrize("minutes", ["nan", float("inf"), "-Infinity"])
def test_minutes_to_seconds_rejects_non_finite(minutes: object) -> None:
    with pytest.raises(CoercionError):
        minutes_to_seconds(minutes)


def test_truncate() -> None:
    assert truncate(None, 5) is None
    assert truncate("abcdefgh", 5) == "abcde"
    assert truncate(12345678, 3) == "123"
