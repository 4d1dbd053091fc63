"""Pydantic models for Home Connect connector payloads."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RawEvent(BaseModel):
    """Single flat key/value telemetry event."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    key: str | None = None
    value: Any = None
    displayvalue: str | None = Field(
        default=None,
        validation_alias=AliasChoices("displayvalue", "displayValue", "display_value"),
    )
    unit: str | None = None
    ha_id: str | None = Field(
        default=None, validation_alias=AliasChoices("haId", "ha_id")
    )

    @field_validator("key", mode="before")
    @classmethod
    def _strip_key(cls, value: Any) -> Any:
        """Normalise blank keys to ``None``."""

        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("displayvalue", "unit", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        """Render scalar display values and units as strings."""

        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value


class ProgramEntry(BaseModel):
    """Program descriptor returned by the available-programs endpoint."""

    model_config = ConfigDict(extra="allow")

    key: str
    name: str | None = None

    @field_validator("key", mode="before")
    @classmethod
    def _require_key(cls, value: Any) -> Any:
        """Reject blank program keys."""

        if value is None or not str(value).strip():
            raise ValueError("program key must be a non-empty string")
        return str(value).strip()


class ProgramOption(BaseModel):
    """Option item attached to an active or selected program."""

    model_config = ConfigDict(extra="allow")

    key: str | None = None
    value: Any = None
    displayvalue: str | None = None
    unit: str | None = None
    name: str | None = None


class ProgramData(BaseModel):
    """Program body nested under ``data`` in API responses."""

    model_config = ConfigDict(extra="allow")

    key: str | None = None
    name: str | None = None
    options: list[ProgramOption] | None = None


class ActiveProgramPayload(BaseModel):
    """Active program payload, flat or wrapped in ``data``."""

    model_config = ConfigDict(extra="allow")

    key: str | None = None
    name: str | None = None
    options: list[ProgramOption] | None = None
    data: ProgramData | None = None


__all__ = [
    "ActiveProgramPayload",
    "ProgramData",
    "ProgramEntry",
    "ProgramOption",
    "RawEvent",
]
