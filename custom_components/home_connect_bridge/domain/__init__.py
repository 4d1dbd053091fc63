"""Domain-layer primitives for the Home Connect Bridge integration."""

from .catalog import ProgramCatalog, ProgramCatalogEntry
from .commands import (
    BaseDispatch,
    CommandPlan,
    FetchPrograms,
    SendCommand,
    SetPowerState,
    SetSelectedProgramOption,
    SetSetting,
    StartProgram,
    StopProgram,
    VendorOption,
)
from .router import EventRouter, EventRule, PatternRule, RouteResult
from .snapshot import SnapshotField, build_snapshot, serialize_snapshot
from .state import AttributeStore, DeviceState
from .telemetry import DiscoveredKeyStat, RecentEventRecord, TelemetryRecorder

__all__ = [
    "AttributeStore",
    "BaseDispatch",
    "CommandPlan",
    "DeviceState",
    "DiscoveredKeyStat",
    "EventRouter",
    "EventRule",
    "FetchPrograms",
    "PatternRule",
    "ProgramCatalog",
    "ProgramCatalogEntry",
    "RecentEventRecord",
    "RouteResult",
    "SendCommand",
    "SetPowerState",
    "SetSelectedProgramOption",
    "SetSetting",
    "SnapshotField",
    "StartProgram",
    "StopProgram",
    "TelemetryRecorder",
    "VendorOption",
    "build_snapshot",
    "serialize_snapshot",
]
