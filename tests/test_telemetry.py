"""Tests for discovered-key and recent-event bookkeeping."""

from __future__ import annotations

from custom_components.home_connect_bridge.const import MAX_DISCOVERED_KEYS
from custom_components.home_connect_bridge.domain.telemetry import TelemetryRecorder


def test_discovered_keys_track_counts_and_values() -> None:
    recorder = TelemetryRecorder()

    recorder.record("A.B", 1, "one", "t1")
    recorder.record("A.B", 2, "two", "t2")

    stat = recorder.discovered_keys["A.B"]
    assert stat.as_dict() == {
        "key": "A.B",
        "first_seen": "t1",
        "last_seen": "t2",
        "last_value": "2",
        "count": 2,
    }


def test_discovered_keys_are_capped() -> None:
    recorder = TelemetryRecorder(max_recent_events=0)

    for index in range(MAX_DISCOVERED_KEYS + 1):
        recorder.record(f"Key.{index}", index, None, "t")

    assert len(recorder.discovered_keys) == MAX_DISCOVERED_KEYS
    assert f"Key.{MAX_DISCOVERED_KEYS}" not in recorder.discovered_keys

    recorder.record("Key.0", "again", None, "t2")
    assert recorder.discovered_keys["Key.0"].count == 2


def test_recent_events_newest_first_and_bounded() -> None:
    recorder = TelemetryRecorder(max_recent_events=3)

    for name in ("E1", "E2", "E3", "E4"):
        recorder.record(name, name.lower(), None, "t")

    assert [record.key for record in recorder.recent_events] == ["E4", "E3", "E2"]


def test_zero_bound_disables_recent_log() -> None:
    recorder = TelemetryRecorder(max_recent_events=0)

    recorder.record("A.B", 1, None, "t")

    assert recorder.recent_events == []
    assert "A.B" in recorder.discovered_keys


def test_values_are_truncated() -> None:
    recorder = TelemetryRecorder()

    recorder.record("A.B", "x" * 300, "y" * 300, "t")

    record = recorder.recent_events[0]
    assert len(record.value or "") == 100
    assert len(record.displayvalue or "") == 50
    assert len(recorder.discovered_keys["A.B"].last_value or "") == 100


def test_blank_keys_are_ignored() -> None:
    recorder = TelemetryRecorder()

    recorder.record(None, 1, None, "t")
    recorder.record("", 1, None, "t")

    assert recorder.as_dict() == {"discovered_keys": [], "recent_events": []}


def test_lowering_bound_trims_log() -> None:
    recorder = TelemetryRecorder(max_recent_events=5)
    for index in range(5):
        recorder.record(f"K{index}", index, None, "t")

    recorder.max_recent_events = 2

    assert [record.key for record in recorder.recent_events] == ["K4", "K3"]


def test_restore_honours_bounds() -> None:
    recorder = TelemetryRecorder(max_recent_events=2)

    recorder.restore(
        [
            {"key": "A.B", "first_seen": "t1", "last_seen": "t2", "count": 4},
            {"value": "no key"},
            "junk",
        ],
        [
            {"time": "t3", "key": "C", "value": "3"},
            {"time": "t2", "key": "B", "value": "2"},
            {"time": "t1", "key": "A", "value": "1"},
        ],
    )

    assert list(recorder.discovered_keys) == ["A.B"]
    assert recorder.discovered_keys["A.B"].count == 4
    assert [record.key for record in recorder.recent_events] == ["C", "B"]


def test_clear_discovered_keeps_recent_log() -> None:
    recorder = TelemetryRecorder()
    recorder.record("A.B", 1, None, "t")

    recorder.clear_discovered()

    assert recorder.discovered_keys == {}
    assert len(recorder.recent_events) == 1
