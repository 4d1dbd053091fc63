"""Tests for dryer command translation and dispatch."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from custom_components.home_connect_bridge.appliances import (
    ApplianceOptions,
    DryerDevice,
)
from custom_components.home_connect_bridge.appliances.dryer import (
    COMMAND_PAUSE,
    COMMAND_RESUME,
    OPTION_DRYING_TARGET,
    OPTION_DURATION,
    OPTION_START_IN_RELATIVE,
    OPTION_TEMPERATURE,
    OPTION_WRINKLE_GUARD,
)


def test_start_program_by_name(dryer: DryerDevice, connector: MagicMock) -> None:
    assert dryer.start_program("Synthetics") is True

    connector.start_program.assert_called_once_with(
        dryer.ref, "LaundryCare.Dryer.Program.Synthetic"
    )
    assert dryer.attributes["lastProgram"] == "Synthetics"
    assert dryer.attributes["lastCommandSent"] == (
        "startProgram: [program:Synthetics, key:LaundryCare.Dryer.Program.Synthetic]"
    )
    assert dryer.attributes["lastCommandTime"] == "2024-01-01 12:00:00"


def test_start_program_defaults_to_configured_program(
    device_factory, connector: MagicMock
) -> None:
    dryer = device_factory(options=ApplianceOptions(default_program="Towels"))

    dryer.start_program()

    connector.start_program.assert_called_once_with(
        dryer.ref, "LaundryCare.Dryer.Program.Towels"
    )


def test_start_program_uses_discovered_key(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    dryer.parse_available_programs(
        [{"key": "LaundryCare.Dryer.Program.Eco40", "name": "Eco"}]
    )

    dryer.start_program("Eco")

    connector.start_program.assert_called_once_with(
        dryer.ref, "LaundryCare.Dryer.Program.Eco40"
    )


def test_start_program_by_key(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.start_program_by_key("LaundryCare.Dryer.Program.Mix")

    connector.start_program.assert_called_once_with(
        dryer.ref, "LaundryCare.Dryer.Program.Mix"
    )
    assert dryer.attributes["lastProgram"] == "Mix"


def test_start_uses_default_target(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.start()

    connector.start_program.assert_called_once_with(
        dryer.ref,
        "LaundryCare.Dryer.Program.Cotton",
        [
            {
                "key": OPTION_DRYING_TARGET,
                "value": "LaundryCare.Dryer.EnumType.DryingTarget.CupboardDry",
            }
        ],
    )
    assert dryer.attributes["lastCommandSent"] == (
        "startProgramWithOptions: [program:Cotton, target:CupboardDry]"
    )


def test_start_with_options_skips_unknown_values(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    dryer.start_program_with_options("Wool", "Soggy", "Low")

    connector.start_program.assert_called_once_with(
        dryer.ref,
        "LaundryCare.Dryer.Program.Wool",
        [
            {
                "key": OPTION_TEMPERATURE,
                "value": "LaundryCare.Dryer.EnumType.Temperature.Low",
            }
        ],
    )


def test_start_timed_dry(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.start_timed_dry(30, "High")

    connector.start_program.assert_called_once_with(
        dryer.ref,
        "LaundryCare.Dryer.Program.TimeDrying",
        [
            {"key": OPTION_DURATION, "value": 1800, "unit": "seconds"},
            {
                "key": OPTION_TEMPERATURE,
                "value": "LaundryCare.Dryer.EnumType.Temperature.High",
            },
        ],
    )
    assert dryer.attributes["lastProgram"] == "TimedDry"


def test_start_delayed(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.start_delayed("Cotton", 90)

    connector.start_program.assert_called_once_with(
        dryer.ref,
        "LaundryCare.Dryer.Program.Cotton",
        [{"key": OPTION_START_IN_RELATIVE, "value": 5400, "unit": "seconds"}],
    )
    assert dryer.attributes["lastCommandSent"] == (
        "startDelayed: [program:Cotton, delay:90]"
    )


def test_start_delayed_fractional_minutes(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    dryer.start_delayed("Cotton", 4.1)

    connector.start_program.assert_called_once_with(
        dryer.ref,
        "LaundryCare.Dryer.Program.Cotton",
        [{"key": OPTION_START_IN_RELATIVE, "value": 246, "unit": "seconds"}],
    )


def test_set_drying_target(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.set_drying_target("ExtraDry")

    connector.set_selected_program_option.assert_called_once_with(
        dryer.ref,
        OPTION_DRYING_TARGET,
        "LaundryCare.Dryer.EnumType.DryingTarget.ExtraDry",
    )


def test_unknown_drying_target_is_rejected(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    assert dryer.set_drying_target("Soggy") is False

    connector.set_selected_program_option.assert_not_called()
    assert "lastCommandSent" not in dryer.attributes


@pytest.mark.parametrize(("state", "expected"), [("on", True), ("ON", True), ("off", False)])
def test_set_wrinkle_guard(
    dryer: DryerDevice, connector: MagicMock, state: str, expected: bool
) -> None:
    dryer.set_wrinkle_guard(state)

    connector.set_selected_program_option.assert_called_once_with(
        dryer.ref, OPTION_WRINKLE_GUARD, expected
    )


def test_pause_resume_stop(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.pause_program()
    dryer.resume_program()
    dryer.stop_program()

    assert [call.args for call in connector.send_command.call_args_list] == [
        (dryer.ref, COMMAND_PAUSE),
        (dryer.ref, COMMAND_RESUME),
    ]
    connector.stop_program.assert_called_once_with(dryer.ref)
    assert dryer.attributes["lastCommandSent"] == "stopProgram"


def test_power_commands(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.turn_on()
    dryer.turn_off()

    assert [call.args for call in connector.set_power_state.call_args_list] == [
        (dryer.ref, True),
        (dryer.ref, False),
    ]
    assert dryer.attributes["lastCommandSent"] == "setPower: [state:off]"


def test_get_available_programs(dryer: DryerDevice, connector: MagicMock) -> None:
    dryer.get_available_programs()

    connector.get_available_programs.assert_called_once_with(dryer.ref)


def test_run_command_dispatches_by_name(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    assert dryer.run_command("start_timed_dry", {"minutes": 15}) is True

    connector.start_program.assert_called_once()


def test_run_command_rejects_unknown_commands(dryer: DryerDevice) -> None:
    with pytest.raises(ValueError, match="Unsupported command"):
        dryer.run_command("set_fan_level", {"level": 3})
    with pytest.raises(ValueError, match="Unsupported command"):
        dryer.run_command("_notify")


def test_run_command_rejects_bad_parameters(dryer: DryerDevice) -> None:
    with pytest.raises(ValueError, match="Invalid parameters"):
        dryer.run_command("set_drying_target", {"colour": "blue"})
    with pytest.raises(ValueError, match="Invalid parameters"):
        dryer.run_command("start_delayed", {"program": "Cotton"})


def test_run_command_propagates_dispatch_type_errors(
    dryer: DryerDevice, connector: MagicMock
) -> None:
    connector.start_program.side_effect = TypeError("connector exploded")

    with pytest.raises(TypeError, match="connector exploded"):
        dryer.run_command("start_program", {"program": "Cotton"})


def test_commands_work_without_connector(device_factory) -> None:
    dryer = device_factory(install=False)
    dryer.connector = None

    assert dryer.start_program("Cotton") is True
    assert dryer.attributes["lastProgram"] == "Cotton"
