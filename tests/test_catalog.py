"""Tests for the program name/key catalog."""

from __future__ import annotations

import pytest

from custom_components.home_connect_bridge.appliances.dryer import DRYER_PROGRAMS
from custom_components.home_connect_bridge.appliances.hood import HOOD_PROGRAMS
from custom_components.home_connect_bridge.domain.catalog import ProgramCatalog


@pytest.fixture
def catalog() -> ProgramCatalog:
    return ProgramCatalog("LaundryCare.Dryer", DRYER_PROGRAMS)


@pytest.mark.parametrize("name", list(DRYER_PROGRAMS))
def test_static_dryer_programs_round_trip(catalog: ProgramCatalog, name: str) -> None:
    assert catalog.resolve_name(catalog.resolve_key(name)) == name


@pytest.mark.parametrize("name", list(HOOD_PROGRAMS))
def test_static_hood_programs_round_trip(name: str) -> None:
    catalog = ProgramCatalog("Cooking.Hood", HOOD_PROGRAMS)

    assert catalog.resolve_name(catalog.resolve_key(name)) == name


def test_resolve_key_order(catalog: ProgramCatalog) -> None:
    catalog.replace_discovered(
        [
            ("Cotton", "Vendor.Override.Cotton"),
            ("Eco", "LaundryCare.Dryer.Program.Eco40"),
        ]
    )

    assert catalog.resolve_key("Custom.Key.Verbatim") == "Custom.Key.Verbatim"
    assert catalog.resolve_key("Cotton") == "LaundryCare.Dryer.Program.Cotton"
    assert catalog.resolve_key("Eco") == "LaundryCare.Dryer.Program.Eco40"
    assert catalog.resolve_key("Steam") == "LaundryCare.Dryer.Program.Steam"


def test_replace_discovered_uses_terminal_segment(catalog: ProgramCatalog) -> None:
    names = catalog.replace_discovered(
        [
            (None, "LaundryCare.Dryer.Program.Mix"),
            ("Eco", "LaundryCare.Dryer.Program.Eco40"),
            ("Ignored", ""),
        ]
    )

    assert names == ["Mix", "Eco"]
    assert catalog.discovered_names == ["Mix", "Eco"]
    assert catalog.resolve_name("LaundryCare.Dryer.Program.Eco40") == "Eco"


def test_replace_discovered_replaces_wholesale(catalog: ProgramCatalog) -> None:
    catalog.replace_discovered([("Eco", "LaundryCare.Dryer.Program.Eco40")])
    catalog.replace_discovered([("Steam", "LaundryCare.Dryer.Program.Steam")])

    assert catalog.discovered_names == ["Steam"]
    assert catalog.resolve_key("Eco") == "LaundryCare.Dryer.Program.Eco"


def test_resolve_name_falls_back_to_terminal_segment(catalog: ProgramCatalog) -> None:
    assert catalog.resolve_name("Some.Unknown.Program") == "Program"


def test_persistence_round_trip(catalog: ProgramCatalog) -> None:
    catalog.replace_discovered([("Eco", "LaundryCare.Dryer.Program.Eco40")])

    restored = ProgramCatalog("LaundryCare.Dryer", DRYER_PROGRAMS)
    restored.restore(catalog.as_dict())

    assert restored.discovered_names == ["Eco"]
    assert restored.resolve_key("Eco") == "LaundryCare.Dryer.Program.Eco40"
