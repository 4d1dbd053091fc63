"""Program name ↔ vendor key catalog."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..codecs.common import extract_enum


@dataclass(frozen=True, slots=True)
class ProgramCatalogEntry:
    """One program known by name and vendor key."""

    name: str
    vendor_key: str


class ProgramCatalog:
    """Combine a fixed built-in program table with a discovered one.

    The static table never changes at runtime. The discovered table is
    replaced wholesale every time the appliance reports its program list.
    """

    def __init__(self, namespace: str, static: Mapping[str, str]) -> None:
        """Initialise the catalog for the ``namespace`` program family."""

        self._namespace = namespace
        self._static: dict[str, str] = dict(static)
        self._discovered: dict[str, str] = {}

    @property
    def namespace(self) -> str:
        """Return the vendor namespace used for synthesised keys."""

        return self._namespace

    @property
    def static_entries(self) -> list[ProgramCatalogEntry]:
        """Return the built-in programs in table order."""

        return [ProgramCatalogEntry(name, key) for name, key in self._static.items()]

    @property
    def discovered_entries(self) -> list[ProgramCatalogEntry]:
        """Return the programs reported by the appliance."""

        return [
            ProgramCatalogEntry(name, key) for name, key in self._discovered.items()
        ]

    @property
    def discovered_names(self) -> list[str]:
        """Return the discovered program names in reported order."""

        return list(self._discovered)

    def replace_discovered(
        self, entries: Iterable[tuple[str | None, str]]
    ) -> list[str]:
        """Replace the discovered table with ``(name, key)`` pairs.

        Missing names fall back to the key's terminal segment. Returns the
        resulting program names in order.
        """

        table: dict[str, str] = {}
        for name, key in entries:
            if not key:
                continue
            display = name or extract_enum(key)
            if not display:
                continue
            table.setdefault(display, key)
        self._discovered = table
        return list(table)

    def resolve_key(self, name: str) -> str:
        """Resolve a program name to its vendor key.

        Dotted values are used verbatim, then the static table, then the
        discovered table; unknown names are synthesised under the namespace.
        """

        if "." in name:
            return name
        if name in self._static:
            return self._static[name]
        if name in self._discovered:
            return self._discovered[name]
        return f"{self._namespace}.Program.{name}"

    def resolve_name(self, vendor_key: str) -> str | None:
        """Resolve a vendor key back to a display name."""

        for table in (self._static, self._discovered):
            for name, key in table.items():
                if key == vendor_key:
                    return name
        return extract_enum(vendor_key) or None

    def as_dict(self) -> dict[str, Any]:
        """Return the discovered table for persistence."""

        return {"discovered": dict(self._discovered)}

    def restore(self, data: Mapping[str, Any]) -> None:
        """Restore the discovered table from persisted data."""

        discovered = data.get("discovered")
        if isinstance(discovered, Mapping):
            self.replace_discovered(
                (str(name), str(key)) for name, key in discovered.items()
            )


__all__ = ["ProgramCatalog", "ProgramCatalogEntry"]
