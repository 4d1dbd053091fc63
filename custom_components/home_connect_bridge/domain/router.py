"""Ordered rule table routing raw events to normalisation handlers."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
import logging
import re
from typing import Any, Generic, Protocol, TypeVar

from ..codecs.models import RawEvent

_LOGGER = logging.getLogger(__name__)


class RoutingContext(Protocol):
    """Device-side hooks the router drives for every event."""

    @property
    def name(self) -> str:
        """Return the display name used in log messages."""

    def record_event(self, event: RawEvent) -> None:
        """Record the raw event in diagnostic bookkeeping."""

    def refresh_derived_state(self) -> None:
        """Recompute derived attributes from the current snapshot."""

    def refresh_snapshot(self) -> None:
        """Re-serialise the external snapshot."""


ContextT = TypeVar("ContextT", bound=RoutingContext)

EventHandler = Callable[[Any, RawEvent], None]


@dataclass(frozen=True, slots=True)
class EventRule:
    """Normalisation handler plus the recompute steps it triggers."""

    name: str
    handler: EventHandler
    derived: bool = False
    snapshot: bool = False


@dataclass(frozen=True, slots=True)
class PatternRule:
    """Event rule selected by a regular expression over the event key."""

    pattern: re.Pattern[str]
    rule: EventRule

    @classmethod
    def prefix(cls, prefix: str, rule: EventRule) -> PatternRule:
        """Build a rule matching every key under the dotted ``prefix``."""

        return cls(re.compile(rf"{re.escape(prefix)}\..+"), rule)

    def matches(self, key: str) -> bool:
        """Return whether the rule applies to ``key``."""

        return self.pattern.fullmatch(key) is not None


@dataclass(frozen=True, slots=True)
class RouteResult:
    """Outcome of routing one event."""

    rule: EventRule
    applied: bool


class EventRouter(Generic[ContextT]):
    """Match event keys exactly, then by pattern, then by default."""

    def __init__(
        self,
        exact: Mapping[str, EventRule],
        patterns: Iterable[PatternRule],
        default: EventRule,
    ) -> None:
        """Freeze the rule table."""

        self._exact = dict(exact)
        self._patterns = tuple(patterns)
        self._default = default

    @property
    def exact_keys(self) -> tuple[str, ...]:
        """Return the keys with a dedicated rule."""

        return tuple(self._exact)

    def match(self, key: str) -> EventRule:
        """Return the rule that applies to ``key``."""

        rule = self._exact.get(key)
        if rule is not None:
            return rule
        for pattern in self._patterns:
            if pattern.matches(key):
                return pattern.rule
        return self._default

    def route(self, context: ContextT, event: RawEvent) -> RouteResult | None:
        """Record, normalise and recompute for one event.

        Handler failures are logged and never stop the recompute steps.
        Events without a key are ignored.
        """

        if not event.key:
            return None

        context.record_event(event)
        rule = self.match(event.key)
        applied = True
        try:
            rule.handler(context, event)
        except ValueError as err:
            applied = False
            _LOGGER.warning(
                "%s: Skipping update for %s (%s): %s",
                context.name,
                event.key,
                rule.name,
                err,
            )
        except Exception:  # noqa: BLE001
            applied = False
            _LOGGER.warning(
                "%s: Rule %s failed for %s=%r",
                context.name,
                rule.name,
                event.key,
                event.value,
                exc_info=True,
            )

        if rule.derived:
            context.refresh_derived_state()
        if rule.snapshot:
            context.refresh_snapshot()
        return RouteResult(rule=rule, applied=applied)


__all__ = [
    "EventHandler",
    "EventRouter",
    "EventRule",
    "PatternRule",
    "RouteResult",
    "RoutingContext",
]
