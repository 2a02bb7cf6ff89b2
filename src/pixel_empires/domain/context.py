"""Simulation context shared by every engine component."""

from __future__ import annotations

from dataclasses import dataclass, field

from .catalog import DEFAULT_CATALOG, Catalog
from .events import EventBus, GameEvent
from .models import Empire
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class SimulationContext:
    """Explicit handle to the state, static content and event channel.

    Components receive the context in their constructor and never reach for
    module-level state.
    """

    empire: Empire
    catalog: Catalog = DEFAULT_CATALOG
    rules: RulesConfig = DEFAULT_RULES
    events: EventBus = field(default_factory=EventBus)

    def emit(self, event: GameEvent) -> None:
        self.events.publish(event)
