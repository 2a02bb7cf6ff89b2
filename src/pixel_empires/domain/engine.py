"""Facade over the progression engine components.

:class:`EmpireEngine` is what outer layers (the HTTP runtime, save slots,
tests) talk to.  It owns one :class:`SimulationContext` and the components
built around it; nothing here keeps module-level state.
"""

from __future__ import annotations

from collections.abc import Mapping

from . import economy
from . import events as game_events
from .catalog import DEFAULT_CATALOG, Catalog, TechnologyDefinition
from .combat import AttackPreview, CombatResolver, UnitCounts
from .context import SimulationContext
from .enums import BuildingType, QueueKind, ResourceKind, TechCategory, TechnologyID, UnitType
from .events import EventBus, EventListener
from .models import (
    BonusVector,
    Building,
    Camp,
    CombatReport,
    ConstructionJob,
    Empire,
    EmpireID,
    MapCell,
    QueueEntry,
    ResearchJob,
    TrainingJob,
)
from .queues import QueueScheduler
from .research import TechnologyAggregator
from .results import Failure, Success
from .rules_config import DEFAULT_RULES, RulesConfig
from .setup import new_empire
from .tick import TickSummary, run_tick


class EmpireEngine:
    """Single-writer entry point for every engine operation."""

    def __init__(
        self,
        empire: Empire,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        rules: RulesConfig = DEFAULT_RULES,
        events: EventBus | None = None,
    ) -> None:
        self.ctx = SimulationContext(
            empire=empire, catalog=catalog, rules=rules, events=events or EventBus()
        )
        self.aggregator = TechnologyAggregator(self.ctx)
        self.scheduler = QueueScheduler(self.ctx, self.aggregator)
        self.combat = CombatResolver(self.ctx)
        self.rederive()

    @classmethod
    def new(
        cls,
        empire_id: EmpireID,
        name: str,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        rules: RulesConfig = DEFAULT_RULES,
        events: EventBus | None = None,
    ) -> EmpireEngine:
        empire = new_empire(empire_id, name, catalog=catalog, rules=rules)
        return cls(empire, catalog=catalog, rules=rules, events=events)

    @property
    def empire(self) -> Empire:
        return self.ctx.empire

    @property
    def events(self) -> EventBus:
        return self.ctx.events

    def subscribe(self, listener: EventListener) -> None:
        self.ctx.events.subscribe(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        self.ctx.events.unsubscribe(listener)

    def rederive(self) -> None:
        """Recompute bonuses and storage capacity from persistent state."""

        self.aggregator.recompute_bonuses()
        economy.refresh_storage_capacity(self.ctx)

    # ------------------------------------------------------------------
    # Commands

    def start_construction(
        self, building_type: BuildingType | str, x: int, y: int
    ) -> Success[ConstructionJob] | Failure:
        return self.scheduler.start_construction(building_type, x, y)

    def start_training(
        self, unit_type: UnitType | str, quantity: int
    ) -> Success[TrainingJob] | Failure:
        return self.scheduler.start_training(unit_type, quantity)

    def start_research(
        self, category: TechCategory | str, tech_id: TechnologyID | str
    ) -> Success[ResearchJob] | Failure:
        return self.scheduler.start_research(category, tech_id)

    def tick(self, delta_seconds: float) -> TickSummary:
        return run_tick(self.ctx, delta_seconds, scheduler=self.scheduler)

    def advance_turn(self) -> int:
        self.empire.turn += 1
        self.ctx.emit(game_events.turn_advanced(self.empire.turn))
        return self.empire.turn

    def preview_attack(
        self, x: int, y: int, unit_counts: UnitCounts
    ) -> Success[AttackPreview] | Failure:
        return self.combat.preview_attack(x, y, unit_counts)

    def commit_attack(
        self, x: int, y: int, unit_counts: UnitCounts
    ) -> Success[CombatReport] | Failure:
        return self.combat.commit_attack(x, y, unit_counts)

    # ------------------------------------------------------------------
    # Read-only accessors

    def resources(self) -> dict[ResourceKind, float]:
        return self.empire.ledger.snapshot()

    def capacity(self) -> float:
        return self.empire.ledger.capacity

    def bonuses(self) -> BonusVector:
        return self.empire.bonuses

    def queue(self, kind: QueueKind | str) -> list[QueueEntry]:
        return list(self.empire.queue(QueueKind(kind)))

    def researched(self) -> list[tuple[TechCategory, TechnologyID]]:
        return self.empire.researched()

    def available_technologies(self) -> list[TechnologyDefinition]:
        return self.aggregator.available_technologies()

    def can_research(self, category: TechCategory | str, tech_id: TechnologyID | str) -> bool:
        return self.aggregator.can_research(category, tech_id)

    def units(self) -> dict[UnitType, int]:
        return dict(self.empire.units)

    def buildings(self) -> Mapping[BuildingType, Building]:
        return dict(self.empire.buildings)

    def camps(self) -> list[MapCell]:
        return self.empire.world.camp_cells()

    def camp_at(self, x: int, y: int) -> Camp | None:
        cell = self.empire.world.cell_at(x, y)
        return cell.camp if cell else None

    def combat_reports(self) -> list[CombatReport]:
        return list(self.empire.combat_reports)

    def production_rates(self) -> dict[ResourceKind, float]:
        return economy.production_rates(self.ctx)

    def wall_defense(self) -> float:
        return economy.wall_defense(self.ctx)
