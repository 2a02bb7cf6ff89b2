"""Dataclasses describing the empire aggregate and everything it owns.

The engine operates exclusively on these in-memory types.  Persistence
adapters (JSON snapshots, SQL save slots) translate them through pydantic
``TypeAdapter`` instances, so every field must stay JSON-representable:
enum-keyed dicts, lists and plain scalars only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import ClassVar, NewType

from .enums import (
    BonusField,
    BuildingType,
    CampType,
    CellType,
    CombatOutcome,
    QueueKind,
    ResourceKind,
    TechCategory,
    TechnologyID,
    UnitType,
)
from .ledger import ResourceLedger

# --- Strongly typed identifiers -------------------------------------------------

EmpireID = NewType("EmpireID", int)
CampID = NewType("CampID", str)


# --- Buildings and bonuses ------------------------------------------------------


@dataclass(slots=True)
class Building:
    """A constructed building and its position inside the settlement."""

    level: int
    x: int
    y: int


@dataclass(slots=True)
class BonusVector:
    """Aggregated modifiers derived from the researched technology set."""

    unit_attack: float = 0.0
    unit_defense: float = 0.0
    food_production: float = 0.0
    ore_production: float = 0.0
    storage_capacity: float = 0.0
    wall_defense: float = 0.0
    advantage_bonus: float = 0.0
    defensive_casualty_reduction: float = 0.0

    def reset(self) -> None:
        for slot in fields(self):
            setattr(self, slot.name, 0.0)

    def add(self, bonus: BonusField, value: float) -> None:
        setattr(self, bonus.value, getattr(self, bonus.value) + value)

    def get(self, bonus: BonusField) -> float:
        return getattr(self, bonus.value)

    def as_dict(self) -> dict[str, float]:
        return {slot.name: getattr(self, slot.name) for slot in fields(self)}


# --- Queue entries --------------------------------------------------------------


@dataclass(slots=True)
class ConstructionJob:
    """Pending build or upgrade of a single building level."""

    kind: ClassVar[QueueKind] = QueueKind.CONSTRUCTION

    building_type: BuildingType
    target_level: int
    x: int
    y: int
    time_remaining: float


@dataclass(slots=True)
class TrainingJob:
    """Pending batch of units."""

    kind: ClassVar[QueueKind] = QueueKind.TRAINING

    unit_type: UnitType
    quantity: int
    time_remaining: float


@dataclass(slots=True)
class ResearchJob:
    """Pending technology research."""

    kind: ClassVar[QueueKind] = QueueKind.RESEARCH

    category: TechCategory
    tech_id: TechnologyID
    time_remaining: float


QueueEntry = ConstructionJob | TrainingJob | ResearchJob


# --- World map ------------------------------------------------------------------


@dataclass(slots=True)
class Camp:
    """NPC camp occupying a map cell.

    Defense is never stored; it is always derived from ``difficulty``.
    ``respawn_remaining`` is set after the camp is defeated and counts down
    to the moment the camp reappears.
    """

    camp_id: CampID
    camp_type: CampType
    difficulty: float
    loot: dict[ResourceKind, float]
    generation: int = 0
    respawn_remaining: float | None = None

    @property
    def is_defeated(self) -> bool:
        return self.respawn_remaining is not None


@dataclass(slots=True)
class MapCell:
    """Occupied world map cell."""

    x: int
    y: int
    kind: CellType
    camp: Camp | None = None


@dataclass(slots=True)
class WorldMap:
    """Sparse grid of occupied cells."""

    width: int
    height: int
    cells: list[MapCell] = field(default_factory=list)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> MapCell | None:
        for cell in self.cells:
            if cell.x == x and cell.y == y:
                return cell
        return None

    def camp_cells(self) -> list[MapCell]:
        return [cell for cell in self.cells if cell.kind == CellType.NPC and cell.camp]


# --- Combat ---------------------------------------------------------------------


@dataclass(slots=True)
class AdvantageNote:
    """Explains a camp advantage applied to one unit type."""

    unit_type: UnitType
    camp_type: CampType
    multiplier: float
    description: str


@dataclass(slots=True)
class CombatReport:
    """Record of a committed attack."""

    target_name: str
    camp_type: CampType
    x: int
    y: int
    difficulty: float
    outcome: CombatOutcome
    total_attack_power: float
    target_defense: float
    units_sent: dict[UnitType, int]
    units_lost: dict[UnitType, int]
    loot: dict[ResourceKind, float]
    advantages: list[AdvantageNote]
    bonuses: dict[str, float]
    turn: int
    resolved_at: datetime


# --- Root aggregate -------------------------------------------------------------


def _empty_units() -> dict[UnitType, int]:
    return {unit_type: 0 for unit_type in UnitType}


def _empty_technologies() -> dict[TechCategory, dict[TechnologyID, bool]]:
    return {category: {} for category in TechCategory}


@dataclass(slots=True)
class Empire:
    """Root aggregate representing one player's empire."""

    id: EmpireID
    name: str
    world: WorldMap
    ledger: ResourceLedger = field(default_factory=ResourceLedger)
    buildings: dict[BuildingType, Building] = field(default_factory=dict)
    units: dict[UnitType, int] = field(default_factory=_empty_units)
    technologies: dict[TechCategory, dict[TechnologyID, bool]] = field(
        default_factory=_empty_technologies
    )
    bonuses: BonusVector = field(default_factory=BonusVector)
    construction_queue: list[ConstructionJob] = field(default_factory=list)
    training_queue: list[TrainingJob] = field(default_factory=list)
    research_queue: list[ResearchJob] = field(default_factory=list)
    combat_reports: list[CombatReport] = field(default_factory=list)
    turn: int = 1
    elapsed_seconds: float = 0.0

    def building_level(self, building_type: BuildingType) -> int:
        building = self.buildings.get(building_type)
        return building.level if building else 0

    def is_researched(self, category: TechCategory, tech_id: TechnologyID) -> bool:
        return bool(self.technologies.get(category, {}).get(tech_id, False))

    def researched(self) -> list[tuple[TechCategory, TechnologyID]]:
        return [
            (category, tech_id)
            for category, techs in self.technologies.items()
            for tech_id, done in techs.items()
            if done
        ]

    def queue(self, kind: QueueKind) -> list[QueueEntry]:
        if kind == QueueKind.CONSTRUCTION:
            return self.construction_queue
        if kind == QueueKind.TRAINING:
            return self.training_queue
        if kind == QueueKind.RESEARCH:
            return self.research_queue
        raise ValueError(f"unknown queue kind: {kind!r}")
