"""Static definitions for buildings, units, technologies and NPC camps.

Definitions are immutable and keyed by the domain enumerations.  Every lookup
goes through :class:`Catalog`, which raises :class:`UnknownDefinitionError`
instead of returning ``None`` so a bad key never silently turns into a zero
cost or a missing effect.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from .enums import (
    BonusField,
    BuildingType,
    CampType,
    ResourceKind,
    TechCategory,
    TechnologyID,
    UnitType,
)

FOOD = ResourceKind.FOOD
ORE = ResourceKind.ORE


class UnknownDefinitionError(KeyError):
    """Raised when a catalog lookup names something that does not exist."""


@dataclass(frozen=True, slots=True)
class BuildingLevel:
    """Cost and stats of a single building level."""

    cost: dict[ResourceKind, float]
    production: dict[ResourceKind, float] = field(default_factory=dict)
    capacity: float | None = None
    training_speed: float | None = None
    research_speed: float | None = None
    defense: float | None = None


@dataclass(frozen=True, slots=True)
class BuildingDefinition:
    """Catalog entry for a building type."""

    type: BuildingType
    name: str
    description: str
    levels: tuple[BuildingLevel, ...]
    requirements: dict[BuildingType, int] = field(default_factory=dict)

    @property
    def max_level(self) -> int:
        return len(self.levels)

    def level(self, level: int) -> BuildingLevel:
        """Return the stats for a 1-based building level."""

        if level < 1 or level > self.max_level:
            raise UnknownDefinitionError(f"{self.type} has no level {level}")
        return self.levels[level - 1]


@dataclass(frozen=True, slots=True)
class UnitDefinition:
    """Catalog entry for a troop type."""

    type: UnitType
    name: str
    cost: dict[ResourceKind, float]
    attack: float
    defense: float
    hp: int
    carry_capacity: int
    upkeep: dict[ResourceKind, float]
    # Base attack multiplier applied against the listed camp types.
    camp_advantages: dict[CampType, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TechnologyDefinition:
    """Catalog entry for a researchable technology."""

    category: TechCategory
    id: TechnologyID
    name: str
    description: str
    cost: dict[ResourceKind, float]
    research_seconds: float
    effects: dict[BonusField, float]
    building_requirements: dict[BuildingType, int] = field(default_factory=dict)
    technology_requirements: tuple[tuple[TechCategory, TechnologyID], ...] = ()


@dataclass(frozen=True, slots=True)
class CampDefinition:
    """Catalog entry for an NPC camp."""

    type: CampType
    name: str
    difficulty: float
    loot: dict[ResourceKind, float]


@dataclass(frozen=True, slots=True)
class Catalog:
    """Validated lookup tables over every static definition."""

    buildings: Mapping[BuildingType, BuildingDefinition]
    units: Mapping[UnitType, UnitDefinition]
    technologies: Mapping[TechCategory, Mapping[TechnologyID, TechnologyDefinition]]
    camps: Mapping[CampType, CampDefinition]

    def building(self, building_type: BuildingType | str) -> BuildingDefinition:
        return _lookup(self.buildings, building_type, BuildingType, "building")

    def unit(self, unit_type: UnitType | str) -> UnitDefinition:
        return _lookup(self.units, unit_type, UnitType, "unit")

    def camp(self, camp_type: CampType | str) -> CampDefinition:
        return _lookup(self.camps, camp_type, CampType, "camp")

    def technology(
        self, category: TechCategory | str, tech_id: TechnologyID | str
    ) -> TechnologyDefinition:
        branch = _lookup(self.technologies, category, TechCategory, "technology category")
        return _lookup(branch, tech_id, TechnologyID, f"{category} technology")

    def iter_technologies(self) -> Iterator[TechnologyDefinition]:
        for branch in self.technologies.values():
            yield from branch.values()


def _lookup(table, key, enum_type, label: str):
    try:
        member = enum_type(key)
    except ValueError as exc:
        raise UnknownDefinitionError(f"unknown {label}: {key!r}") from exc
    try:
        return table[member]
    except KeyError as exc:
        raise UnknownDefinitionError(f"unknown {label}: {key!r}") from exc


# ---------------------------------------------------------------------------
# Default content


def _cost(food: float, ore: float) -> dict[ResourceKind, float]:
    return {FOOD: food, ORE: ore}


_BUILDINGS = {
    BuildingType.TOWN_HALL: BuildingDefinition(
        type=BuildingType.TOWN_HALL,
        name="Town Hall",
        description="Center of your empire",
        levels=(
            BuildingLevel(cost=_cost(0, 0)),
            BuildingLevel(cost=_cost(100, 100)),
            BuildingLevel(cost=_cost(300, 300)),
        ),
    ),
    BuildingType.FARM: BuildingDefinition(
        type=BuildingType.FARM,
        name="Farm",
        description="Produces food for your empire",
        levels=(
            BuildingLevel(cost=_cost(50, 20), production={FOOD: 1}),
            BuildingLevel(cost=_cost(100, 50), production={FOOD: 2}),
            BuildingLevel(cost=_cost(200, 100), production={FOOD: 4}),
        ),
    ),
    BuildingType.MINE: BuildingDefinition(
        type=BuildingType.MINE,
        name="Mine",
        description="Produces ore for buildings and units",
        levels=(
            BuildingLevel(cost=_cost(20, 50), production={ORE: 1}),
            BuildingLevel(cost=_cost(50, 100), production={ORE: 2}),
            BuildingLevel(cost=_cost(100, 200), production={ORE: 4}),
        ),
    ),
    BuildingType.WAREHOUSE: BuildingDefinition(
        type=BuildingType.WAREHOUSE,
        name="Warehouse",
        description="Increases resource storage capacity",
        levels=(
            BuildingLevel(cost=_cost(30, 30), capacity=200),
            BuildingLevel(cost=_cost(80, 80), capacity=500),
            BuildingLevel(cost=_cost(150, 150), capacity=1000),
        ),
    ),
    BuildingType.BARRACKS: BuildingDefinition(
        type=BuildingType.BARRACKS,
        name="Barracks",
        description="Train military units",
        levels=(
            BuildingLevel(cost=_cost(50, 100), training_speed=1.0),
            BuildingLevel(cost=_cost(100, 200), training_speed=1.5),
            BuildingLevel(cost=_cost(200, 400), training_speed=2.0),
        ),
    ),
    BuildingType.WALL: BuildingDefinition(
        type=BuildingType.WALL,
        name="Wall",
        description="Provides defense for your empire",
        levels=(
            BuildingLevel(cost=_cost(20, 80), defense=10),
            BuildingLevel(cost=_cost(50, 150), defense=25),
            BuildingLevel(cost=_cost(100, 300), defense=50),
        ),
    ),
    BuildingType.LIBRARY: BuildingDefinition(
        type=BuildingType.LIBRARY,
        name="Library",
        description="Research new technologies for your empire",
        levels=(
            BuildingLevel(cost=_cost(80, 120), research_speed=1.0),
            BuildingLevel(cost=_cost(160, 240), research_speed=1.5),
            BuildingLevel(cost=_cost(320, 480), research_speed=2.0),
        ),
        requirements={BuildingType.TOWN_HALL: 2},
    ),
}

_UNITS = {
    UnitType.SPEARMAN: UnitDefinition(
        type=UnitType.SPEARMAN,
        name="Spearman",
        cost=_cost(20, 30),
        attack=5,
        defense=3,
        hp=10,
        carry_capacity=10,
        upkeep={FOOD: 1},
        camp_advantages={CampType.GOBLIN_CAMP: 1.2},
    ),
    UnitType.ARCHER: UnitDefinition(
        type=UnitType.ARCHER,
        name="Archer",
        cost=_cost(15, 40),
        attack=7,
        defense=1,
        hp=8,
        carry_capacity=8,
        upkeep={FOOD: 1},
        camp_advantages={CampType.BANDIT_HIDEOUT: 1.2},
    ),
    UnitType.CAVALRY: UnitDefinition(
        type=UnitType.CAVALRY,
        name="Cavalry",
        cost=_cost(30, 25),
        attack=6,
        defense=2,
        hp=12,
        carry_capacity=15,
        upkeep={FOOD: 2},
    ),
}


def _tech(
    category: TechCategory,
    tech_id: TechnologyID,
    name: str,
    description: str,
    cost: dict[ResourceKind, float],
    research_seconds: float,
    effects: dict[BonusField, float],
    buildings: dict[BuildingType, int],
    techs: tuple[tuple[TechCategory, TechnologyID], ...] = (),
) -> TechnologyDefinition:
    return TechnologyDefinition(
        category=category,
        id=tech_id,
        name=name,
        description=description,
        cost=cost,
        research_seconds=research_seconds,
        effects=effects,
        building_requirements=buildings,
        technology_requirements=techs,
    )


_MIL = TechCategory.MILITARY
_ECO = TechCategory.ECONOMIC
_DEF = TechCategory.DEFENSIVE

_TECHNOLOGIES = {
    _MIL: {
        TechnologyID.IMPROVED_WEAPONS: _tech(
            _MIL,
            TechnologyID.IMPROVED_WEAPONS,
            "Improved Weapons",
            "Increases attack of all units by 20%",
            _cost(100, 200),
            60,
            {BonusField.UNIT_ATTACK: 0.2},
            {BuildingType.LIBRARY: 1},
        ),
        TechnologyID.IMPROVED_ARMOR: _tech(
            _MIL,
            TechnologyID.IMPROVED_ARMOR,
            "Improved Armor",
            "Increases defense of all units by 20%",
            _cost(150, 150),
            60,
            {BonusField.UNIT_DEFENSE: 0.2},
            {BuildingType.LIBRARY: 1},
        ),
        TechnologyID.ADVANCED_TACTICS: _tech(
            _MIL,
            TechnologyID.ADVANCED_TACTICS,
            "Advanced Tactics",
            "Increases unit type advantages by 10%",
            _cost(200, 200),
            90,
            {BonusField.ADVANTAGE_BONUS: 0.1},
            {BuildingType.LIBRARY: 2},
            (
                (_MIL, TechnologyID.IMPROVED_WEAPONS),
                (_MIL, TechnologyID.IMPROVED_ARMOR),
            ),
        ),
    },
    _ECO: {
        TechnologyID.EFFICIENT_FARMING: _tech(
            _ECO,
            TechnologyID.EFFICIENT_FARMING,
            "Efficient Farming",
            "Increases food production by 25%",
            _cost(100, 100),
            45,
            {BonusField.FOOD_PRODUCTION: 0.25},
            {BuildingType.LIBRARY: 1, BuildingType.FARM: 1},
        ),
        TechnologyID.IMPROVED_MINING: _tech(
            _ECO,
            TechnologyID.IMPROVED_MINING,
            "Improved Mining",
            "Increases ore production by 25%",
            _cost(100, 100),
            45,
            {BonusField.ORE_PRODUCTION: 0.25},
            {BuildingType.LIBRARY: 1, BuildingType.MINE: 1},
        ),
        TechnologyID.RESOURCE_MANAGEMENT: _tech(
            _ECO,
            TechnologyID.RESOURCE_MANAGEMENT,
            "Resource Management",
            "Increases storage capacity by 30%",
            _cost(150, 150),
            60,
            {BonusField.STORAGE_CAPACITY: 0.3},
            {BuildingType.LIBRARY: 2, BuildingType.WAREHOUSE: 1},
        ),
    },
    _DEF: {
        TechnologyID.REINFORCED_WALLS: _tech(
            _DEF,
            TechnologyID.REINFORCED_WALLS,
            "Reinforced Walls",
            "Increases wall defense by 30%",
            _cost(50, 200),
            60,
            {BonusField.WALL_DEFENSE: 0.3},
            {BuildingType.LIBRARY: 1, BuildingType.WALL: 1},
        ),
        TechnologyID.DEFENSIVE_TACTICS: _tech(
            _DEF,
            TechnologyID.DEFENSIVE_TACTICS,
            "Defensive Tactics",
            "Reduces casualties in defensive battles by 20%",
            _cost(200, 100),
            75,
            {BonusField.DEFENSIVE_CASUALTY_REDUCTION: 0.2},
            {BuildingType.LIBRARY: 2, BuildingType.WALL: 2},
        ),
    },
}

_CAMPS = {
    CampType.GOBLIN_CAMP: CampDefinition(
        type=CampType.GOBLIN_CAMP,
        name="Goblin Camp",
        difficulty=1,
        loot=_cost(50, 30),
    ),
    CampType.BANDIT_HIDEOUT: CampDefinition(
        type=CampType.BANDIT_HIDEOUT,
        name="Bandit Hideout",
        difficulty=2,
        loot=_cost(80, 50),
    ),
}


DEFAULT_CATALOG = Catalog(
    buildings=_BUILDINGS,
    units=_UNITS,
    technologies=_TECHNOLOGIES,
    camps=_CAMPS,
)
