"""Enumerations and type aliases for the Pixel Empires domain."""

from __future__ import annotations

from enum import StrEnum


class ResourceKind(StrEnum):
    """Fungible resources held in the empire ledger."""

    FOOD = "FOOD"
    ORE = "ORE"


class BuildingType(StrEnum):
    """Buildings that can be constructed inside the empire."""

    TOWN_HALL = "TOWN_HALL"
    FARM = "FARM"
    MINE = "MINE"
    WAREHOUSE = "WAREHOUSE"
    BARRACKS = "BARRACKS"
    WALL = "WALL"
    LIBRARY = "LIBRARY"


class UnitType(StrEnum):
    """Trainable troop types."""

    SPEARMAN = "SPEARMAN"
    ARCHER = "ARCHER"
    CAVALRY = "CAVALRY"


class TechCategory(StrEnum):
    """Research tree branches."""

    MILITARY = "MILITARY"
    ECONOMIC = "ECONOMIC"
    DEFENSIVE = "DEFENSIVE"


class TechnologyID(StrEnum):
    """Identifiers of every researchable technology."""

    IMPROVED_WEAPONS = "IMPROVED_WEAPONS"
    IMPROVED_ARMOR = "IMPROVED_ARMOR"
    ADVANCED_TACTICS = "ADVANCED_TACTICS"
    EFFICIENT_FARMING = "EFFICIENT_FARMING"
    IMPROVED_MINING = "IMPROVED_MINING"
    RESOURCE_MANAGEMENT = "RESOURCE_MANAGEMENT"
    REINFORCED_WALLS = "REINFORCED_WALLS"
    DEFENSIVE_TACTICS = "DEFENSIVE_TACTICS"


class BonusField(StrEnum):
    """Slots of the aggregated bonus vector a technology may contribute to."""

    UNIT_ATTACK = "unit_attack"
    UNIT_DEFENSE = "unit_defense"
    FOOD_PRODUCTION = "food_production"
    ORE_PRODUCTION = "ore_production"
    STORAGE_CAPACITY = "storage_capacity"
    WALL_DEFENSE = "wall_defense"
    ADVANTAGE_BONUS = "advantage_bonus"
    DEFENSIVE_CASUALTY_REDUCTION = "defensive_casualty_reduction"


class CampType(StrEnum):
    """NPC camp flavours found on the world map."""

    GOBLIN_CAMP = "GOBLIN_CAMP"
    BANDIT_HIDEOUT = "BANDIT_HIDEOUT"


class CellType(StrEnum):
    """Occupant of a world map cell."""

    PLAYER = "PLAYER"
    NPC = "NPC"


class QueueKind(StrEnum):
    """The three independent production queues."""

    CONSTRUCTION = "construction"
    TRAINING = "training"
    RESEARCH = "research"


class CombatOutcome(StrEnum):
    """Result of an attack against a camp."""

    VICTORY = "victory"
    DEFEAT = "defeat"


class FailureReason(StrEnum):
    """Recoverable reasons an engine command can be rejected."""

    INSUFFICIENT_RESOURCES = "insufficient_resources"
    PREREQUISITE_NOT_MET = "prerequisite_not_met"
    ALREADY_RESEARCHED = "already_researched"
    RESEARCH_IN_PROGRESS = "research_in_progress"
    INVALID_TARGET = "invalid_target"
    EMPTY_COMMITMENT = "empty_commitment"
    INSUFFICIENT_UNITS = "insufficient_units"
    UNSUPPORTED_BUILDING = "unsupported_building"
    MAX_LEVEL_REACHED = "max_level_reached"
    INVALID_QUANTITY = "invalid_quantity"
    UNKNOWN_TECHNOLOGY = "unknown_technology"
