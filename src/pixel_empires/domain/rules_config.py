"""Declarative rule configuration for the progression engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Storage and starting stockpile constants."""

    base_storage_capacity: float = 100.0
    starting_food: float = 100.0
    starting_ore: float = 100.0


@dataclass(frozen=True, slots=True)
class QueueRules:
    """Durations and countdown policy for the production queues."""

    construction_seconds: float = 10.0
    seconds_per_unit: float = 5.0
    # When False, time left over after a completion is dropped instead of
    # being applied to the next entry in the same tick.
    carry_residual_time: bool = False


@dataclass(frozen=True, slots=True)
class CombatRules:
    """Combat resolution constants."""

    defense_per_difficulty: float = 10.0
    advantaged_loss_rate: float = 0.2
    standard_loss_rate: float = 0.25
    defeat_loss_rate: float = 1.0
    report_history: int = 10


@dataclass(frozen=True, slots=True)
class WorldRules:
    """World map layout and camp respawn tuning."""

    width: int = 10
    height: int = 10
    player_x: int = 1
    player_y: int = 1
    camp_respawn_seconds: float = 30.0
    respawn_difficulty_step: float = 0.5
    max_difficulty: float = 10.0
    respawn_loot_factor: float = 0.2


@dataclass(frozen=True, slots=True)
class ActivityLogRules:
    """Activity log retention."""

    max_entries: int = 100


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    economy: EconomyRules = EconomyRules()
    queues: QueueRules = QueueRules()
    combat: CombatRules = CombatRules()
    world: WorldRules = WorldRules()
    activity_log: ActivityLogRules = ActivityLogRules()


DEFAULT_RULES = RulesConfig()
