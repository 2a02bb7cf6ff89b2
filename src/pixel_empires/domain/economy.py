"""Production, upkeep, storage and wall defense rules."""

from __future__ import annotations

from .context import SimulationContext
from .enums import BuildingType, ResourceKind, UnitType

PRODUCING_BUILDINGS = (BuildingType.FARM, BuildingType.MINE)


def base_storage_capacity(ctx: SimulationContext) -> float:
    """Warehouse capacity for the current level, or the rules default without one."""

    level = ctx.empire.building_level(BuildingType.WAREHOUSE)
    if level <= 0:
        return ctx.rules.economy.base_storage_capacity
    stats = ctx.catalog.building(BuildingType.WAREHOUSE).level(level)
    if stats.capacity is None:
        return ctx.rules.economy.base_storage_capacity
    return stats.capacity


def refresh_storage_capacity(ctx: SimulationContext) -> float:
    """Re-derive ledger capacity from warehouses and the storage research bonus."""

    return ctx.empire.ledger.recompute_capacity(
        base_storage_capacity(ctx), ctx.empire.bonuses.storage_capacity
    )


def production_rates(ctx: SimulationContext) -> dict[ResourceKind, float]:
    """Per-second production including research bonuses."""

    empire = ctx.empire
    rates = {kind: 0.0 for kind in ResourceKind}
    for building_type in PRODUCING_BUILDINGS:
        level = empire.building_level(building_type)
        if level <= 0:
            continue
        stats = ctx.catalog.building(building_type).level(level)
        for kind, amount in stats.production.items():
            rates[kind] += amount

    bonuses = empire.bonuses
    if bonuses.food_production > 0:
        rates[ResourceKind.FOOD] *= 1 + bonuses.food_production
    if bonuses.ore_production > 0:
        rates[ResourceKind.ORE] *= 1 + bonuses.ore_production
    return rates


def upkeep_rates(ctx: SimulationContext) -> dict[ResourceKind, float]:
    """Per-second resource drain from the standing army."""

    totals = {kind: 0.0 for kind in ResourceKind}
    for unit_type, count in ctx.empire.units.items():
        if count <= 0:
            continue
        for kind, amount in ctx.catalog.unit(unit_type).upkeep.items():
            totals[kind] += amount * count
    return totals


def generate_resources(ctx: SimulationContext, delta_seconds: float) -> dict[ResourceKind, float]:
    rates = production_rates(ctx)
    return ctx.empire.ledger.produce({kind: rate * delta_seconds for kind, rate in rates.items()})


def apply_upkeep(ctx: SimulationContext, delta_seconds: float) -> dict[ResourceKind, float]:
    drain = upkeep_rates(ctx)
    return ctx.empire.ledger.produce(
        {kind: -amount * delta_seconds for kind, amount in drain.items() if amount}
    )


def wall_defense(ctx: SimulationContext) -> float:
    level = ctx.empire.building_level(BuildingType.WALL)
    if level <= 0:
        return 0.0
    defense = ctx.catalog.building(BuildingType.WALL).level(level).defense or 0.0
    bonus = ctx.empire.bonuses.wall_defense
    return defense * (1 + bonus) if bonus > 0 else defense


def unit_defense(ctx: SimulationContext, unit_type: UnitType) -> float:
    defense = ctx.catalog.unit(unit_type).defense
    bonus = ctx.empire.bonuses.unit_defense
    return defense * (1 + bonus) if bonus > 0 else defense
