"""Starting state for a new empire."""

from __future__ import annotations

from .catalog import DEFAULT_CATALOG, Catalog
from .enums import BuildingType, ResourceKind
from .ledger import ResourceLedger
from .models import Building, Empire, EmpireID
from .rules_config import DEFAULT_RULES, RulesConfig
from .world import new_world_map


def new_empire(
    empire_id: EmpireID,
    name: str,
    *,
    catalog: Catalog = DEFAULT_CATALOG,
    rules: RulesConfig = DEFAULT_RULES,
) -> Empire:
    """Town hall at the player cell, starting stockpile, no units and no research."""

    economy_rules = rules.economy
    ledger = ResourceLedger(
        amounts={
            ResourceKind.FOOD: economy_rules.starting_food,
            ResourceKind.ORE: economy_rules.starting_ore,
        },
        capacity=economy_rules.base_storage_capacity,
    )
    return Empire(
        id=empire_id,
        name=name,
        world=new_world_map(catalog=catalog, rules=rules),
        ledger=ledger,
        buildings={
            BuildingType.TOWN_HALL: Building(
                level=1, x=rules.world.player_x, y=rules.world.player_y
            ),
        },
    )
