"""World map layout and NPC camp respawns."""

from __future__ import annotations

import math

from . import events as game_events
from .catalog import DEFAULT_CATALOG, Catalog
from .context import SimulationContext
from .enums import CampType, CellType
from .models import Camp, CampID, MapCell, WorldMap
from .rules_config import DEFAULT_RULES, RulesConfig

STARTING_CAMPS: tuple[tuple[CampType, int, int], ...] = (
    (CampType.GOBLIN_CAMP, 3, 3),
    (CampType.BANDIT_HIDEOUT, 6, 2),
    (CampType.GOBLIN_CAMP, 2, 7),
)


def camp_id_for(camp_type: CampType, x: int, y: int, generation: int) -> CampID:
    return CampID(f"{camp_type}_{x}_{y}_{generation}")


def new_world_map(
    *,
    catalog: Catalog = DEFAULT_CATALOG,
    rules: RulesConfig = DEFAULT_RULES,
    camps: tuple[tuple[CampType, int, int], ...] = STARTING_CAMPS,
) -> WorldMap:
    """Build the starting map with the player base and the initial camps."""

    world = WorldMap(width=rules.world.width, height=rules.world.height)
    player = MapCell(x=rules.world.player_x, y=rules.world.player_y, kind=CellType.PLAYER)
    world.cells.append(player)
    for camp_type, x, y in camps:
        place_camp(world, camp_type, x, y, catalog=catalog)
    return world


def place_camp(
    world: WorldMap,
    camp_type: CampType,
    x: int,
    y: int,
    *,
    catalog: Catalog = DEFAULT_CATALOG,
    difficulty: float | None = None,
) -> Camp:
    """Put a fresh camp on an empty in-bounds cell."""

    if not world.in_bounds(x, y):
        raise ValueError(f"({x}, {y}) is outside the {world.width}x{world.height} map")
    if world.cell_at(x, y) is not None:
        raise ValueError(f"({x}, {y}) is already occupied")

    definition = catalog.camp(camp_type)
    camp = Camp(
        camp_id=camp_id_for(definition.type, x, y, 0),
        camp_type=definition.type,
        difficulty=definition.difficulty if difficulty is None else difficulty,
        loot=dict(definition.loot),
    )
    world.cells.append(MapCell(x=x, y=y, kind=CellType.NPC, camp=camp))
    return camp


def respawn_camp(ctx: SimulationContext, cell: MapCell) -> Camp:
    """Replace a defeated camp with a tougher one carrying more loot."""

    old = cell.camp
    if old is None:
        raise ValueError(f"({cell.x}, {cell.y}) holds no camp")
    definition = ctx.catalog.camp(old.camp_type)
    world_rules = ctx.rules.world

    difficulty = min(
        definition.difficulty + world_rules.respawn_difficulty_step,
        world_rules.max_difficulty,
    )
    loot_scale = 1 + (difficulty - definition.difficulty) * world_rules.respawn_loot_factor
    generation = old.generation + 1
    camp = Camp(
        camp_id=camp_id_for(old.camp_type, cell.x, cell.y, generation),
        camp_type=old.camp_type,
        difficulty=difficulty,
        loot={
            kind: float(math.floor(amount * loot_scale))
            for kind, amount in definition.loot.items()
        },
        generation=generation,
    )
    cell.camp = camp
    ctx.emit(game_events.camp_respawned(camp.camp_id, camp.camp_type, cell.x, cell.y, difficulty))
    return camp


def advance_respawns(ctx: SimulationContext, delta_seconds: float) -> list[Camp]:
    """Count down defeated camps and respawn those whose timer ran out."""

    respawned: list[Camp] = []
    for cell in ctx.empire.world.camp_cells():
        camp = cell.camp
        if camp is None or camp.respawn_remaining is None:
            continue
        camp.respawn_remaining -= delta_seconds
        if camp.respawn_remaining <= 0:
            respawned.append(respawn_camp(ctx, cell))
    return respawned
