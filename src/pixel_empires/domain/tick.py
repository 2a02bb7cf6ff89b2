"""Per-tick orchestration for an empire."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import economy, world
from . import events as game_events
from .context import SimulationContext
from .enums import ResourceKind
from .models import Camp, QueueEntry
from .queues import QueueScheduler


@dataclass(slots=True)
class TickSummary:
    """What changed during one tick."""

    delta_seconds: float
    produced: dict[ResourceKind, float] = field(default_factory=dict)
    upkeep: dict[ResourceKind, float] = field(default_factory=dict)
    completed: list[QueueEntry] = field(default_factory=list)
    respawned: list[Camp] = field(default_factory=list)


def run_tick(
    ctx: SimulationContext,
    delta_seconds: float,
    *,
    scheduler: QueueScheduler | None = None,
) -> TickSummary:
    """Advance the empire by ``delta_seconds`` of game time."""

    if delta_seconds < 0:
        raise ValueError("delta_seconds must be non-negative")

    scheduler = scheduler or QueueScheduler(ctx)
    summary = TickSummary(delta_seconds=delta_seconds)
    before = ctx.empire.ledger.snapshot()

    economy.refresh_storage_capacity(ctx)
    summary.produced = economy.generate_resources(ctx, delta_seconds)
    summary.completed = scheduler.advance_all(delta_seconds)
    summary.upkeep = economy.apply_upkeep(ctx, delta_seconds)
    summary.respawned = world.advance_respawns(ctx, delta_seconds)

    ctx.empire.elapsed_seconds += delta_seconds

    after = ctx.empire.ledger.snapshot()
    if after != before:
        ctx.emit(
            game_events.resources_changed(
                {str(kind): value for kind, value in before.items()},
                {str(kind): value for kind, value in after.items()},
                "tick",
            )
        )
    return summary
