"""Construction, training and research queues.

Each queue is strict FIFO and only its head counts down.  Starting a job
validates, deducts the full cost once and appends to the tail; completing a
job applies its side effect and dequeues it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from . import economy
from . import events as game_events
from .catalog import UnknownDefinitionError
from .context import SimulationContext
from .enums import (
    BuildingType,
    FailureReason,
    QueueKind,
    ResourceKind,
    TechCategory,
    TechnologyID,
    UnitType,
)
from .models import Building, ConstructionJob, QueueEntry, ResearchJob, TrainingJob
from .research import TechnologyAggregator
from .results import Failure, Success, fail

logger = logging.getLogger(__name__)

QUEUE_ORDER: tuple[QueueKind, ...] = (
    QueueKind.CONSTRUCTION,
    QueueKind.TRAINING,
    QueueKind.RESEARCH,
)


def _as_payload(values: Mapping[ResourceKind, float]) -> dict[str, float]:
    return {str(kind): float(amount) for kind, amount in values.items()}


class QueueScheduler:
    """Owns the start operations and the per-tick countdown of every queue."""

    def __init__(
        self,
        ctx: SimulationContext,
        aggregator: TechnologyAggregator | None = None,
    ) -> None:
        self.ctx = ctx
        self.aggregator = aggregator or TechnologyAggregator(ctx)

    # ------------------------------------------------------------------
    # Starting jobs

    def start_construction(
        self, building_type: BuildingType | str, x: int, y: int
    ) -> Success[ConstructionJob] | Failure:
        definition = self.ctx.catalog.building(building_type)
        empire = self.ctx.empire

        queued = sum(
            1 for job in empire.construction_queue if job.building_type == definition.type
        )
        target_level = empire.building_level(definition.type) + queued + 1
        if target_level > definition.max_level:
            return fail(
                FailureReason.MAX_LEVEL_REACHED,
                f"{definition.name} is already at maximum level {definition.max_level}",
            )

        for required_type, level in definition.requirements.items():
            if empire.building_level(required_type) < level:
                name = self.ctx.catalog.building(required_type).name
                return fail(
                    FailureReason.PREREQUISITE_NOT_MET,
                    f"{definition.name} requires {name} level {level}",
                )

        cost = definition.level(target_level).cost
        if not empire.ledger.can_afford(cost):
            return fail(
                FailureReason.INSUFFICIENT_RESOURCES,
                f"Not enough resources to build {definition.name} level {target_level}",
            )

        existing = empire.buildings.get(definition.type)
        if existing is not None:
            x, y = existing.x, existing.y

        self._charge(cost, f"construction of {definition.name}")
        job = ConstructionJob(
            building_type=definition.type,
            target_level=target_level,
            x=x,
            y=y,
            time_remaining=self.ctx.rules.queues.construction_seconds,
        )
        empire.construction_queue.append(job)
        self.ctx.emit(
            game_events.job_started(
                QueueKind.CONSTRUCTION,
                f"{definition.name} level {target_level}",
                job.time_remaining,
                _as_payload(cost),
            )
        )
        return Success(job)

    def start_training(
        self, unit_type: UnitType | str, quantity: int
    ) -> Success[TrainingJob] | Failure:
        definition = self.ctx.catalog.unit(unit_type)
        empire = self.ctx.empire

        if quantity < 1:
            return fail(FailureReason.INVALID_QUANTITY, "Quantity must be at least 1")

        if empire.building_level(BuildingType.BARRACKS) <= 0:
            return fail(
                FailureReason.UNSUPPORTED_BUILDING,
                f"Training {definition.name} requires a Barracks",
            )

        cost = {kind: amount * quantity for kind, amount in definition.cost.items()}
        if not empire.ledger.can_afford(cost):
            return fail(
                FailureReason.INSUFFICIENT_RESOURCES,
                f"Not enough resources to train {quantity} {definition.name}",
            )

        self._charge(cost, f"training of {quantity} {definition.name}")
        duration = quantity * self.ctx.rules.queues.seconds_per_unit / self.training_speed()
        job = TrainingJob(unit_type=definition.type, quantity=quantity, time_remaining=duration)
        empire.training_queue.append(job)
        self.ctx.emit(
            game_events.job_started(
                QueueKind.TRAINING,
                f"{quantity} {definition.name}",
                duration,
                _as_payload(cost),
            )
        )
        return Success(job)

    def start_research(
        self, category: TechCategory | str, tech_id: TechnologyID | str
    ) -> Success[ResearchJob] | Failure:
        failure = self.aggregator.check_research(category, tech_id)
        if failure is not None:
            return failure
        definition = self.ctx.catalog.technology(category, tech_id)

        self._charge(definition.cost, f"research of {definition.name}")
        duration = definition.research_seconds / self.aggregator.research_speed()
        job = ResearchJob(
            category=definition.category, tech_id=definition.id, time_remaining=duration
        )
        self.ctx.empire.research_queue.append(job)
        self.ctx.emit(
            game_events.job_started(
                QueueKind.RESEARCH, definition.name, duration, _as_payload(definition.cost)
            )
        )
        return Success(job)

    def training_speed(self) -> float:
        level = self.ctx.empire.building_level(BuildingType.BARRACKS)
        if level <= 0:
            return 1.0
        speed = self.ctx.catalog.building(BuildingType.BARRACKS).level(level).training_speed
        return speed or 1.0

    def _charge(self, cost: Mapping[ResourceKind, float], reason: str) -> None:
        ledger = self.ctx.empire.ledger
        before = ledger.snapshot()
        ledger.deduct(cost)
        self.ctx.emit(
            game_events.resources_changed(
                _as_payload(before), _as_payload(ledger.snapshot()), reason
            )
        )

    # ------------------------------------------------------------------
    # Advancing

    def advance_all(self, delta_seconds: float) -> list[QueueEntry]:
        """Advance every queue in the fixed construction, training, research order."""

        completed: list[QueueEntry] = []
        for kind in QUEUE_ORDER:
            completed.extend(self.advance(kind, delta_seconds))
        return completed

    def advance(self, kind: QueueKind, delta_seconds: float) -> list[QueueEntry]:
        """Count down the head of one queue and complete it when it runs out.

        Leftover time is dropped unless ``rules.queues.carry_residual_time`` is
        set, in which case it flows into the next head and several entries may
        finish in the same call.
        """

        if delta_seconds < 0:
            raise ValueError("delta_seconds must be non-negative")

        queue = self.ctx.empire.queue(kind)
        if not queue:
            return []

        queue[0].time_remaining -= delta_seconds
        completed: list[QueueEntry] = []
        while queue and queue[0].time_remaining <= 0:
            head = queue[0]
            residual = -head.time_remaining
            head.time_remaining = 0.0
            self._complete(head)
            queue.pop(0)
            completed.append(head)
            if not self.ctx.rules.queues.carry_residual_time or not queue:
                break
            queue[0].time_remaining -= residual
        return completed

    # ------------------------------------------------------------------
    # Completion handlers

    def _complete(self, job: QueueEntry) -> None:
        if isinstance(job, ConstructionJob):
            self._complete_construction(job)
        elif isinstance(job, TrainingJob):
            self._complete_training(job)
        else:
            self._complete_research(job)

    def _complete_construction(self, job: ConstructionJob) -> None:
        empire = self.ctx.empire
        try:
            max_level = self.ctx.catalog.building(job.building_type).max_level
        except UnknownDefinitionError:
            logger.warning("dropping construction of unknown building %s", job.building_type)
            return

        level = job.target_level
        if level > max_level:
            logger.warning(
                "construction of %s targets level %s beyond max %s; clamping",
                job.building_type,
                level,
                max_level,
            )
            level = max_level

        building = empire.buildings.get(job.building_type)
        if building is None:
            empire.buildings[job.building_type] = Building(level=level, x=job.x, y=job.y)
        else:
            if level <= building.level:
                logger.warning(
                    "construction of %s level %s is stale; building already at %s",
                    job.building_type,
                    job.target_level,
                    building.level,
                )
            building.level = max(building.level, level)

        economy.refresh_storage_capacity(self.ctx)
        final = empire.buildings[job.building_type]
        self.ctx.emit(
            game_events.construction_completed(job.building_type, final.level, final.x, final.y)
        )

    def _complete_training(self, job: TrainingJob) -> None:
        units = self.ctx.empire.units
        units[job.unit_type] = units.get(job.unit_type, 0) + max(job.quantity, 0)
        self.ctx.emit(
            game_events.training_completed(job.unit_type, job.quantity, units[job.unit_type])
        )

    def _complete_research(self, job: ResearchJob) -> None:
        empire = self.ctx.empire
        try:
            definition = self.ctx.catalog.technology(job.category, job.tech_id)
        except UnknownDefinitionError:
            logger.warning(
                "dropping research of unknown technology %s/%s", job.category, job.tech_id
            )
            return

        if empire.is_researched(definition.category, definition.id):
            logger.warning("%s finished research but was already researched", definition.name)

        empire.technologies.setdefault(definition.category, {})[definition.id] = True
        self.aggregator.recompute_bonuses()
        economy.refresh_storage_capacity(self.ctx)
        self.ctx.emit(
            game_events.research_completed(definition.category, definition.id, definition.name)
        )
