"""Technology prerequisites and bonus aggregation."""

from __future__ import annotations

from .catalog import TechnologyDefinition, UnknownDefinitionError
from .context import SimulationContext
from .enums import BuildingType, FailureReason, TechCategory, TechnologyID
from .models import BonusVector
from .results import Failure, fail


class TechnologyAggregator:
    """Validates research starts and folds researched effects into the bonus vector."""

    def __init__(self, ctx: SimulationContext) -> None:
        self.ctx = ctx

    def check_research(
        self, category: TechCategory | str, tech_id: TechnologyID | str
    ) -> Failure | None:
        """Return the first reason the technology cannot be started, or ``None``."""

        try:
            definition = self.ctx.catalog.technology(category, tech_id)
        except UnknownDefinitionError as exc:
            return fail(FailureReason.UNKNOWN_TECHNOLOGY, exc.args[0])
        empire = self.ctx.empire

        if empire.is_researched(definition.category, definition.id):
            return fail(
                FailureReason.ALREADY_RESEARCHED, f"{definition.name} is already researched"
            )

        for job in empire.research_queue:
            if job.category == definition.category and job.tech_id == definition.id:
                return fail(
                    FailureReason.RESEARCH_IN_PROGRESS,
                    f"{definition.name} is already being researched",
                )

        if not empire.ledger.can_afford(definition.cost):
            return fail(
                FailureReason.INSUFFICIENT_RESOURCES,
                f"Not enough resources to research {definition.name}",
            )

        for building_type, level in definition.building_requirements.items():
            if empire.building_level(building_type) < level:
                name = self.ctx.catalog.building(building_type).name
                return fail(
                    FailureReason.PREREQUISITE_NOT_MET,
                    f"{definition.name} requires {name} level {level}",
                )

        # One level deep: the declared requirement set is all that is consulted.
        for req_category, req_id in definition.technology_requirements:
            if not empire.is_researched(req_category, req_id):
                required = self.ctx.catalog.technology(req_category, req_id)
                return fail(
                    FailureReason.PREREQUISITE_NOT_MET,
                    f"{definition.name} requires {required.name}",
                )

        return None

    def can_research(self, category: TechCategory | str, tech_id: TechnologyID | str) -> bool:
        return self.check_research(category, tech_id) is None

    def available_technologies(self) -> list[TechnologyDefinition]:
        return [
            definition
            for definition in self.ctx.catalog.iter_technologies()
            if self.can_research(definition.category, definition.id)
        ]

    def recompute_bonuses(self) -> BonusVector:
        """Reset the bonus vector and re-add every researched technology's effects."""

        bonuses = self.ctx.empire.bonuses
        bonuses.reset()
        for category, tech_id in self.ctx.empire.researched():
            definition = self.ctx.catalog.technology(category, tech_id)
            for bonus, value in definition.effects.items():
                bonuses.add(bonus, value)
        return bonuses

    def research_speed(self) -> float:
        """Library research speed, or 1.0 when no library stat applies."""

        level = self.ctx.empire.building_level(BuildingType.LIBRARY)
        if level <= 0:
            return 1.0
        speed = self.ctx.catalog.building(BuildingType.LIBRARY).level(level).research_speed
        return speed or 1.0
