"""Tests for research prerequisites and bonus aggregation."""

from __future__ import annotations

import pytest

from pixel_empires.domain import models as dm
from pixel_empires.domain.engine import EmpireEngine
from pixel_empires.domain.enums import (
    BuildingType,
    FailureReason,
    QueueKind,
    ResourceKind,
    TechCategory,
    TechnologyID,
)
from pixel_empires.domain.results import Failure, Success

MIL = TechCategory.MILITARY
ECO = TechCategory.ECONOMIC


def _engine(
    library: int = 1, warehouse: int = 3, food: float = 500, ore: float = 500
) -> EmpireEngine:
    engine = EmpireEngine.new(dm.EmpireID(1), "Scholars")
    empire = engine.empire
    if library:
        empire.buildings[BuildingType.LIBRARY] = dm.Building(level=library, x=2, y=1)
    if warehouse:
        empire.buildings[BuildingType.WAREHOUSE] = dm.Building(level=warehouse, x=0, y=1)
    engine.rederive()
    empire.ledger.amounts = {ResourceKind.FOOD: food, ResourceKind.ORE: ore}
    return engine


def test_start_research_deducts_cost_and_queues_job():
    engine = _engine()
    result = engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)

    assert isinstance(result, Success)
    assert result.value.time_remaining == 60
    assert engine.resources() == {ResourceKind.FOOD: 400, ResourceKind.ORE: 300}
    assert engine.queue(QueueKind.RESEARCH) == [result.value]


def test_research_duration_scales_with_library_speed():
    engine = _engine(library=2)
    result = engine.start_research(MIL, TechnologyID.IMPROVED_ARMOR)
    assert isinstance(result, Success)
    assert result.value.time_remaining == 40


def test_already_researched_is_rejected_without_side_effects():
    engine = _engine()
    engine.empire.technologies[MIL][TechnologyID.IMPROVED_WEAPONS] = True
    before = engine.resources()

    result = engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.ALREADY_RESEARCHED
    assert engine.queue(QueueKind.RESEARCH) == []
    assert engine.resources() == before


def test_duplicate_queued_research_is_rejected():
    engine = _engine()
    assert engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS).ok
    result = engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)
    assert isinstance(result, Failure)
    assert result.reason == FailureReason.RESEARCH_IN_PROGRESS
    assert len(engine.queue(QueueKind.RESEARCH)) == 1


def test_insufficient_resources_checked_before_buildings():
    engine = _engine(library=0, food=0, ore=0)
    result = engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)
    assert isinstance(result, Failure)
    assert result.reason == FailureReason.INSUFFICIENT_RESOURCES


def test_missing_building_level_is_a_prerequisite_failure():
    engine = _engine(library=0)
    result = engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)
    assert isinstance(result, Failure)
    assert result.reason == FailureReason.PREREQUISITE_NOT_MET
    assert "Library" in result.detail


def test_technology_outside_its_category_is_rejected():
    engine = _engine()
    before = engine.resources()

    result = engine.start_research(MIL, TechnologyID.EFFICIENT_FARMING)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.UNKNOWN_TECHNOLOGY
    assert not engine.can_research(MIL, TechnologyID.EFFICIENT_FARMING)
    assert engine.queue(QueueKind.RESEARCH) == []
    assert engine.resources() == before


def test_technology_prerequisites_are_checked_one_level_deep():
    engine = _engine(library=2)
    result = engine.start_research(MIL, TechnologyID.ADVANCED_TACTICS)
    assert isinstance(result, Failure)
    assert result.reason == FailureReason.PREREQUISITE_NOT_MET

    engine.empire.technologies[MIL][TechnologyID.IMPROVED_WEAPONS] = True
    engine.empire.technologies[MIL][TechnologyID.IMPROVED_ARMOR] = True
    assert engine.can_research(MIL, TechnologyID.ADVANCED_TACTICS)


def test_completion_sets_flag_and_recomputes_bonuses():
    engine = _engine()
    completed: list[str] = []
    engine.subscribe(lambda event: completed.append(event.type))

    engine.start_research(MIL, TechnologyID.IMPROVED_WEAPONS)
    engine.tick(60)

    assert engine.empire.is_researched(MIL, TechnologyID.IMPROVED_WEAPONS)
    assert engine.bonuses().unit_attack == 0.2
    assert "research_completed" in completed
    assert engine.queue(QueueKind.RESEARCH) == []


def test_recompute_is_idempotent_and_ignores_stale_vector():
    engine = _engine()
    engine.empire.technologies[MIL][TechnologyID.IMPROVED_WEAPONS] = True
    engine.empire.technologies[ECO][TechnologyID.RESOURCE_MANAGEMENT] = True
    engine.empire.bonuses.unit_attack = 99.0

    first = engine.aggregator.recompute_bonuses().as_dict()
    second = engine.aggregator.recompute_bonuses().as_dict()

    assert first == second
    assert first["unit_attack"] == 0.2
    assert first["storage_capacity"] == 0.3
    assert first["food_production"] == 0.0


def test_storage_research_raises_capacity():
    engine = _engine(library=2, warehouse=1)
    assert engine.capacity() == 200
    engine.empire.ledger.amounts = {ResourceKind.FOOD: 200, ResourceKind.ORE: 200}

    assert engine.start_research(ECO, TechnologyID.RESOURCE_MANAGEMENT).ok
    engine.tick(40)

    assert engine.capacity() == pytest.approx(260)


def test_available_technologies_lists_startable_research():
    engine = _engine()
    available = {definition.id for definition in engine.available_technologies()}
    assert TechnologyID.IMPROVED_WEAPONS in available
    assert TechnologyID.IMPROVED_ARMOR in available
    assert TechnologyID.ADVANCED_TACTICS not in available
    assert TechnologyID.EFFICIENT_FARMING not in available
