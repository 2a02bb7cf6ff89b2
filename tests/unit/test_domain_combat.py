"""Tests for attack power, previews and committed attacks."""

from __future__ import annotations

from dataclasses import replace

import pytest

from pixel_empires.domain import models as dm
from pixel_empires.domain.catalog import DEFAULT_CATALOG, Catalog
from pixel_empires.domain.engine import EmpireEngine
from pixel_empires.domain.enums import (
    CampType,
    CombatOutcome,
    FailureReason,
    ResourceKind,
    UnitType,
)
from pixel_empires.domain.results import Failure, Success
from pixel_empires.domain.world import place_camp

FOOD = ResourceKind.FOOD
ORE = ResourceKind.ORE
GOBLIN_CELL = (3, 3)
BANDIT_CELL = (6, 2)


def _catalog() -> Catalog:
    attacks = {UnitType.SPEARMAN: 10, UnitType.ARCHER: 8, UnitType.CAVALRY: 12}
    units = {
        unit_type: replace(definition, attack=attacks[unit_type])
        for unit_type, definition in DEFAULT_CATALOG.units.items()
    }
    return replace(DEFAULT_CATALOG, units=units)


def _engine(catalog: Catalog = DEFAULT_CATALOG, **units: int) -> EmpireEngine:
    engine = EmpireEngine.new(dm.EmpireID(1), "Raiders", catalog=catalog)
    for name, count in units.items():
        engine.empire.units[UnitType(name.upper())] = count
    return engine


def test_advantaged_unit_gets_camp_multiplier():
    engine = _engine(_catalog())
    power = engine.combat.attack_power(CampType.GOBLIN_CAMP, {UnitType.SPEARMAN: 5})
    assert power.total == pytest.approx(60)
    assert [note.unit_type for note in power.advantages] == [UnitType.SPEARMAN]
    assert "x1.20" in power.advantages[0].description


def test_unit_attack_bonus_applies_before_advantage():
    engine = _engine(_catalog())
    engine.empire.bonuses.unit_attack = 0.1
    power = engine.combat.attack_power(CampType.BANDIT_HIDEOUT, {UnitType.ARCHER: 10})
    assert power.total == pytest.approx(105.6)


@pytest.mark.parametrize("camp_type", list(CampType))
def test_unit_without_advantage_ignores_target_type(camp_type):
    engine = _engine(_catalog())
    power = engine.combat.attack_power(camp_type, {UnitType.CAVALRY: 5})
    assert power.total == pytest.approx(60)
    assert power.advantages == []


def test_advantage_bonus_adds_to_declared_multiplier():
    engine = _engine(_catalog())
    engine.empire.bonuses.advantage_bonus = 0.3
    power = engine.combat.attack_power(CampType.GOBLIN_CAMP, {UnitType.SPEARMAN: 5})
    assert power.total == pytest.approx(75)


@pytest.mark.parametrize(
    ("difficulty", "outcome"),
    [(5, CombatOutcome.VICTORY), (6, CombatOutcome.DEFEAT)],
)
def test_victory_requires_power_strictly_above_defense(difficulty, outcome):
    engine = _engine(_catalog(), spearman=5)
    place_camp(engine.empire.world, CampType.GOBLIN_CAMP, 8, 8, difficulty=difficulty)

    preview = engine.preview_attack(8, 8, {UnitType.SPEARMAN: 5})

    assert isinstance(preview, Success)
    assert preview.value.target_defense == difficulty * 10
    assert preview.value.predicted_outcome == outcome


def test_commit_matches_preview():
    engine = _engine(spearman=6, archer=4)
    counts = {UnitType.SPEARMAN: 6, UnitType.ARCHER: 4}

    preview = engine.preview_attack(*GOBLIN_CELL, counts)
    report = engine.commit_attack(*GOBLIN_CELL, counts)

    assert isinstance(preview, Success)
    assert isinstance(report, Success)
    assert report.value.total_attack_power == preview.value.total_attack_power
    assert report.value.target_defense == preview.value.target_defense
    assert report.value.outcome == preview.value.predicted_outcome


def test_preview_does_not_require_owning_units():
    engine = _engine()
    result = engine.preview_attack(*GOBLIN_CELL, {UnitType.CAVALRY: 50})
    assert isinstance(result, Success)
    assert engine.units()[UnitType.CAVALRY] == 0


def test_victory_casualties_use_advantage_rate():
    engine = _engine(spearman=10, cavalry=10)
    result = engine.commit_attack(
        *GOBLIN_CELL, {UnitType.SPEARMAN: 10, UnitType.CAVALRY: 10}
    )

    assert isinstance(result, Success)
    report = result.value
    assert report.outcome == CombatOutcome.VICTORY
    assert report.units_lost == {UnitType.SPEARMAN: 2, UnitType.CAVALRY: 2}
    assert engine.units()[UnitType.SPEARMAN] == 8
    assert engine.units()[UnitType.CAVALRY] == 8


def test_loot_is_clamped_to_capacity():
    engine = _engine(spearman=10)
    engine.empire.ledger.amounts = {FOOD: 90, ORE: 100}

    result = engine.commit_attack(*GOBLIN_CELL, {UnitType.SPEARMAN: 10})

    assert isinstance(result, Success)
    assert result.value.loot == {FOOD: 10, ORE: 0}
    assert engine.resources() == {FOOD: 100, ORE: 100}


def test_defeated_camp_is_locked_until_it_respawns_stronger():
    engine = _engine(spearman=10)
    old_id = engine.camp_at(*GOBLIN_CELL).camp_id
    assert engine.commit_attack(*GOBLIN_CELL, {UnitType.SPEARMAN: 5}).ok

    engine.tick(29)
    locked = engine.preview_attack(*GOBLIN_CELL, {UnitType.SPEARMAN: 1})
    assert isinstance(locked, Failure)
    assert locked.reason == FailureReason.INVALID_TARGET

    summary = engine.tick(1)

    camp = engine.camp_at(*GOBLIN_CELL)
    assert summary.respawned == [camp]
    assert not camp.is_defeated
    assert camp.difficulty == 1.5
    assert camp.loot == {FOOD: 55, ORE: 33}
    assert camp.generation == 1
    assert camp.camp_id != old_id
    assert camp.camp_id.endswith("_3_3_1")


def test_respawn_scales_from_catalog_difficulty():
    engine = _engine(spearman=5)
    place_camp(engine.empire.world, CampType.BANDIT_HIDEOUT, 8, 8, difficulty=10)
    engine.empire.world.cell_at(8, 8).camp.respawn_remaining = 1

    engine.tick(1)

    assert engine.camp_at(8, 8).difficulty == 2.5


def test_defeat_loses_everyone_sent():
    engine = _engine(spearman=5, archer=3)
    place_camp(engine.empire.world, CampType.GOBLIN_CAMP, 8, 8, difficulty=10)

    result = engine.commit_attack(8, 8, {UnitType.SPEARMAN: 5})

    assert isinstance(result, Success)
    assert result.value.outcome == CombatOutcome.DEFEAT
    assert result.value.loot == {}
    assert engine.units()[UnitType.SPEARMAN] == 0
    assert engine.units()[UnitType.ARCHER] == 3
    assert not engine.camp_at(8, 8).is_defeated


def test_casualty_reduction_softens_losses():
    engine = _engine(spearman=5)
    engine.empire.bonuses.defensive_casualty_reduction = 0.2
    place_camp(engine.empire.world, CampType.GOBLIN_CAMP, 8, 8, difficulty=10)

    result = engine.commit_attack(8, 8, {UnitType.SPEARMAN: 5})

    assert isinstance(result, Success)
    assert result.value.units_lost == {UnitType.SPEARMAN: 4}
    assert engine.units()[UnitType.SPEARMAN] == 1


@pytest.mark.parametrize(
    ("x", "y", "counts", "reason"),
    [
        (3, 3, {}, FailureReason.EMPTY_COMMITMENT),
        (3, 3, {UnitType.SPEARMAN: 0}, FailureReason.EMPTY_COMMITMENT),
        (3, 3, {UnitType.SPEARMAN: -1}, FailureReason.EMPTY_COMMITMENT),
        (3, 3, {UnitType.SPEARMAN: 0.5}, FailureReason.EMPTY_COMMITMENT),
        (10, 3, {UnitType.SPEARMAN: 1}, FailureReason.INVALID_TARGET),
        (-1, 0, {UnitType.SPEARMAN: 1}, FailureReason.INVALID_TARGET),
        (1, 1, {UnitType.SPEARMAN: 1}, FailureReason.INVALID_TARGET),
        (0, 0, {UnitType.SPEARMAN: 1}, FailureReason.INVALID_TARGET),
        (3, 3, {UnitType.SPEARMAN: 6}, FailureReason.INSUFFICIENT_UNITS),
    ],
)
def test_rejected_attacks_change_nothing(x, y, counts, reason):
    engine = _engine(spearman=5)
    resources = engine.resources()

    result = engine.commit_attack(x, y, counts)

    assert isinstance(result, Failure)
    assert result.reason == reason
    assert engine.units()[UnitType.SPEARMAN] == 5
    assert engine.resources() == resources
    assert engine.combat_reports() == []
    assert not engine.camp_at(*GOBLIN_CELL).is_defeated


def test_string_unit_keys_are_accepted():
    engine = _engine(archer=10)
    result = engine.commit_attack(*BANDIT_CELL, {"ARCHER": 10})
    assert isinstance(result, Success)
    assert result.value.units_sent == {UnitType.ARCHER: 10}


def test_report_history_is_bounded_and_newest_first():
    engine = _engine(spearman=100)
    place_camp(engine.empire.world, CampType.GOBLIN_CAMP, 8, 8, difficulty=10)

    for _ in range(12):
        assert engine.commit_attack(8, 8, {UnitType.SPEARMAN: 1}).ok
        engine.advance_turn()

    reports = engine.combat_reports()
    assert len(reports) == 10
    assert [report.turn for report in reports] == list(range(12, 2, -1))


def test_combat_resolved_event_is_published():
    engine = _engine(spearman=10)
    seen = []
    engine.subscribe(seen.append)

    engine.commit_attack(*GOBLIN_CELL, {UnitType.SPEARMAN: 10})

    resolved = [event for event in seen if event.type == "combat_resolved"]
    assert len(resolved) == 1
    assert resolved[0].payload["outcome"] == "victory"
    assert resolved[0].payload["units_lost"] == {"SPEARMAN": 2}
