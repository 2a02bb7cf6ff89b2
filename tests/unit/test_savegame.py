"""Tests for savegame manifests and `.pxempire` archives."""

from __future__ import annotations

import json
from zipfile import ZipFile

from pixel_empires.domain import models as dm
from pixel_empires.domain.engine import EmpireEngine
from pixel_empires.domain.enums import (
    BuildingType,
    CampType,
    QueueKind,
    ResourceKind,
    TechCategory,
    TechnologyID,
    UnitType,
)
from pixel_empires.domain.world import place_camp
from pixel_empires.savegame import (
    MANIFEST_PATH,
    SaveManifest,
    export_empire,
    import_empire,
    load_manifest,
    save_manifest,
)


def _busy_engine() -> EmpireEngine:
    engine = EmpireEngine.new(dm.EmpireID(7), "Archivists")
    empire = engine.empire
    empire.buildings[BuildingType.WAREHOUSE] = dm.Building(level=3, x=0, y=1)
    empire.buildings[BuildingType.BARRACKS] = dm.Building(level=1, x=2, y=1)
    empire.buildings[BuildingType.LIBRARY] = dm.Building(level=1, x=3, y=1)
    empire.technologies[TechCategory.ECONOMIC][TechnologyID.EFFICIENT_FARMING] = True
    engine.rederive()
    empire.ledger.amounts = {ResourceKind.FOOD: 900, ResourceKind.ORE: 900}
    empire.units[UnitType.ARCHER] = 10

    assert engine.start_construction(BuildingType.FARM, 4, 4).ok
    assert engine.start_training(UnitType.SPEARMAN, 2).ok
    assert engine.start_research(TechCategory.MILITARY, TechnologyID.IMPROVED_WEAPONS).ok
    assert engine.commit_attack(6, 2, {UnitType.ARCHER: 10}).ok
    engine.tick(3)
    return engine


def _round_trip(manifest: SaveManifest) -> SaveManifest:
    return SaveManifest.model_validate(json.loads(json.dumps(manifest.model_dump(mode="json"))))


def test_round_trip_preserves_progress():
    engine = _busy_engine()
    restored = import_empire(_round_trip(export_empire(engine.empire, slot=2)))

    assert restored.resources() == engine.resources()
    assert restored.units() == engine.units()
    assert restored.researched() == engine.researched()
    assert restored.empire.elapsed_seconds == engine.empire.elapsed_seconds
    for kind in QueueKind:
        assert restored.queue(kind) == engine.queue(kind)
    assert restored.combat_reports() == engine.combat_reports()
    defeated = restored.camp_at(6, 2)
    assert defeated.is_defeated
    assert defeated.respawn_remaining == engine.camp_at(6, 2).respawn_remaining


def test_restored_engine_keeps_running():
    engine = _busy_engine()
    restored = import_empire(_round_trip(export_empire(engine.empire)))

    engine.tick(10)
    restored.tick(10)

    assert restored.buildings()[BuildingType.FARM].level == 1
    assert restored.units() == engine.units()
    assert restored.resources() == engine.resources()


def test_metadata_summarises_empire():
    engine = _busy_engine()
    metadata = export_empire(engine.empire, slot=3).metadata
    assert metadata.player_name == "Archivists"
    assert metadata.slot == 3
    assert metadata.turn == 1
    assert metadata.units["ARCHER"] == engine.units()[UnitType.ARCHER]
    assert set(metadata.resources) == {"FOOD", "ORE"}


def test_import_rederives_capacity_and_bonuses():
    engine = _busy_engine()
    manifest = export_empire(engine.empire)
    manifest.empire.ledger.capacity = 99_999
    manifest.empire.bonuses.unit_attack = 5.0
    manifest.empire.bonuses.food_production = 0.0

    restored = import_empire(manifest)

    assert restored.capacity() == 1_000
    assert restored.bonuses().unit_attack == 0.0
    assert restored.bonuses().food_production > 0


def test_export_is_detached_from_live_empire():
    engine = _busy_engine()
    manifest = export_empire(engine.empire)
    engine.empire.units[UnitType.CAVALRY] = 42
    engine.tick(60)
    assert manifest.empire.units[UnitType.CAVALRY] == 0
    assert len(manifest.empire.research_queue) == 1


def test_report_history_is_truncated():
    engine = EmpireEngine.new(dm.EmpireID(1), "Losers")
    engine.empire.units[UnitType.SPEARMAN] = 10
    place_camp(engine.empire.world, CampType.GOBLIN_CAMP, 8, 8, difficulty=10)
    for _ in range(4):
        engine.commit_attack(8, 8, {UnitType.SPEARMAN: 1})

    manifest = export_empire(engine.empire, report_history=2)

    assert len(manifest.empire.combat_reports) == 2
    assert manifest.empire.combat_reports == engine.combat_reports()[:2]


def test_archive_round_trip(tmp_path):
    engine = _busy_engine()
    path = save_manifest(export_empire(engine.empire), tmp_path / "nested" / "empire.pxempire")

    with ZipFile(path) as archive:
        assert MANIFEST_PATH in archive.namelist()

    restored = import_empire(load_manifest(path))
    assert restored.empire.name == "Archivists"
    assert restored.queue(QueueKind.TRAINING) == engine.queue(QueueKind.TRAINING)
