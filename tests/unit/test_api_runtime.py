"""Tests for API runtime helpers (game service and tick manager)."""

from __future__ import annotations

import asyncio

import pytest

from pixel_empires.api.runtime import ApiState, GameService, TickManager, build_rules
from pixel_empires.config import Settings
from pixel_empires.domain import models as dm
from pixel_empires.domain.enums import BuildingType, ResourceKind
from pixel_empires.repository import JsonSaveRepository, SqlSaveRepository


def _service(tmp_path) -> GameService:
    return GameService(JsonSaveRepository(tmp_path, slots=2))


def test_game_service_create_and_list(tmp_path):
    service = _service(tmp_path)
    first = service.create_empire("Alpha")
    second = service.create_empire("Beta")

    assert [int(s.empire.id) for s in service.list_sessions()] == [1, 2]
    assert service.get_session(dm.EmpireID(2)) is second
    assert first.log.entries()[0].message == "Alpha was founded"

    with pytest.raises(FileNotFoundError):
        service.get_session(dm.EmpireID(99))


def test_game_service_save_and_load(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    engine = session.engine
    assert engine.start_construction(BuildingType.FARM, 2, 2).ok

    metadata = service.save(session.empire.id, 1)
    assert metadata.slot == 1
    assert metadata.player_name == "Alpha"

    engine.tick(10)
    assert engine.buildings()[BuildingType.FARM].level == 1

    restored = service.load(session.empire.id, 1)
    assert restored is service.get_session(session.empire.id)
    assert BuildingType.FARM not in restored.engine.buildings()
    assert len(restored.engine.empire.construction_queue) == 1
    assert restored.log is session.log
    assert restored.log.entries()[0].message == "Game loaded from slot 1"

    # The replaced engine no longer feeds the log.
    before = len(session.log.entries())
    engine.advance_turn()
    assert len(session.log.entries()) == before

    restored.engine.advance_turn()
    assert restored.log.entries()[0].message == "Turn 2 begins"


def test_game_service_lists_saves(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    service.save(session.empire.id, 2)

    listing = service.list_saves(session.empire.id)
    assert listing[1] is None
    assert listing[2].player_name == "Alpha"


def test_load_of_empty_slot_raises(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    with pytest.raises(FileNotFoundError):
        service.load(session.empire.id, 1)


def test_detail_dict_is_json_friendly(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    session.engine.start_construction(BuildingType.FARM, 2, 2)

    detail = service.to_detail_dict(session)

    assert detail["resources"] == {"FOOD": 50.0, "ORE": 80.0}
    assert detail["queued_jobs"] == {"construction": 1, "training": 0, "research": 0}
    assert detail["queues"]["construction"][0]["building_type"] == "FARM"
    assert detail["buildings"]["TOWN_HALL"] == {"level": 1, "x": 1, "y": 1}
    assert {camp["camp_type"] for camp in detail["camps"]} == {"GOBLIN_CAMP", "BANDIT_HIDEOUT"}


def test_build_rules_applies_report_history(tmp_path):
    rules = build_rules(Settings(data_dir=tmp_path, combat_report_history=4))
    assert rules.combat.report_history == 4


@pytest.mark.asyncio
async def test_tick_manager_advances_empire(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    session.empire.buildings[BuildingType.FARM] = dm.Building(level=1, x=2, y=2)
    session.empire.ledger.amounts = {ResourceKind.FOOD: 0, ResourceKind.ORE: 0}

    manager = TickManager(service, base_interval_seconds=1.0)
    await manager.advance_now(session.empire.id, 5)

    assert session.engine.resources()[ResourceKind.FOOD] == 5
    assert session.empire.elapsed_seconds == 5


@pytest.mark.asyncio
async def test_tick_manager_background_loop(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")

    manager = TickManager(service, base_interval_seconds=0.1, debug_multiplier=10.0)
    assert manager.game_seconds_per_cycle == pytest.approx(1.0)

    await manager.set_enabled(True)
    assert manager.running
    await asyncio.sleep(0.35)
    await manager.set_enabled(False)

    assert not manager.running
    assert session.empire.elapsed_seconds >= 1.0


@pytest.mark.asyncio
async def test_tick_manager_settings(tmp_path):
    manager = TickManager(_service(tmp_path), base_interval_seconds=2.0)

    manager.set_base_interval(0.01)
    assert manager.interval_seconds == TickManager.MIN_INTERVAL_SECONDS
    manager.set_base_interval(4.0)
    manager.set_debug_multiplier(0.5)
    assert manager.interval_seconds == 4.0
    assert manager.game_seconds_per_cycle == pytest.approx(2.0)

    await manager.stop()
    assert not manager.running


@pytest.mark.asyncio
async def test_run_serializes_engine_calls(tmp_path):
    service = _service(tmp_path)
    session = service.create_empire("Alpha")
    manager = TickManager(service, base_interval_seconds=1.0)

    turns = await asyncio.gather(
        *(manager.run(session.engine.advance_turn) for _ in range(5))
    )

    assert sorted(turns) == [2, 3, 4, 5, 6]


@pytest.mark.asyncio
async def test_api_state_uses_json_backend(tmp_path):
    state = ApiState(settings=Settings(data_dir=tmp_path, save_backend="json"))
    assert isinstance(state.repository, JsonSaveRepository)
    assert state.db_engine is None
    assert state.database_status() == "not_configured"
    await state.startup()
    assert not state.ticks.running
    await state.shutdown()


@pytest.mark.asyncio
async def test_api_state_disposes_sql_engine_on_shutdown(tmp_path):
    settings = Settings(
        data_dir=tmp_path,
        save_backend="sql",
        database_url=f"sqlite:///{tmp_path / 'saves.db'}",
    )
    state = ApiState(settings=settings)
    assert isinstance(state.repository, SqlSaveRepository)
    assert state.database_status() == "connected"

    pool = state.db_engine.pool
    await state.startup()
    await state.shutdown()
    assert state.db_engine.pool is not pool
