"""Runtime primitives backing the Pixel Empires HTTP API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from sqlalchemy.engine import Engine

from pixel_empires import savegame
from pixel_empires.activity_log import ActivityLog, LogCategory
from pixel_empires.config import Settings, get_settings
from pixel_empires.database import (
    check_database_health,
    create_db_engine,
    get_session_factory,
    init_db,
)
from pixel_empires.domain import models as dm
from pixel_empires.domain.catalog import DEFAULT_CATALOG, Catalog
from pixel_empires.domain.combat import AttackPreview
from pixel_empires.domain.engine import EmpireEngine
from pixel_empires.domain.enums import QueueKind
from pixel_empires.domain.rules_config import DEFAULT_RULES, RulesConfig
from pixel_empires.interfaces import ISaveRepository
from pixel_empires.repository import JsonSaveRepository, SqlSaveRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class EmpireSession:
    """A live engine together with its activity log."""

    engine: EmpireEngine
    log: ActivityLog

    @property
    def empire(self) -> dm.Empire:
        return self.engine.empire


class GameService:
    """Owns the live empires and moves them in and out of save slots."""

    def __init__(
        self,
        repository: ISaveRepository,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._repository = repository
        self._catalog = catalog
        self._rules = rules
        self._sessions: dict[dm.EmpireID, EmpireSession] = {}

    @property
    def save_slots(self) -> int:
        return self._repository.slots

    def list_sessions(self) -> list[EmpireSession]:
        return [self._sessions[key] for key in sorted(self._sessions, key=int)]

    def get_session(self, empire_id: dm.EmpireID) -> EmpireSession:
        """Return a live empire or raise ``FileNotFoundError``."""

        session = self._sessions.get(empire_id)
        if session is None:
            raise FileNotFoundError(f"empire {int(empire_id)} not found")
        return session

    def create_empire(self, name: str) -> EmpireSession:
        empire_id = self._next_identifier()
        engine = EmpireEngine.new(empire_id, name, catalog=self._catalog, rules=self._rules)
        session = self._attach(engine)
        session.log.add(LogCategory.SYSTEM, f"{name} was founded")
        return session

    def _next_identifier(self) -> dm.EmpireID:
        if not self._sessions:
            return dm.EmpireID(1)
        return dm.EmpireID(max(int(key) for key in self._sessions) + 1)

    def _attach(self, engine: EmpireEngine, log: ActivityLog | None = None) -> EmpireSession:
        log = log or ActivityLog(self._rules.activity_log.max_entries)
        log.attach(engine.events)
        session = EmpireSession(engine=engine, log=log)
        self._sessions[engine.empire.id] = session
        return session

    def save(self, empire_id: dm.EmpireID, slot: int) -> savegame.SaveMetadata:
        session = self.get_session(empire_id)
        manifest = savegame.export_empire(
            session.empire,
            slot=slot,
            report_history=self._rules.combat.report_history,
        )
        self._repository.save(empire_id, slot, manifest)
        session.log.add(LogCategory.SYSTEM, f"Game saved to slot {slot}")
        return manifest.metadata

    def load(self, empire_id: dm.EmpireID, slot: int) -> EmpireSession:
        """Replace the live empire with the contents of a slot."""

        current = self.get_session(empire_id)
        manifest = self._repository.load(empire_id, slot)
        engine = savegame.import_empire(manifest, catalog=self._catalog, rules=self._rules)
        engine.empire.id = empire_id
        current.log.detach(current.engine.events)
        session = self._attach(engine, current.log)
        session.log.add(LogCategory.SYSTEM, f"Game loaded from slot {slot}")
        return session

    def list_saves(self, empire_id: dm.EmpireID) -> dict[int, savegame.SaveMetadata | None]:
        self.get_session(empire_id)
        return self._repository.list_slots(empire_id)

    # ------------------------------------------------------------------
    # JSON views

    @staticmethod
    def to_summary_dict(session: EmpireSession) -> dict[str, object]:
        engine = session.engine
        empire = engine.empire
        return {
            "id": int(empire.id),
            "name": empire.name,
            "turn": empire.turn,
            "elapsed_seconds": empire.elapsed_seconds,
            "resources": {str(k): v for k, v in engine.resources().items()},
            "capacity": engine.capacity(),
            "units": {str(k): v for k, v in engine.units().items()},
            "queued_jobs": {
                str(kind): len(engine.queue(kind)) for kind in QueueKind
            },
        }

    @staticmethod
    def to_detail_dict(session: EmpireSession) -> dict[str, object]:
        engine = session.engine
        summary = GameService.to_summary_dict(session)
        summary.update(
            {
                "buildings": {
                    str(kind): {"level": b.level, "x": b.x, "y": b.y}
                    for kind, b in engine.buildings().items()
                },
                "production": {str(k): v for k, v in engine.production_rates().items()},
                "wall_defense": engine.wall_defense(),
                "bonuses": engine.bonuses().as_dict(),
                "researched": [
                    {"category": str(category), "tech_id": str(tech_id)}
                    for category, tech_id in engine.researched()
                ],
                "queues": {
                    str(kind): [GameService.to_job_dict(job) for job in engine.queue(kind)]
                    for kind in QueueKind
                },
                "camps": [
                    {
                        "x": cell.x,
                        "y": cell.y,
                        "camp_id": cell.camp.camp_id,
                        "camp_type": str(cell.camp.camp_type),
                        "difficulty": cell.camp.difficulty,
                        "loot": {str(k): v for k, v in cell.camp.loot.items()},
                        "respawn_remaining": cell.camp.respawn_remaining,
                    }
                    for cell in engine.camps()
                    if cell.camp is not None
                ],
            }
        )
        return summary

    def summaries(self) -> list[dict[str, object]]:
        return [self.to_summary_dict(session) for session in self.list_sessions()]

    @staticmethod
    def to_technology_list(session: EmpireSession) -> list[dict[str, object]]:
        engine = session.engine
        available = {(d.category, d.id) for d in engine.available_technologies()}
        return [
            {
                "category": str(definition.category),
                "tech_id": str(definition.id),
                "name": definition.name,
                "description": definition.description,
                "cost": {str(k): v for k, v in definition.cost.items()},
                "research_seconds": definition.research_seconds,
                "researched": engine.empire.is_researched(definition.category, definition.id),
                "available": (definition.category, definition.id) in available,
            }
            for definition in engine.ctx.catalog.iter_technologies()
        ]

    @staticmethod
    def to_report_list(session: EmpireSession) -> list[dict[str, object]]:
        return [GameService.to_report_dict(report) for report in session.engine.combat_reports()]

    @staticmethod
    def to_log_list(session: EmpireSession, limit: int | None = None) -> list[dict[str, str]]:
        return [
            {
                "category": str(entry.category),
                "message": entry.message,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in session.log.entries(limit)
        ]

    @staticmethod
    def to_job_dict(job: dm.QueueEntry) -> dict[str, object]:
        data: dict[str, object] = {
            "kind": str(job.kind),
            "time_remaining": job.time_remaining,
        }
        if isinstance(job, dm.ConstructionJob):
            data.update(
                building_type=str(job.building_type),
                target_level=job.target_level,
                x=job.x,
                y=job.y,
            )
        elif isinstance(job, dm.TrainingJob):
            data.update(unit_type=str(job.unit_type), quantity=job.quantity)
        else:
            data.update(category=str(job.category), tech_id=str(job.tech_id))
        return data

    @staticmethod
    def to_preview_dict(preview: AttackPreview) -> dict[str, object]:
        return {
            "target_name": preview.target_name,
            "camp_type": str(preview.camp_type),
            "x": preview.x,
            "y": preview.y,
            "total_attack_power": preview.total_attack_power,
            "target_defense": preview.target_defense,
            "predicted_outcome": str(preview.predicted_outcome),
            "advantages": [_advantage_dict(note) for note in preview.advantages],
        }

    @staticmethod
    def to_report_dict(report: dm.CombatReport) -> dict[str, object]:
        return {
            "target_name": report.target_name,
            "camp_type": str(report.camp_type),
            "x": report.x,
            "y": report.y,
            "difficulty": report.difficulty,
            "outcome": str(report.outcome),
            "total_attack_power": report.total_attack_power,
            "target_defense": report.target_defense,
            "units_sent": {str(k): v for k, v in report.units_sent.items()},
            "units_lost": {str(k): v for k, v in report.units_lost.items()},
            "loot": {str(k): v for k, v in report.loot.items()},
            "advantages": [_advantage_dict(note) for note in report.advantages],
            "bonuses": report.bonuses,
            "turn": report.turn,
            "resolved_at": report.resolved_at.isoformat(),
        }


def _advantage_dict(note: dm.AdvantageNote) -> dict[str, object]:
    return {
        "unit_type": str(note.unit_type),
        "camp_type": str(note.camp_type),
        "multiplier": note.multiplier,
        "description": note.description,
    }


class TickManager:
    """Serializes engine mutations and optionally ticks every empire in the background."""

    MIN_INTERVAL_SECONDS = 0.1

    def __init__(
        self,
        service: GameService,
        *,
        base_interval_seconds: float,
        debug_multiplier: float = 1.0,
    ) -> None:
        self._service = service
        self._base_interval = max(base_interval_seconds, self.MIN_INTERVAL_SECONDS)
        self._debug_multiplier = max(debug_multiplier, 0.01)
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._lock = asyncio.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._base_interval

    @property
    def debug_multiplier(self) -> float:
        return self._debug_multiplier

    @property
    def game_seconds_per_cycle(self) -> float:
        return self._base_interval * self._debug_multiplier

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_base_interval(self, seconds: float) -> None:
        self._base_interval = max(seconds, self.MIN_INTERVAL_SECONDS)

    def set_debug_multiplier(self, multiplier: float) -> None:
        self._debug_multiplier = max(multiplier, 0.01)

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func`` in a worker thread while holding the engine lock."""

        async with self._lock:
            return await asyncio.to_thread(func, *args)

    async def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self._ensure_running()
        else:
            await self.stop()

    def _ensure_running(self) -> None:
        if self._task is None or self._task.done():
            self._stop_event = asyncio.Event()
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self._run_loop(), name="pixel-empires-tick-loop")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        await task
        self._task = None

    async def advance_now(self, empire_id: dm.EmpireID, seconds: float) -> EmpireSession:
        session = self._service.get_session(empire_id)
        await self.run(session.engine.tick, seconds)
        return session

    async def _run_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                    break
                except TimeoutError:
                    pass
                await self._run_cycle()
        finally:
            self._task = None

    async def _run_cycle(self) -> None:
        sessions = self._service.list_sessions()
        if not sessions:
            return
        await self.run(self._advance_all_sync, sessions, self.game_seconds_per_cycle)

    @staticmethod
    def _advance_all_sync(sessions: list[EmpireSession], seconds: float) -> None:
        for session in sessions:
            session.engine.tick(seconds)
        logger.debug("advanced %d empires by %.2fs", len(sessions), seconds)


def build_rules(settings: Settings, base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    """Apply settings-level overrides to the rules configuration."""

    return replace(
        base,
        combat=replace(base.combat, report_history=settings.combat_report_history),
    )


def build_db_engine(settings: Settings) -> Engine | None:
    """Create and initialize the save slot database, or ``None`` for JSON slots."""

    if settings.save_backend != "sql":
        return None
    engine = create_db_engine(settings.database_url, echo=settings.database_echo)
    init_db(engine)
    return engine


def build_repository(settings: Settings, db_engine: Engine | None = None) -> ISaveRepository:
    """JSON slots under ``data_dir`` or the SQL save slot table."""

    if db_engine is None:
        return JsonSaveRepository(settings.data_dir, slots=settings.save_slots)
    return SqlSaveRepository(get_session_factory(db_engine), slots=settings.save_slots)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        repository: ISaveRepository | None = None,
        rules: RulesConfig | None = None,
        catalog: Catalog = DEFAULT_CATALOG,
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = rules or build_rules(self.settings)
        self.db_engine = None if repository is not None else build_db_engine(self.settings)
        self.repository = repository or build_repository(self.settings, self.db_engine)
        self.empires = GameService(self.repository, catalog=catalog, rules=self.rules)
        self.ticks = TickManager(
            self.empires,
            base_interval_seconds=self.settings.tick_interval_seconds,
            debug_multiplier=self.settings.debug_tick_speed_multiplier,
        )

    def database_status(self) -> str:
        if self.db_engine is None:
            return "not_configured"
        return "connected" if check_database_health(self.db_engine) else "unavailable"

    async def startup(self) -> None:
        if self.settings.auto_tick:
            await self.ticks.set_enabled(True)

    async def shutdown(self) -> None:
        await self.ticks.stop()
        if self.db_engine is not None:
            self.db_engine.dispose()
            logger.info("database engine disposed")


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
