"""HTTP routes for the Pixel Empires API."""

from __future__ import annotations

import asyncio
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from pixel_empires import __version__
from pixel_empires.api.runtime import ApiState, EmpireSession, GameService
from pixel_empires.domain import models as dm
from pixel_empires.domain.enums import BuildingType, TechCategory, TechnologyID, UnitType
from pixel_empires.domain.results import Failure

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class EmpireSummary(BaseModel):
    id: int
    name: str
    turn: int
    elapsed_seconds: float
    resources: dict[str, float]
    capacity: float
    units: dict[str, int]
    queued_jobs: dict[str, int]


class EmpireDetail(EmpireSummary):
    buildings: dict[str, dict[str, int]]
    production: dict[str, float]
    wall_defense: float
    bonuses: dict[str, float]
    researched: list[dict[str, str]]
    queues: dict[str, list[dict[str, object]]]
    camps: list[dict[str, object]]


class CreateEmpireRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class ConstructionRequest(BaseModel):
    building_type: BuildingType
    x: int
    y: int


class TrainingRequest(BaseModel):
    unit_type: UnitType
    quantity: int


class ResearchRequest(BaseModel):
    category: TechCategory
    tech_id: TechnologyID


class TickRequest(BaseModel):
    seconds: float = Field(default=1.0, ge=0.0, le=3600.0)


class AttackRequest(BaseModel):
    x: int
    y: int
    units: dict[UnitType, int]


class TickerRequest(BaseModel):
    enabled: bool
    interval_seconds: float | None = Field(default=None, gt=0.0)
    debug_multiplier: float | None = Field(default=None, gt=0.0)


class TickerStatus(BaseModel):
    running: bool
    interval_seconds: float
    debug_multiplier: float
    game_seconds_per_cycle: float


class SaveSlotSummary(BaseModel):
    slot: int
    empty: bool
    player_name: str | None = None
    turn: int | None = None
    saved_at: str | None = None


class LogEntryResponse(BaseModel):
    category: str
    message: str
    timestamp: str


def _session(state: ApiState, empire_id: int) -> EmpireSession:
    try:
        return state.empires.get_session(dm.EmpireID(empire_id))
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="empire not found"
        ) from exc


def _reject(failure: Failure) -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"reason": str(failure.reason), "detail": failure.detail},
    )


def _check_slot(state: ApiState, slot: int) -> None:
    if not 1 <= slot <= state.empires.save_slots:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"save slot must be between 1 and {state.empires.save_slots}",
        )


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "version": __version__,
        "database": await asyncio.to_thread(state.database_status),
        "empires": len(state.empires.list_sessions()),
        "save_slots": state.empires.save_slots,
        "ticker_running": state.ticks.running,
    }


@router.get("/ticker", response_model=TickerStatus)
async def get_ticker(state: ApiStateDep) -> TickerStatus:
    return _ticker_status(state)


@router.post("/ticker", response_model=TickerStatus)
async def update_ticker(request: TickerRequest, state: ApiStateDep) -> TickerStatus:
    if request.interval_seconds is not None:
        state.ticks.set_base_interval(request.interval_seconds)
    if request.debug_multiplier is not None:
        state.ticks.set_debug_multiplier(request.debug_multiplier)
    await state.ticks.set_enabled(request.enabled)
    return _ticker_status(state)


def _ticker_status(state: ApiState) -> TickerStatus:
    return TickerStatus(
        running=state.ticks.running,
        interval_seconds=state.ticks.interval_seconds,
        debug_multiplier=state.ticks.debug_multiplier,
        game_seconds_per_cycle=state.ticks.game_seconds_per_cycle,
    )


@router.get("/empires", response_model=list[EmpireSummary])
async def list_empires(state: ApiStateDep) -> list[EmpireSummary]:
    summaries = await state.ticks.run(state.empires.summaries)
    return [EmpireSummary.model_validate(summary) for summary in summaries]


@router.post("/empires", response_model=EmpireDetail, status_code=status.HTTP_201_CREATED)
async def create_empire(request: CreateEmpireRequest, state: ApiStateDep) -> EmpireDetail:
    session = await state.ticks.run(state.empires.create_empire, request.name)
    detail = await state.ticks.run(GameService.to_detail_dict, session)
    return EmpireDetail.model_validate(detail)


@router.get("/empires/{empire_id}", response_model=EmpireDetail)
async def get_empire(empire_id: int, state: ApiStateDep) -> EmpireDetail:
    session = _session(state, empire_id)
    detail = await state.ticks.run(GameService.to_detail_dict, session)
    return EmpireDetail.model_validate(detail)


@router.post("/empires/{empire_id}/construction", status_code=status.HTTP_201_CREATED)
async def start_construction(
    empire_id: int, request: ConstructionRequest, state: ApiStateDep
) -> dict[str, object]:
    session = _session(state, empire_id)
    result = await state.ticks.run(
        session.engine.start_construction, request.building_type, request.x, request.y
    )
    if isinstance(result, Failure):
        _reject(result)
    return GameService.to_job_dict(result.value)


@router.post("/empires/{empire_id}/training", status_code=status.HTTP_201_CREATED)
async def start_training(
    empire_id: int, request: TrainingRequest, state: ApiStateDep
) -> dict[str, object]:
    session = _session(state, empire_id)
    result = await state.ticks.run(
        session.engine.start_training, request.unit_type, request.quantity
    )
    if isinstance(result, Failure):
        _reject(result)
    return GameService.to_job_dict(result.value)


@router.post("/empires/{empire_id}/research", status_code=status.HTTP_201_CREATED)
async def start_research(
    empire_id: int, request: ResearchRequest, state: ApiStateDep
) -> dict[str, object]:
    session = _session(state, empire_id)
    result = await state.ticks.run(
        session.engine.start_research, request.category, request.tech_id
    )
    if isinstance(result, Failure):
        _reject(result)
    return GameService.to_job_dict(result.value)


@router.post("/empires/{empire_id}/tick", response_model=EmpireSummary)
async def advance_tick(empire_id: int, request: TickRequest, state: ApiStateDep) -> EmpireSummary:
    _session(state, empire_id)
    session = await state.ticks.advance_now(dm.EmpireID(empire_id), request.seconds)
    summary = await state.ticks.run(GameService.to_summary_dict, session)
    return EmpireSummary.model_validate(summary)


@router.post("/empires/{empire_id}/turn", response_model=EmpireSummary)
async def advance_turn(empire_id: int, state: ApiStateDep) -> EmpireSummary:
    session = _session(state, empire_id)
    await state.ticks.run(session.engine.advance_turn)
    summary = await state.ticks.run(GameService.to_summary_dict, session)
    return EmpireSummary.model_validate(summary)


@router.post("/empires/{empire_id}/attack/preview")
async def preview_attack(
    empire_id: int, request: AttackRequest, state: ApiStateDep
) -> dict[str, object]:
    session = _session(state, empire_id)
    result = await state.ticks.run(
        session.engine.preview_attack, request.x, request.y, request.units
    )
    if isinstance(result, Failure):
        _reject(result)
    return GameService.to_preview_dict(result.value)


@router.post("/empires/{empire_id}/attack")
async def commit_attack(
    empire_id: int, request: AttackRequest, state: ApiStateDep
) -> dict[str, object]:
    session = _session(state, empire_id)
    result = await state.ticks.run(
        session.engine.commit_attack, request.x, request.y, request.units
    )
    if isinstance(result, Failure):
        _reject(result)
    return GameService.to_report_dict(result.value)


@router.get("/empires/{empire_id}/reports")
async def list_reports(empire_id: int, state: ApiStateDep) -> list[dict[str, object]]:
    session = _session(state, empire_id)
    return await state.ticks.run(GameService.to_report_list, session)


@router.get("/empires/{empire_id}/technologies")
async def list_technologies(empire_id: int, state: ApiStateDep) -> list[dict[str, object]]:
    session = _session(state, empire_id)
    return await state.ticks.run(GameService.to_technology_list, session)


@router.get("/empires/{empire_id}/log", response_model=list[LogEntryResponse])
async def activity_log(
    empire_id: int,
    state: ApiStateDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[LogEntryResponse]:
    session = _session(state, empire_id)
    entries = await state.ticks.run(GameService.to_log_list, session, limit)
    return [LogEntryResponse.model_validate(entry) for entry in entries]


@router.get("/empires/{empire_id}/saves", response_model=list[SaveSlotSummary])
async def list_saves(empire_id: int, state: ApiStateDep) -> list[SaveSlotSummary]:
    _session(state, empire_id)
    listing = await state.ticks.run(state.empires.list_saves, dm.EmpireID(empire_id))
    return [
        SaveSlotSummary(slot=slot, empty=True)
        if metadata is None
        else SaveSlotSummary(
            slot=slot,
            empty=False,
            player_name=metadata.player_name,
            turn=metadata.turn,
            saved_at=metadata.saved_at.isoformat(),
        )
        for slot, metadata in sorted(listing.items())
    ]


@router.post(
    "/empires/{empire_id}/saves/{slot}",
    response_model=SaveSlotSummary,
    status_code=status.HTTP_201_CREATED,
)
async def save_empire(empire_id: int, slot: int, state: ApiStateDep) -> SaveSlotSummary:
    _session(state, empire_id)
    _check_slot(state, slot)
    metadata = await state.ticks.run(state.empires.save, dm.EmpireID(empire_id), slot)
    return SaveSlotSummary(
        slot=slot,
        empty=False,
        player_name=metadata.player_name,
        turn=metadata.turn,
        saved_at=metadata.saved_at.isoformat(),
    )


@router.post("/empires/{empire_id}/saves/{slot}/load", response_model=EmpireDetail)
async def load_empire(empire_id: int, slot: int, state: ApiStateDep) -> EmpireDetail:
    _session(state, empire_id)
    _check_slot(state, slot)
    try:
        session = await state.ticks.run(state.empires.load, dm.EmpireID(empire_id), slot)
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"save slot {slot} is empty"
        ) from exc
    detail = await state.ticks.run(GameService.to_detail_dict, session)
    return EmpireDetail.model_validate(detail)
