"""Bounded activity log fed by engine domain events."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from pixel_empires.domain import events as game_events
from pixel_empires.domain.events import EventBus, GameEvent

logger = logging.getLogger(__name__)


class LogCategory(StrEnum):
    """Headings shown next to activity log entries."""

    BUILDING = "Building"
    TRAINING = "Training"
    RESEARCH = "Research"
    COMBAT = "Combat"
    WORLD = "World"
    SYSTEM = "System"


@dataclass(slots=True)
class LogEntry:
    category: LogCategory
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class ActivityLog:
    """Keeps the most recent entries, newest first, and mirrors them to logging."""

    def __init__(self, max_entries: int = 100) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def add(self, category: LogCategory, message: str) -> LogEntry:
        entry = LogEntry(category=category, message=message)
        self._entries.appendleft(entry)
        logger.info("[%s] %s", category, message)
        return entry

    def entries(self, limit: int | None = None) -> list[LogEntry]:
        items = list(self._entries)
        return items if limit is None else items[:limit]

    def clear(self) -> None:
        self._entries.clear()

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(self.handle_event)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(self.handle_event)

    def handle_event(self, event: GameEvent) -> None:
        described = describe_event(event)
        if described is not None:
            self.add(*described)


def describe_event(event: GameEvent) -> tuple[LogCategory, str] | None:
    """Translate a domain event into a log line; ``None`` for events not logged."""

    payload = event.payload
    if event.type == game_events.JOB_STARTED:
        category = {
            "construction": LogCategory.BUILDING,
            "training": LogCategory.TRAINING,
            "research": LogCategory.RESEARCH,
        }.get(payload["queue"], LogCategory.SYSTEM)
        return category, f"Started {payload['description']} ({payload['duration']:.0f}s)"
    if event.type == game_events.CONSTRUCTION_COMPLETED:
        return (
            LogCategory.BUILDING,
            f"{payload['building_type']} reached level {payload['level']}",
        )
    if event.type == game_events.TRAINING_COMPLETED:
        return (
            LogCategory.TRAINING,
            f"Trained {payload['quantity']} {payload['unit_type']} (now {payload['total']})",
        )
    if event.type == game_events.RESEARCH_COMPLETED:
        return LogCategory.RESEARCH, f"Research completed: {payload['name']}"
    if event.type == game_events.COMBAT_RESOLVED:
        outcome = "Victory" if payload["outcome"] == "victory" else "Defeat"
        return (
            LogCategory.COMBAT,
            f"{outcome} against {payload['target_name']} "
            f"({payload['total_attack_power']:.1f} vs {payload['target_defense']:.1f})",
        )
    if event.type == game_events.CAMP_RESPAWNED:
        return (
            LogCategory.WORLD,
            f"A {payload['camp_type']} reappeared at ({payload['x']}, {payload['y']})",
        )
    if event.type == game_events.TURN_ADVANCED:
        return LogCategory.SYSTEM, f"Turn {payload['turn']} begins"
    return None
