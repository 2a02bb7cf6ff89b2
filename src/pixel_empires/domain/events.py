"""Domain events and the observer channel collaborators subscribe to.

The engine never calls into presentation code.  It publishes
:class:`GameEvent` values on an :class:`EventBus`; the activity log, the HTTP
runtime or a test can subscribe and react.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GameEvent:
    """Base event. All events have a type and payload."""

    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


EventListener = Callable[[GameEvent], None]


class EventBus:
    """Synchronous publish/subscribe channel."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("event listener failed for %s", event.type)


# ===== Event Type Constants =====

JOB_STARTED = "job_started"
CONSTRUCTION_COMPLETED = "construction_completed"
TRAINING_COMPLETED = "training_completed"
RESEARCH_COMPLETED = "research_completed"
RESOURCES_CHANGED = "resources_changed"
COMBAT_RESOLVED = "combat_resolved"
CAMP_RESPAWNED = "camp_respawned"
TURN_ADVANCED = "turn_advanced"


# ===== Event Factory Functions =====


def job_started(queue: str, description: str, duration: float, cost: dict[str, float]) -> GameEvent:
    return GameEvent(JOB_STARTED, {
        "queue": queue,
        "description": description,
        "duration": duration,
        "cost": cost,
    })


def construction_completed(building_type: str, level: int, x: int, y: int) -> GameEvent:
    return GameEvent(CONSTRUCTION_COMPLETED, {
        "building_type": building_type,
        "level": level,
        "x": x,
        "y": y,
    })


def training_completed(unit_type: str, quantity: int, total: int) -> GameEvent:
    return GameEvent(TRAINING_COMPLETED, {
        "unit_type": unit_type,
        "quantity": quantity,
        "total": total,
    })


def research_completed(category: str, tech_id: str, name: str) -> GameEvent:
    return GameEvent(RESEARCH_COMPLETED, {
        "category": category,
        "tech_id": tech_id,
        "name": name,
    })


def resources_changed(
    old_values: dict[str, float],
    new_values: dict[str, float],
    reason: str,
) -> GameEvent:
    return GameEvent(RESOURCES_CHANGED, {
        "old_values": old_values,
        "new_values": new_values,
        "change": {key: new_values[key] - old_values.get(key, 0.0) for key in new_values},
        "reason": reason,
    })


def combat_resolved(
    target_name: str,
    outcome: str,
    total_attack_power: float,
    target_defense: float,
    units_lost: dict[str, int],
    loot: dict[str, float],
) -> GameEvent:
    return GameEvent(COMBAT_RESOLVED, {
        "target_name": target_name,
        "outcome": outcome,
        "total_attack_power": total_attack_power,
        "target_defense": target_defense,
        "units_lost": units_lost,
        "loot": loot,
    })


def camp_respawned(camp_id: str, camp_type: str, x: int, y: int, difficulty: float) -> GameEvent:
    return GameEvent(CAMP_RESPAWNED, {
        "camp_id": camp_id,
        "camp_type": camp_type,
        "x": x,
        "y": y,
        "difficulty": difficulty,
    })


def turn_advanced(turn: int) -> GameEvent:
    return GameEvent(TURN_ADVANCED, {"turn": turn})
