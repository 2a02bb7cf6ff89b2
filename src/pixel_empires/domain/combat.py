"""Attack power, outcome prediction and committed attacks against NPC camps."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from . import events as game_events
from .context import SimulationContext
from .enums import CampType, CellType, CombatOutcome, FailureReason, ResourceKind, UnitType
from .models import AdvantageNote, Camp, CombatReport, MapCell
from .results import Failure, Success, fail

UnitCounts = Mapping[UnitType | str, int]


@dataclass(slots=True)
class AttackPower:
    """Total offensive power and the advantages that shaped it."""

    total: float
    per_unit: dict[UnitType, float] = field(default_factory=dict)
    advantages: list[AdvantageNote] = field(default_factory=list)


@dataclass(slots=True)
class AttackPreview:
    """Advisory comparison shown before an attack is committed."""

    target_name: str
    camp_type: CampType
    x: int
    y: int
    total_attack_power: float
    target_defense: float
    predicted_outcome: CombatOutcome
    advantages: list[AdvantageNote]


class CombatResolver:
    """Computes attack power and applies committed attacks to the empire."""

    def __init__(self, ctx: SimulationContext) -> None:
        self.ctx = ctx

    def target_defense(self, camp: Camp) -> float:
        return camp.difficulty * self.ctx.rules.combat.defense_per_difficulty

    def attack_power(self, camp_type: CampType | str, unit_counts: UnitCounts) -> AttackPower:
        camp_type = self.ctx.catalog.camp(camp_type).type
        bonuses = self.ctx.empire.bonuses
        power = AttackPower(total=0.0)

        for key, count in unit_counts.items():
            if count <= 0:
                continue
            unit = self.ctx.catalog.unit(key)
            base_attack = unit.attack
            if bonuses.unit_attack > 0:
                base_attack *= 1 + bonuses.unit_attack
            unit_attack = count * base_attack

            base_advantage = unit.camp_advantages.get(camp_type)
            if base_advantage is not None:
                multiplier = base_advantage
                if bonuses.advantage_bonus > 0:
                    multiplier += bonuses.advantage_bonus
                unit_attack *= multiplier
                camp_name = self.ctx.catalog.camp(camp_type).name
                power.advantages.append(
                    AdvantageNote(
                        unit_type=unit.type,
                        camp_type=camp_type,
                        multiplier=multiplier,
                        description=(
                            f"{unit.name} is effective against {camp_name} (x{multiplier:.2f})"
                        ),
                    )
                )

            power.per_unit[unit.type] = power.per_unit.get(unit.type, 0.0) + unit_attack
            power.total += unit_attack

        return power

    def preview_attack(
        self, x: int, y: int, unit_counts: UnitCounts
    ) -> Success[AttackPreview] | Failure:
        counts = self._normalize_counts(unit_counts)
        if isinstance(counts, Failure):
            return counts
        cell = self._target_cell(x, y)
        if isinstance(cell, Failure):
            return cell
        return Success(self._preview(cell, counts))

    def commit_attack(
        self, x: int, y: int, unit_counts: UnitCounts
    ) -> Success[CombatReport] | Failure:
        """Resolve an attack, apply casualties and loot, and record a report."""

        counts = self._normalize_counts(unit_counts)
        if isinstance(counts, Failure):
            return counts
        cell = self._target_cell(x, y)
        if isinstance(cell, Failure):
            return cell

        empire = self.ctx.empire
        for unit_type, count in counts.items():
            owned = empire.units.get(unit_type, 0)
            if count > owned:
                name = self.ctx.catalog.unit(unit_type).name
                return fail(
                    FailureReason.INSUFFICIENT_UNITS,
                    f"Only {owned} {name} available, {count} requested",
                )

        preview = self._preview(cell, counts)
        camp = cell.camp
        advantaged = {note.unit_type for note in preview.advantages}
        combat_rules = self.ctx.rules.combat
        reduction = min(max(empire.bonuses.defensive_casualty_reduction, 0.0), 1.0)
        victory = preview.predicted_outcome == CombatOutcome.VICTORY

        units_lost: dict[UnitType, int] = {}
        for unit_type, count in counts.items():
            if victory:
                rate = (
                    combat_rules.advantaged_loss_rate
                    if unit_type in advantaged
                    else combat_rules.standard_loss_rate
                )
            else:
                rate = combat_rules.defeat_loss_rate
            lost = min(math.floor(count * rate * (1 - reduction)), count)
            units_lost[unit_type] = lost
            empire.units[unit_type] = empire.units.get(unit_type, 0) - lost

        loot: dict[ResourceKind, float] = {}
        if victory:
            before = empire.ledger.snapshot()
            applied = empire.ledger.produce(camp.loot)
            loot = dict(applied)
            camp.respawn_remaining = self.ctx.rules.world.camp_respawn_seconds
            self.ctx.emit(
                game_events.resources_changed(
                    {str(k): v for k, v in before.items()},
                    {str(k): v for k, v in empire.ledger.snapshot().items()},
                    f"loot from {preview.target_name}",
                )
            )

        report = CombatReport(
            target_name=preview.target_name,
            camp_type=camp.camp_type,
            x=cell.x,
            y=cell.y,
            difficulty=camp.difficulty,
            outcome=preview.predicted_outcome,
            total_attack_power=preview.total_attack_power,
            target_defense=preview.target_defense,
            units_sent=dict(counts),
            units_lost=units_lost,
            loot=loot,
            advantages=preview.advantages,
            bonuses=empire.bonuses.as_dict(),
            turn=empire.turn,
            resolved_at=datetime.now(UTC),
        )
        empire.combat_reports.insert(0, report)
        del empire.combat_reports[combat_rules.report_history :]

        self.ctx.emit(
            game_events.combat_resolved(
                report.target_name,
                report.outcome,
                report.total_attack_power,
                report.target_defense,
                {str(k): v for k, v in units_lost.items()},
                {str(k): v for k, v in loot.items()},
            )
        )
        return Success(report)

    def _preview(self, cell: MapCell, counts: dict[UnitType, int]) -> AttackPreview:
        camp = cell.camp
        power = self.attack_power(camp.camp_type, counts)
        defense = self.target_defense(camp)
        outcome = CombatOutcome.VICTORY if power.total > defense else CombatOutcome.DEFEAT
        return AttackPreview(
            target_name=self.ctx.catalog.camp(camp.camp_type).name,
            camp_type=camp.camp_type,
            x=cell.x,
            y=cell.y,
            total_attack_power=power.total,
            target_defense=defense,
            predicted_outcome=outcome,
            advantages=power.advantages,
        )

    def _normalize_counts(self, unit_counts: UnitCounts) -> dict[UnitType, int] | Failure:
        counts: dict[UnitType, int] = {}
        for key, count in unit_counts.items():
            unit_type = self.ctx.catalog.unit(key).type
            if count < 0:
                return fail(FailureReason.EMPTY_COMMITMENT, "Unit counts cannot be negative")
            whole = int(count)
            if whole > 0:
                counts[unit_type] = counts.get(unit_type, 0) + whole
        if not counts:
            return fail(FailureReason.EMPTY_COMMITMENT, "Select at least one unit to attack")
        return counts

    def _target_cell(self, x: int, y: int) -> MapCell | Failure:
        world = self.ctx.empire.world
        if not world.in_bounds(x, y):
            return fail(FailureReason.INVALID_TARGET, f"({x}, {y}) is outside the map")
        cell = world.cell_at(x, y)
        if cell is None or cell.kind != CellType.NPC or cell.camp is None:
            return fail(FailureReason.INVALID_TARGET, f"({x}, {y}) is not an enemy camp")
        if cell.camp.is_defeated:
            return fail(
                FailureReason.INVALID_TARGET,
                f"The camp at ({x}, {y}) was defeated and has not respawned yet",
            )
        return cell
