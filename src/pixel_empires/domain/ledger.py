"""Resource ledger holding the empire stockpile and its storage cap."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .enums import ResourceKind


def _empty_amounts() -> dict[ResourceKind, float]:
    return {kind: 0.0 for kind in ResourceKind}


@dataclass(slots=True)
class ResourceLedger:
    """Quantities of every resource, clamped to ``[0, capacity]``.

    ``capacity`` is derived state: callers refresh it through
    :meth:`recompute_capacity` whenever warehouses or storage research change.
    """

    amounts: dict[ResourceKind, float] = field(default_factory=_empty_amounts)
    capacity: float = 100.0

    def amount(self, kind: ResourceKind) -> float:
        return self.amounts.get(kind, 0.0)

    def can_afford(self, cost: Mapping[ResourceKind, float]) -> bool:
        """Return ``True`` when every resource covers its share of ``cost``."""

        return all(self.amount(kind) >= needed for kind, needed in cost.items())

    def deduct(self, cost: Mapping[ResourceKind, float]) -> bool:
        """Remove ``cost`` from the stockpile; no-op returning ``False`` if unaffordable."""

        if not self.can_afford(cost):
            return False
        for kind, needed in cost.items():
            self.amounts[kind] = self.amount(kind) - needed
        return True

    def produce(self, amounts: Mapping[ResourceKind, float]) -> dict[ResourceKind, float]:
        """Apply production deltas and clamp; return the change actually applied."""

        applied: dict[ResourceKind, float] = {}
        for kind, delta in amounts.items():
            before = self.amount(kind)
            after = min(max(before + delta, 0.0), self.capacity)
            self.amounts[kind] = after
            applied[kind] = after - before
        return applied

    def recompute_capacity(self, base_capacity: float, storage_bonus: float) -> float:
        """Set capacity to the base plus the research storage bonus and re-clamp."""

        bonus_amount = base_capacity * storage_bonus if storage_bonus > 0 else 0.0
        self.capacity = base_capacity + bonus_amount
        for kind in ResourceKind:
            self.amounts[kind] = min(max(self.amount(kind), 0.0), self.capacity)
        return self.capacity

    def snapshot(self) -> dict[ResourceKind, float]:
        return {kind: self.amount(kind) for kind in ResourceKind}
