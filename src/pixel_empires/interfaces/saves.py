"""Save Repository Protocol Interface."""

from typing import Any, Protocol

from pixel_empires.domain.models import EmpireID
from pixel_empires.savegame import SaveManifest, SaveMetadata


class ISaveRepository(Protocol):
    """Protocol for numbered save slot storage.

    Slots are 1-based. Implementations raise ``ValueError`` for a slot outside
    the configured range and ``FileNotFoundError`` when loading an empty slot.
    """

    slots: int

    def save(self, empire_id: EmpireID, slot: int, manifest: SaveManifest) -> Any:
        """Write a manifest into a slot, replacing any previous save.

        Args:
            empire_id: Owner of the save
            slot: Slot number
            manifest: Manifest to persist

        Returns:
            Backend-specific locator of the stored save
        """
        ...

    def load(self, empire_id: EmpireID, slot: int) -> SaveManifest:
        """Load the manifest stored in a slot."""
        ...

    def list_slots(self, empire_id: EmpireID) -> dict[int, SaveMetadata | None]:
        """Return metadata per slot, ``None`` for empty slots."""
        ...

    def delete(self, empire_id: EmpireID, slot: int) -> None:
        """Clear a slot."""
        ...
