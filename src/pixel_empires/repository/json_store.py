"""JSON-based save slot repository for Pixel Empires."""

from __future__ import annotations

import json
from pathlib import Path

from pixel_empires.domain import models as dm
from pixel_empires.savegame import SaveManifest, SaveMetadata


class JsonSaveRepository:
    """Persist save manifests as JSON files, one directory per empire."""

    def __init__(self, base_path: Path, *, slots: int = 3) -> None:
        if slots < 1:
            raise ValueError("slots must be at least 1")
        self.base_path = base_path
        self.slots = slots
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _check_slot(self, slot: int) -> None:
        if not 1 <= slot <= self.slots:
            raise ValueError(f"slot must be between 1 and {self.slots}, got {slot}")

    def _path_for(self, empire_id: dm.EmpireID, slot: int) -> Path:
        return self.base_path / f"empire_{int(empire_id)}" / f"slot_{slot}.json"

    def save(self, empire_id: dm.EmpireID, slot: int, manifest: SaveManifest) -> Path:
        """Write a manifest into a slot, replacing whatever was there."""

        self._check_slot(slot)
        path = self._path_for(empire_id, slot)
        path.parent.mkdir(parents=True, exist_ok=True)
        manifest.metadata.slot = slot
        payload = json.dumps(manifest.model_dump(mode="json"), indent=2, sort_keys=True)
        path.write_text(payload, encoding="utf-8")
        return path

    def load(self, empire_id: dm.EmpireID, slot: int) -> SaveManifest:
        """Load a slot; raises ``FileNotFoundError`` when it is empty."""

        self._check_slot(slot)
        path = self._path_for(empire_id, slot)
        if not path.exists():
            raise FileNotFoundError(f"save slot {slot} is empty")
        return _read(path)

    def list_slots(self, empire_id: dm.EmpireID) -> dict[int, SaveMetadata | None]:
        """Return metadata for every slot, ``None`` where the slot is empty."""

        listing: dict[int, SaveMetadata | None] = {}
        for slot in range(1, self.slots + 1):
            path = self._path_for(empire_id, slot)
            if path.exists():
                listing[slot] = _read(path).metadata
            else:
                listing[slot] = None
        return listing

    def delete(self, empire_id: dm.EmpireID, slot: int) -> None:
        """Remove a slot if it exists."""

        self._check_slot(slot)
        path = self._path_for(empire_id, slot)
        if path.exists():
            path.unlink()


def _read(path: Path) -> SaveManifest:
    return SaveManifest.model_validate(json.loads(path.read_text(encoding="utf-8")))
