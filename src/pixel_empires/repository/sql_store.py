"""SQLAlchemy-backed save slot repository."""

from __future__ import annotations

import json

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from pixel_empires.domain import models as dm
from pixel_empires.models import SaveSlot
from pixel_empires.savegame import SaveManifest, SaveMetadata


class SqlSaveRepository:
    """Persist save manifests in the ``save_slots`` table."""

    def __init__(self, session_factory: sessionmaker[Session], *, slots: int = 3) -> None:
        if slots < 1:
            raise ValueError("slots must be at least 1")
        self.session_factory = session_factory
        self.slots = slots

    def _check_slot(self, slot: int) -> None:
        if not 1 <= slot <= self.slots:
            raise ValueError(f"slot must be between 1 and {self.slots}, got {slot}")

    @staticmethod
    def _find(session: Session, empire_id: dm.EmpireID, slot: int) -> SaveSlot | None:
        stmt = select(SaveSlot).where(
            SaveSlot.empire_id == int(empire_id), SaveSlot.slot == slot
        )
        return session.scalars(stmt).one_or_none()

    def save(self, empire_id: dm.EmpireID, slot: int, manifest: SaveManifest) -> int:
        """Upsert a slot and return its row id."""

        self._check_slot(slot)
        manifest.metadata.slot = slot
        payload = json.dumps(manifest.model_dump(mode="json"), sort_keys=True)
        with self.session_factory() as session:
            row = self._find(session, empire_id, slot)
            if row is None:
                row = SaveSlot(empire_id=int(empire_id), slot=slot, player_name="", payload="")
                session.add(row)
            row.player_name = manifest.metadata.player_name
            row.turn = manifest.metadata.turn
            row.payload = payload
            session.commit()
            return row.id

    def load(self, empire_id: dm.EmpireID, slot: int) -> SaveManifest:
        """Load a slot; raises ``FileNotFoundError`` when it is empty."""

        self._check_slot(slot)
        with self.session_factory() as session:
            row = self._find(session, empire_id, slot)
            if row is None:
                raise FileNotFoundError(f"save slot {slot} is empty")
            return SaveManifest.model_validate(json.loads(row.payload))

    def list_slots(self, empire_id: dm.EmpireID) -> dict[int, SaveMetadata | None]:
        listing: dict[int, SaveMetadata | None] = dict.fromkeys(range(1, self.slots + 1))
        with self.session_factory() as session:
            rows = session.scalars(
                select(SaveSlot).where(SaveSlot.empire_id == int(empire_id))
            ).all()
            for row in rows:
                if row.slot in listing:
                    listing[row.slot] = SaveManifest.model_validate(
                        json.loads(row.payload)
                    ).metadata
        return listing

    def delete(self, empire_id: dm.EmpireID, slot: int) -> None:
        self._check_slot(slot)
        with self.session_factory() as session:
            row = self._find(session, empire_id, slot)
            if row is not None:
                session.delete(row)
                session.commit()
