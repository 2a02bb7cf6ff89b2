"""Save slot model.

One row per (empire, slot).  The manifest is stored as JSON text; the summary
columns duplicate a few metadata fields so slot listings never parse payloads.
"""

from sqlalchemy import CheckConstraint, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class SaveSlot(Base, TimestampMixin):
    """A persisted save of one empire in one numbered slot.

    Attributes:
        id: Primary key
        empire_id: Empire the save belongs to
        slot: 1-based slot number
        player_name: Empire name at save time
        turn: Turn counter at save time
        payload: Serialized save manifest (JSON)
    """

    __tablename__ = "save_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    empire_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    slot: Mapped[int] = mapped_column(Integer, nullable=False)
    player_name: Mapped[str] = mapped_column(String, nullable=False)
    turn: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("empire_id", "slot", name="uq_save_slots_empire_slot"),
        CheckConstraint("slot >= 1", name="ck_save_slots_slot_positive"),
    )

    def __repr__(self) -> str:
        return f"<SaveSlot(empire_id={self.empire_id}, slot={self.slot}, turn={self.turn})>"
