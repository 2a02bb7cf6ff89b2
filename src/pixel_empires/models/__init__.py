"""SQLAlchemy models for Pixel Empires persistence."""

from .base import Base, TimestampMixin
from .save_slot import SaveSlot

__all__ = ["Base", "SaveSlot", "TimestampMixin"]
