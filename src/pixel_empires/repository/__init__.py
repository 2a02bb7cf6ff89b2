"""Save slot repositories."""

from .json_store import JsonSaveRepository
from .sql_store import SqlSaveRepository

__all__ = ["JsonSaveRepository", "SqlSaveRepository"]
