"""Record persistence."""
from .base import Movement, RecordStore
from .sqlite_store import SqliteRecordStore

__all__ = ["Movement", "RecordStore", "SqliteRecordStore"]
