"""Record store module for tablekv."""

from .base import RecordStore
from .memory import MemoryRecordStore
from .sqlite import SQLiteRecordStore

__all__ = ["RecordStore", "MemoryRecordStore", "SQLiteRecordStore"]
