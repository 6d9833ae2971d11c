"""
Cognitive Engine Storage Backends

- StorageBackend: the store contract consumed by the engines
- SQLiteStorage: embedded SQLite implementation
"""

from .base import StorageBackend, StorageConfig, MemoryRecord, LessonRecord
from .sqlite_storage import SQLiteStorage

__all__ = [
    "StorageBackend",
    "StorageConfig",
    "MemoryRecord",
    "LessonRecord",
    "SQLiteStorage",
]
