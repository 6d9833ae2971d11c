"""
Cognitive Engine Storage Backend Interface

Abstract base class for the durable store behind the recall and
insight engines.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from pathlib import Path


def _default_base_dir() -> Path:
    home = os.getenv("COGNITIVE_ENGINE_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".cognitive-engine"


@dataclass
class StorageConfig:
    """Configuration for storage backends."""
    base_dir: Path = field(default_factory=_default_base_dir)
    namespace: str = "default"
    db_name: str = "cognitive.db"
    in_memory: bool = False     # Private, non-persistent database (tests)


@dataclass(frozen=True)
class MemoryRecord:
    """Snapshot of a row in the memories table."""
    id: int
    content: str
    tags: str                   # JSON array text, decoded by the recall engine
    created_at: str


@dataclass(frozen=True)
class LessonRecord:
    """Snapshot of a row in the lessons table."""
    id: int
    category: str
    pattern: str
    outcome: str
    created_at: str


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Pattern arguments use case-sensitive substring semantics: a stored
    value matches when it contains the pattern contiguously. Reads never
    mutate and return immutable record snapshots, newest first.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()
        self._ensure_storage()

    @abstractmethod
    def _ensure_storage(self) -> None:
        """Ensure storage location exists."""
        pass

    # ========================================================================
    # Memory Operations
    # ========================================================================

    @abstractmethod
    def insert_memory(self, content: str, tags_blob: str) -> int:
        """Insert a memory and return its new id."""
        pass

    @abstractmethod
    def find_memories_by_tag_pattern(
        self,
        pattern: str,
        limit: int,
        fold_case: bool = False
    ) -> List[MemoryRecord]:
        """Memories whose tags blob contains the pattern.

        With fold_case the stored value is lower-cased before matching;
        the caller is expected to pass an already lower-cased pattern.
        """
        pass

    @abstractmethod
    def find_memories_by_content_pattern(
        self,
        pattern: str,
        limit: int,
        fold_case: bool = False
    ) -> List[MemoryRecord]:
        pass

    @abstractmethod
    def find_recent_memories(self, limit: int) -> List[MemoryRecord]:
        pass

    @abstractmethod
    def delete_memory_by_id(self, memory_id: int) -> int:
        """Delete one memory, returning the number of rows removed."""
        pass

    @abstractmethod
    def delete_memories_by_tag_pattern(self, pattern: str) -> int:
        pass

    @abstractmethod
    def delete_all_memories(self) -> int:
        pass

    # ========================================================================
    # Lesson Operations
    # ========================================================================

    @abstractmethod
    def insert_lesson(self, category: str, pattern: str, outcome: str) -> int:
        """Insert a lesson and return its new id."""
        pass

    @abstractmethod
    def count_lesson_patterns_by_outcome(
        self,
        category_pattern: str,
        outcome: str,
        limit: int
    ) -> List[Tuple[str, int]]:
        """
        Count lessons per distinct pattern text.

        Returns (pattern, count) pairs ordered by count descending.
        """
        pass

    @abstractmethod
    def find_lessons_by_category_pattern(self, pattern: str, limit: int) -> List[LessonRecord]:
        pass

    @abstractmethod
    def delete_lesson_by_id(self, lesson_id: int) -> int:
        pass

    @abstractmethod
    def delete_lessons_by_category_pattern(self, pattern: str) -> int:
        pass

    @abstractmethod
    def delete_all_lessons(self) -> int:
        pass

    # ========================================================================
    # Utility Methods
    # ========================================================================

    @abstractmethod
    def compact_and_report_size(self) -> Tuple[int, int]:
        """Reclaim free space; return (before_bytes, after_bytes)."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics."""
        pass

    def close(self) -> None:
        pass

    def get_storage_path(self) -> Path:
        """Get the base storage path for this namespace."""
        return self.config.base_dir / self.config.namespace
