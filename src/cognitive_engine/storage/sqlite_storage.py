"""
Cognitive Engine SQLite Storage Backend

Embedded SQLite implementation of the store contract.
"""

import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime
from contextlib import contextmanager

import structlog

from ..errors import StorageError, ValidationError
from .base import StorageBackend, StorageConfig, MemoryRecord, LessonRecord

logger = structlog.get_logger(__name__)


def _fold(value: Optional[str]) -> Optional[str]:
    # Same folding as str.lower on the query side; SQLite lower() is ASCII-only
    return value.lower() if value is not None else None


class SQLiteStorage(StorageBackend):
    """
    SQLite database storage backend.

    One connection per instance. Every statement runs under a re-entrant
    lock, so writers are serialized and VACUUM holds exclusive access for
    its whole duration.

    Schema:
        memories: id, content, tags, created_at
        lessons: id, category, pattern, outcome, created_at

    Substring matching uses instr() rather than LIKE: it is case-sensitive
    unless a memory search asks for fold_case, and treats '%' and '_' in
    caller input literally.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        super().__init__(config)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._init_database()

    def _ensure_storage(self) -> None:
        """Create storage directory if it doesn't exist."""
        if not self.config.in_memory:
            self.get_storage_path().mkdir(parents=True, exist_ok=True)

    def _db_path(self) -> Path:
        """Get database file path."""
        return self.get_storage_path() / self.config.db_name

    @contextmanager
    def _get_connection(self):
        """Get the locked database connection, wrapping driver errors."""
        with self._lock:
            try:
                if self._conn is None:
                    target = ":memory:" if self.config.in_memory else str(self._db_path())
                    self._conn = sqlite3.connect(target, check_same_thread=False)
                    self._conn.row_factory = sqlite3.Row
                    self._conn.create_function("fold", 1, _fold, deterministic=True)
                yield self._conn
            except sqlite3.Error as e:
                if self._conn is not None:
                    self._conn.rollback()
                logger.error("storage_failure", error=str(e))
                raise StorageError(f"Storage failure: {e}") from e
            except (OverflowError, UnicodeEncodeError) as e:
                # Parameter the driver cannot bind (e.g. lone surrogates)
                if self._conn is not None:
                    self._conn.rollback()
                logger.warning("unbindable_value", error=str(e))
                raise ValidationError(f"Value cannot be stored: {e}") from e

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS memories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL,
                    tags TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS lessons (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    category TEXT NOT NULL,
                    pattern TEXT NOT NULL,
                    outcome TEXT NOT NULL CHECK (outcome IN ('success', 'failure')),
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_memories_tags ON memories(tags);
                CREATE INDEX IF NOT EXISTS idx_lessons_category ON lessons(category);
            """)
            conn.commit()

    def _execute_write(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self._get_connection() as conn:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor

    # ========================================================================
    # Memory Operations
    # ========================================================================

    def insert_memory(self, content: str, tags_blob: str) -> int:
        cursor = self._execute_write(
            "INSERT INTO memories (content, tags, created_at) VALUES (?, ?, ?)",
            (content, tags_blob, datetime.now().isoformat())
        )
        return cursor.lastrowid

    def find_memories_by_tag_pattern(
        self,
        pattern: str,
        limit: int,
        fold_case: bool = False
    ) -> List[MemoryRecord]:
        return self._find_memories_matching("tags", pattern, limit, fold_case)

    def find_memories_by_content_pattern(
        self,
        pattern: str,
        limit: int,
        fold_case: bool = False
    ) -> List[MemoryRecord]:
        return self._find_memories_matching("content", pattern, limit, fold_case)

    def _find_memories_matching(
        self,
        column: str,
        pattern: str,
        limit: int,
        fold_case: bool
    ) -> List[MemoryRecord]:
        target = f"fold({column})" if fold_case else column
        with self._get_connection() as conn:
            rows = conn.execute(f"""
                SELECT id, content, tags, created_at FROM memories
                WHERE instr({target}, ?) > 0
                ORDER BY id DESC
                LIMIT ?
            """, (pattern, limit)).fetchall()
            return [self._row_to_memory(row) for row in rows]

    def find_recent_memories(self, limit: int) -> List[MemoryRecord]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, content, tags, created_at FROM memories
                ORDER BY id DESC
                LIMIT ?
            """, (limit,)).fetchall()
            return [self._row_to_memory(row) for row in rows]

    def delete_memory_by_id(self, memory_id: int) -> int:
        return self._execute_write(
            "DELETE FROM memories WHERE id = ?", (memory_id,)
        ).rowcount

    def delete_memories_by_tag_pattern(self, pattern: str) -> int:
        return self._execute_write(
            "DELETE FROM memories WHERE instr(tags, ?) > 0", (pattern,)
        ).rowcount

    def delete_all_memories(self) -> int:
        return self._execute_write("DELETE FROM memories").rowcount

    def _row_to_memory(self, row: sqlite3.Row) -> MemoryRecord:
        return MemoryRecord(
            id=row["id"],
            content=row["content"],
            tags=row["tags"],
            created_at=row["created_at"]
        )

    # ========================================================================
    # Lesson Operations
    # ========================================================================

    def insert_lesson(self, category: str, pattern: str, outcome: str) -> int:
        cursor = self._execute_write(
            "INSERT INTO lessons (category, pattern, outcome, created_at) VALUES (?, ?, ?, ?)",
            (category, pattern, outcome, datetime.now().isoformat())
        )
        return cursor.lastrowid

    def count_lesson_patterns_by_outcome(
        self,
        category_pattern: str,
        outcome: str,
        limit: int
    ) -> List[Tuple[str, int]]:
        with self._get_connection() as conn:
            # Equal counts keep the pattern that was first recorded earliest
            rows = conn.execute("""
                SELECT pattern, COUNT(*) AS count FROM lessons
                WHERE instr(category, ?) > 0 AND outcome = ?
                GROUP BY pattern
                ORDER BY count DESC, MIN(id) ASC
                LIMIT ?
            """, (category_pattern, outcome, limit)).fetchall()
            return [(row["pattern"], row["count"]) for row in rows]

    def find_lessons_by_category_pattern(self, pattern: str, limit: int) -> List[LessonRecord]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, category, pattern, outcome, created_at FROM lessons
                WHERE instr(category, ?) > 0
                ORDER BY id DESC
                LIMIT ?
            """, (pattern, limit)).fetchall()
            return [self._row_to_lesson(row) for row in rows]

    def delete_lesson_by_id(self, lesson_id: int) -> int:
        return self._execute_write(
            "DELETE FROM lessons WHERE id = ?", (lesson_id,)
        ).rowcount

    def delete_lessons_by_category_pattern(self, pattern: str) -> int:
        return self._execute_write(
            "DELETE FROM lessons WHERE instr(category, ?) > 0", (pattern,)
        ).rowcount

    def delete_all_lessons(self) -> int:
        return self._execute_write("DELETE FROM lessons").rowcount

    def _row_to_lesson(self, row: sqlite3.Row) -> LessonRecord:
        return LessonRecord(
            id=row["id"],
            category=row["category"],
            pattern=row["pattern"],
            outcome=row["outcome"],
            created_at=row["created_at"]
        )

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def _size_bytes(self, conn: sqlite3.Connection) -> int:
        page_count = conn.execute("PRAGMA page_count").fetchone()[0]
        page_size = conn.execute("PRAGMA page_size").fetchone()[0]
        return page_count * page_size

    def compact_and_report_size(self) -> Tuple[int, int]:
        """Run VACUUM and report the database size around it."""
        with self._get_connection() as conn:
            before = self._size_bytes(conn)
            conn.execute("VACUUM")
            after = self._size_bytes(conn)
        logger.info("database_vacuumed", before_bytes=before, after_bytes=after)
        return before, after

    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics."""
        with self._get_connection() as conn:
            memory_count = conn.execute(
                "SELECT COUNT(*) FROM memories"
            ).fetchone()[0]
            lesson_count = conn.execute(
                "SELECT COUNT(*) FROM lessons"
            ).fetchone()[0]

            return {
                "backend": "sqlite",
                "namespace": self.config.namespace,
                "storage_path": ":memory:" if self.config.in_memory else str(self._db_path()),
                "memory_count": memory_count,
                "lesson_count": lesson_count,
                "total_size_bytes": self._size_bytes(conn)
            }

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
