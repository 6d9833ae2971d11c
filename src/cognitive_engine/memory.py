"""
Cognitive Engine Memory System

Long-term memory of free-text notes with optional tags.

Recall is a two-phase search over the store:
1. Tag phase: memories whose tags contain the query
2. Keyword phase: only when the tag phase came up short, memories whose
   content contains the query

Results are concatenated and deduplicated by id, tag hits first.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional, List, Dict, Any

import structlog

from .errors import DeserializationError
from .storage import StorageBackend, MemoryRecord
from .validation import require_str, require_limit, optional_id, string_list

logger = structlog.get_logger(__name__)

MAX_CONTENT_LENGTH = 500
TRUNCATION_MARKER = "..."

_WHITESPACE = re.compile(r"\s+")


def compress(text: str) -> str:
    """Collapse whitespace runs and cap the length."""
    compressed = _WHITESPACE.sub(" ", text).strip()
    if len(compressed) > MAX_CONTENT_LENGTH:
        compressed = compressed[:MAX_CONTENT_LENGTH] + TRUNCATION_MARKER
    return compressed


def encode_tags(tags: List[str]) -> str:
    # Non-ASCII tags stay raw so substring search sees the real characters
    return json.dumps(list(tags), ensure_ascii=False)


def decode_tags(blob: str) -> List[str]:
    """Parse a stored tags blob, refusing anything but a JSON list of strings."""
    try:
        tags = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Malformed tags blob {blob!r}: {e}") from e
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise DeserializationError(f"Tags blob is not a list of strings: {blob!r}")
    return tags


@dataclass
class Memory:
    """A single memory entry."""
    id: int
    content: str
    tags: List[str]
    created: str

    @classmethod
    def from_record(cls, record: MemoryRecord) -> "Memory":
        return cls(
            id=record.id,
            content=record.content,
            tags=decode_tags(record.tags),
            created=record.created_at
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "tags": self.tags,
            "date": self.created
        }


class MemoryEngine:
    """Stores memories and runs recall over an injected store."""

    def __init__(self, storage: StorageBackend):
        self._storage = storage

    # =========================================================================
    # Write
    # =========================================================================

    def remember(self, content: str, tags: Optional[List[str]] = None) -> Dict[str, Any]:
        """Save to long-term memory."""
        content = require_str(content, "content")
        tag_list = string_list(tags, "tags")

        compressed = compress(content)
        memory_id = self._storage.insert_memory(compressed, encode_tags(tag_list))
        logger.info("memory_stored", memory_id=memory_id, length=len(compressed), tags=tag_list)

        return {
            "id": memory_id,
            "message": f"Stored memory #{memory_id} with {len(compressed)} chars"
        }

    # =========================================================================
    # Read
    # =========================================================================

    def recall(self, query: str, limit: int = 5) -> Dict[str, Any]:
        """
        Search memories by tag, falling back to content keywords.

        The keyword phase asks for the remaining slots without excluding
        tag hits, so duplicates are removed afterwards and the result may
        hold fewer than ``limit`` entries even when more matches exist.
        It is never re-capped after deduplication.
        """
        query = require_str(query, "query").lower()
        limit = require_limit(limit)

        results = self._storage.find_memories_by_tag_pattern(query, limit, fold_case=True)
        if len(results) < limit:
            results = results + self._storage.find_memories_by_content_pattern(
                query, limit - len(results), fold_case=True
            )

        seen = set()
        unique: List[MemoryRecord] = []
        for record in results:
            if record.id not in seen:
                seen.add(record.id)
                unique.append(record)

        logger.debug("memories_recalled", query=query, found=len(unique))
        return {"memories": [Memory.from_record(r).to_dict() for r in unique]}

    def get_recent_memories(self, limit: int = 10) -> Dict[str, Any]:
        limit = require_limit(limit)
        records = self._storage.find_recent_memories(limit)
        return {"memories": [Memory.from_record(r).to_dict() for r in records]}

    # =========================================================================
    # Delete
    # =========================================================================

    def forget(self, id: Optional[int] = None, tag: Optional[str] = None) -> Dict[str, Any]:
        """Delete one memory by id, or every memory whose tags contain ``tag``."""
        memory_id = optional_id(id)
        deleted = 0

        if memory_id is not None:
            deleted = self._storage.delete_memory_by_id(memory_id)
        elif tag:
            deleted = self._storage.delete_memories_by_tag_pattern(require_str(tag, "tag"))

        if deleted:
            logger.info("memories_forgotten", deleted=deleted, memory_id=memory_id, tag=tag)

        return {
            "deleted": deleted,
            "message": f"Deleted {deleted} memory(s)" if deleted > 0 else "No matching memories found"
        }

    def clear_memories(self) -> Dict[str, Any]:
        deleted = self._storage.delete_all_memories()
        logger.info("memories_cleared", deleted=deleted)
        return {
            "deleted": deleted,
            "message": f"Cleared all memories ({deleted} deleted)"
        }
