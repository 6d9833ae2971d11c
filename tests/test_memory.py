"""
Memory Engine Tests

- remember: normalization, truncation, tag round-trip
- recall: tag phase, keyword fallback, deduplication
- forget / clear
"""

import pytest

from cognitive_engine.errors import DeserializationError, ValidationError
from cognitive_engine.memory import compress, encode_tags, decode_tags, MAX_CONTENT_LENGTH


# ============================================================================
# Helpers
# ============================================================================

class TestCompress:
    def test_collapses_whitespace(self):
        assert compress("  hello \n\t  world  ") == "hello world"

    def test_truncates_with_marker(self):
        result = compress("a" * 600)
        assert result == "a" * MAX_CONTENT_LENGTH + "..."

    def test_exact_cap_is_not_marked(self):
        assert compress("b" * MAX_CONTENT_LENGTH) == "b" * MAX_CONTENT_LENGTH


class TestTagsBlob:
    def test_round_trip(self):
        tags = ["greeting", "한국어", "with \"quotes\"", ""]
        assert decode_tags(encode_tags(tags)) == tags

    def test_non_ascii_is_stored_raw(self):
        assert "한국어" in encode_tags(["한국어"])

    def test_invalid_json_raises(self):
        with pytest.raises(DeserializationError):
            decode_tags("not json")

    def test_non_list_raises(self):
        with pytest.raises(DeserializationError):
            decode_tags('{"tag": "x"}')
        with pytest.raises(DeserializationError):
            decode_tags("[1, 2]")


# ============================================================================
# Remember
# ============================================================================

class TestRemember:
    def test_stores_normalized_content(self, memory):
        result = memory.remember("  hello   world  ", ["greeting"])

        assert isinstance(result["id"], int)
        assert result["message"] == f"Stored memory #{result['id']} with 11 chars"

        recent = memory.get_recent_memories()["memories"]
        assert recent[0]["content"] == "hello world"
        assert recent[0]["tags"] == ["greeting"]

    def test_long_content_reports_capped_length(self, memory):
        result = memory.remember("word " * 300)
        assert result["message"].endswith(f"with {MAX_CONTENT_LENGTH + 3} chars")

    def test_tags_default_to_empty(self, memory):
        memory.remember("no tags here")
        assert memory.get_recent_memories()["memories"][0]["tags"] == []

    def test_rejects_bad_tags(self, memory):
        with pytest.raises(ValidationError) as exc:
            memory.remember("content", tags="not-a-list")
        assert exc.value.field == "tags"

    def test_unencodable_text_is_rejected(self, memory, storage):
        with pytest.raises(ValidationError):
            memory.remember("bad \ud800 text")
        assert storage.get_stats()["memory_count"] == 0


# ============================================================================
# Recall
# ============================================================================

class TestRecall:
    def test_finds_by_tag_and_by_keyword(self, memory):
        memory.remember("  hello   world  ", ["greeting"])

        by_tag = memory.recall("greeting")["memories"]
        by_keyword = memory.recall("hello")["memories"]

        assert [m["content"] for m in by_tag] == ["hello world"]
        assert [m["content"] for m in by_keyword] == ["hello world"]

    def test_result_shape(self, memory):
        memory.remember("shape check", ["shape"])
        entry = memory.recall("shape")["memories"][0]
        assert set(entry) == {"id", "content", "tags", "date"}

    def test_query_is_case_folded(self, memory):
        memory.remember("Deploy with Docker Compose", ["DevOps"])

        assert len(memory.recall("DOCKER")["memories"]) == 1
        assert len(memory.recall("devops")["memories"]) == 1

    def test_match_in_tags_and_content_appears_once(self, memory):
        memory.remember("python is great", ["python"])
        results = memory.recall("python")["memories"]
        assert len(results) == 1

    def test_tag_hits_come_before_keyword_hits(self, memory):
        keyword_only = memory.remember("notes about redis")["id"]
        tagged = memory.remember("cache layer", ["redis"])["id"]

        results = memory.recall("redis")["memories"]
        assert [m["id"] for m in results] == [tagged, keyword_only]

    def test_keyword_phase_skipped_when_tags_fill_limit(self, memory):
        memory.remember("redis keyword only")
        memory.remember("first", ["redis"])
        memory.remember("second", ["redis"])

        results = memory.recall("redis", limit=2)["memories"]
        assert [m["content"] for m in results] == ["second", "first"]

    def test_result_is_not_refilled_after_dedup(self, memory):
        memory.remember("x older keyword match")
        memory.remember("x newer tagged match", ["x"])

        # Keyword phase gets one slot and spends it on the tagged memory again
        results = memory.recall("x", limit=2)["memories"]
        assert [m["content"] for m in results] == ["x newer tagged match"]

    def test_no_matches(self, memory):
        memory.remember("something")
        assert memory.recall("absent") == {"memories": []}

    def test_malformed_tags_blob_is_an_error(self, memory, storage):
        storage.insert_memory("broken row", "not json")
        with pytest.raises(DeserializationError):
            memory.recall("broken")

    def test_invalid_limit(self, memory):
        with pytest.raises(ValidationError):
            memory.recall("x", limit=0)

    def test_limit_beyond_integer_range(self, memory):
        with pytest.raises(ValidationError) as exc:
            memory.recall("x", limit=2 ** 64)
        assert exc.value.field == "limit"

    def test_recent_memories(self, memory):
        for i in range(3):
            memory.remember(f"entry {i}")

        recent = memory.get_recent_memories(limit=2)["memories"]
        assert [m["content"] for m in recent] == ["entry 2", "entry 1"]


# ============================================================================
# Forget / Clear
# ============================================================================

class TestForget:
    def test_missing_id(self, memory):
        assert memory.forget(id=999) == {"deleted": 0, "message": "No matching memories found"}

    def test_id_beyond_integer_range(self, memory):
        with pytest.raises(ValidationError) as exc:
            memory.forget(id=2 ** 64)
        assert exc.value.field == "id"

    def test_by_id(self, memory):
        memory_id = memory.remember("to delete")["id"]
        result = memory.forget(id=memory_id)

        assert result == {"deleted": 1, "message": "Deleted 1 memory(s)"}
        assert memory.get_recent_memories()["memories"] == []

    def test_id_takes_precedence_over_tag(self, memory):
        keep = memory.remember("keep", ["temp"])["id"]
        drop = memory.remember("drop", ["temp"])["id"]

        assert memory.forget(id=drop, tag="temp")["deleted"] == 1
        assert [m["id"] for m in memory.get_recent_memories()["memories"]] == [keep]

    def test_by_tag(self, memory):
        memory.remember("a", ["project-x"])
        memory.remember("b", ["project-x", "urgent"])
        memory.remember("c", ["other"])

        result = memory.forget(tag="project-x")
        assert result["deleted"] == 2
        assert result["message"] == "Deleted 2 memory(s)"

    def test_no_criteria_deletes_nothing(self, memory):
        memory.remember("safe")
        assert memory.forget()["deleted"] == 0
        assert len(memory.get_recent_memories()["memories"]) == 1

    def test_clear_is_idempotent(self, memory):
        memory.remember("one")
        memory.remember("two")

        assert memory.clear_memories() == {"deleted": 2, "message": "Cleared all memories (2 deleted)"}
        assert memory.clear_memories()["deleted"] == 0
