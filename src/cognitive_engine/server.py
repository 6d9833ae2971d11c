#!/usr/bin/env python3
"""
Cognitive Engine - Persistent Memory and Heuristic Reasoning for AI Assistants

An MCP server that provides:
- Long-term memory with tag-then-keyword recall
- Lessons learned from successes and failures, aggregated into insights
- Stepwise problem decomposition (think)
- Rule-based answer verification (verify)

Usage:
    python -m cognitive_engine.server [--namespace NAME] [--storage-dir PATH]
                                      [--log-level LEVEL] [--log-format console|json]

Every tool returns its result as JSON text. Failures come back as a tagged
result, e.g. {"error": "ValidationError", "message": "...", "field": "outcome"}.
"""

import argparse
import inspect
import json
import os
from pathlib import Path
from typing import Optional, List, Dict, Any, Callable

import structlog
from mcp.server.fastmcp import FastMCP

from .errors import CognitiveEngineError, InternalError, NotFoundError, ValidationError
from .insights import InsightEngine
from .logging_config import setup_logging
from .memory import MemoryEngine
from .storage import StorageBackend, StorageConfig, SQLiteStorage
from .think import think as think_pipeline, DEFAULT_DEPTH
from .verify import verify as verify_pipeline

logger = structlog.get_logger(__name__)


def format_size(num_bytes: int) -> str:
    """Human-readable size: 512B, 12.3KB, 1.5MB."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f}KB"
    return f"{num_bytes / (1024 * 1024):.1f}MB"


# ============================================================================
# Cognitive Engine
# ============================================================================

class CognitiveEngine:
    """
    Owns the store and routes named operations to the engines.

    The store is constructed here (or injected) and handed to each engine;
    there is no process-wide database handle.
    """

    def __init__(self, storage: Optional[StorageBackend] = None, config: Optional[StorageConfig] = None):
        self.storage = storage or SQLiteStorage(config)
        self.memory = MemoryEngine(self.storage)
        self.insights = InsightEngine(self.storage)

        self._operations: Dict[str, Callable[..., Dict[str, Any]]] = {
            "remember": self.memory.remember,
            "recall": self.memory.recall,
            "get_recent_memories": self.memory.get_recent_memories,
            "forget": self.memory.forget,
            "clear_memories": self.memory.clear_memories,
            "learn": self.insights.learn,
            "get_insights": self.insights.get_insights,
            "get_lessons": self.insights.get_lessons,
            "forget_lesson": self.insights.forget_lesson,
            "clear_lessons": self.insights.clear_lessons,
            "vacuum_db": self.vacuum_db,
            "think": think_pipeline,
            "verify": verify_pipeline,
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._operations)

    def vacuum_db(self) -> Dict[str, Any]:
        """Compact the database and report sizes."""
        before, after = self.storage.compact_and_report_size()
        return {
            "before": format_size(before),
            "after": format_size(after),
            "saved": format_size(max(0, before - after))
        }

    def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a named operation.

        Every failure is returned as a tagged dict instead of being raised:
        taxonomy errors keep their own type, anything else is reported as
        InternalError. Arguments whose value is None are treated as omitted
        so operation defaults apply.
        """
        arguments = {k: v for k, v in (arguments or {}).items() if v is not None}
        try:
            operation = self._operations.get(name)
            if operation is None:
                raise NotFoundError(f"Unknown tool: {name}")
            try:
                bound = inspect.signature(operation).bind(**arguments)
            except TypeError as e:
                raise ValidationError(f"Invalid arguments for {name}: {e}") from e
            return operation(*bound.args, **bound.kwargs)
        except CognitiveEngineError as e:
            logger.warning("tool_failed", tool=name, error=type(e).__name__, message=e.message)
            return e.to_dict()
        except Exception as e:
            logger.exception("tool_crashed", tool=name)
            return InternalError(f"Unexpected failure in {name}: {type(e).__name__}: {e}").to_dict()

    def close(self) -> None:
        self.storage.close()


# ============================================================================
# MCP Server
# ============================================================================

mcp = FastMCP("cognitive-engine")
ctx: CognitiveEngine = None  # Initialized in main()


def _call(name: str, **arguments: Any) -> str:
    return json.dumps(ctx.dispatch(name, arguments), indent=2, ensure_ascii=False)


# ============================================================================
# Memory Tools
# ============================================================================

@mcp.tool()
def remember(content: str, tags: Optional[List[str]] = None) -> str:
    """
    Store information in long-term memory. Retrieve it later with recall.

    Args:
        content: What to remember (whitespace is collapsed, capped at 500 chars)
        tags: Tags used for searching (optional)
    """
    return _call("remember", content=content, tags=tags)


@mcp.tool()
def recall(query: str, limit: int = 5) -> str:
    """
    Search stored memories by tag, then by keyword.

    Args:
        query: Tag or keyword to search for
        limit: Maximum results (default 5)
    """
    return _call("recall", query=query, limit=limit)


@mcp.tool()
def get_recent_memories(limit: int = 10) -> str:
    """
    List the most recently stored memories.

    Args:
        limit: Maximum results (default 10)
    """
    return _call("get_recent_memories", limit=limit)


@mcp.tool()
def forget(id: Optional[int] = None, tag: Optional[str] = None) -> str:
    """
    Delete a memory by id, or all memories carrying a tag.

    Args:
        id: Memory id
        tag: Delete every memory whose tags contain this text
    """
    return _call("forget", id=id, tag=tag)


@mcp.tool()
def clear_memories() -> str:
    """Delete all memories."""
    return _call("clear_memories")


# ============================================================================
# Lesson Tools
# ============================================================================

@mcp.tool()
def learn(category: str, pattern: str, outcome: str) -> str:
    """
    Record a success or failure pattern. Query it later with get_insights.

    Args:
        category: Category (e.g. coding, math, logic)
        pattern: Description of the pattern
        outcome: 'success' or 'failure'
    """
    return _call("learn", category=category, pattern=pattern, outcome=outcome)


@mcp.tool()
def get_insights(category: str, limit: int = 5) -> str:
    """
    Show learned patterns and the success rate for a category.

    Args:
        category: Category to look up
        limit: Maximum patterns per outcome (default 5)
    """
    return _call("get_insights", category=category, limit=limit)


@mcp.tool()
def get_lessons(category: str, limit: int = 10) -> str:
    """
    List raw lessons for a category, newest first.

    Args:
        category: Category to look up
        limit: Maximum results (default 10)
    """
    return _call("get_lessons", category=category, limit=limit)


@mcp.tool()
def forget_lesson(id: Optional[int] = None, category: Optional[str] = None) -> str:
    """
    Delete a lesson by id, or all lessons in matching categories.

    Args:
        id: Lesson id
        category: Delete every lesson whose category contains this text
    """
    return _call("forget_lesson", id=id, category=category)


@mcp.tool()
def clear_lessons() -> str:
    """Delete all lessons."""
    return _call("clear_lessons")


# ============================================================================
# Maintenance Tools
# ============================================================================

@mcp.tool()
def vacuum_db() -> str:
    """Compact the database and report how much space was reclaimed."""
    return _call("vacuum_db")


# ============================================================================
# Reasoning Tools
# ============================================================================

@mcp.tool()
def think(problem: str, depth: int = DEFAULT_DEPTH) -> str:
    """
    Analyze a problem step by step. Deeper analysis adds more steps.

    Args:
        problem: Problem or question to analyze
        depth: Analysis depth 1-5 (default 3)
    """
    return _call("think", problem=problem, depth=depth)


@mcp.tool()
def verify(answer: str, criteria: Optional[List[str]] = None, context: str = "") -> str:
    """
    Check an answer for logical consistency, relevance and quality.

    Args:
        answer: Answer to check
        criteria: Extra criteria such as "must include X" or "minimum 50 characters"
        context: Original question or context (optional)
    """
    return _call("verify", answer=answer, criteria=criteria, context=context)


# ============================================================================
# Main
# ============================================================================

def main():
    global ctx

    parser = argparse.ArgumentParser(description="Cognitive Engine MCP Server")
    parser.add_argument("--namespace", default=os.getenv("COGNITIVE_ENGINE_NAMESPACE", "default"),
                        help="Storage namespace")
    parser.add_argument("--storage-dir", type=Path, help="Storage directory")
    parser.add_argument("--log-level", default=os.getenv("COGNITIVE_ENGINE_LOG_LEVEL", "INFO"))
    parser.add_argument("--log-format", default=os.getenv("COGNITIVE_ENGINE_LOG_FORMAT", "console"),
                        choices=["console", "json"])
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_format)

    config = StorageConfig(namespace=args.namespace)
    if args.storage_dir:
        config.base_dir = args.storage_dir

    ctx = CognitiveEngine(config=config)

    stats = ctx.storage.get_stats()
    logger.info(
        "server_starting",
        namespace=args.namespace,
        storage=stats["storage_path"],
        memories=stats["memory_count"],
        lessons=stats["lesson_count"]
    )

    try:
        mcp.run()
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
