"""
Cognitive Engine - Persistent Memory and Heuristic Reasoning for AI Assistants

Modules:
    memory: Long-term memories with tag-then-keyword recall
    insights: Success/failure lessons aggregated into insights
    think: Stepwise problem decomposition
    verify: Rule-based answer scoring
    storage: Store contract and SQLite backend
    errors: Error taxonomy surfaced to tool callers
    server: MCP server and operation dispatch

Usage:
    # As MCP server
    cognitive-engine --namespace myproject

    # Programmatic
    from cognitive_engine import CognitiveEngine
    engine = CognitiveEngine()
    engine.memory.remember("Important fact", tags=["info"])
"""

from .errors import (
    CognitiveEngineError, ValidationError, NotFoundError,
    StorageError, DeserializationError, InternalError
)
from .storage import StorageBackend, StorageConfig, SQLiteStorage
from .memory import MemoryEngine, Memory
from .insights import InsightEngine, Insight, Outcome
from .think import think
from .verify import verify
from .server import CognitiveEngine

__version__ = "1.0.0"

__all__ = [
    # Errors
    "CognitiveEngineError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DeserializationError",
    "InternalError",

    # Storage
    "StorageBackend",
    "StorageConfig",
    "SQLiteStorage",

    # Engines
    "MemoryEngine",
    "Memory",
    "InsightEngine",
    "Insight",
    "Outcome",
    "CognitiveEngine",

    # Pipelines
    "think",
    "verify",
]
