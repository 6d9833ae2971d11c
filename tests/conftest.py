import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cognitive_engine.storage import SQLiteStorage, StorageConfig
from cognitive_engine.memory import MemoryEngine
from cognitive_engine.insights import InsightEngine


@pytest.fixture
def storage():
    store = SQLiteStorage(StorageConfig(in_memory=True))
    yield store
    store.close()


@pytest.fixture
def memory(storage):
    return MemoryEngine(storage)


@pytest.fixture
def insights(storage):
    return InsightEngine(storage)
