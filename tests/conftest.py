"""Pytest fixtures for agentmemory tests."""

import pytest

from agentmemory.providers.history import MemoryHistoryManager
from agentmemory.providers.vector_stores import MemoryVectorStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep API keys from the developer's shell out of config resolution."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("AGENT_MEMORY_API_KEY", raising=False)
    monkeypatch.delenv("AGENT_MEMORY_CONFIG", raising=False)


@pytest.fixture
def base_config():
    """Smallest partial config that passes validation."""
    return {
        "embedder": {"provider": "openai", "config": {"api_key": "sk-embed"}},
        "llm": {"provider": "openai", "config": {"api_key": "sk-llm"}},
        "vector_store": {"provider": "memory", "config": {"collection_name": "test", "dimension": 2}},
    }


@pytest.fixture
async def store():
    """Initialized 2-dimensional reference vector store."""
    s = MemoryVectorStore({"collection_name": "test", "dimension": 2})
    await s.initialize()
    yield s
    await s.shutdown()


@pytest.fixture
async def history():
    """Initialized in-memory history log."""
    h = MemoryHistoryManager()
    await h.initialize()
    yield h
    await h.close()
