"""Tests for the provider container."""

import pytest

from agentmemory import Container
from agentmemory.errors import UnsupportedProviderError, ValidationError
from agentmemory.providers.base import ProviderStatus
from agentmemory.providers.history import MemoryHistoryManager
from agentmemory.providers.vector_stores import MemoryVectorStore


class TestContainer:
    """Tests for container lifecycle and collection routing."""

    async def test_initialize_builds_providers(self, base_config):
        async with Container(base_config) as c:
            assert isinstance(c.vector_store, MemoryVectorStore)
            assert c.vector_store.collection_name == "test"
            assert c.vector_store.dimension == 2
            assert isinstance(c.history, MemoryHistoryManager)
            assert c.embedder.model_name == "text-embedding-3-small"
            assert c.llm.model_name == "gpt-4o-mini"

    async def test_default_store_round_trip(self, base_config):
        async with Container(base_config) as c:
            await c.vector_store.insert([[1.0, 0.0]], ["a"], [{"user_id": "u1"}])
            hits = await c.vector_store.search([1.0, 0.0], limit=1)
        assert hits[0].id == "a"

    async def test_collections_are_isolated(self, base_config):
        async with Container(base_config) as c:
            notes = c.collection("notes")
            assert c.collection("notes") is notes
            assert notes is not c.vector_store

            await notes.insert([[1.0, 0.0]], ["a"], [{}])

            assert await c.vector_store.get("a") is None
            assert sorted(c.collections) == ["notes", "test"]

    async def test_collections_isolated_with_db_path(self, base_config, tmp_path):
        """Test that collections stay separate when they share one SQLite file."""
        base_config["vector_store"]["config"]["db_path"] = str(tmp_path / "v.sqlite")
        async with Container(base_config) as c:
            notes = c.collection("notes")
            await notes.insert([[1.0, 0.0]], ["a"], [{}])
            await c.vector_store.insert([[0.0, 1.0]], ["b"], [{}])

            assert await c.vector_store.get("a") is None
            assert await notes.get("b") is None

            await notes.delete_col()
            assert await c.vector_store.get("b") is not None

    async def test_disable_history(self, base_config):
        base_config["disable_history"] = True
        async with Container(base_config) as c:
            assert c.history is None

    async def test_history_gets_agent_name(self, base_config):
        base_config["agent_history_name"] = "agent-7"
        async with Container(base_config) as c:
            assert c.history.config["agent_history_name"] == "agent-7"

    async def test_invalid_config_fails_at_construction(self):
        with pytest.raises(ValidationError):
            Container({})

    async def test_unknown_provider_fails_before_io(self, base_config):
        base_config["vector_store"]["provider"] = "made-up"
        c = Container(base_config)

        with pytest.raises(UnsupportedProviderError):
            await c.initialize()
        assert not c.embedder.is_initialized

    async def test_access_before_initialize(self, base_config):
        c = Container(base_config)
        with pytest.raises(RuntimeError):
            c.vector_store
        with pytest.raises(RuntimeError):
            c.llm

    async def test_health_check(self, base_config):
        async with Container(base_config) as c:
            health = await c.health_check()

        assert set(health) == {"embedder", "llm", "vector_store:test", "history"}
        assert health["vector_store:test"].status == ProviderStatus.HEALTHY

    async def test_shutdown_releases_collections(self, base_config):
        c = Container(base_config)
        await c.initialize()
        store = c.vector_store
        await c.shutdown()

        assert c.collections == []
        assert not store.is_initialized
        await c.shutdown()
