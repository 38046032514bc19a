"""Tests for provider factories."""

import pytest

from agentmemory.config import ConfigManager
from agentmemory.errors import UnsupportedProviderError
from agentmemory.factory import (
    EmbedderFactory,
    HistoryManagerFactory,
    LLMFactory,
    VectorStoreFactory,
)
from agentmemory.providers.embeddings import (
    CloudflareEmbedder,
    GoogleEmbedder,
    OllamaEmbedder,
    OpenAIEmbedder,
    TogetherEmbedder,
)
from agentmemory.providers.history import (
    CloudflareHistoryManager,
    MemoryHistoryManager,
    SupabaseHistoryManager,
)
from agentmemory.providers.llms import (
    AnthropicLLM,
    GoogleLLM,
    GroqLLM,
    LmStudioLLM,
    LmStudioStructuredLLM,
    OllamaLLM,
    OpenAILLM,
    OpenAIStructuredLLM,
)
from agentmemory.providers.vector_stores import (
    MemoryVectorStore,
    QdrantStore,
    RedisStore,
    SupabaseStore,
    VectorizeStore,
)


class TestRegistries:
    """Every supported name maps to its implementation."""

    @pytest.mark.parametrize("name,cls", [
        ("openai", OpenAIEmbedder),
        ("ollama", OllamaEmbedder),
        ("google", GoogleEmbedder),
        ("together", TogetherEmbedder),
        ("cloudflare", CloudflareEmbedder),
    ])
    def test_embedders(self, name, cls):
        assert type(EmbedderFactory.create(name, {"api_key": "k"})) is cls

    @pytest.mark.parametrize("name,cls", [
        ("openai", OpenAILLM),
        ("openai_structured", OpenAIStructuredLLM),
        ("anthropic", AnthropicLLM),
        ("groq", GroqLLM),
        ("ollama", OllamaLLM),
        ("google", GoogleLLM),
        ("lmstudio", LmStudioLLM),
        ("lmstudio_structured", LmStudioStructuredLLM),
    ])
    def test_llms(self, name, cls):
        assert type(LLMFactory.create(name, {"api_key": "k"})) is cls

    @pytest.mark.parametrize("name,cls", [
        ("memory", MemoryVectorStore),
        ("cloudflare", VectorizeStore),
        ("qdrant", QdrantStore),
        ("redis", RedisStore),
        ("supabase", SupabaseStore),
    ])
    def test_vector_stores(self, name, cls):
        assert type(VectorStoreFactory.create(name, {"collection_name": "c"})) is cls

    @pytest.mark.parametrize("name,cls", [
        ("memory", MemoryHistoryManager),
        ("cloudflare", CloudflareHistoryManager),
        ("supabase", SupabaseHistoryManager),
    ])
    def test_history_managers(self, name, cls):
        assert type(HistoryManagerFactory.create(name, {})) is cls

    def test_supported_lists_names(self):
        assert VectorStoreFactory.supported() == ["cloudflare", "memory", "qdrant", "redis", "supabase"]


class TestCreate:
    """Tests for name matching and construction."""

    @pytest.mark.parametrize("factory", [
        EmbedderFactory, LLMFactory, VectorStoreFactory, HistoryManagerFactory,
    ])
    def test_unknown_name(self, factory):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            factory.create("made-up", {})

        assert exc_info.value.provider == "made-up"
        assert "made-up" in str(exc_info.value)

    def test_names_are_case_insensitive(self):
        assert isinstance(LLMFactory.create("OpenAI", {"api_key": "k"}), OpenAILLM)
        assert isinstance(VectorStoreFactory.create("Memory", {}), MemoryVectorStore)

    def test_construction_does_no_io(self):
        """Test that remote providers build without credentials or network."""
        store = VectorStoreFactory.create("qdrant", {"collection_name": "c", "url": "http://nowhere:1"})
        assert not store.is_initialized

    def test_vector_store_config_applied(self):
        store = VectorStoreFactory.create("memory", {"collection_name": "notes", "dimension": 3})
        assert store.collection_name == "notes"
        assert store.dimension == 3

    def test_accepts_resolved_config_section(self, base_config):
        config = ConfigManager.merge_config(base_config)
        embedder = EmbedderFactory.create(config.embedder.provider, config.embedder.config)

        assert embedder.model_name == "text-embedding-3-small"
        assert embedder.config["api_key"] == "sk-embed"

    def test_register_new_variant(self, monkeypatch):
        monkeypatch.setattr(VectorStoreFactory, "_registry", dict(VectorStoreFactory._registry))

        class ScratchStore(MemoryVectorStore):
            name = "scratch"

        VectorStoreFactory.register("Scratch", ScratchStore)

        assert isinstance(VectorStoreFactory.create("scratch", {}), ScratchStore)
        assert VectorStoreFactory.get_class("SCRATCH") is ScratchStore
