"""Provider factories.

One factory per capability family. Each maps a provider name to the class
implementing it; the mapping is consulted once, at construction time.
Names are matched case-insensitively in every family.

Usage:
    embedder = EmbedderFactory.create("openai", {"api_key": "sk-..."})
    store = VectorStoreFactory.create("memory", {"collection_name": "notes", "dimension": 384})
"""

import logging
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from .errors import UnsupportedProviderError
from .providers.base import Embedder, HistoryManager, LLM, Provider, VectorStore
from .providers.embeddings import (
    CloudflareEmbedder,
    GoogleEmbedder,
    OllamaEmbedder,
    OpenAIEmbedder,
    TogetherEmbedder,
)
from .providers.history import (
    CloudflareHistoryManager,
    MemoryHistoryManager,
    SupabaseHistoryManager,
)
from .providers.llms import (
    AnthropicLLM,
    GoogleLLM,
    GroqLLM,
    LmStudioLLM,
    LmStudioStructuredLLM,
    OllamaLLM,
    OpenAILLM,
    OpenAIStructuredLLM,
)
from .providers.vector_stores import (
    MemoryVectorStore,
    QdrantStore,
    RedisStore,
    SupabaseStore,
    VectorizeStore,
)

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Provider)

ConfigInput = Union[Mapping[str, Any], BaseModel, None]


class ProviderFactory(Generic[P]):
    """Name-keyed constructor table for one provider family."""

    family: ClassVar[str] = "provider"
    _registry: ClassVar[dict[str, type]] = {}

    @classmethod
    def create(cls, provider: str, config: ConfigInput = None) -> P:
        """Construct the provider registered under ``provider``.

        Construction does no I/O; the instance initializes itself on first
        use (or when ``initialize()`` is awaited).

        Raises:
            UnsupportedProviderError: If no implementation is registered.
        """
        provider_cls = cls._registry.get((provider or "").lower())
        if provider_cls is None:
            raise UnsupportedProviderError(cls.family, provider)
        if isinstance(config, BaseModel):
            config = config.model_dump()
        logger.debug(f"Creating {cls.family} provider: {provider}")
        return provider_cls(config or {})

    @classmethod
    def register(cls, name: str, provider_cls: type) -> None:
        """Add or replace a variant."""
        cls._registry[name.lower()] = provider_cls

    @classmethod
    def supported(cls) -> list[str]:
        return sorted(cls._registry)

    @classmethod
    def get_class(cls, provider: str) -> Optional[type]:
        return cls._registry.get((provider or "").lower())


class EmbedderFactory(ProviderFactory[Embedder]):
    family = "embedder"
    _registry = {
        "openai": OpenAIEmbedder,
        "ollama": OllamaEmbedder,
        "google": GoogleEmbedder,
        "together": TogetherEmbedder,
        "cloudflare": CloudflareEmbedder,
    }


class LLMFactory(ProviderFactory[LLM]):
    family = "LLM"
    _registry = {
        "openai": OpenAILLM,
        "openai_structured": OpenAIStructuredLLM,
        "anthropic": AnthropicLLM,
        "groq": GroqLLM,
        "ollama": OllamaLLM,
        "google": GoogleLLM,
        "lmstudio": LmStudioLLM,
        "lmstudio_structured": LmStudioStructuredLLM,
    }


class VectorStoreFactory(ProviderFactory[VectorStore]):
    family = "vector store"
    _registry = {
        "memory": MemoryVectorStore,
        "cloudflare": VectorizeStore,
        "qdrant": QdrantStore,
        "redis": RedisStore,
        "supabase": SupabaseStore,
    }


class HistoryManagerFactory(ProviderFactory[HistoryManager]):
    family = "history store"
    _registry = {
        "memory": MemoryHistoryManager,
        "cloudflare": CloudflareHistoryManager,
        "supabase": SupabaseHistoryManager,
    }
