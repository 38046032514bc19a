"""agentmemory: provider-agnostic storage for AI agent memories.

Key design principles:

1. **Provider Pattern**: Embedders, LLMs, vector stores and history logs are
   swappable providers behind one interface per family.

2. **Configuration-Driven**: A partial configuration is merged over defaults
   and validated once; factories pick implementations by name.

3. **Reference Semantics**: ``MemoryVectorStore`` defines exact search
   behavior (exhaustive cosine ranking) that other backends are checked
   against.

Usage:
    from agentmemory import Container

    config = {
        "embedder": {"config": {"api_key": "sk-..."}},
        "llm": {"config": {"api_key": "sk-..."}},
        "vector_store": {"config": {"dimension": 3}},
    }
    async with Container(config) as c:
        await c.vector_store.insert([[1.0, 0.0, 0.0]], ["a"], [{"user_id": "u1"}])
        hits = await c.vector_store.search([1.0, 0.0, 0.0], limit=5)
"""

from .config import ConfigManager, MemoryConfig
from .container import Container
from .errors import (
    AgentMemoryError,
    DimensionMismatchError,
    NotApplicableError,
    UnsupportedProviderError,
    ValidationError,
)
from .factory import (
    EmbedderFactory,
    HistoryManagerFactory,
    LLMFactory,
    VectorStoreFactory,
)
from .interfaces import HistoryRecord, LLMResponse, Message, SearchFilters, VectorStoreResult

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "MemoryConfig",
    "Container",
    "EmbedderFactory",
    "LLMFactory",
    "VectorStoreFactory",
    "HistoryManagerFactory",
    "VectorStoreResult",
    "HistoryRecord",
    "Message",
    "LLMResponse",
    "SearchFilters",
    "AgentMemoryError",
    "ValidationError",
    "UnsupportedProviderError",
    "DimensionMismatchError",
    "NotApplicableError",
]
