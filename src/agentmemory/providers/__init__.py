"""Provider interfaces and implementations.

Providers are swappable backends that implement standard interfaces.
Each capability family has an abstract base in ``base`` and concrete
implementations in its own subpackage.
"""

from .base import (
    Embedder,
    HistoryManager,
    LLM,
    Provider,
    ProviderHealth,
    ProviderStatus,
    VectorStore,
)

__all__ = [
    "Provider",
    "ProviderHealth",
    "ProviderStatus",
    "Embedder",
    "LLM",
    "VectorStore",
    "HistoryManager",
]
