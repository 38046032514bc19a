"""Configuration resolution.

Partial user configuration is merged over built-in defaults and validated
once, producing an immutable ``MemoryConfig``.
"""

from .defaults import DEFAULT_MEMORY_CONFIG
from .manager import ConfigManager
from .schema import (
    EmbedderConfig,
    EmbedderSection,
    GraphStoreSection,
    HistoryStoreSection,
    LLMConfig,
    LLMSection,
    MemoryConfig,
    VectorStoreConfig,
    VectorStoreSection,
)

__all__ = [
    "ConfigManager",
    "DEFAULT_MEMORY_CONFIG",
    "MemoryConfig",
    "EmbedderConfig",
    "EmbedderSection",
    "VectorStoreConfig",
    "VectorStoreSection",
    "LLMConfig",
    "LLMSection",
    "HistoryStoreSection",
    "GraphStoreSection",
]
