"""Schema for the resolved memory configuration.

A ``MemoryConfig`` is only ever produced by ``ConfigManager.merge_config``;
building one directly skips the default-merging rules.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class EmbedderConfig(_Section):
    """Embedder settings. Unknown keys are dropped."""
    api_key: str
    model: Optional[str] = None
    account_id: Optional[str] = None  # Cloudflare Workers AI
    url: Optional[str] = None  # Ollama host


class EmbedderSection(_Section):
    provider: str = Field(min_length=1)
    config: EmbedderConfig


class VectorStoreConfig(_Section):
    """Vector store settings.

    Provider-specific keys (``url``, ``api_key``, ``table_name``, ...) pass
    through unexamined. ``config`` is an opaque bag of extra options.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    collection_name: str = Field(min_length=1)
    dimension: Optional[int] = Field(default=None, gt=0)
    config: dict[str, Any] = Field(default_factory=dict)


class VectorStoreSection(_Section):
    provider: str = Field(min_length=1)
    config: VectorStoreConfig


class LLMConfig(_Section):
    model_config = ConfigDict(frozen=True, extra="allow")

    api_key: str
    model: Optional[str] = None
    base_url: Optional[str] = None
    config: dict[str, Any] = Field(default_factory=dict)


class LLMSection(_Section):
    provider: str = Field(min_length=1)
    config: LLMConfig


class HistoryStoreSection(_Section):
    provider: str = Field(min_length=1)
    config: dict[str, Any] = Field(default_factory=dict)


class GraphStoreConnection(_Section):
    url: str
    username: str
    password: str


class GraphLLMSection(_Section):
    provider: str = Field(min_length=1)
    config: dict[str, Any] = Field(default_factory=dict)


class GraphStoreSection(_Section):
    provider: str = Field(min_length=1)
    config: GraphStoreConnection
    llm: Optional[GraphLLMSection] = None
    custom_prompt: Optional[str] = None


class MemoryConfig(_Section):
    """Fully resolved configuration for one memory pipeline.

    Attributes:
        version: Config format version
        embedder: Embedding provider and its settings
        vector_store: Vector store provider and its settings
        llm: Chat completion provider and its settings
        history_store: History log provider (None only if never defaulted)
        graph_store: Graph store connection (resolved, not consumed here)
        disable_history: Skip history logging entirely
        enable_graph: Whether the pipeline should use the graph store
        agent_history_name: Name of the remote history agent instance
        custom_prompt: Optional fact-extraction prompt override
    """
    version: Optional[str] = None
    embedder: EmbedderSection
    vector_store: VectorStoreSection
    llm: LLMSection
    history_store: Optional[HistoryStoreSection] = None
    graph_store: Optional[GraphStoreSection] = None
    disable_history: bool = False
    enable_graph: bool = False
    agent_history_name: Optional[str] = None
    custom_prompt: Optional[str] = None
