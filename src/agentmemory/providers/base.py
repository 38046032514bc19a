"""Abstract base classes for all providers.

These define the contracts that provider implementations must satisfy.
Every provider has a two-phase lifecycle: construction is cheap and never
does I/O, and ``initialize()`` does whatever setup is needed (opening
connections, creating schema, resolving remote handles). Public operations
pass through ``_ensure_ready()`` so a call that arrives before setup has
finished waits for it instead of failing.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from ..errors import DimensionMismatchError
from ..interfaces import (
    HistoryRecord,
    LLMResponse,
    Message,
    SearchFilters,
    VectorStoreResult,
)


class ProviderStatus(Enum):
    """Provider health status."""
    HEALTHY = "healthy"
    UNAVAILABLE = "unavailable"
    INITIALIZING = "initializing"


@dataclass
class ProviderHealth:
    """Health check result for a provider."""
    status: ProviderStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    last_check: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Provider(ABC):
    """Base class for all providers.

    Provides common functionality:
    - Configuration storage
    - Lazy, single-flight initialization
    - Health checking
    - Async context manager lifecycle
    """

    name = "provider"

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        self.config: dict[str, Any] = dict(config or {})
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the provider. Must be safe to call more than once."""
        pass

    async def shutdown(self) -> None:
        """Release held resources."""
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        """Check provider health and connectivity."""
        if not self._initialized:
            return ProviderHealth(
                status=ProviderStatus.INITIALIZING,
                message=f"{self.name} not initialized yet",
            )
        return ProviderHealth(status=ProviderStatus.HEALTHY, message=self.name)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def _ensure_ready(self) -> None:
        """Run ``initialize()`` once, even under concurrent first use."""
        if self._initialized:
            return
        async with self._init_lock:
            if not self._initialized:
                await self.initialize()

    async def __aenter__(self):
        await self._ensure_ready()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()


class Embedder(Provider):
    """Abstract embedding provider.

    Responsible for converting text to vector embeddings.
    """

    @property
    def model_name(self) -> Optional[str]:
        return self.config.get("model")

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        pass

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts."""
        pass


class LLM(Provider):
    """Abstract chat completion provider."""

    @property
    def model_name(self) -> Optional[str]:
        return self.config.get("model")

    @abstractmethod
    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        """Generate a completion.

        Returns the text content, or an ``LLMResponse`` carrying tool calls
        when the model chose to call tools.
        """
        pass

    @abstractmethod
    async def generate_chat(self, messages: list[Message]) -> LLMResponse:
        """Generate a plain chat reply."""
        pass


class VectorStore(Provider):
    """Abstract vector store bound to one collection.

    Implementations must agree with the reference engine
    (``MemoryVectorStore``) on filter semantics and result shape. Ranking
    may be approximate for remote backends.
    """

    DEFAULT_DIMENSION = 1536

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        super().__init__(config)
        self.collection_name: str = self.config.get("collection_name") or "memories"
        self.dimension: int = int(self.config.get("dimension") or self.DEFAULT_DIMENSION)

    def _check_dimension(self, vector: list[float], vector_id: Optional[str] = None) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), vector_id)

    @staticmethod
    def _check_batch(vectors: list, ids: list, payloads: list) -> None:
        if not (len(vectors) == len(ids) == len(payloads)):
            raise ValueError(
                f"insert expects equal lengths, got vectors={len(vectors)}, "
                f"ids={len(ids)}, payloads={len(payloads)}"
            )

    @abstractmethod
    async def insert(
        self,
        vectors: list[list[float]],
        ids: list[str],
        payloads: list[dict[str, Any]],
    ) -> None:
        """Insert or replace records by id."""
        pass

    @abstractmethod
    async def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[VectorStoreResult]:
        """Return the ``limit`` records most similar to ``query``."""
        pass

    @abstractmethod
    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        """Exact lookup by id. Returns None when absent."""
        pass

    @abstractmethod
    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        """Replace vector and payload for ``vector_id``."""
        pass

    @abstractmethod
    async def delete(self, vector_id: str) -> None:
        """Delete a record. Absent ids are not an error."""
        pass

    @abstractmethod
    async def delete_col(self) -> None:
        """Destroy every record in the collection."""
        pass

    @abstractmethod
    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        """List records matching filters.

        Returns:
            Tuple of (results, number of results returned). The count is not
            a total over the whole collection.
        """
        pass

    @abstractmethod
    async def get_user_id(self) -> str:
        pass

    @abstractmethod
    async def set_user_id(self, user_id: str) -> None:
        pass


class HistoryManager(Provider):
    """Abstract append-only log of memory mutations."""

    @abstractmethod
    async def add_history(
        self,
        memory_id: str,
        previous_value: Optional[str],
        new_value: Optional[str],
        action: str,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
        is_deleted: int = 0,
    ) -> None:
        """Append one entry."""
        pass

    @abstractmethod
    async def get_history(self, memory_id: str) -> list[HistoryRecord]:
        """Entries for ``memory_id`` in insertion order."""
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Drop and recreate the whole log."""
        pass

    async def close(self) -> None:
        """Release held resources. Safe to call on a closed store."""
        await self.shutdown()
