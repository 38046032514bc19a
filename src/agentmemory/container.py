"""Dependency injection container.

Resolves configuration, builds one provider per capability family, and
keeps the table of collection name -> vector store.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from .config import ConfigManager, MemoryConfig
from .factory import (
    EmbedderFactory,
    HistoryManagerFactory,
    LLMFactory,
    VectorStoreFactory,
)
from .providers.base import (
    Embedder,
    HistoryManager,
    LLM,
    ProviderHealth,
    VectorStore,
)

logger = logging.getLogger(__name__)


class Container:
    """Manages the lifecycle of all providers and provides them to consumers.

    Usage:
        container = Container({"embedder": {"config": {"api_key": "sk-..."}}})
        await container.initialize()

        store = container.vector_store
        notes = container.collection("notes")

        await container.shutdown()
    """

    def __init__(self, config: Union[MemoryConfig, Mapping[str, Any], None] = None):
        """Resolve configuration. No provider is built yet.

        Raises:
            ValidationError: If the configuration is incomplete.
        """
        if not isinstance(config, MemoryConfig):
            config = ConfigManager.merge_config(config)
        self.config = config
        self._embedder: Optional[Embedder] = None
        self._llm: Optional[LLM] = None
        self._history: Optional[HistoryManager] = None
        self._collections: dict[str, VectorStore] = {}
        self._initialized = False

    async def initialize(self) -> None:
        """Create and initialize all providers.

        Every provider is constructed before any is initialized, so an
        unsupported provider name fails before any I/O happens.
        """
        if self._initialized:
            return

        cfg = self.config
        logger.info(
            f"Initializing container: embedder={cfg.embedder.provider} "
            f"llm={cfg.llm.provider} vector_store={cfg.vector_store.provider}"
        )

        self._embedder = EmbedderFactory.create(cfg.embedder.provider, cfg.embedder.config)
        self._llm = LLMFactory.create(cfg.llm.provider, cfg.llm.config)
        store = self.collection(cfg.vector_store.config.collection_name)
        if not cfg.disable_history and cfg.history_store is not None:
            self._history = HistoryManagerFactory.create(
                cfg.history_store.provider,
                {"agent_history_name": cfg.agent_history_name, **cfg.history_store.config},
            )

        await self._embedder.initialize()
        await self._llm.initialize()
        await store.initialize()
        if self._history:
            await self._history.initialize()

        self._initialized = True
        logger.info("Container initialized successfully")

    async def shutdown(self) -> None:
        """Shutdown all providers in reverse order."""
        if not self._initialized and not self._collections:
            return

        logger.info("Shutting down container")
        if self._history:
            await self._history.close()
        for store in self._collections.values():
            await store.shutdown()
        self._collections.clear()
        if self._llm:
            await self._llm.shutdown()
        if self._embedder:
            await self._embedder.shutdown()

        self._initialized = False
        logger.info("Container shutdown complete")

    def collection(self, name: str) -> VectorStore:
        """Return the store bound to collection ``name``, creating it if needed.

        Stores share the configured provider and settings but never share
        state. A new store initializes itself on first use.
        """
        store = self._collections.get(name)
        if store is None:
            vs = self.config.vector_store
            store = VectorStoreFactory.create(
                vs.provider,
                {**vs.config.model_dump(), "collection_name": name},
            )
            self._collections[name] = store
            logger.debug(f"Registered collection {name} ({vs.provider})")
        return store

    @property
    def collections(self) -> list[str]:
        return list(self._collections)

    async def health_check(self) -> dict[str, ProviderHealth]:
        """Check health of all providers."""
        results = {}
        if self._embedder:
            results["embedder"] = await self._embedder.health_check()
        if self._llm:
            results["llm"] = await self._llm.health_check()
        for name, store in self._collections.items():
            results[f"vector_store:{name}"] = await store.health_check()
        if self._history:
            results["history"] = await self._history.health_check()
        return results

    @property
    def embedder(self) -> Embedder:
        if not self._embedder:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._embedder

    @property
    def llm(self) -> LLM:
        if not self._llm:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._llm

    @property
    def vector_store(self) -> VectorStore:
        """The store for the configured default collection."""
        if not self._initialized:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._collections[self.config.vector_store.config.collection_name]

    @property
    def history(self) -> Optional[HistoryManager]:
        """The history log, or None when history is disabled."""
        return self._history

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
