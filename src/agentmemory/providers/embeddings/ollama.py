"""Ollama embedding provider."""

from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import Embedder
from ..http import HTTPClientMixin


class OllamaEmbedder(HTTPClientMixin, Embedder):
    """Embeddings from a local Ollama server (``/api/embed``)."""

    name = "ollama"
    DEFAULT_URL = "http://localhost:11434"
    DEFAULT_MODEL = "nomic-embed-text:latest"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.model = self.config.get("model") or self.DEFAULT_MODEL
        self._adopt_client(client)

    @property
    def model_name(self) -> str:
        return self.model

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self._open_client(self.config.get("url") or self.DEFAULT_URL)
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def embed(self, text: str) -> list[float]:
        results = await self.embed_batch([text])
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        await self._ensure_ready()
        data = await self._request_json(
            "POST", "/api/embed", json={"model": self.model, "input": texts}
        )
        return data["embeddings"]
