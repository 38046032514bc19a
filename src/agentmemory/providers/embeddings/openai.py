"""OpenAI-compatible embedding provider."""

from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import Embedder
from ..http import HTTPClientMixin


class OpenAIEmbedder(HTTPClientMixin, Embedder):
    """Embeddings from any endpoint speaking the OpenAI ``/embeddings`` API.

    Subclasses only change the base URL and default model.
    """

    name = "openai"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "text-embedding-3-small"

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

    def _base_url(self) -> str:
        return self.config.get("url") or self.DEFAULT_BASE_URL

    async def initialize(self) -> None:
        """Create the HTTP client.

        Raises:
            ValueError: If API key is not configured
        """
        if self._initialized:
            return
        api_key = self.config.get("api_key")
        if self._client is None and not api_key:
            raise ValueError(f"{self.name} embedder requires an API key")
        await self._open_client(
            self._base_url(),
            headers={"Authorization": f"Bearer {api_key}"},
        )
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
            "POST", "/embeddings", json={"model": self.model, "input": texts}
        )
        embeddings = sorted(data["data"], key=lambda x: x["index"])
        return [e["embedding"] for e in embeddings]
