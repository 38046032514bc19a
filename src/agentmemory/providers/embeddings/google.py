"""Google Generative Language embedding provider."""

from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import Embedder
from ..http import HTTPClientMixin


class GoogleEmbedder(HTTPClientMixin, Embedder):
    """Embeddings from the Gemini API (``batchEmbedContents``)."""

    name = "google"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "text-embedding-004"

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
        api_key = self.config.get("api_key")
        if self._client is None and not api_key:
            raise ValueError("google embedder requires an API key")
        await self._open_client(self.BASE_URL, headers={"x-goog-api-key": api_key or ""})
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
        model = f"models/{self.model}"
        data = await self._request_json(
            "POST",
            f"/{model}:batchEmbedContents",
            json={
                "requests": [
                    {"model": model, "content": {"parts": [{"text": t}]}}
                    for t in texts
                ]
            },
        )
        return [e["values"] for e in data["embeddings"]]
