"""Cloudflare Vectorize vector store (REST API)."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import VectorStore
from ..http import HTTPClientMixin
from ...errors import NotApplicableError
from ...interfaces import SearchFilters, VectorStoreResult

logger = logging.getLogger(__name__)


class VectorizeStore(HTTPClientMixin, VectorStore):
    """Connects to a Cloudflare Vectorize index.

    Config keys:
        account_id: Cloudflare account id (required)
        api_token: API token with Vectorize access (or ``api_key``)
        index_name: Vectorize index (defaults to ``collection_name``)
        base_url: Override the API root

    Insert policy differs from the reference engine: a vector with the wrong
    dimension is skipped with a warning and the rest of the batch is written.
    The index itself is infrastructure, so ``delete_col`` does not delete it.
    """

    name = "cloudflare"
    API_ROOT = "https://api.cloudflare.com/client/v4"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.index_name = self.config.get("index_name") or self.collection_name
        self._adopt_client(client)

    async def initialize(self) -> None:
        if self._initialized:
            return
        account_id = self.config.get("account_id")
        token = self.config.get("api_token") or self.config.get("api_key")
        if self._client is None and not (account_id and token):
            raise ValueError("Cloudflare Vectorize requires account_id and api_token")

        root = self.config.get("base_url") or self.API_ROOT
        await self._open_client(
            f"{root}/accounts/{account_id}/vectorize/v2/indexes/{self.index_name}",
            headers={"Authorization": f"Bearer {token}"},
        )
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _upsert(self, records: list[dict[str, Any]]) -> None:
        body = "\n".join(json.dumps(r) for r in records)
        await self._request(
            "POST",
            "/upsert",
            content=body.encode(),
            headers={"Content-Type": "application/x-ndjson"},
        )

    async def insert(
        self,
        vectors: list[list[float]],
        ids: list[str],
        payloads: list[dict[str, Any]],
    ) -> None:
        self._check_batch(vectors, ids, payloads)
        records = []
        for vector, vector_id, payload in zip(vectors, ids, payloads):
            if len(vector) != self.dimension:
                logger.warning(
                    f"Vector dimension mismatch for ID {vector_id}. Expected "
                    f"{self.dimension}, got {len(vector)}. Skipping insertion for this vector."
                )
                continue
            records.append({"id": vector_id, "values": vector, "metadata": payload or {}})

        if not records:
            return
        await self._ensure_ready()
        await self._upsert(records)

    async def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[VectorStoreResult]:
        self._check_dimension(query)
        await self._ensure_ready()
        data = await self._query(query, limit, filters)
        return [
            VectorStoreResult(
                id=match["id"],
                payload=match.get("metadata") or {},
                score=match.get("score"),
            )
            for match in data
        ]

    async def _query(
        self,
        vector: list[float],
        limit: int,
        filters: Optional[SearchFilters],
    ) -> list[dict[str, Any]]:
        body: dict[str, Any] = {
            "vector": vector,
            "topK": limit,
            "returnMetadata": "all",
            "returnValues": False,
        }
        if filters:
            body["filter"] = filters
        data = await self._request_json("POST", "/query", json=body)
        return (data.get("result") or {}).get("matches", [])

    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        await self._ensure_ready()
        data = await self._request_json("POST", "/get_by_ids", json={"ids": [vector_id]})
        vectors = data.get("result") or []
        if not vectors:
            return None
        return VectorStoreResult(id=vectors[0]["id"], payload=vectors[0].get("metadata") or {})

    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        await self._upsert([{"id": vector_id, "values": vector, "metadata": payload or {}}])

    async def delete(self, vector_id: str) -> None:
        await self._ensure_ready()
        await self._request("POST", "/delete_by_ids", json={"ids": [vector_id]})

    async def delete_col(self) -> None:
        logger.warning(
            f"delete_col did not delete Vectorize index {self.index_name}: index "
            "deletion must be done via the Cloudflare dashboard or Wrangler CLI"
        )

    async def get_user_id(self) -> str:
        raise NotApplicableError("get_user_id", "VectorizeStore")

    async def set_user_id(self, user_id: str) -> None:
        raise NotApplicableError("set_user_id", "VectorizeStore")

    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        """List by querying with a zero vector.

        Vectorize has no listing endpoint, so order is whatever the index
        returns and the count is only what came back, never a total.
        """
        await self._ensure_ready()
        matches = await self._query([0.0] * self.dimension, limit, filters)
        results = [
            VectorStoreResult(id=m["id"], payload=m.get("metadata") or {})
            for m in matches
        ]
        return results, len(results)
