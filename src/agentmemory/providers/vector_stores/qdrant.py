"""Qdrant vector store (REST API)."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import VectorStore
from ..http import HTTPClientMixin
from ...interfaces import SearchFilters, VectorStoreResult

logger = logging.getLogger(__name__)

MIGRATIONS_COLLECTION = "memory_migrations"
# Namespace for per-collection user-id point ids
USER_ID_NAMESPACE = uuid.UUID("00000000-0000-0000-0000-000000000001")


def user_id_point(collection_name: str) -> str:
    """Stable point id holding the user id of ``collection_name``."""
    return str(uuid.uuid5(USER_ID_NAMESPACE, collection_name))


class QdrantStore(HTTPClientMixin, VectorStore):
    """Vector store backed by a Qdrant collection.

    Config keys:
        url: Qdrant base URL (default ``http://localhost:6333``)
        api_key: Optional API key
        on_disk: Store vectors on disk when creating the collection

    The collection is created with cosine distance if it does not exist.
    Qdrant point ids must be UUIDs or unsigned integers.
    """

    name = "qdrant"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self._adopt_client(client)

    async def initialize(self) -> None:
        if self._initialized:
            return
        headers = {}
        if self.config.get("api_key"):
            headers["api-key"] = self.config["api_key"]
        await self._open_client(
            self.config.get("url") or "http://localhost:6333",
            headers=headers,
        )
        await self._ensure_collection(self.collection_name, self.dimension)
        await self._ensure_collection(MIGRATIONS_COLLECTION, 1)
        self._initialized = True
        logger.info(f"Qdrant collection ready: {self.collection_name}")

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _ensure_collection(self, name: str, size: int) -> None:
        response = await self._client.get(f"/collections/{name}")
        if response.status_code == 200:
            return
        if response.status_code != 404:
            response.raise_for_status()
        await self._request(
            "PUT",
            f"/collections/{name}",
            json={
                "vectors": {
                    "size": size,
                    "distance": "Cosine",
                    "on_disk": bool(self.config.get("on_disk", False)),
                }
            },
        )

    @staticmethod
    def _build_filter(filters: Optional[SearchFilters]) -> Optional[dict[str, Any]]:
        if not filters:
            return None
        return {
            "must": [
                {"key": key, "match": {"value": value}}
                for key, value in filters.items()
            ]
        }

    async def _upsert(self, points: list[dict[str, Any]]) -> None:
        await self._request(
            "PUT",
            f"/collections/{self.collection_name}/points",
            params={"wait": "true"},
            json={"points": points},
        )

    async def insert(
        self,
        vectors: list[list[float]],
        ids: list[str],
        payloads: list[dict[str, Any]],
    ) -> None:
        self._check_batch(vectors, ids, payloads)
        for vector, vector_id in zip(vectors, ids):
            self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        await self._upsert([
            {"id": vector_id, "vector": vector, "payload": payload or {}}
            for vector, vector_id, payload in zip(vectors, ids, payloads)
        ])

    async def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[VectorStoreResult]:
        self._check_dimension(query)
        await self._ensure_ready()
        body: dict[str, Any] = {"vector": query, "limit": limit, "with_payload": True}
        qfilter = self._build_filter(filters)
        if qfilter:
            body["filter"] = qfilter
        data = await self._request_json(
            "POST", f"/collections/{self.collection_name}/points/search", json=body
        )
        return [
            VectorStoreResult(id=str(hit["id"]), payload=hit.get("payload") or {}, score=hit.get("score"))
            for hit in data.get("result", [])
        ]

    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        await self._ensure_ready()
        response = await self._client.get(
            f"/collections/{self.collection_name}/points/{vector_id}"
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        point = response.json().get("result")
        if not point:
            return None
        return VectorStoreResult(id=str(point["id"]), payload=point.get("payload") or {})

    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        await self._upsert([{"id": vector_id, "vector": vector, "payload": payload or {}}])

    async def delete(self, vector_id: str) -> None:
        await self._ensure_ready()
        await self._request(
            "POST",
            f"/collections/{self.collection_name}/points/delete",
            params={"wait": "true"},
            json={"points": [vector_id]},
        )

    async def delete_col(self) -> None:
        """Drop the collection and recreate it empty."""
        await self._ensure_ready()
        await self._request("DELETE", f"/collections/{self.collection_name}")
        await self._ensure_collection(self.collection_name, self.dimension)
        logger.info(f"Dropped Qdrant collection {self.collection_name}")

    async def get_user_id(self) -> str:
        """Return the stored user id, generating one on first use."""
        await self._ensure_ready()
        response = await self._client.get(
            f"/collections/{MIGRATIONS_COLLECTION}/points/{user_id_point(self.collection_name)}"
        )
        if response.status_code != 404:
            response.raise_for_status()
            point = response.json().get("result")
            if point and point.get("payload", {}).get("user_id"):
                return point["payload"]["user_id"]
        user_id = uuid.uuid4().hex
        await self.set_user_id(user_id)
        return user_id

    async def set_user_id(self, user_id: str) -> None:
        await self._ensure_ready()
        await self._request(
            "PUT",
            f"/collections/{MIGRATIONS_COLLECTION}/points",
            params={"wait": "true"},
            json={"points": [{
                "id": user_id_point(self.collection_name),
                "vector": [0.0],
                "payload": {"collection": self.collection_name, "user_id": user_id},
            }]},
        )

    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        await self._ensure_ready()
        body: dict[str, Any] = {"limit": limit, "with_payload": True, "with_vector": False}
        qfilter = self._build_filter(filters)
        if qfilter:
            body["filter"] = qfilter
        data = await self._request_json(
            "POST", f"/collections/{self.collection_name}/points/scroll", json=body
        )
        points = (data.get("result") or {}).get("points", [])
        results = [
            VectorStoreResult(id=str(p["id"]), payload=p.get("payload") or {})
            for p in points
        ]
        return results, len(results)
