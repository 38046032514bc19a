"""Redis vector store.

Each record is a hash (packed vector + JSON payload). Insertion order is
kept in a sorted set so listing and tie-breaking are stable. Ranking is done
client-side with the same cosine scan as the reference engine, so results
match it exactly; this suits small collections, not large ones.
"""

from __future__ import annotations

import json
import logging
import struct
import uuid
from collections.abc import Mapping
from typing import Any, Optional

import redis.asyncio as aioredis

from ..base import ProviderHealth, ProviderStatus, VectorStore
from ...interfaces import SearchFilters, VectorStoreResult
from ...similarity import cosine_similarity, matches_filters, rank_key

logger = logging.getLogger(__name__)


class RedisStore(VectorStore):
    """Vector store backed by plain Redis data structures.

    Config keys:
        redis_url: Connection URL (default ``redis://localhost:6379/0``)
        key_prefix: Namespace for all keys (default ``agentmemory``)
    """

    name = "redis"

    def __init__(self, config: Optional[Mapping[str, Any]] = None, client=None):
        super().__init__(config)
        self.redis_url = self.config.get("redis_url") or self.config.get("url") or "redis://localhost:6379/0"
        prefix = self.config.get("key_prefix") or "agentmemory"
        self._ns = f"{prefix}:{self.collection_name}"
        self._client = client
        self._owns_client = client is None

    @property
    def _ids_key(self) -> str:
        return f"{self._ns}:ids"

    @property
    def _seq_key(self) -> str:
        return f"{self._ns}:seq"

    @property
    def _user_key(self) -> str:
        return f"{self._ns}:user_id"

    def _record_key(self, vector_id: str) -> str:
        return f"{self._ns}:vec:{vector_id}"

    async def initialize(self) -> None:
        if self._initialized:
            return
        if self._client is None:
            self._client = aioredis.from_url(self.redis_url)
        await self._client.ping()
        self._initialized = True
        logger.info(f"Redis vector store ready: {self._ns}")

    async def shutdown(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if self._client is None:
            return ProviderHealth(status=ProviderStatus.UNAVAILABLE, message="Not connected")
        count = await self._client.zcard(self._ids_key)
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            message=f"Redis store with {count} entries",
        )

    async def _write(self, vector_id: str, vector: list[float], payload: dict[str, Any]) -> None:
        if await self._client.zscore(self._ids_key, vector_id) is None:
            seq = await self._client.incr(self._seq_key)
            await self._client.zadd(self._ids_key, {vector_id: seq})
        await self._client.hset(
            self._record_key(vector_id),
            mapping={
                "vector": struct.pack(f"<{len(vector)}d", *vector),
                "payload": json.dumps(payload or {}),
            },
        )

    async def _records(self):
        """Yield (id, vector, payload) in insertion order."""
        for raw_id in await self._client.zrange(self._ids_key, 0, -1):
            vector_id = raw_id.decode() if isinstance(raw_id, bytes) else raw_id
            record = await self._client.hgetall(self._record_key(vector_id))
            if not record:
                continue
            blob = record.get(b"vector", record.get("vector"))
            payload = record.get(b"payload", record.get("payload"))
            vector = list(struct.unpack(f"<{len(blob) // 8}d", blob))
            yield vector_id, vector, json.loads(payload)

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
        for vector, vector_id, payload in zip(vectors, ids, payloads):
            await self._write(vector_id, vector, payload)

    async def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[VectorStoreResult]:
        self._check_dimension(query)
        await self._ensure_ready()
        scored = []
        async for vector_id, vector, payload in self._records():
            if not matches_filters(payload, filters):
                continue
            scored.append(VectorStoreResult(
                id=vector_id,
                payload=payload,
                score=cosine_similarity(query, vector),
            ))
        scored.sort(key=lambda r: rank_key(r.score))
        return scored[:max(limit, 0)]

    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        await self._ensure_ready()
        payload = await self._client.hget(self._record_key(vector_id), "payload")
        if payload is None:
            return None
        return VectorStoreResult(id=vector_id, payload=json.loads(payload))

    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        await self._write(vector_id, vector, payload)

    async def delete(self, vector_id: str) -> None:
        await self._ensure_ready()
        await self._client.zrem(self._ids_key, vector_id)
        await self._client.delete(self._record_key(vector_id))

    async def delete_col(self) -> None:
        await self._ensure_ready()
        keys = [self._ids_key, self._seq_key, self._user_key]
        async for vector_id, _, _ in self._records():
            keys.append(self._record_key(vector_id))
        await self._client.delete(*keys)
        logger.info(f"Dropped Redis collection {self._ns}")

    async def get_user_id(self) -> str:
        """Return the stored user id, generating one on first use."""
        await self._ensure_ready()
        value = await self._client.get(self._user_key)
        if value is not None:
            return value.decode() if isinstance(value, bytes) else value
        user_id = uuid.uuid4().hex
        await self._client.set(self._user_key, user_id)
        return user_id

    async def set_user_id(self, user_id: str) -> None:
        await self._ensure_ready()
        await self._client.set(self._user_key, user_id)

    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        await self._ensure_ready()
        results = []
        async for vector_id, _, payload in self._records():
            if len(results) >= limit:
                break
            if matches_filters(payload, filters):
                results.append(VectorStoreResult(id=vector_id, payload=payload))
        return results, len(results)
