"""Supabase (Postgres + pgvector) vector store over PostgREST.

Expects this schema in the target database::

    create extension if not exists vector;

    create table memories (
        id text primary key,
        embedding vector(1536),
        metadata jsonb,
        created_at timestamptz default now()
    );

    create table memory_migrations (
        collection_name text primary key,
        user_id text not null
    );

    create or replace function match_vectors(
        query_embedding vector(1536),
        match_count int,
        filter jsonb default '{}'::jsonb
    )
    returns table (id text, similarity float, metadata jsonb)
    language sql stable as $$
        select id, 1 - (embedding <=> query_embedding) as similarity, metadata
        from memories
        where metadata @> filter
        order by embedding <=> query_embedding
        limit match_count;
    $$;
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import VectorStore
from ..http import HTTPClientMixin
from ...interfaces import SearchFilters, VectorStoreResult

logger = logging.getLogger(__name__)


class SupabaseStore(HTTPClientMixin, VectorStore):
    """Vector store backed by a Supabase table.

    Config keys:
        supabase_url: Project URL (required)
        supabase_key: Service or anon key (required)
        table_name: Table holding vectors (defaults to ``collection_name``)
        match_function: RPC used for similarity search (default ``match_vectors``)
    """

    name = "supabase"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.table_name = self.config.get("table_name") or self.collection_name
        self.match_function = self.config.get("match_function") or "match_vectors"
        self._adopt_client(client)

    async def initialize(self) -> None:
        if self._initialized:
            return
        url = self.config.get("supabase_url")
        key = self.config.get("supabase_key")
        if self._client is None and not (url and key):
            raise ValueError("Supabase vector store requires supabase_url and supabase_key")
        await self._open_client(
            f"{(url or '').rstrip('/')}/rest/v1",
            headers={"apikey": key or "", "Authorization": f"Bearer {key}"},
        )
        # Fails fast if the table is missing
        try:
            await self._request("GET", f"/{self.table_name}", params={"select": "id", "limit": "1"})
        except Exception:
            await self._close_client()
            raise
        self._initialized = True
        logger.info(f"Supabase vector table ready: {self.table_name}")

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _upsert(self, rows: list[dict[str, Any]]) -> None:
        await self._request(
            "POST",
            f"/{self.table_name}",
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
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
            {"id": vector_id, "embedding": vector, "metadata": payload or {}}
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
        rows = await self._request_json(
            "POST",
            f"/rpc/{self.match_function}",
            json={"query_embedding": query, "match_count": limit, "filter": filters or {}},
        )
        return [
            VectorStoreResult(id=row["id"], payload=row.get("metadata") or {}, score=row.get("similarity"))
            for row in rows or []
        ]

    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        await self._ensure_ready()
        rows = await self._request_json(
            "GET",
            f"/{self.table_name}",
            params={"select": "id,metadata", "id": f"eq.{vector_id}", "limit": "1"},
        )
        if not rows:
            return None
        return VectorStoreResult(id=rows[0]["id"], payload=rows[0].get("metadata") or {})

    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        await self._upsert([{"id": vector_id, "embedding": vector, "metadata": payload or {}}])

    async def delete(self, vector_id: str) -> None:
        await self._ensure_ready()
        await self._request("DELETE", f"/{self.table_name}", params={"id": f"eq.{vector_id}"})

    async def delete_col(self) -> None:
        """Delete every row and this collection's user id. The table stays."""
        await self._ensure_ready()
        await self._request("DELETE", f"/{self.table_name}", params={"id": "not.is.null"})
        await self._request(
            "DELETE",
            "/memory_migrations",
            params={"collection_name": f"eq.{self.collection_name}"},
        )
        logger.info(f"Deleted all rows from Supabase table {self.table_name}")

    async def get_user_id(self) -> str:
        """Return the collection's user id, generating one on first use."""
        await self._ensure_ready()
        rows = await self._request_json(
            "GET",
            "/memory_migrations",
            params={
                "select": "user_id",
                "collection_name": f"eq.{self.collection_name}",
                "limit": "1",
            },
        )
        if rows:
            return rows[0]["user_id"]
        user_id = uuid.uuid4().hex
        await self.set_user_id(user_id)
        return user_id

    async def set_user_id(self, user_id: str) -> None:
        await self._ensure_ready()
        await self._request(
            "POST",
            "/memory_migrations",
            json={"collection_name": self.collection_name, "user_id": user_id},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        await self._ensure_ready()
        params = {"select": "id,metadata", "limit": str(limit), "order": "created_at.asc"}
        if filters:
            params["metadata"] = f"cs.{json.dumps(filters)}"
        rows = await self._request_json("GET", f"/{self.table_name}", params=params)
        results = [
            VectorStoreResult(id=row["id"], payload=row.get("metadata") or {})
            for row in rows or []
        ]
        return results, len(results)
