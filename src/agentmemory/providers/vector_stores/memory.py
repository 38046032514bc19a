"""Reference vector store: SQLite persistence with an exhaustive cosine scan.

Every record lives in a ``vectors`` table keyed by (collection, id);
searches load the whole collection, filter on payload equality, and rank by
cosine similarity. This is the behavior other backends are verified against.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import struct
import time
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from ..base import ProviderHealth, ProviderStatus, VectorStore
from ...interfaces import SearchFilters, VectorStoreResult
from ...similarity import cosine_similarity, matches_filters, rank_key

logger = logging.getLogger(__name__)


def _pack(vector: list[float]) -> bytes:
    return struct.pack(f"<{len(vector)}d", *vector)


def _unpack(blob: bytes) -> list[float]:
    return list(struct.unpack(f"<{len(blob) // 8}d", blob))


class MemoryVectorStore(VectorStore):
    """In-process vector store for one collection.

    Config keys:
        collection_name: Collection this store is bound to
        dimension: Fixed vector length (default 1536)
        db_path: SQLite file. Defaults to ``:memory:``, so each instance
            owns a private database. Several collections may share one
            file; every row is scoped by collection name.
        directory: Alternative to ``db_path``; the file becomes
            ``<directory>/<collection_name>.sqlite``.

    Dimension mismatches fail the whole call before anything is written.
    ``update`` behaves as an upsert, consistent with ``insert``.
    """

    name = "memory"

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        super().__init__(config)
        directory = self.config.get("directory")
        if self.config.get("db_path"):
            self.db_path = str(self.config["db_path"])
        elif directory:
            self.db_path = str(Path(directory).expanduser() / f"{self.collection_name}.sqlite")
        else:
            self.db_path = ":memory:"
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        if self._initialized:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._create_tables()
        self._initialized = True
        logger.info(
            f"Memory vector store ready: collection={self.collection_name} "
            f"dimension={self.dimension} db={self.db_path}"
        )

    async def shutdown(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if self._conn is None:
            return ProviderHealth(
                status=ProviderStatus.UNAVAILABLE,
                message="Database not open",
            )
        start = time.perf_counter()
        count = self._conn.execute(
            "SELECT COUNT(*) FROM vectors WHERE collection = ?", (self.collection_name,)
        ).fetchone()[0]
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            latency_ms=(time.perf_counter() - start) * 1000,
            message=f"Memory vector store with {count} entries",
        )

    def _create_tables(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS vectors (
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                vector BLOB NOT NULL,
                payload TEXT NOT NULL,
                PRIMARY KEY (collection, id)
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS memory_migrations (
                collection TEXT PRIMARY KEY,
                user_id TEXT NOT NULL
            )
        """)
        self._conn.commit()

    def _upsert(self, rows: list[tuple[str, bytes, str]]) -> None:
        # ON CONFLICT keeps the rowid, so replaced records keep their scan position
        with self._conn:
            self._conn.executemany(
                """
                INSERT INTO vectors (collection, id, vector, payload) VALUES (?, ?, ?, ?)
                ON CONFLICT(collection, id) DO UPDATE SET
                    vector = excluded.vector,
                    payload = excluded.payload
                """,
                [(self.collection_name, *row) for row in rows],
            )

    def _scan(self):
        return self._conn.execute(
            "SELECT id, vector, payload FROM vectors WHERE collection = ? ORDER BY rowid",
            (self.collection_name,),
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
        rows = [
            (vector_id, _pack(vector), json.dumps(payload or {}))
            for vector, vector_id, payload in zip(vectors, ids, payloads)
        ]
        async with self._lock:
            self._upsert(rows)
        logger.debug(f"Inserted {len(rows)} vectors into {self.collection_name}")

    async def search(
        self,
        query: list[float],
        limit: int = 10,
        filters: Optional[SearchFilters] = None,
    ) -> list[VectorStoreResult]:
        self._check_dimension(query)
        await self._ensure_ready()

        async with self._lock:
            rows = self._scan().fetchall()

        scored = []
        for row in rows:
            payload = json.loads(row["payload"])
            if not matches_filters(payload, filters):
                continue
            score = cosine_similarity(query, _unpack(row["vector"]))
            scored.append(VectorStoreResult(id=row["id"], payload=payload, score=score))

        scored.sort(key=lambda r: rank_key(r.score))
        return scored[:max(limit, 0)]

    async def get(self, vector_id: str) -> Optional[VectorStoreResult]:
        await self._ensure_ready()
        async with self._lock:
            row = self._conn.execute(
                "SELECT id, payload FROM vectors WHERE collection = ? AND id = ?",
                (self.collection_name, vector_id),
            ).fetchone()
        if row is None:
            return None
        return VectorStoreResult(id=row["id"], payload=json.loads(row["payload"]))

    async def update(
        self,
        vector_id: str,
        vector: list[float],
        payload: dict[str, Any],
    ) -> None:
        self._check_dimension(vector, vector_id)
        await self._ensure_ready()
        async with self._lock:
            self._upsert([(vector_id, _pack(vector), json.dumps(payload or {}))])

    async def delete(self, vector_id: str) -> None:
        await self._ensure_ready()
        async with self._lock:
            with self._conn:
                self._conn.execute(
                    "DELETE FROM vectors WHERE collection = ? AND id = ?",
                    (self.collection_name, vector_id),
                )

    async def delete_col(self) -> None:
        """Remove every record and the user id of this collection only."""
        await self._ensure_ready()
        async with self._lock:
            with self._conn:
                self._conn.execute(
                    "DELETE FROM vectors WHERE collection = ?", (self.collection_name,)
                )
                self._conn.execute(
                    "DELETE FROM memory_migrations WHERE collection = ?", (self.collection_name,)
                )
        logger.info(f"Dropped collection {self.collection_name}")

    async def get_user_id(self) -> str:
        """Return the collection's user id, generating one on first use."""
        await self._ensure_ready()
        async with self._lock:
            row = self._conn.execute(
                "SELECT user_id FROM memory_migrations WHERE collection = ?",
                (self.collection_name,),
            ).fetchone()
            if row is not None:
                return row["user_id"]
            user_id = uuid.uuid4().hex
            self._write_user_id(user_id)
        return user_id

    async def set_user_id(self, user_id: str) -> None:
        await self._ensure_ready()
        async with self._lock:
            self._write_user_id(user_id)

    def _write_user_id(self, user_id: str) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO memory_migrations (collection, user_id) VALUES (?, ?)",
                (self.collection_name, user_id),
            )

    async def list(
        self,
        filters: Optional[SearchFilters] = None,
        limit: int = 100,
    ) -> tuple[list[VectorStoreResult], int]:
        await self._ensure_ready()
        async with self._lock:
            rows = self._scan().fetchall()

        results = []
        for row in rows:
            if len(results) >= limit:
                break
            payload = json.loads(row["payload"])
            if matches_filters(payload, filters):
                results.append(VectorStoreResult(id=row["id"], payload=payload))
        return results, len(results)
