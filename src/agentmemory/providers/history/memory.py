"""SQLite history log.

The reference history backend: one append-only ``memory_history`` table.
Defaults to an in-memory database private to the instance.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from ..base import HistoryManager, ProviderHealth, ProviderStatus
from ...interfaces import HistoryRecord

logger = logging.getLogger(__name__)

CREATE_HISTORY_TABLE = """
    CREATE TABLE IF NOT EXISTS memory_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memory_id TEXT NOT NULL,
        previous_value TEXT,
        new_value TEXT,
        action TEXT NOT NULL,
        created_at TEXT,
        updated_at TEXT,
        is_deleted INTEGER DEFAULT 0
    )
"""


class MemoryHistoryManager(HistoryManager):
    """History log in a local SQLite database.

    Config keys:
        db_path: SQLite file (default ``:memory:``)
    """

    name = "memory"

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        super().__init__(config)
        self.db_path = str(self.config.get("db_path") or ":memory:")
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        if self._initialized:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute(CREATE_HISTORY_TABLE)
        self._conn.commit()
        self._initialized = True
        logger.info(f"History store ready: {self.db_path}")

    async def shutdown(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._initialized = False

    async def health_check(self) -> ProviderHealth:
        if self._conn is None:
            return ProviderHealth(status=ProviderStatus.UNAVAILABLE, message="Database not open")
        count = self._conn.execute("SELECT COUNT(*) FROM memory_history").fetchone()[0]
        return ProviderHealth(
            status=ProviderStatus.HEALTHY,
            message=f"History store with {count} entries",
        )

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
        await self._ensure_ready()
        async with self._lock:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO memory_history
                    (memory_id, previous_value, new_value, action, created_at, updated_at, is_deleted)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (memory_id, previous_value, new_value, action, created_at, updated_at, is_deleted),
                )

    async def get_history(self, memory_id: str) -> list[HistoryRecord]:
        await self._ensure_ready()
        async with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM memory_history WHERE memory_id = ? ORDER BY id ASC",
                (memory_id,),
            ).fetchall()
        return [HistoryRecord.from_row(dict(row)) for row in rows]

    async def reset(self) -> None:
        await self._ensure_ready()
        async with self._lock:
            with self._conn:
                self._conn.execute("DROP TABLE IF EXISTS memory_history")
                self._conn.execute(CREATE_HISTORY_TABLE)
        logger.info("History store reset")
