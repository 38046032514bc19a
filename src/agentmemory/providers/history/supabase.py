"""Supabase history log over PostgREST.

Expects a ``memory_history`` table with the same columns as the SQLite
reference (``id bigint generated always as identity primary key``, ...).
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import HistoryManager
from ..http import HTTPClientMixin
from ...interfaces import HistoryRecord

logger = logging.getLogger(__name__)


class SupabaseHistoryManager(HTTPClientMixin, HistoryManager):
    """History log in a Supabase table.

    Config keys:
        supabase_url: Project URL (required)
        supabase_key: Service or anon key (required)
        table_name: History table (default ``memory_history``)
    """

    name = "supabase"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.table_name = self.config.get("table_name") or "memory_history"
        self._adopt_client(client)

    async def initialize(self) -> None:
        if self._initialized:
            return
        url = self.config.get("supabase_url")
        key = self.config.get("supabase_key")
        if self._client is None and not (url and key):
            raise ValueError("Supabase history store requires supabase_url and supabase_key")
        await self._open_client(
            f"{(url or '').rstrip('/')}/rest/v1",
            headers={"apikey": key or "", "Authorization": f"Bearer {key}"},
        )
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

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
        await self._request(
            "POST",
            f"/{self.table_name}",
            json={
                "memory_id": memory_id,
                "previous_value": previous_value,
                "new_value": new_value,
                "action": action,
                "created_at": created_at,
                "updated_at": updated_at,
                "is_deleted": is_deleted,
            },
            headers={"Prefer": "return=minimal"},
        )

    async def get_history(self, memory_id: str) -> list[HistoryRecord]:
        await self._ensure_ready()
        rows = await self._request_json(
            "GET",
            f"/{self.table_name}",
            params={"select": "*", "memory_id": f"eq.{memory_id}", "order": "id.asc"},
        )
        return [HistoryRecord.from_row(row) for row in rows or []]

    async def reset(self) -> None:
        """Delete every row. PostgREST cannot drop tables, so the table stays."""
        await self._ensure_ready()
        await self._request("DELETE", f"/{self.table_name}", params={"id": "not.is.null"})
        logger.info(f"Supabase history table {self.table_name} reset")
