"""History log hosted by a remote Cloudflare history agent.

Each agent instance is addressed by name and owns its own SQL storage, so
one ``agent_history_name`` is one independent log. The agent handle is
resolved in ``initialize()``; calls made before that wait for it.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..base import HistoryManager
from ..http import HTTPClientMixin
from ...interfaces import HistoryRecord

logger = logging.getLogger(__name__)


class CloudflareHistoryManager(HTTPClientMixin, HistoryManager):
    """Forwards history calls to a named history agent over HTTP.

    Config keys:
        worker_url: Base URL of the Worker hosting the agents (required)
        agent_binding: Agent namespace (default ``history-manager-agent``)
        agent_history_name: Agent instance name (default ``memory-history``)
        api_token: Optional bearer token
    """

    name = "cloudflare"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.agent_binding = self.config.get("agent_binding") or "history-manager-agent"
        self.agent_history_name = self.config.get("agent_history_name") or "memory-history"
        self._agent_path: Optional[str] = None
        self._adopt_client(client)

    async def initialize(self) -> None:
        if self._initialized:
            return
        worker_url = self.config.get("worker_url")
        if self._client is None and not worker_url:
            raise ValueError("Cloudflare history store requires worker_url")
        headers = {}
        if self.config.get("api_token"):
            headers["Authorization"] = f"Bearer {self.config['api_token']}"
        await self._open_client(worker_url or "", headers=headers)

        path = f"/agents/{self.agent_binding}/{self.agent_history_name}"
        # Resolving the handle creates the agent and its table on first use
        try:
            await self._request("GET", path)
        except Exception:
            await self._close_client()
            raise
        self._agent_path = path
        self._initialized = True
        logger.info(f"Resolved history agent {self.agent_binding}/{self.agent_history_name}")

    async def shutdown(self) -> None:
        await self._close_client()
        self._agent_path = None
        self._initialized = False

    async def _call(self, method: str, *args: Any) -> Any:
        await self._ensure_ready()
        return await self._request_json(
            "POST", f"{self._agent_path}/{method}", json={"args": list(args)}
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
        await self._call(
            "addHistory",
            memory_id,
            previous_value,
            new_value,
            action,
            created_at,
            updated_at,
            is_deleted,
        )

    async def get_history(self, memory_id: str) -> list[HistoryRecord]:
        rows = await self._call("getHistory", memory_id) or []
        return [HistoryRecord.from_row(row) for row in sorted(rows, key=lambda r: r["id"])]

    async def reset(self) -> None:
        await self._call("reset")
