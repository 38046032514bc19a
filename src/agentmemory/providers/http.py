"""Shared httpx client handling for remote providers."""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HTTPClientMixin:
    """Owns one ``httpx.AsyncClient`` per provider instance.

    A client passed to the constructor is used as-is and not closed on
    shutdown; otherwise one is opened in ``initialize()``.
    """

    _client: Optional[httpx.AsyncClient] = None
    _owns_client: bool = True

    def _adopt_client(self, client: Optional[httpx.AsyncClient]) -> None:
        self._client = client
        self._owns_client = client is None

    async def _open_client(
        self,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> httpx.AsyncClient:
        """Open the client if none was injected."""
        if self._client is not None:
            return self._client
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Content-Type": "application/json", **(headers or {})},
        )
        self._owns_client = True
        return self._client

    async def _close_client(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise ``httpx.HTTPStatusError`` on 4xx/5xx.

        Transport and status errors are not wrapped.
        """
        if self._client is None:
            raise RuntimeError("Provider not initialized")
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._request(method, url, **kwargs)
        if not response.content:
            return None
        return response.json()
