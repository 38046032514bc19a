"""Anthropic Messages API provider."""

from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from ..base import LLM
from ..http import HTTPClientMixin
from ...interfaces import LLMResponse, Message


class AnthropicLLM(HTTPClientMixin, LLM):
    """Chat completions from Anthropic's ``/v1/messages`` endpoint.

    System messages are lifted into the top-level ``system`` field. Tools are
    not forwarded.
    """

    name = "anthropic"
    BASE_URL = "https://api.anthropic.com/v1"
    API_VERSION = "2023-06-01"
    DEFAULT_MODEL = "claude-3-sonnet-20240229"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.model = self.config.get("model") or self.DEFAULT_MODEL
        self.max_tokens = int(self.config.get("max_tokens") or 4096)
        self._adopt_client(client)

    @property
    def model_name(self) -> str:
        return self.model

    async def initialize(self) -> None:
        if self._initialized:
            return
        api_key = self.config.get("api_key")
        if self._client is None and not api_key:
            raise ValueError("anthropic LLM requires an API key")
        await self._open_client(
            self.config.get("base_url") or self.BASE_URL,
            headers={"x-api-key": api_key or "", "anthropic-version": self.API_VERSION},
            timeout_seconds=60.0,
        )
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _complete(self, messages: list[Message], json_mode: bool = False) -> LLMResponse:
        await self._ensure_ready()
        system = "\n".join(m.content_text() for m in messages if m.role == "system")
        if json_mode:
            system = (system + "\nRespond with a single JSON object.").strip()
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": m.role, "content": m.content_text()}
                for m in messages
                if m.role != "system"
            ],
        }
        if system:
            body["system"] = system
        data = await self._request_json("POST", "/messages", json=body)
        text = "".join(
            block.get("text", "") for block in data.get("content", []) if block.get("type") == "text"
        )
        return LLMResponse(content=text, role=data.get("role", "assistant"))

    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        json_mode = bool(response_format and response_format.get("type") in ("json_object", "json_schema"))
        response = await self._complete(messages, json_mode=json_mode)
        return response.content

    async def generate_chat(self, messages: list[Message]) -> LLMResponse:
        return await self._complete(messages)
