"""Ollama chat provider."""

import json
from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from ..base import LLM
from ..http import HTTPClientMixin
from ...interfaces import LLMResponse, Message, ToolCall


class OllamaLLM(HTTPClientMixin, LLM):
    """Chat completions from a local Ollama server (``/api/chat``)."""

    name = "ollama"
    DEFAULT_URL = "http://localhost:11434"
    DEFAULT_MODEL = "llama3.1:8b"

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        self.model = self.config.get("model") or self.DEFAULT_MODEL
        self._adopt_client(client)

    @property
    def model_name(self) -> str:
        return self.model

    async def initialize(self) -> None:
        if self._initialized:
            return
        extra = self.config.get("config") or {}
        url = self.config.get("base_url") or extra.get("url") or self.DEFAULT_URL
        await self._open_client(url, timeout_seconds=120.0)
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _chat(self, body: dict[str, Any]) -> dict[str, Any]:
        await self._ensure_ready()
        data = await self._request_json("POST", "/api/chat", json={**body, "stream": False})
        return data["message"]

    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content_text()} for m in messages],
        }
        if response_format and response_format.get("type") == "json_object":
            body["format"] = "json"
        if tools:
            body["tools"] = tools
        message = await self._chat(body)
        if message.get("tool_calls"):
            return LLMResponse(
                content=message.get("content") or "",
                role=message.get("role", "assistant"),
                tool_calls=[
                    ToolCall(
                        name=call["function"]["name"],
                        arguments=json.dumps(call["function"].get("arguments", {})),
                    )
                    for call in message["tool_calls"]
                ],
            )
        return message.get("content") or ""

    async def generate_chat(self, messages: list[Message]) -> LLMResponse:
        message = await self._chat({
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content_text()} for m in messages],
        })
        return LLMResponse(content=message.get("content") or "", role=message.get("role", "assistant"))
