"""OpenAI-compatible chat completion providers."""

from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from ..base import LLM
from ..http import HTTPClientMixin
from ...interfaces import LLMResponse, Message, ToolCall


def _to_wire(messages: list[Message]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": m.content_text()} for m in messages]


def _parse_choice(data: dict[str, Any]) -> Union[str, LLMResponse]:
    message = data["choices"][0]["message"]
    tool_calls = message.get("tool_calls")
    if tool_calls:
        return LLMResponse(
            content=message.get("content") or "",
            role=message.get("role", "assistant"),
            tool_calls=[
                ToolCall(name=call["function"]["name"], arguments=call["function"]["arguments"])
                for call in tool_calls
            ],
        )
    return message.get("content") or ""


class OpenAILLM(HTTPClientMixin, LLM):
    """Chat completions from any endpoint speaking the OpenAI API."""

    name = "openai"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"
    REQUIRES_API_KEY = True

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

    def _base_url(self) -> str:
        return self.config.get("base_url") or self.DEFAULT_BASE_URL

    async def initialize(self) -> None:
        if self._initialized:
            return
        api_key = self.config.get("api_key")
        if self._client is None and self.REQUIRES_API_KEY and not api_key:
            raise ValueError(f"{self.name} LLM requires an API key")
        await self._open_client(
            self._base_url(),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout_seconds=float(self.config.get("timeout_seconds") or 60.0),
        )
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _complete(self, body: dict[str, Any]) -> dict[str, Any]:
        await self._ensure_ready()
        return await self._request_json("POST", "/chat/completions", json=body)

    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        body: dict[str, Any] = {"model": self.model, "messages": _to_wire(messages)}
        if response_format:
            body["response_format"] = response_format
        if tools:
            body["tools"] = tools
            body["tool_choice"] = "auto"
        return _parse_choice(await self._complete(body))

    async def generate_chat(self, messages: list[Message]) -> LLMResponse:
        data = await self._complete({"model": self.model, "messages": _to_wire(messages)})
        message = data["choices"][0]["message"]
        return LLMResponse(content=message.get("content") or "", role=message.get("role", "assistant"))


class OpenAIStructuredLLM(OpenAILLM):
    """OpenAI chat completions with strict tools and JSON-schema output."""

    name = "openai_structured"
    DEFAULT_MODEL = "gpt-4o-2024-08-06"

    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        body: dict[str, Any] = {"model": self.model, "messages": _to_wire(messages)}
        if tools:
            body["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool["function"]["name"],
                        "description": tool["function"].get("description", ""),
                        "parameters": tool["function"].get("parameters", {}),
                        "strict": True,
                    },
                }
                for tool in tools
            ]
            body["tool_choice"] = "auto"
        elif response_format:
            if response_format.get("json_schema"):
                body["response_format"] = {
                    "type": "json_schema",
                    "json_schema": response_format["json_schema"],
                }
            else:
                body["response_format"] = response_format
        return _parse_choice(await self._complete(body))
