"""Google Gemini chat provider."""

from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from ..base import LLM
from ..http import HTTPClientMixin
from ...interfaces import LLMResponse, Message


class GoogleLLM(HTTPClientMixin, LLM):
    """Chat completions from the Gemini ``generateContent`` endpoint."""

    name = "google"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-1.5-flash"

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
        api_key = self.config.get("api_key")
        if self._client is None and not api_key:
            raise ValueError("google LLM requires an API key")
        await self._open_client(
            self.BASE_URL,
            headers={"x-goog-api-key": api_key or ""},
            timeout_seconds=60.0,
        )
        self._initialized = True

    async def shutdown(self) -> None:
        await self._close_client()
        self._initialized = False

    async def _generate(self, messages: list[Message], json_mode: bool = False) -> str:
        await self._ensure_ready()
        system = "\n".join(m.content_text() for m in messages if m.role == "system")
        body: dict[str, Any] = {
            "contents": [
                {
                    "role": "model" if m.role == "assistant" else "user",
                    "parts": [{"text": m.content_text()}],
                }
                for m in messages
                if m.role != "system"
            ],
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        if json_mode:
            body["generationConfig"] = {"responseMimeType": "application/json"}
        data = await self._request_json(
            "POST", f"/models/{self.model}:generateContent", json=body
        )
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)

    async def generate_response(
        self,
        messages: list[Message],
        response_format: Optional[dict[str, Any]] = None,
        tools: Optional[list[dict[str, Any]]] = None,
    ) -> Union[str, LLMResponse]:
        json_mode = bool(response_format and response_format.get("type") == "json_object")
        return await self._generate(messages, json_mode=json_mode)

    async def generate_chat(self, messages: list[Message]) -> LLMResponse:
        return LLMResponse(content=await self._generate(messages))
