"""Tests for embedding and LLM providers over a mock HTTP transport."""

import json

import httpx
import pytest

from agentmemory.interfaces import LLMResponse, Message
from agentmemory.providers.base import ProviderStatus
from agentmemory.providers.embeddings import CloudflareEmbedder, OllamaEmbedder, OpenAIEmbedder
from agentmemory.providers.llms import AnthropicLLM, LmStudioLLM, OllamaLLM, OpenAILLM, OpenAIStructuredLLM


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


def chat_reply(message):
    return httpx.Response(200, json={"choices": [{"message": message}]})


class TestEmbedders:
    """Tests for embedding providers."""

    async def test_openai_batch_ordered_by_index(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": [
                {"index": 1, "embedding": [0.0, 1.0]},
                {"index": 0, "embedding": [1.0, 0.0]},
            ]})

        async with mock_client(handler) as client:
            embedder = OpenAIEmbedder({"api_key": "k"}, client=client)
            vectors = await embedder.embed_batch(["first", "second"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert seen[0] == {"model": "text-embedding-3-small", "input": ["first", "second"]}

    async def test_empty_batch_makes_no_request(self):
        embedder = OpenAIEmbedder({"api_key": "k"})
        assert await embedder.embed_batch([]) == []
        assert not embedder.is_initialized

    async def test_missing_api_key(self):
        with pytest.raises(ValueError):
            await OpenAIEmbedder({}).initialize()

    async def test_cloudflare_requires_account_id(self):
        with pytest.raises(ValueError):
            await CloudflareEmbedder({"api_key": "k"}).initialize()

    async def test_ollama_embed(self):
        def handler(request):
            assert request.url.path == "/api/embed"
            return httpx.Response(200, json={"embeddings": [[0.5, 0.5]]})

        async with mock_client(handler) as client:
            embedder = OllamaEmbedder({"model": "nomic"}, client=client)
            assert await embedder.embed("hello") == [0.5, 0.5]
            assert embedder.model_name == "nomic"


class TestOpenAILLM:
    """Tests for OpenAI-compatible chat providers."""

    async def test_plain_response_is_text(self):
        async with mock_client(lambda r: chat_reply({"role": "assistant", "content": "hi"})) as client:
            llm = OpenAILLM({"api_key": "k"}, client=client)
            result = await llm.generate_response([Message(role="user", content="hello")])
        assert result == "hi"

    async def test_tool_calls(self):
        reply = {
            "role": "assistant",
            "content": None,
            "tool_calls": [{"function": {"name": "add_memory", "arguments": '{"data": "x"}'}}],
        }
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return chat_reply(reply)

        tools = [{"type": "function", "function": {"name": "add_memory"}}]
        async with mock_client(handler) as client:
            llm = OpenAILLM({"api_key": "k"}, client=client)
            result = await llm.generate_response([Message(role="user", content="hi")], tools=tools)

        assert isinstance(result, LLMResponse)
        assert result.content == ""
        assert result.tool_calls[0].name == "add_memory"
        assert bodies[0]["tool_choice"] == "auto"

    async def test_structured_uses_strict_tools(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return chat_reply({"role": "assistant", "content": "{}"})

        tools = [{"type": "function", "function": {"name": "f", "parameters": {"type": "object"}}}]
        async with mock_client(handler) as client:
            llm = OpenAIStructuredLLM({"api_key": "k"}, client=client)
            await llm.generate_response([Message(role="user", content="hi")], tools=tools)

        assert bodies[0]["tools"][0]["function"]["strict"] is True
        assert bodies[0]["model"] == "gpt-4o-2024-08-06"

    async def test_non_string_content_sent_as_json(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return chat_reply({"role": "assistant", "content": "ok"})

        async with mock_client(handler) as client:
            llm = OpenAILLM({"api_key": "k"}, client=client)
            await llm.generate_chat([Message(role="user", content={"facts": ["a"]})])

        assert bodies[0]["messages"][0]["content"] == '{"facts": ["a"]}'

    async def test_lmstudio_needs_no_key(self):
        llm = LmStudioLLM({})
        await llm.initialize()
        try:
            assert llm.is_initialized
        finally:
            await llm.shutdown()

    async def test_openai_requires_key(self):
        with pytest.raises(ValueError):
            await OpenAILLM({}).initialize()


class TestOtherLLMs:
    """Tests for Anthropic and Ollama request shaping."""

    async def test_anthropic_lifts_system_message(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={
                "role": "assistant",
                "content": [{"type": "text", "text": "noted"}],
            })

        async with mock_client(handler) as client:
            llm = AnthropicLLM({"api_key": "k"}, client=client)
            reply = await llm.generate_chat([
                Message(role="system", content="Be brief."),
                Message(role="user", content="hello"),
            ])

        assert reply.content == "noted"
        assert bodies[0]["system"] == "Be brief."
        assert bodies[0]["messages"] == [{"role": "user", "content": "hello"}]

    async def test_ollama_tool_calls(self):
        def handler(request):
            body = json.loads(request.content)
            assert body["stream"] is False
            return httpx.Response(200, json={"message": {
                "role": "assistant",
                "content": "",
                "tool_calls": [{"function": {"name": "f", "arguments": {"x": 1}}}],
            }})

        async with mock_client(handler) as client:
            llm = OllamaLLM({}, client=client)
            result = await llm.generate_response(
                [Message(role="user", content="hi")],
                tools=[{"type": "function", "function": {"name": "f"}}],
            )

        assert result.tool_calls[0].arguments == '{"x": 1}'


class TestProviderStatus:
    def test_reported_statuses(self):
        """Only statuses some provider can report are defined."""
        assert {s.value for s in ProviderStatus} == {"healthy", "unavailable", "initializing"}
