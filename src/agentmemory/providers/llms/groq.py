"""Groq chat completion provider (OpenAI-compatible API)."""

from .openai import OpenAILLM


class GroqLLM(OpenAILLM):
    name = "groq"
    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
    DEFAULT_MODEL = "llama3-70b-8192"
