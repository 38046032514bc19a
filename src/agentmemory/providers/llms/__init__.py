"""Chat completion providers."""

from .anthropic import AnthropicLLM
from .google import GoogleLLM
from .groq import GroqLLM
from .lmstudio import LmStudioLLM, LmStudioStructuredLLM
from .ollama import OllamaLLM
from .openai import OpenAILLM, OpenAIStructuredLLM

__all__ = [
    "OpenAILLM",
    "OpenAIStructuredLLM",
    "AnthropicLLM",
    "GroqLLM",
    "OllamaLLM",
    "GoogleLLM",
    "LmStudioLLM",
    "LmStudioStructuredLLM",
]
