"""Embedding providers."""

from .cloudflare import CloudflareEmbedder
from .google import GoogleEmbedder
from .ollama import OllamaEmbedder
from .openai import OpenAIEmbedder
from .together import TogetherEmbedder

__all__ = [
    "OpenAIEmbedder",
    "OllamaEmbedder",
    "GoogleEmbedder",
    "TogetherEmbedder",
    "CloudflareEmbedder",
]
