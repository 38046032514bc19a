"""Together AI embedding provider."""

from .openai import OpenAIEmbedder


class TogetherEmbedder(OpenAIEmbedder):
    name = "together"
    DEFAULT_BASE_URL = "https://api.together.xyz/v1"
    DEFAULT_MODEL = "togethercomputer/m2-bert-80M-8k-retrieval"
