"""LM Studio chat completion providers.

LM Studio serves the OpenAI API locally and ignores the API key.
"""

from .openai import OpenAILLM, OpenAIStructuredLLM

LMSTUDIO_URL = "http://localhost:1234/v1"


class LmStudioLLM(OpenAILLM):
    name = "lmstudio"
    DEFAULT_BASE_URL = LMSTUDIO_URL
    DEFAULT_MODEL = "llama3.1:8b"
    REQUIRES_API_KEY = False


class LmStudioStructuredLLM(OpenAIStructuredLLM):
    name = "lmstudio_structured"
    DEFAULT_BASE_URL = LMSTUDIO_URL
    DEFAULT_MODEL = "llama3.1:8b"
    REQUIRES_API_KEY = False

    def _base_url(self) -> str:
        # The structured variant reads its URL from the nested config bag
        extra = self.config.get("config") or {}
        return extra.get("url") or self.config.get("base_url") or self.DEFAULT_BASE_URL
