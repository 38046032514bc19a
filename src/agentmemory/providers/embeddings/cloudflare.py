"""Cloudflare Workers AI embedding provider.

Uses the OpenAI-compatible endpoint under the account's ``/ai/v1`` path.
"""

from .openai import OpenAIEmbedder


class CloudflareEmbedder(OpenAIEmbedder):
    name = "cloudflare"
    DEFAULT_MODEL = "@cf/baai/bge-large-en-v1.5"

    def _base_url(self) -> str:
        account_id = self.config.get("account_id")
        if not account_id:
            raise ValueError("Cloudflare embedder requires account_id")
        return f"https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/v1"
