"""Built-in defaults merged under every user configuration.

Read-only: ``ConfigManager`` copies out of these mappings and never writes
back. API keys are absent here and filled from the environment at merge time.
"""

from types import MappingProxyType

DEFAULT_MEMORY_CONFIG = MappingProxyType({
    "version": "v1.1",
    "embedder": MappingProxyType({
        "provider": "openai",
        "config": MappingProxyType({
            "api_key": None,
            "model": "text-embedding-3-small",
            "account_id": None,
            "url": None,
        }),
    }),
    "vector_store": MappingProxyType({
        "provider": "memory",
        "config": MappingProxyType({
            "collection_name": "memories",
            "dimension": 1536,
        }),
    }),
    "llm": MappingProxyType({
        "provider": "openai",
        "config": MappingProxyType({
            "api_key": None,
            "model": "gpt-4o-mini",
            "base_url": None,
        }),
    }),
    "history_store": MappingProxyType({
        "provider": "memory",
        "config": MappingProxyType({}),
    }),
    "graph_store": MappingProxyType({
        "provider": "neo4j",
        "config": MappingProxyType({
            "url": "neo4j://localhost:7687",
            "username": "neo4j",
            "password": "password",
        }),
        "llm": MappingProxyType({
            "provider": "openai",
            "config": MappingProxyType({"model": "gpt-4o-mini"}),
        }),
    }),
    "agent_history_name": "memory-history",
    "disable_history": False,
    "enable_graph": False,
})

# Environment variables consulted when no API key is configured.
API_KEY_ENV_VARS = ("AGENT_MEMORY_API_KEY", "OPENAI_API_KEY")
