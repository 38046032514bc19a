"""Vector store backends."""

from .cloudflare import VectorizeStore
from .memory import MemoryVectorStore
from .qdrant import QdrantStore
from .redis import RedisStore
from .supabase import SupabaseStore

__all__ = [
    "MemoryVectorStore",
    "VectorizeStore",
    "QdrantStore",
    "RedisStore",
    "SupabaseStore",
]
