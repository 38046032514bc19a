"""History log backends."""

from .cloudflare import CloudflareHistoryManager
from .memory import MemoryHistoryManager
from .supabase import SupabaseHistoryManager

__all__ = [
    "MemoryHistoryManager",
    "CloudflareHistoryManager",
    "SupabaseHistoryManager",
]
