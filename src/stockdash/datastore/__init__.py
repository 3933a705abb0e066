"""DataStore access layer."""
from .base import DataStore, Filter, OrderBy, FILTER_OPS
from .memory import MemoryStore
from .supabase import SupabaseStore

__all__ = ["DataStore", "Filter", "OrderBy", "FILTER_OPS", "MemoryStore", "SupabaseStore"]
