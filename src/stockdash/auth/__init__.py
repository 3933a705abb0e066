"""Sessions and authorization."""
from .session import Session, AccessPolicy
from .client import SupabaseAuth

__all__ = ["Session", "AccessPolicy", "SupabaseAuth"]
