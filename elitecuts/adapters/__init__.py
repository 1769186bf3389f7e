"""
Adapters layer - External integrations (Supabase REST and auth APIs).
"""

from .mock_supabase_client import MockSupabaseAuthenticator, MockSupabaseClient
from .supabase_auth import Session, SupabaseAuthenticator
from .supabase_client import SupabaseClient

__all__ = [
    "MockSupabaseAuthenticator",
    "MockSupabaseClient",
    "Session",
    "SupabaseAuthenticator",
    "SupabaseClient",
]
