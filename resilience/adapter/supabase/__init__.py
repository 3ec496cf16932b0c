"""Supabase Auth adapter."""

from .auth import (
    MockSupabaseAuthClient,
    RealSupabaseAuthClient,
    SupabaseAuthClient,
    SupabaseAuthError,
)

__all__ = [
    "MockSupabaseAuthClient",
    "RealSupabaseAuthClient",
    "SupabaseAuthClient",
    "SupabaseAuthError",
]
