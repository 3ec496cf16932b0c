"""Test implementations of the mockable DI components.

Importing this package registers them as provider subclasses, which is
what lets ``build_test_container`` select them.
"""

from .persistence import MockPersistenceProvider
from .supabase import MockSupabaseProvider
from .container import build_test_container

__all__ = [
    "MockPersistenceProvider",
    "MockSupabaseProvider",
    "build_test_container",
]
