"""In-memory repository implementations for testing."""

from .profile import InMemoryProfileRepository

__all__ = ["InMemoryProfileRepository"]
