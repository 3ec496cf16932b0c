"""Test container builder with selective unmocking."""

from dishka import AsyncContainer

from resilience.util.di import COMPONENTS, Component
from resilience.util.di.container import create_container


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container with every component mocked except ``unmock``.

    Settings are loaded from environment variables.

    Examples:
        # Unit and E2E tests: mock Supabase Auth, in-memory profiles
        container = build_test_container()

        # Integration tests: real PostgreSQL (needs DATABASE__URL)
        container = build_test_container(unmock={"persistence"})

    Raises:
        ValueError: If an unknown component is named
    """
    unmock = unmock or set()
    unknown = unmock - COMPONENTS
    if unknown:
        raise ValueError(f"Unknown components: {sorted(unknown)}")

    return create_container(mocked=COMPONENTS - unmock)
