"""Mock persistence providers for testing."""

from dishka import Scope, provide

from resilience.domain.repository import ProfileRepository
from resilience.persistence.repository.inmemory import InMemoryProfileRepository
from resilience.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    The repository is APP-scoped so that rows written by the session
    monitor's reconciliation scope are visible to later requests. Each
    test builds its own container, which keeps tests isolated.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_profile_repository(self) -> ProfileRepository:
        """Provide in-memory profile repository."""
        return InMemoryProfileRepository()
