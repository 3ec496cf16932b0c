"""Unit tests for the session monitor wiring in the app lifespan."""

import pytest

from resilience.application.usecase.profile import ReconcileProfileUseCase
from resilience.config import AuthSettings
from resilience.domain.error import StoreError
from resilience.domain.model import Identity, SessionEvent
from resilience.domain.service import (
    IdentitySessionMonitor,
    ProfileReconciler,
    SessionProvider,
)
from resilience.domain.value import ReconcileOutcome, SessionEventKind
from resilience.interface.api.app import _reconcile_runner
from resilience.persistence.repository.inmemory import InMemoryProfileRepository
from tests.di import build_test_container
from tests.factories import make_identity


class FakeSessionProvider(SessionProvider):
    """Session provider whose events are pushed by the test."""

    async def emit(self, kind: SessionEventKind, identity: Identity) -> None:
        await self._notify(SessionEvent(kind=kind, identity=identity))


class FailingCommitContainer:
    """Request container whose scope exit fails like a rejected commit."""

    def __init__(self, use_case: ReconcileProfileUseCase) -> None:
        self.use_case = use_case
        self.opened = 0

    def __call__(self) -> "FailingCommitContainer":
        self.opened += 1
        return self

    async def __aenter__(self) -> "FailingCommitContainer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        raise StoreError("commit failed: connection reset")

    async def get(self, dependency_type):
        return self.use_case


@pytest.fixture
def repo():
    return InMemoryProfileRepository()


class TestReconcileRunner:
    """Each reconciliation runs in its own request scope."""

    @pytest.mark.asyncio
    async def test_commit_failure_on_scope_exit_is_store_unavailable(self, repo):
        use_case = ReconcileProfileUseCase(ProfileReconciler(repo, AuthSettings()))
        container = FailingCommitContainer(use_case)
        provider = FakeSessionProvider()

        async with IdentitySessionMonitor(
            provider, _reconcile_runner(container)
        ) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())

            assert container.opened == 1
            assert (
                monitor.last_outcome("user-123") == ReconcileOutcome.STORE_UNAVAILABLE
            )
            assert monitor.current_identity.is_signed_in("user-123") is True

    @pytest.mark.asyncio
    async def test_commit_failure_is_returned_not_raised(self, repo):
        use_case = ReconcileProfileUseCase(ProfileReconciler(repo, AuthSettings()))
        run = _reconcile_runner(FailingCommitContainer(use_case))

        outcome = await run(make_identity())

        assert outcome == ReconcileOutcome.STORE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_reconciles_through_the_test_container(self):
        container = build_test_container()
        try:
            outcome = await _reconcile_runner(container)(make_identity())
        finally:
            await container.close()

        assert outcome == ReconcileOutcome.SUCCESS
