"""Unit tests for IdentitySessionMonitor."""

import asyncio

import pytest

from resilience.config import AuthSettings
from resilience.domain.model import Identity, SessionEvent
from resilience.domain.service import (
    IdentityChange,
    IdentitySessionMonitor,
    SessionProvider,
)
from resilience.domain.value import ReconcileOutcome, SessionEventKind
from tests.factories import make_identity


class FakeSessionProvider(SessionProvider):
    """Session provider whose events are pushed by the test."""

    async def emit(self, kind: SessionEventKind, identity: Identity) -> None:
        await self._notify(SessionEvent(kind=kind, identity=identity))


class RecordingRunner:
    """Reconcile callable that records calls and can be held open."""

    def __init__(self, outcome: ReconcileOutcome = ReconcileOutcome.SUCCESS):
        self.outcome = outcome
        self.calls: list[str] = []
        self.release = asyncio.Event()
        self.release.set()
        self.finished = 0

    async def __call__(self, identity: Identity) -> ReconcileOutcome:
        self.calls.append(identity.subject_id)
        await self.release.wait()
        self.finished += 1
        return self.outcome


@pytest.fixture
def provider():
    return FakeSessionProvider()


@pytest.fixture
def runner():
    return RecordingRunner()


class TestTriggering:
    """Which session events start a reconciliation."""

    @pytest.mark.asyncio
    async def test_signed_in_reconciles_and_publishes(self, provider, runner):
        identity = make_identity()

        async with IdentitySessionMonitor(provider, runner) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, identity)

            assert runner.calls == ["user-123"]
            assert monitor.current_identity.get("user-123") == identity
            assert monitor.last_outcome("user-123") == ReconcileOutcome.SUCCESS

    @pytest.mark.asyncio
    async def test_signed_in_always_reconciles(self, provider, runner):
        """A repeated sign-in is a new sign-in."""
        async with IdentitySessionMonitor(provider, runner):
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())

        assert runner.calls == ["user-123", "user-123"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind", [SessionEventKind.INITIAL_SESSION, SessionEventKind.TOKEN_REFRESHED]
    )
    async def test_session_for_new_subject_reconciles_once(
        self, provider, runner, kind
    ):
        """Restored or refreshed sessions reconcile only when the subject is new."""
        async with IdentitySessionMonitor(provider, runner):
            await provider.emit(kind, make_identity())
            await provider.emit(kind, make_identity())
            await provider.emit(SessionEventKind.TOKEN_REFRESHED, make_identity())

        assert runner.calls == ["user-123"]

    @pytest.mark.asyncio
    async def test_signed_out_publishes_and_does_not_reconcile(
        self, provider, runner
    ):
        changes: list[IdentityChange] = []

        async with IdentitySessionMonitor(provider, runner) as monitor:
            monitor.current_identity.subscribe(changes.append)
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())
            await provider.emit(SessionEventKind.SIGNED_OUT, make_identity())

            assert monitor.current_identity.is_signed_in("user-123") is False

        assert runner.calls == ["user-123"]
        assert [c.identity is None for c in changes] == [False, True]

    @pytest.mark.asyncio
    async def test_session_after_sign_out_reconciles_again(self, provider, runner):
        async with IdentitySessionMonitor(provider, runner):
            await provider.emit(SessionEventKind.INITIAL_SESSION, make_identity())
            await provider.emit(SessionEventKind.SIGNED_OUT, make_identity())
            await provider.emit(SessionEventKind.INITIAL_SESSION, make_identity())

        assert runner.calls == ["user-123", "user-123"]

    @pytest.mark.asyncio
    async def test_subjects_are_tracked_separately(self, provider, runner):
        async with IdentitySessionMonitor(provider, runner) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-1"))
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-2"))

            assert set(monitor.current_identity.snapshot()) == {"user-1", "user-2"}

        assert runner.calls == ["user-1", "user-2"]


class TestOverlap:
    """A subject never has two reconciliations running."""

    @pytest.mark.asyncio
    async def test_event_during_running_reconciliation_is_skipped(
        self, provider, runner
    ):
        runner.release.clear()

        async with IdentitySessionMonitor(provider, runner) as monitor:
            first = asyncio.create_task(
                provider.emit(SessionEventKind.SIGNED_IN, make_identity())
            )
            await asyncio.sleep(0)

            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())

            runner.release.set()
            await first

            assert monitor.gate.running == frozenset()

        assert runner.calls == ["user-123"]

    @pytest.mark.asyncio
    async def test_other_subject_is_not_blocked(self, provider, runner):
        runner.release.clear()

        async with IdentitySessionMonitor(provider, runner):
            first = asyncio.create_task(
                provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-1"))
            )
            await asyncio.sleep(0)
            second = asyncio.create_task(
                provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-2"))
            )
            await asyncio.sleep(0)

            assert runner.calls == ["user-1", "user-2"]

            runner.release.set()
            await asyncio.gather(first, second)


class TestLifecycle:
    """Subscription and shutdown."""

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, provider, runner):
        monitor = IdentitySessionMonitor(provider, runner)

        await monitor.start()
        assert provider.listener_count == 1
        assert monitor.is_running is True

        await monitor.close()
        assert provider.listener_count == 0
        assert monitor.is_running is False

        await provider.emit(SessionEventKind.SIGNED_IN, make_identity())
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_start_twice_subscribes_once(self, provider, runner):
        monitor = IdentitySessionMonitor(provider, runner)

        await monitor.start()
        await monitor.start()

        assert provider.listener_count == 1
        await monitor.close()

    @pytest.mark.asyncio
    async def test_close_waits_for_in_flight_reconciliation(self, provider, runner):
        runner.release.clear()
        monitor = IdentitySessionMonitor(provider, runner)
        await monitor.start()

        sign_in = asyncio.create_task(
            provider.emit(SessionEventKind.SIGNED_IN, make_identity())
        )
        await asyncio.sleep(0)

        closing = asyncio.create_task(monitor.close())
        await asyncio.sleep(0)
        assert closing.done() is False

        runner.release.set()
        await closing
        await sign_in

        assert runner.finished == 1


class TestFailures:
    """Reconciliation failures never block sign-in."""

    @pytest.mark.asyncio
    async def test_failed_outcome_is_recorded(self, provider):
        runner = RecordingRunner(outcome=ReconcileOutcome.STORE_UNAVAILABLE)

        async with IdentitySessionMonitor(provider, runner) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())

            assert (
                monitor.last_outcome("user-123") == ReconcileOutcome.STORE_UNAVAILABLE
            )
            assert monitor.current_identity.is_signed_in("user-123") is True

    @pytest.mark.asyncio
    async def test_raising_runner_does_not_reach_the_provider(self, provider):
        async def broken(identity: Identity) -> ReconcileOutcome:
            raise RuntimeError("database exploded")

        async with IdentitySessionMonitor(provider, broken) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity())

            assert monitor.current_identity.is_signed_in("user-123") is True
            assert monitor.gate.running == frozenset()


class TestTrackedSubjectCap:
    """Remembered identities and outcomes stay bounded."""

    @pytest.mark.asyncio
    async def test_least_recent_identity_is_forgotten(self, provider, runner):
        async with IdentitySessionMonitor(
            provider, runner, max_tracked_subjects=2
        ) as monitor:
            for subject_id in ["user-1", "user-2", "user-3"]:
                await provider.emit(
                    SessionEventKind.SIGNED_IN, make_identity(subject_id)
                )

            assert set(monitor.current_identity.snapshot()) == {"user-2", "user-3"}
            assert monitor.last_outcome("user-1") is None
            assert monitor.last_outcome("user-3") == ReconcileOutcome.SUCCESS

    @pytest.mark.asyncio
    async def test_recent_activity_keeps_a_subject(self, provider, runner):
        async with IdentitySessionMonitor(
            provider, runner, max_tracked_subjects=2
        ) as monitor:
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-1"))
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-2"))
            await provider.emit(
                SessionEventKind.TOKEN_REFRESHED, make_identity("user-1")
            )
            await provider.emit(SessionEventKind.SIGNED_IN, make_identity("user-3"))

            assert set(monitor.current_identity.snapshot()) == {"user-1", "user-3"}

    @pytest.mark.asyncio
    async def test_forgotten_subject_reconciles_again(self, provider, runner):
        async with IdentitySessionMonitor(provider, runner, max_tracked_subjects=1):
            await provider.emit(
                SessionEventKind.INITIAL_SESSION, make_identity("user-1")
            )
            await provider.emit(
                SessionEventKind.INITIAL_SESSION, make_identity("user-2")
            )
            await provider.emit(
                SessionEventKind.INITIAL_SESSION, make_identity("user-1")
            )

        assert runner.calls == ["user-1", "user-2", "user-1"]

    def test_default_cap_comes_from_auth_settings(self):
        assert AuthSettings().monitor_max_subjects == 10_000
