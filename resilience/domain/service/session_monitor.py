"""Identity session monitor.

Watches the identity provider's session changes, keeps track of who is
signed in and starts one profile reconciliation per sign-in.
"""

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Optional

import logfire

from resilience.domain.model.identity import Identity
from resilience.domain.model.session import SessionEvent
from resilience.domain.value import ReconcileOutcome, SessionEventKind

from .base import Service
from .reconciliation_gate import ReconciliationGate
from .session_provider import SessionProvider, Subscription

ReconcileRunner = Callable[[Identity], Awaitable[ReconcileOutcome]]

DEFAULT_MAX_SUBJECTS = 10_000


@dataclass(frozen=True)
class IdentityChange:
    """A subject signed in (``identity`` set) or out (``identity`` None)."""

    subject_id: str
    identity: Optional[Identity]


IdentityListener = Callable[[IdentityChange], None]


class CurrentIdentity:
    """Signed-in identities, readable by anyone, written only by the monitor.

    Holds at most ``max_subjects`` identities. Past that the least recently
    seen subject is forgotten, so its next session event reconciles again.
    """

    def __init__(self, max_subjects: int = DEFAULT_MAX_SUBJECTS) -> None:
        self.max_subjects = max_subjects
        self._identities: OrderedDict[str, Identity] = OrderedDict()
        self._listeners: list[IdentityListener] = []

    def get(self, subject_id: str) -> Optional[Identity]:
        return self._identities.get(subject_id)

    def is_signed_in(self, subject_id: str) -> bool:
        return subject_id in self._identities

    def snapshot(self) -> dict[str, Identity]:
        return dict(self._identities)

    def subscribe(self, listener: IdentityListener) -> Subscription:
        """Register a listener called with every identity change."""
        self._listeners.append(listener)

        def release() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(release)

    def _publish(self, change: IdentityChange) -> None:
        if change.identity is None:
            self._identities.pop(change.subject_id, None)
        else:
            self._identities[change.subject_id] = change.identity
            self._identities.move_to_end(change.subject_id)
            while len(self._identities) > self.max_subjects:
                evicted, _ = self._identities.popitem(last=False)
                logfire.debug("Forgetting least recent identity", subject_id=evicted)

        for listener in list(self._listeners):
            listener(change)


class IdentitySessionMonitor(Service):
    """Forwards sign-ins from the session provider to profile reconciliation.

    Reconciliation runs on SIGNED_IN, and on INITIAL_SESSION or
    TOKEN_REFRESHED only for a subject not already known as signed in.
    A run already in progress for a subject is never overlapped.

    Use as an async context manager so the provider subscription is always
    released.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        reconcile: ReconcileRunner,
        gate: ReconciliationGate | None = None,
        max_tracked_subjects: int = DEFAULT_MAX_SUBJECTS,
    ) -> None:
        """Initialize session monitor.

        Args:
            session_provider: Identity provider to watch
            reconcile: Runs one reconciliation and reports its outcome
            gate: Per-subject re-entrancy guard
            max_tracked_subjects: Cap on remembered identities and outcomes
        """
        self.session_provider = session_provider
        self.reconcile = reconcile
        self.gate = gate or ReconciliationGate()
        self.max_tracked_subjects = max_tracked_subjects
        self.current_identity = CurrentIdentity(max_subjects=max_tracked_subjects)
        self._outcomes: OrderedDict[str, ReconcileOutcome] = OrderedDict()
        self._subscription: Subscription | None = None
        self._in_flight: set[asyncio.Future] = set()

    async def __aenter__(self) -> "IdentitySessionMonitor":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._subscription is not None

    def last_outcome(self, subject_id: str) -> Optional[ReconcileOutcome]:
        """Outcome of the most recent reconciliation for a subject."""
        return self._outcomes.get(subject_id)

    async def start(self) -> None:
        """Subscribe to the session provider."""
        if self._subscription is not None:
            return
        self._subscription = self.session_provider.subscribe(self._on_session_change)
        logfire.info("Identity session monitor started")

    async def close(self) -> None:
        """Unsubscribe and wait for reconciliations still running."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

        if self._in_flight:
            logfire.info(
                "Waiting for in-flight reconciliations", count=len(self._in_flight)
            )
            await asyncio.gather(*list(self._in_flight))

        logfire.info("Identity session monitor stopped")

    async def _on_session_change(self, event: SessionEvent) -> None:
        identity = event.identity
        subject_id = identity.subject_id

        with logfire.span(
            "session_monitor.on_session_change",
            kind=event.kind.value,
            subject_id=subject_id,
        ):
            if event.is_sign_out:
                self.current_identity._publish(IdentityChange(subject_id, None))
                logfire.info("Identity signed out", subject_id=subject_id)
                return

            was_signed_in = self.current_identity.is_signed_in(subject_id)
            self.current_identity._publish(IdentityChange(subject_id, identity))

            if event.kind != SessionEventKind.SIGNED_IN and was_signed_in:
                logfire.debug(
                    "Identity unchanged, no reconciliation",
                    kind=event.kind.value,
                    subject_id=subject_id,
                )
                return

            await self._reconcile_once(identity)

    async def _reconcile_once(self, identity: Identity) -> Optional[ReconcileOutcome]:
        subject_id = identity.subject_id

        with self.gate.claim(subject_id) as acquired:
            if not acquired:
                logfire.info(
                    "Reconciliation already in progress, skipping",
                    subject_id=subject_id,
                )
                return None

            done = asyncio.get_running_loop().create_future()
            self._in_flight.add(done)
            try:
                outcome = await self.reconcile(identity)
            finally:
                done.set_result(None)
                self._in_flight.discard(done)

        self._outcomes[subject_id] = outcome
        self._outcomes.move_to_end(subject_id)
        while len(self._outcomes) > self.max_tracked_subjects:
            self._outcomes.popitem(last=False)
        if outcome == ReconcileOutcome.SUCCESS:
            logfire.info("Profile reconciled", subject_id=subject_id)
        else:
            # The session stands either way; the next sign-in retries
            logfire.warn(
                "Profile reconciliation failed",
                subject_id=subject_id,
                outcome=outcome.value,
            )
        return outcome
