"""Per-subject re-entrancy guard for profile reconciliation."""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum


class SubjectState(str, Enum):
    """Reconciliation state of one subject."""

    IDLE = "idle"
    RUNNING = "running"


class ReconciliationGate:
    """State machine IDLE -> RUNNING -> IDLE per subject id.

    ``try_begin`` checks and sets the state without suspending, so under a
    single event loop two notifications for the same subject can never both
    see IDLE.
    """

    def __init__(self) -> None:
        self._running: set[str] = set()

    def state(self, subject_id: str) -> SubjectState:
        if subject_id in self._running:
            return SubjectState.RUNNING
        return SubjectState.IDLE

    def try_begin(self, subject_id: str) -> bool:
        """Move a subject from IDLE to RUNNING.

        Returns:
            True if the caller now owns the run, False if one is in progress
        """
        if subject_id in self._running:
            return False
        self._running.add(subject_id)
        return True

    def finish(self, subject_id: str) -> None:
        """Move a subject from RUNNING back to IDLE.

        Raises:
            ValueError: If the subject is not running
        """
        if subject_id not in self._running:
            raise ValueError(f"No reconciliation running for subject {subject_id}")
        self._running.remove(subject_id)

    @property
    def running(self) -> frozenset[str]:
        return frozenset(self._running)

    @contextmanager
    def claim(self, subject_id: str) -> Iterator[bool]:
        """Hold the subject for the duration of the block if it is idle.

        Yields:
            Whether the claim succeeded
        """
        acquired = self.try_begin(subject_id)
        try:
            yield acquired
        finally:
            if acquired:
                self.finish(subject_id)
