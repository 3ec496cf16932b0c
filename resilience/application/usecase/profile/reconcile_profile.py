"""Reconcile profile use case."""

import logfire
from pydantic import BaseModel

from resilience.application.usecase.base import BaseUseCase
from resilience.domain.error import (
    ConstraintViolationError,
    MissingIdentityError,
    ReconciliationError,
    StoreUnavailableError,
)
from resilience.domain.model import Identity
from resilience.domain.service import ProfileReconciler
from resilience.domain.value import ReconcileOutcome


class ReconcileProfileRequest(BaseModel):
    """Reconcile profile request."""

    identity: Identity


class ReconcileProfileResponse(BaseModel):
    """Reconcile profile response.

    ``step`` and ``message`` are set only when the run failed.
    """

    outcome: ReconcileOutcome
    profile_id: int | None = None
    step: str | None = None
    message: str | None = None


_OUTCOMES: dict[type[ReconciliationError], ReconcileOutcome] = {
    MissingIdentityError: ReconcileOutcome.MISSING_IDENTITY,
    StoreUnavailableError: ReconcileOutcome.STORE_UNAVAILABLE,
    ConstraintViolationError: ReconcileOutcome.CONSTRAINT_VIOLATION,
}


class ReconcileProfileUseCase(
    BaseUseCase[ReconcileProfileRequest, ReconcileProfileResponse]
):
    """Use case for converging the profile store after a sign-in."""

    def __init__(self, profile_reconciler: ProfileReconciler) -> None:
        """Initialize reconcile profile use case.

        Args:
            profile_reconciler: Profile reconciliation domain service
        """
        self.profile_reconciler = profile_reconciler

    async def execute(
        self, request: ReconcileProfileRequest
    ) -> ReconcileProfileResponse:
        """Reconcile the profile for an identity.

        Reconciliation errors become an outcome value so the caller can log
        them without aborting the sign-in.

        Args:
            request: Request with the authenticated identity

        Returns:
            Outcome of the run
        """
        try:
            profile = await self.profile_reconciler.reconcile(request.identity)
        except ReconciliationError as e:
            outcome = _OUTCOMES.get(type(e), ReconcileOutcome.STORE_UNAVAILABLE)
            logfire.error(
                "Profile reconciliation error",
                subject_id=request.identity.subject_id,
                outcome=outcome.value,
                step=e.step,
                error=str(e),
            )
            return ReconcileProfileResponse(
                outcome=outcome, step=e.step, message=str(e)
            )

        return ReconcileProfileResponse(
            outcome=ReconcileOutcome.SUCCESS, profile_id=profile.id
        )
