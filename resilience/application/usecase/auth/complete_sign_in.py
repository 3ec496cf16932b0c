"""Complete sign-in use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from resilience.application.usecase.base import BaseUseCase
from resilience.domain.service import SessionProvider


class CompleteSignInRequest(BaseModel):
    """Complete sign-in request from the OAuth callback."""

    code: str
    code_verifier: str | None = None


class CompleteSignInResponse(BaseModel):
    """Complete sign-in response."""

    access_token: str
    refresh_token: str | None
    expires_at: datetime | None
    subject_id: str


class CompleteSignInUseCase(
    BaseUseCase[CompleteSignInRequest, CompleteSignInResponse]
):
    """Use case for exchanging the OAuth callback code for a session.

    The exchange makes the provider emit SIGNED_IN, which drives profile
    reconciliation through the session monitor.
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self.session_provider = session_provider

    async def execute(self, request: CompleteSignInRequest) -> CompleteSignInResponse:
        """Exchange the code for a session.

        Raises:
            ProviderError: If the exchange fails
        """
        with logfire.span("complete_sign_in"):
            session = await self.session_provider.exchange_code_for_session(
                request.code, request.code_verifier
            )
            logfire.info(
                "User signed in", subject_id=session.identity.subject_id
            )

        return CompleteSignInResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
            subject_id=session.identity.subject_id,
        )
