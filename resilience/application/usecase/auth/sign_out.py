"""Sign-out use case."""

import logfire
from pydantic import BaseModel

from resilience.application.usecase.base import BaseUseCase
from resilience.domain.service import SessionProvider


class SignOutRequest(BaseModel):
    """Sign-out request."""

    access_token: str | None = None


class SignOutUseCase(BaseUseCase[SignOutRequest, None]):
    """Use case for ending a session with the identity provider."""

    def __init__(self, session_provider: SessionProvider) -> None:
        self.session_provider = session_provider

    async def execute(self, request: SignOutRequest) -> None:
        """Sign out. A request without a token has nothing to end.

        Raises:
            ProviderError: If the provider rejects the sign-out
        """
        if not request.access_token:
            logfire.info("Sign-out without a session")
            return

        with logfire.span("sign_out"):
            await self.session_provider.sign_out(request.access_token)
