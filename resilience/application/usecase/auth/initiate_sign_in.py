"""Initiate sign-in use case."""

import logfire
from pydantic import BaseModel

from resilience.application.usecase.base import BaseUseCase
from resilience.config import AuthSettings
from resilience.domain.service import SessionProvider


class InitiateSignInRequest(BaseModel):
    """Initiate sign-in request."""

    provider: str | None = None  # Defaults to the configured provider


class InitiateSignInResponse(BaseModel):
    """Initiate sign-in response."""

    authorization_url: str
    code_verifier: str  # Kept by the browser until the callback


class InitiateSignInUseCase(
    BaseUseCase[InitiateSignInRequest, InitiateSignInResponse]
):
    """Use case for starting an OAuth sign-in."""

    def __init__(
        self, session_provider: SessionProvider, auth_settings: AuthSettings
    ) -> None:
        """Initialize initiate sign-in use case.

        Args:
            session_provider: Identity provider
            auth_settings: Authentication settings
        """
        self.session_provider = session_provider
        self.auth_settings = auth_settings

    async def execute(self, request: InitiateSignInRequest) -> InitiateSignInResponse:
        """Build the authorization URL for the provider.

        Args:
            request: Request with the OAuth provider name

        Returns:
            Authorization URL and PKCE verifier
        """
        provider = request.provider or self.auth_settings.default_provider

        with logfire.span("initiate_sign_in", provider=provider):
            sign_in = await self.session_provider.initiate_sign_in(
                provider, redirect_to=self.auth_settings.callback_url
            )

        return InitiateSignInResponse(
            authorization_url=sign_in.authorization_url,
            code_verifier=sign_in.code_verifier,
        )
