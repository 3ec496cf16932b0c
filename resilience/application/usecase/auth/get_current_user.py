"""Get current user use case."""

from datetime import datetime

from pydantic import BaseModel

from resilience.application.usecase.base import BaseUseCase
from resilience.domain.service import ProfileService, SessionProvider


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    access_token: str | None = None


class ProfileInfo(BaseModel):
    """Profile information for response."""

    id: int
    display_name: str | None
    avatar_url: str | None
    roles: list[str]
    providers: list[str]
    last_authenticated_at: datetime | None
    created_at: datetime | None


class GetCurrentUserResponse(BaseModel):
    """Get current user response.

    ``profile`` is None when reconciliation has not produced one yet; the
    user is still authenticated.
    """

    authenticated: bool
    subject_id: str | None = None
    email: str | None = None
    profile: ProfileInfo | None = None


class GetCurrentUserUseCase(
    BaseUseCase[GetCurrentUserRequest, GetCurrentUserResponse]
):
    """Use case for getting the current authenticated user."""

    def __init__(
        self, session_provider: SessionProvider, profile_service: ProfileService
    ) -> None:
        """Initialize get current user use case.

        Args:
            session_provider: Identity provider
            profile_service: Profile domain service
        """
        self.session_provider = session_provider
        self.profile_service = profile_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Execute get current user flow.

        Steps:
        1. Read the session from the access token
        2. Load the profile for its subject id, if any

        Args:
            request: Request with the access token

        Returns:
            Authentication status, identity and profile
        """
        session = await self.session_provider.get_session(request.access_token)
        if session is None:
            return GetCurrentUserResponse(authenticated=False)

        identity = session.identity
        profile = await self.profile_service.find_by_subject(identity.subject_id)

        return GetCurrentUserResponse(
            authenticated=True,
            subject_id=identity.subject_id,
            email=identity.email,
            profile=(
                ProfileInfo(
                    id=profile.id,
                    display_name=profile.display_name,
                    avatar_url=profile.avatar_url,
                    roles=sorted(profile.roles),
                    providers=sorted(profile.providers),
                    last_authenticated_at=profile.last_authenticated_at,
                    created_at=profile.created_at,
                )
                if profile
                else None
            ),
        )
