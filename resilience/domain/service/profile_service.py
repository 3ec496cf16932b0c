"""Profile domain service."""

import logfire

from resilience.domain.model.profile import Profile
from resilience.domain.repository import ProfileRepository


class ProfileService:
    """Domain service for reading profiles."""

    def __init__(self, profile_repository: ProfileRepository) -> None:
        """Initialize profile service.

        Args:
            profile_repository: Profile repository
        """
        self.profile_repository = profile_repository

    async def find_by_subject(self, subject_id: str) -> Profile | None:
        """Get the profile for a subject id.

        Args:
            subject_id: The identity's subject id

        Returns:
            Profile if found, None otherwise
        """
        with logfire.span("profile_service.find_by_subject", subject_id=subject_id):
            profile = await self.profile_repository.find_by_subject(subject_id)
            if profile:
                logfire.info(
                    "Profile found", subject_id=subject_id, profile_id=profile.id
                )
            else:
                logfire.info("No profile for subject", subject_id=subject_id)
            return profile
