"""Profile repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from resilience.domain.model.profile import Profile
from resilience.domain.value import ProfileId, ProfilePatch


class ProfileRepository(ABC):
    """Repository for Profile rows.

    Every method either succeeds or raises ``StoreError``. Writes rejected
    by a constraint raise ``StoreConstraintError``.
    """

    @abstractmethod
    async def find_by_subject(self, subject_id: str) -> Optional[Profile]:
        """Point lookup of a profile by subject id.

        Args:
            subject_id: The identity's subject id

        Returns:
            The oldest matching profile if any, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_subject(self, subject_id: str) -> list[Profile]:
        """Get every profile row stored for a subject id.

        More than one row only exists for data written before the
        uniqueness constraint was in place.

        Args:
            subject_id: The identity's subject id

        Returns:
            List of profiles (may be empty)
        """
        pass

    @abstractmethod
    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile row.

        Args:
            profile: The profile to insert (``id`` is ignored)

        Returns:
            The stored profile with its assigned id

        Raises:
            StoreConstraintError: If a row for the subject id already exists
        """
        pass

    @abstractmethod
    async def update(
        self, profile_id: ProfileId, patch: ProfilePatch
    ) -> Optional[Profile]:
        """Apply a targeted update to one profile row.

        Only the columns set on the patch are written.

        Args:
            profile_id: Row to update
            patch: Columns to write

        Returns:
            The updated profile, or None if no row has that id
        """
        pass

    @abstractmethod
    async def upsert(self, profile: Profile) -> Profile:
        """Insert a profile, or merge it into the existing row for its subject id.

        On conflict the existing row keeps a non-blank display name, gains
        the profile's roles and providers, and takes its
        ``last_authenticated_at``. Nothing else is overwritten.

        Args:
            profile: The profile to insert

        Returns:
            The stored profile
        """
        pass

    @abstractmethod
    async def delete(self, profile_id: ProfileId) -> None:
        """Delete a profile row.

        Args:
            profile_id: Row to delete
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Make every write since the last commit durable."""
        pass
