"""In-memory profile repository for testing."""

from datetime import datetime, timezone
from itertools import count
from typing import Optional

from resilience.domain.error import StoreConstraintError
from resilience.domain.model.profile import Profile
from resilience.domain.repository.profile import ProfileRepository
from resilience.domain.service.profile_reconciler import survivor_order
from resilience.domain.value import ProfileId, ProfilePatch


class InMemoryProfileRepository(ProfileRepository):
    """In-memory implementation of ProfileRepository for testing.

    Ids are sequential, like the database identity column. Pass
    ``enforce_unique_subject=False`` to seed duplicate rows the way a
    store without the uniqueness constraint would hold them.
    """

    def __init__(self, enforce_unique_subject: bool = True) -> None:
        self.enforce_unique_subject = enforce_unique_subject
        self._profiles: dict[ProfileId, Profile] = {}
        self._ids = count(1)

    @property
    def profiles(self) -> list[Profile]:
        """Every stored row, in insertion order."""
        return list(self._profiles.values())

    async def find_by_subject(self, subject_id: str) -> Optional[Profile]:
        """Find the oldest profile for a subject id."""
        matches = await self.find_all_by_subject(subject_id)
        if not matches:
            return None
        return min(matches, key=survivor_order)

    async def find_all_by_subject(self, subject_id: str) -> list[Profile]:
        """Find every profile row for a subject id."""
        return [p for p in self._profiles.values() if p.subject_id == subject_id]

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile row.

        ``created_at`` is kept when given, so tests can seed old rows.
        """
        if self.enforce_unique_subject and await self.find_all_by_subject(
            profile.subject_id
        ):
            raise StoreConstraintError(
                f"Profile for subject {profile.subject_id} already exists"
            )

        now = datetime.now(timezone.utc)
        stored = profile.model_copy(
            update={
                "id": ProfileId(next(self._ids)),
                "created_at": profile.created_at or now,
                "updated_at": now,
            }
        )
        self._profiles[stored.id] = stored
        return stored

    async def update(
        self, profile_id: ProfileId, patch: ProfilePatch
    ) -> Optional[Profile]:
        """Write only the fields set on the patch."""
        existing = self._profiles.get(profile_id)
        if existing is None:
            return None

        updated = existing.model_copy(
            update={**patch.changes(), "updated_at": datetime.now(timezone.utc)}
        )
        self._profiles[profile_id] = updated
        return updated

    async def upsert(self, profile: Profile) -> Profile:
        """Insert, or merge into the oldest row for the subject id."""
        existing = await self.find_by_subject(profile.subject_id)
        if existing is None:
            return await self.insert(profile)

        display_name = existing.display_name
        if not existing.has_display_name:
            display_name = profile.display_name

        last_authenticated_at = existing.last_authenticated_at
        if profile.last_authenticated_at and (
            last_authenticated_at is None
            or profile.last_authenticated_at > last_authenticated_at
        ):
            last_authenticated_at = profile.last_authenticated_at

        merged = existing.model_copy(
            update={
                "display_name": display_name,
                "roles": existing.roles | profile.roles,
                "providers": existing.providers | profile.providers,
                "last_authenticated_at": last_authenticated_at,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._profiles[merged.id] = merged
        return merged

    async def delete(self, profile_id: ProfileId) -> None:
        """Delete a profile row."""
        self._profiles.pop(profile_id, None)

    async def commit(self) -> None:
        """Writes apply immediately; nothing to commit."""
        pass
