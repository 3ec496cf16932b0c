"""Profile reconciliation domain service."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

import logfire

from resilience.config import AuthSettings
from resilience.domain.error import (
    ConstraintViolationError,
    MissingIdentityError,
    StoreConstraintError,
    StoreError,
    StoreUnavailableError,
)
from resilience.domain.model.identity import Identity
from resilience.domain.model.profile import Profile
from resilience.domain.repository.profile import ProfileRepository
from resilience.domain.value import ProfilePatch

from .base import Service

_NO_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


@contextmanager
def _store_step(step: str) -> Iterator[None]:
    """Translate store failures inside the block into reconciliation errors."""
    try:
        yield
    except StoreConstraintError as e:
        raise ConstraintViolationError(step, str(e)) from e
    except StoreError as e:
        raise StoreUnavailableError(step, str(e)) from e


def survivor_order(profile: Profile) -> tuple:
    """Sort key picking the row that survives a duplicate collapse.

    Rows with a creation timestamp come first, oldest first; rows without
    one come after. Equal timestamps fall back to the lowest row id.
    """
    return (
        profile.created_at is None,
        profile.created_at or _NO_TIMESTAMP,
        profile.id if profile.id is not None else 0,
    )


class ProfileReconciler(Service):
    """Domain service converging the profile store for one identity.

    After a successful run exactly one profile exists for the subject id,
    it carries the default role, and a display name is only ever filled in,
    never replaced. Store failures are raised, never retried.
    """

    def __init__(
        self, profile_repository: ProfileRepository, auth_settings: AuthSettings
    ) -> None:
        """Initialize profile reconciler.

        Args:
            profile_repository: Profile repository
            auth_settings: Authentication settings (default role and provider)
        """
        self.profile_repository = profile_repository
        self.auth_settings = auth_settings

    async def reconcile(self, identity: Identity) -> Profile:
        """Ensure exactly one up-to-date profile exists for an identity.

        Steps:
        1. List every row for the subject id
        2. More than one row: keep the oldest, delete the rest, update it
        3. No row: look again, then upsert a new profile keyed on subject id
        4. One row: apply a targeted update (sign-in time, missing name,
           default role, provider)
        5. Commit the store

        Args:
            identity: Authenticated identity

        Returns:
            The reconciled profile

        Raises:
            MissingIdentityError: If the identity has no subject id
            StoreUnavailableError: If a store read or write failed
            ConstraintViolationError: If the store rejected the upsert
        """
        if not identity.subject_id or not identity.subject_id.strip():
            logfire.warn("Reconciliation rejected - identity has no subject id")
            raise MissingIdentityError()

        subject_id = identity.subject_id

        with logfire.span("profile_reconciler.reconcile", subject_id=subject_id):
            profile = await self._converge(identity)

            with _store_step("commit"):
                await self.profile_repository.commit()
            return profile

    async def _converge(self, identity: Identity) -> Profile:
        """Bring the rows for one subject down to a single updated profile."""
        subject_id = identity.subject_id

        with _store_step("list"):
            profiles = await self.profile_repository.find_all_by_subject(subject_id)
        logfire.info(
            "Profiles found for subject",
            subject_id=subject_id,
            count=len(profiles),
        )

        if len(profiles) > 1:
            survivor = await self._collapse_duplicates(profiles)
            return await self._update_existing(survivor, identity)

        if len(profiles) == 1:
            return await self._update_existing(profiles[0], identity)

        # A concurrent run may have inserted the row since the listing
        with _store_step("recheck"):
            existing = await self.profile_repository.find_by_subject(subject_id)
        if existing:
            logfire.info(
                "Profile found on recheck, skipping creation",
                subject_id=subject_id,
            )
            return await self._update_existing(existing, identity)

        return await self._create(identity)

    def build_new_profile(self, identity: Identity, now: datetime) -> Profile:
        """Build the profile for an identity seen for the first time.

        Args:
            identity: Authenticated identity
            now: Sign-in time

        Returns:
            Unsaved profile
        """
        provider = identity.provider or self.auth_settings.default_provider
        return Profile(
            subject_id=identity.subject_id,
            email=identity.email,
            display_name=identity.suggested_display_name(),
            avatar_url=identity.avatar_url,
            phone=identity.phone,
            roles=frozenset({self.auth_settings.default_role}),
            providers=frozenset({provider}),
            provider_type=provider,
            last_authenticated_at=now,
        )

    def build_patch(
        self, profile: Profile, identity: Identity, now: datetime
    ) -> ProfilePatch:
        """Compute the targeted update for an existing profile.

        Only ``last_authenticated_at`` is always written. A display name is
        added only when the profile has none, and roles and providers only
        ever grow.

        Args:
            profile: Existing profile
            identity: Authenticated identity
            now: Sign-in time

        Returns:
            Patch to apply
        """
        display_name = None
        if not profile.has_display_name:
            display_name = identity.suggested_display_name()

        roles = None
        if self.auth_settings.default_role not in profile.roles:
            roles = profile.roles | {self.auth_settings.default_role}

        provider = identity.provider or self.auth_settings.default_provider
        providers = None
        if provider not in profile.providers:
            providers = profile.providers | {provider}

        return ProfilePatch(
            last_authenticated_at=now,
            display_name=display_name,
            roles=roles,
            providers=providers,
        )

    async def _collapse_duplicates(self, profiles: list[Profile]) -> Profile:
        """Delete every row but the oldest.

        Args:
            profiles: All rows for one subject id (two or more)

        Returns:
            The surviving row
        """
        ordered = sorted(profiles, key=survivor_order)
        survivor, duplicates = ordered[0], ordered[1:]

        logfire.warn(
            "Duplicate profiles detected, collapsing",
            subject_id=survivor.subject_id,
            survivor_id=survivor.id,
            duplicate_ids=[p.id for p in duplicates],
        )

        with _store_step("delete_duplicates"):
            for duplicate in duplicates:
                await self.profile_repository.delete(duplicate.id)
                logfire.info(
                    "Duplicate profile deleted",
                    subject_id=duplicate.subject_id,
                    profile_id=duplicate.id,
                )

        return survivor

    async def _update_existing(self, profile: Profile, identity: Identity) -> Profile:
        """Apply the targeted update to an existing row."""
        patch = self.build_patch(profile, identity, datetime.now(timezone.utc))

        with _store_step("update"):
            updated = await self.profile_repository.update(profile.id, patch)
        if updated is None:
            raise StoreUnavailableError("update", "profile row no longer exists")

        logfire.info(
            "Profile updated",
            subject_id=updated.subject_id,
            profile_id=updated.id,
            fields=sorted(patch.changes()),
        )
        return updated

    async def _create(self, identity: Identity) -> Profile:
        """Upsert a new profile keyed on subject id."""
        profile = self.build_new_profile(identity, datetime.now(timezone.utc))

        with _store_step("upsert"):
            saved = await self.profile_repository.upsert(profile)

        logfire.info(
            "Profile created",
            subject_id=saved.subject_id,
            profile_id=saved.id,
            display_name=saved.display_name,
        )
        return saved
