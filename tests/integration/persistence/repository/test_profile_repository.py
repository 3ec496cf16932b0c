"""Integration tests for PostgresProfileRepository.

Need a reachable PostgreSQL (DATABASE__URL). The profiles table is created
if missing; every test uses its own subject id.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from resilience.domain.error import StoreConstraintError
from resilience.domain.model import Profile
from resilience.domain.repository import ProfileRepository
from resilience.domain.service import ProfileReconciler
from resilience.domain.value import ProfileId, ProfilePatch
from resilience.persistence.repository import PostgresProfileRepository
from resilience.persistence.tables import metadata
from tests.factories import make_identity
from tests.harness import create_env_fixture, requires_database

pytestmark = requires_database

# Integration test fixture
integration_env = create_env_fixture(unmock={"persistence"})


@pytest_asyncio.fixture
async def profile_repo(integration_env) -> ProfileRepository:
    engine = await integration_env.get(AsyncEngine)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return await integration_env.get(ProfileRepository)


@pytest.fixture
def subject_id() -> str:
    return f"it-{uuid4()}"


def _profile(subject_id: str, **overrides) -> Profile:
    return Profile(
        subject_id=subject_id,
        email="jane@x.com",
        roles=frozenset({"trainer"}),
        providers=frozenset({"google"}),
        provider_type="google",
        last_authenticated_at=datetime.now(timezone.utc),
    ).model_copy(update=overrides)


class TestPostgresProfileRepository:
    """Integration tests for PostgresProfileRepository."""

    @pytest.mark.asyncio
    async def test_insert_and_find(self, profile_repo, subject_id):
        stored = await profile_repo.insert(_profile(subject_id, display_name="Jane"))

        found = await profile_repo.find_by_subject(subject_id)

        assert found is not None
        assert found.id == stored.id
        assert found.roles == frozenset({"trainer"})
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_insert_violates_constraint(self, profile_repo, subject_id):
        await profile_repo.insert(_profile(subject_id))

        with pytest.raises(StoreConstraintError):
            await profile_repo.insert(_profile(subject_id))

    @pytest.mark.asyncio
    async def test_update_writes_only_patched_columns(self, profile_repo, subject_id):
        stored = await profile_repo.insert(_profile(subject_id, display_name="Coach"))
        later = datetime.now(timezone.utc) + timedelta(minutes=5)

        updated = await profile_repo.update(
            stored.id, ProfilePatch(last_authenticated_at=later)
        )

        assert updated is not None
        assert updated.display_name == "Coach"
        assert updated.last_authenticated_at == later

    @pytest.mark.asyncio
    async def test_update_missing_row(self, profile_repo):
        result = await profile_repo.update(
            ProfileId(-1), ProfilePatch(last_authenticated_at=datetime.now(timezone.utc))
        )

        assert result is None

    @pytest.mark.asyncio
    async def test_upsert_merges_into_existing_row(self, profile_repo, subject_id):
        stored = await profile_repo.insert(
            _profile(subject_id, display_name="Coach", roles=frozenset({"client"}))
        )

        merged = await profile_repo.upsert(
            _profile(
                subject_id,
                display_name="Jane Doe",
                providers=frozenset({"apple"}),
            )
        )

        assert merged.id == stored.id
        assert merged.display_name == "Coach"
        assert merged.roles == frozenset({"client", "trainer"})
        assert merged.providers == frozenset({"google", "apple"})

    @pytest.mark.asyncio
    async def test_upsert_fills_blank_display_name(self, profile_repo, subject_id):
        await profile_repo.insert(_profile(subject_id, display_name="  "))

        merged = await profile_repo.upsert(_profile(subject_id, display_name="Jane"))

        assert merged.display_name == "Jane"

    @pytest.mark.asyncio
    async def test_delete(self, profile_repo, subject_id):
        stored = await profile_repo.insert(_profile(subject_id))

        await profile_repo.delete(stored.id)

        assert await profile_repo.find_all_by_subject(subject_id) == []

    @pytest.mark.asyncio
    async def test_reconciler_against_postgres(self, integration_env, profile_repo):
        reconciler = await integration_env.get(ProfileReconciler)
        identity = make_identity(subject_id=f"it-{uuid4()}")

        first = await reconciler.reconcile(identity)
        second = await reconciler.reconcile(identity)

        assert first.id == second.id
        assert second.display_name == "Jane Doe"
        assert await profile_repo.find_all_by_subject(identity.subject_id) == [second]

    @pytest.mark.asyncio
    async def test_commit_makes_rows_visible_to_other_sessions(
        self, integration_env, profile_repo, subject_id
    ):
        await profile_repo.insert(_profile(subject_id))

        await profile_repo.commit()

        session_factory = await integration_env.get(async_sessionmaker[AsyncSession])
        async with session_factory() as session:
            other = PostgresProfileRepository(session)
            assert len(await other.find_all_by_subject(subject_id)) == 1
