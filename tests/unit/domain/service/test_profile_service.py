"""Unit tests for ProfileService."""

import pytest

from resilience.domain.service import ProfileService
from resilience.persistence.repository.inmemory import InMemoryProfileRepository
from tests.factories import make_profile


class TestProfileService:
    """Tests for profile lookups."""

    @pytest.mark.asyncio
    async def test_find_by_subject_returns_profile(self):
        repo = InMemoryProfileRepository()
        stored = await repo.insert(make_profile(display_name="Jane Doe"))
        service = ProfileService(repo)

        profile = await service.find_by_subject("user-123")

        assert profile == stored

    @pytest.mark.asyncio
    async def test_find_by_subject_returns_none_when_missing(self):
        service = ProfileService(InMemoryProfileRepository())

        assert await service.find_by_subject("user-123") is None
