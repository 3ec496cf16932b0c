"""Unit tests for Identity display name derivation."""

import pytest

from resilience.domain.model import Identity


class TestSuggestedDisplayName:
    """Tests for Identity.suggested_display_name()."""

    @pytest.mark.parametrize(
        "metadata,expected",
        [
            ({"full_name": "Jane Doe", "name": "Jane"}, "Jane Doe"),
            ({"name": "Jane", "displayName": "JD"}, "Jane"),
            ({"displayName": "JD", "display_name": "jd"}, "JD"),
            ({"display_name": "jd"}, "jd"),
            ({"full_name": "   ", "name": "Jane"}, "Jane"),
            ({"full_name": "  Jane Doe  "}, "Jane Doe"),
        ],
    )
    def test_metadata_precedence(self, metadata, expected):
        identity = Identity(subject_id="user-123", metadata=metadata)

        assert identity.suggested_display_name() == expected

    def test_falls_back_to_email_local_part(self):
        identity = Identity(subject_id="user-123", email="bob@y.com")

        assert identity.suggested_display_name() == "bob"

    def test_ignores_non_string_metadata(self):
        identity = Identity(
            subject_id="user-123", email="bob@y.com", metadata={"full_name": 42}
        )

        assert identity.suggested_display_name() == "bob"

    def test_none_without_name_or_email(self):
        assert Identity(subject_id="user-123").suggested_display_name() is None

    def test_avatar_url_from_metadata(self):
        identity = Identity(
            subject_id="user-123",
            metadata={"avatar_url": "https://example.com/a.png"},
        )

        assert identity.avatar_url == "https://example.com/a.png"
        assert Identity(subject_id="user-123").avatar_url is None
