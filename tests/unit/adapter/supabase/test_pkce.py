"""Unit tests for PKCE utilities."""

import re
from base64 import urlsafe_b64decode, urlsafe_b64encode
from hashlib import sha256

from resilience.adapter.supabase.pkce import generate_pkce_pair


class TestGeneratePkcePair:
    """Tests for generate_pkce_pair function."""

    def test_verifier_is_base64url_without_padding(self):
        verifier, _ = generate_pkce_pair()

        assert re.match(r"^[A-Za-z0-9_-]+$", verifier)
        assert len(verifier) == 64
        assert len(urlsafe_b64decode(verifier)) == 48

    def test_verifier_length_within_rfc_bounds(self):
        """RFC 7636 allows 43 to 128 characters."""
        verifier, _ = generate_pkce_pair()

        assert 43 <= len(verifier) <= 128

    def test_challenge_is_s256_of_verifier(self):
        verifier, challenge = generate_pkce_pair()

        expected = (
            urlsafe_b64encode(sha256(verifier.encode("ascii")).digest())
            .rstrip(b"=")
            .decode("ascii")
        )

        assert challenge == expected
        assert len(challenge) == 43

    def test_generates_unique_pairs(self):
        first = generate_pkce_pair()
        second = generate_pkce_pair()

        assert first[0] != second[0]
        assert first[1] != second[1]
