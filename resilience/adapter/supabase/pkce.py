"""PKCE helpers for the Supabase OAuth flow."""

import secrets
from base64 import urlsafe_b64encode
from hashlib import sha256


def generate_pkce_pair() -> tuple[str, str]:
    """Generate a PKCE verifier and its S256 challenge.

    The challenge goes on the authorize URL; the verifier is kept in a
    cookie until the callback and sent with the code exchange.

    Returns:
        Tuple of (verifier, challenge), both base64url without padding
    """
    verifier = urlsafe_b64encode(secrets.token_bytes(48)).rstrip(b"=").decode("ascii")
    challenge = (
        urlsafe_b64encode(sha256(verifier.encode("ascii")).digest())
        .rstrip(b"=")
        .decode("ascii")
    )
    return verifier, challenge
