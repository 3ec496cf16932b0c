"""Access token utilities.

Supabase Auth issues HS256 access tokens signed with the project's JWT
secret. Verifying them locally avoids a round trip per request.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from pydantic import BaseModel

from resilience.config import AuthSettings


class AccessTokenClaims(BaseModel):
    """Claims of a Supabase access token that this service reads."""

    sub: str
    exp: datetime
    email: str | None = None
    phone: str | None = None
    user_metadata: dict[str, Any] = {}
    app_metadata: dict[str, Any] = {}


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_access_token(
    subject_id: str,
    settings: AuthSettings,
    email: str | None = None,
    user_metadata: dict[str, Any] | None = None,
    app_metadata: dict[str, Any] | None = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Create an access token shaped like the ones Supabase Auth issues.

    Used by the mock session provider and by tests.

    Args:
        subject_id: Identity subject (the ``sub`` claim)
        settings: Authentication settings
        email: Optional email claim
        user_metadata: Optional user metadata claim
        app_metadata: Optional app metadata claim
        expires_in: Token lifetime

    Returns:
        Encoded JWT token
    """
    payload = {
        "sub": subject_id,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "email": email,
        "user_metadata": user_metadata or {},
        "app_metadata": app_metadata or {},
        "exp": datetime.now(timezone.utc) + expires_in,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str, settings: AuthSettings) -> AccessTokenClaims:
    """Verify and decode an access token.

    Args:
        token: JWT token to verify
        settings: Authentication settings

    Returns:
        Token claims if valid

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
        return AccessTokenClaims(**payload)
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")
