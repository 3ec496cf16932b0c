"""Supabase Auth (GoTrue) client.

Implements the session provider on top of the hosted Supabase Auth API:
OAuth sign-in with PKCE, code exchange, token refresh and sign-out.
Access tokens are verified locally against the project JWT secret.
"""

import secrets
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

import httpx
import logfire

from resilience.adapter.error import ProviderError
from resilience.config import AuthSettings
from resilience.domain.model.identity import Identity
from resilience.domain.model.session import Session, SessionEvent
from resilience.domain.service.session_provider import SessionProvider
from resilience.domain.value import SessionEventKind, SignInRequest
from resilience.util.jwt import (
    AccessTokenClaims,
    JWTError,
    create_access_token,
    verify_access_token,
)

from .pkce import generate_pkce_pair


class SupabaseAuthError(ProviderError):
    """Supabase Auth request failed."""

    pass


class SupabaseAuthClient(SessionProvider):
    """Base class for Supabase Auth clients.

    Provides type distinction for dependency injection and the parts shared
    by the real and mock clients: reading sessions from access tokens and
    emitting session events.
    """

    def __init__(self, auth_settings: AuthSettings) -> None:
        super().__init__()
        self.auth_settings = auth_settings

    async def get_session(self, access_token: str | None) -> Session | None:
        """Read the session carried by an access token.

        Emits INITIAL_SESSION for every valid token; the monitor decides
        whether that is news.
        """
        if not access_token:
            return None

        try:
            claims = verify_access_token(access_token, self.auth_settings)
        except JWTError as e:
            logfire.debug("Access token rejected", error=str(e))
            return None

        session = Session(
            access_token=access_token,
            expires_at=claims.exp,
            identity=identity_from_claims(claims),
        )
        await self._emit(SessionEventKind.INITIAL_SESSION, session.identity)
        return session

    async def _emit(self, kind: SessionEventKind, identity: Identity) -> None:
        await self._notify(SessionEvent(kind=kind, identity=identity))


def identity_from_claims(claims: AccessTokenClaims) -> Identity:
    """Build an identity from verified access token claims."""
    return Identity(
        subject_id=claims.sub,
        email=claims.email or None,
        phone=claims.phone or None,
        metadata=claims.user_metadata,
        provider=claims.app_metadata.get("provider"),
    )


def identity_from_user(user: dict[str, Any]) -> Identity:
    """Build an identity from a Supabase Auth user object."""
    app_metadata = user.get("app_metadata") or {}
    return Identity(
        subject_id=user.get("id") or "",
        email=user.get("email") or None,
        phone=user.get("phone") or None,
        metadata=user.get("user_metadata") or {},
        provider=app_metadata.get("provider"),
    )


def session_from_token_response(data: dict[str, Any]) -> Session:
    """Build a session from a Supabase Auth token response.

    Raises:
        SupabaseAuthError: If the response carries no access token or user
    """
    if not data.get("access_token") or not data.get("user"):
        raise SupabaseAuthError("Token response is missing the session")

    expires_at = None
    if data.get("expires_at"):
        expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=timezone.utc)

    return Session(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_at=expires_at,
        identity=identity_from_user(data["user"]),
    )


class RealSupabaseAuthClient(SupabaseAuthClient):
    """Supabase Auth client talking to the hosted GoTrue API."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize Supabase Auth client.

        Args:
            auth_settings: Authentication settings (project URL and keys)
        """
        super().__init__(auth_settings)
        self.base_url = f"{auth_settings.supabase_url.rstrip('/')}/auth/v1"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.auth_settings.supabase_anon_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def initiate_sign_in(self, provider: str, redirect_to: str) -> SignInRequest:
        """Build the authorize URL for an OAuth sign-in with PKCE."""
        code_verifier, code_challenge = generate_pkce_pair()

        params = {
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
            **self.auth_settings.oauth_query_params,
        }
        authorization_url = f"{self.base_url}/authorize?{urlencode(params)}"

        logfire.info(
            "Supabase OAuth sign-in initiated",
            provider=provider,
            redirect_to=redirect_to,
        )

        return SignInRequest(
            authorization_url=authorization_url, code_verifier=code_verifier
        )

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None
    ) -> Session:
        """Exchange the callback code for a session.

        Raises:
            SupabaseAuthError: If the exchange fails
        """
        if not code_verifier:
            raise SupabaseAuthError("PKCE verifier not found")

        data = await self._post_token(
            "pkce", {"auth_code": code, "code_verifier": code_verifier}
        )
        session = session_from_token_response(data)

        logfire.info(
            "Supabase code exchange completed",
            subject_id=session.identity.subject_id,
        )

        await self._emit(SessionEventKind.SIGNED_IN, session.identity)
        return session

    async def refresh_session(self, refresh_token: str) -> Session:
        """Exchange a refresh token for a new session.

        Raises:
            SupabaseAuthError: If the refresh fails
        """
        data = await self._post_token("refresh_token", {"refresh_token": refresh_token})
        session = session_from_token_response(data)

        logfire.info(
            "Supabase session refreshed", subject_id=session.identity.subject_id
        )

        await self._emit(SessionEventKind.TOKEN_REFRESHED, session.identity)
        return session

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session's refresh tokens.

        Raises:
            SupabaseAuthError: If the logout request fails
        """
        try:
            claims = verify_access_token(access_token, self.auth_settings)
        except JWTError:
            claims = None

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.base_url}/logout",
                    headers=self._headers(access_token),
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error("Supabase logout HTTP error", error=str(e))
            raise SupabaseAuthError(f"HTTP error during sign-out: {e}")

        # 401/404: the session is already gone
        if response.status_code not in (200, 204, 401, 404):
            logfire.error(
                "Supabase logout failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise SupabaseAuthError(
                f"Sign-out failed: {response.status_code}",
                status_code=response.status_code,
            )

        if claims is not None:
            logfire.info("Supabase session signed out", subject_id=claims.sub)
            await self._emit(SessionEventKind.SIGNED_OUT, identity_from_claims(claims))

    async def _post_token(self, grant_type: str, body: dict[str, str]) -> dict:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.base_url}/token",
                    params={"grant_type": grant_type},
                    json=body,
                    headers=self._headers(),
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error(
                "Supabase token request HTTP error", grant_type=grant_type, error=str(e)
            )
            raise SupabaseAuthError(f"HTTP error during token request: {e}")

        if response.status_code != 200:
            logfire.error(
                "Supabase token request failed",
                grant_type=grant_type,
                status_code=response.status_code,
                error=response.text,
            )
            raise SupabaseAuthError(
                f"Token request failed: {response.status_code}",
                status_code=response.status_code,
            )

        return response.json()


MOCK_IDENTITY = Identity(
    subject_id="mock-subject-123",
    email="mock.trainer@example.com",
    metadata={"full_name": "Mock Trainer"},
    provider="google",
)


class MockSupabaseAuthClient(SupabaseAuthClient):
    """Mock Supabase Auth client for testing.

    Issues real signed access tokens without calling Supabase. Any code
    signs in as ``MOCK_IDENTITY`` unless another identity was registered
    for it; the code ``"invalid"`` is rejected.
    """

    def __init__(self, auth_settings: AuthSettings) -> None:
        super().__init__(auth_settings)
        self._identities_by_code: dict[str, Identity] = {}
        self._refresh_tokens: dict[str, Identity] = {}

    def register_code(self, code: str, identity: Identity) -> None:
        """Make a callback code sign in as the given identity."""
        self._identities_by_code[code] = identity

    def issue_session(self, identity: Identity) -> Session:
        """Create a session for an identity without emitting an event."""
        access_token = create_access_token(
            identity.subject_id,
            self.auth_settings,
            email=identity.email,
            user_metadata=identity.metadata,
            app_metadata={"provider": identity.provider} if identity.provider else {},
        )
        refresh_token = secrets.token_urlsafe(24)
        self._refresh_tokens[refresh_token] = identity
        return Session(
            access_token=access_token,
            refresh_token=refresh_token,
            identity=identity,
        )

    async def initiate_sign_in(self, provider: str, redirect_to: str) -> SignInRequest:
        code_verifier, code_challenge = generate_pkce_pair()
        params = {
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
            **self.auth_settings.oauth_query_params,
            "mock": "true",
        }
        return SignInRequest(
            authorization_url=f"https://mock.supabase.co/auth/v1/authorize?{urlencode(params)}",
            code_verifier=code_verifier,
        )

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None
    ) -> Session:
        if code == "invalid" or not code_verifier:
            raise SupabaseAuthError("Invalid authorization code")

        identity = self._identities_by_code.get(code, MOCK_IDENTITY)
        session = self.issue_session(identity)
        await self._emit(SessionEventKind.SIGNED_IN, identity)
        return session

    async def refresh_session(self, refresh_token: str) -> Session:
        identity = self._refresh_tokens.pop(refresh_token, None)
        if identity is None:
            raise SupabaseAuthError("Invalid refresh token")

        session = self.issue_session(identity)
        await self._emit(SessionEventKind.TOKEN_REFRESHED, identity)
        return session

    async def sign_out(self, access_token: str) -> None:
        try:
            claims = verify_access_token(access_token, self.auth_settings)
        except JWTError:
            return

        self._refresh_tokens = {
            token: identity
            for token, identity in self._refresh_tokens.items()
            if identity.subject_id != claims.sub
        }
        await self._emit(SessionEventKind.SIGNED_OUT, identity_from_claims(claims))
