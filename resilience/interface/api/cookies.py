"""Session cookie helpers shared by the auth routes and the route guard."""

from datetime import datetime, timezone

from starlette.responses import Response

from resilience.config import Settings


def _cookie_options(settings: Settings) -> dict:
    # Plain HTTP in development, so cookies cannot be secure there
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
        "path": "/",
    }


def set_session_cookies(
    response: Response,
    settings: Settings,
    access_token: str,
    refresh_token: str | None,
    expires_at: datetime | None,
) -> None:
    """Store a session on the response as HTTP-only cookies."""
    access_max_age = None
    if expires_at is not None:
        access_max_age = max(
            0, int((expires_at - datetime.now(timezone.utc)).total_seconds())
        )

    response.set_cookie(
        key=settings.auth.access_token_cookie,
        value=access_token,
        max_age=access_max_age,
        **_cookie_options(settings),
    )

    if refresh_token:
        response.set_cookie(
            key=settings.auth.refresh_token_cookie,
            value=refresh_token,
            max_age=settings.auth.refresh_token_max_age_days * 24 * 60 * 60,
            **_cookie_options(settings),
        )


def clear_session_cookies(response: Response, settings: Settings) -> None:
    """Remove the session cookies."""
    for key in (
        settings.auth.access_token_cookie,
        settings.auth.refresh_token_cookie,
    ):
        response.delete_cookie(key=key, path="/")


def set_code_verifier_cookie(
    response: Response, settings: Settings, code_verifier: str
) -> None:
    """Keep the PKCE verifier until the OAuth callback."""
    response.set_cookie(
        key=settings.auth.code_verifier_cookie,
        value=code_verifier,
        max_age=10 * 60,
        **_cookie_options(settings),
    )


def clear_code_verifier_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.auth.code_verifier_cookie, path="/")
