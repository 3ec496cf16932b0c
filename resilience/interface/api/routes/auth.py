"""Authentication routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from resilience.adapter.error import ProviderError
from resilience.application.usecase.auth import (
    CompleteSignInRequest,
    CompleteSignInUseCase,
    GetCurrentUserRequest,
    GetCurrentUserResponse,
    GetCurrentUserUseCase,
    InitiateSignInRequest,
    InitiateSignInUseCase,
    SignOutRequest,
    SignOutUseCase,
)
from resilience.config import Settings
from resilience.interface.api.cookies import (
    clear_code_verifier_cookie,
    clear_session_cookies,
    set_code_verifier_cookie,
    set_session_cookies,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

# Same-origin API used by the frontend's sign-out button
api_router = APIRouter(
    prefix="/api/auth", tags=["authentication"], route_class=DishkaRoute
)


class InitiateLoginRequest(BaseModel):
    """Initiate login request."""

    provider: str | None = None  # Defaults to Google


class InitiateLoginResponse(BaseModel):
    """Initiate login response."""

    authorization_url: str


class SignOutResponse(BaseModel):
    """Sign-out response."""

    success: bool


@router.post("/login", response_model=InitiateLoginResponse)
async def initiate_login(
    initiate_sign_in_use_case: FromDishka[InitiateSignInUseCase],
    settings: FromDishka[Settings],
    body: InitiateLoginRequest | None = None,
):
    """Start an OAuth sign-in with PKCE.

    The PKCE verifier is stored in an HTTP-only cookie and read back by the
    callback.

    Example:
        POST /auth/login
        {"provider": "google"}

        Response:
        {"authorization_url": "https://<project>.supabase.co/auth/v1/authorize?..."}
    """
    provider = body.provider if body else None
    logger.info(f"Initiating {provider or settings.auth.default_provider} login")

    try:
        result = await initiate_sign_in_use_case.execute(
            InitiateSignInRequest(provider=provider)
        )
    except ProviderError as e:
        logger.error(f"Failed to initiate login: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to initiate login"},
        )

    response = JSONResponse(
        content=InitiateLoginResponse(
            authorization_url=result.authorization_url
        ).model_dump()
    )
    set_code_verifier_cookie(response, settings, result.code_verifier)
    return response


@router.get("/callback")
async def oauth_callback(
    request: Request,
    complete_sign_in_use_case: FromDishka[CompleteSignInUseCase],
    settings: FromDishka[Settings],
    code: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
):
    """Handle the OAuth callback and start the session.

    Any failure sends the browser back to the login page. On success the
    session cookies are set and the browser goes to the home page.

    Example:
        GET /auth/callback?code=abc123

        Redirects to: /
        Sets cookies: sb-access-token, sb-refresh-token
    """
    login_redirect = RedirectResponse(
        url=settings.routes.login_path, status_code=status.HTTP_302_FOUND
    )

    if error:
        logger.warning(f"OAuth provider returned an error: {error} {error_description}")
        return login_redirect

    if not code:
        logger.warning("OAuth callback without a code")
        return login_redirect

    code_verifier = request.cookies.get(settings.auth.code_verifier_cookie)

    try:
        result = await complete_sign_in_use_case.execute(
            CompleteSignInRequest(code=code, code_verifier=code_verifier)
        )
    except ProviderError as e:
        logger.error(f"Code exchange failed: {e}")
        clear_code_verifier_cookie(login_redirect, settings)
        return login_redirect

    logger.info(f"Sign-in completed for subject {result.subject_id}")

    response = RedirectResponse(
        url=settings.routes.home_path, status_code=status.HTTP_302_FOUND
    )
    set_session_cookies(
        response,
        settings,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_at=result.expires_at,
    )
    clear_code_verifier_cookie(response, settings)
    return response


@router.get("/me", response_model=GetCurrentUserResponse)
async def get_current_user(
    request: Request,
    get_current_user_use_case: FromDishka[GetCurrentUserUseCase],
    settings: FromDishka[Settings],
) -> GetCurrentUserResponse:
    """Get the current user, or an unauthenticated status.

    Safe to call without a session: returns ``authenticated: false``
    instead of an error.
    """
    return await get_current_user_use_case.execute(
        GetCurrentUserRequest(
            access_token=request.cookies.get(settings.auth.access_token_cookie)
        )
    )


@api_router.post("/signout", response_model=SignOutResponse)
async def sign_out(
    request: Request,
    sign_out_use_case: FromDishka[SignOutUseCase],
    settings: FromDishka[Settings],
):
    """Sign out with the identity provider and clear the session cookies."""
    try:
        await sign_out_use_case.execute(
            SignOutRequest(
                access_token=request.cookies.get(settings.auth.access_token_cookie)
            )
        )
    except ProviderError as e:
        logger.error(f"Sign-out failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to sign out"},
        )

    response = JSONResponse(content=SignOutResponse(success=True).model_dump())
    clear_session_cookies(response, settings)
    return response
