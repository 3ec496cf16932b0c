"""Session-gating middleware."""

import logging

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from resilience.adapter.error import ProviderError
from resilience.config import Settings
from resilience.domain.model import Session
from resilience.domain.service import RouteGuard, SessionProvider
from resilience.interface.api.cookies import set_session_cookies

logger = logging.getLogger(__name__)


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Redirects requests according to the route guard.

    Reads the access token cookie; when it is missing or invalid and a
    refresh token cookie is present, tries a refresh and re-sets the
    cookies. A session that cannot be checked counts as no session.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        container = request.app.state.dishka_container
        guard = await container.get(RouteGuard)
        path = request.url.path

        if guard.bypasses_session_check(path):
            return await call_next(request)

        settings = await container.get(Settings)
        session_provider = await container.get(SessionProvider)

        session, refreshed = await self._read_session(
            request, settings, session_provider
        )

        decision = guard.decide(path, session_valid=session is not None)
        target = guard.redirect_path(decision)

        if target is not None:
            logger.info(f"Route guard: {path} -> {target} ({decision.value})")
            response: Response = RedirectResponse(
                url=target, status_code=status.HTTP_302_FOUND
            )
        else:
            response = await call_next(request)

        if refreshed is not None:
            set_session_cookies(
                response,
                settings,
                access_token=refreshed.access_token,
                refresh_token=refreshed.refresh_token,
                expires_at=refreshed.expires_at,
            )

        return response

    async def _read_session(
        self,
        request: Request,
        settings: Settings,
        session_provider: SessionProvider,
    ) -> tuple[Session | None, Session | None]:
        """Return the request's session and, if one was refreshed, the new one."""
        access_token = request.cookies.get(settings.auth.access_token_cookie)
        refresh_token = request.cookies.get(settings.auth.refresh_token_cookie)

        try:
            session = await session_provider.get_session(access_token)
            if session is not None or not refresh_token:
                return session, None

            refreshed = await session_provider.refresh_session(refresh_token)
            return refreshed, refreshed
        except ProviderError as e:
            logger.warning(f"Session check failed, treating as signed out: {e}")
            return None, None
