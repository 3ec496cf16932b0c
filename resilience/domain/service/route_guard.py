"""Session-gated route guard."""

from resilience.config import RouteSettings
from resilience.domain.value import RouteDecision

from .base import Service


def _matches_prefix(path: str, prefix: str) -> bool:
    return bool(prefix) and path.startswith(prefix)


class RouteGuard(Service):
    """Decides whether a request is served or redirected.

    ============  =============  ==================
    session       path           decision
    ============  =============  ==================
    none          login route    serve
    none          other          redirect to login
    valid         login route    redirect to home
    valid         other          serve
    ============  =============  ==================

    The decision is pure; reading the session is the caller's job.
    """

    def __init__(self, route_settings: RouteSettings) -> None:
        self.route_settings = route_settings

    def bypasses_session_check(self, path: str) -> bool:
        """Whether a path is served without looking at the session.

        Covers the OAuth callback and the configured public prefixes.
        """
        if _matches_prefix(path, self.route_settings.callback_path):
            return True
        return any(
            _matches_prefix(path, prefix)
            for prefix in self.route_settings.public_prefixes
        )

    def is_login_path(self, path: str) -> bool:
        return _matches_prefix(path, self.route_settings.login_path)

    def decide(self, path: str, session_valid: bool) -> RouteDecision:
        """Apply the decision table.

        Args:
            path: Request path
            session_valid: Whether the request carries a valid session

        Returns:
            Route decision
        """
        on_login = self.is_login_path(path)

        if not session_valid:
            return RouteDecision.SERVE if on_login else RouteDecision.REDIRECT_TO_LOGIN

        return RouteDecision.REDIRECT_TO_HOME if on_login else RouteDecision.SERVE

    def redirect_path(self, decision: RouteDecision) -> str | None:
        """Target path for a redirect decision, None when serving."""
        if decision == RouteDecision.REDIRECT_TO_LOGIN:
            return self.route_settings.login_path
        if decision == RouteDecision.REDIRECT_TO_HOME:
            return self.route_settings.home_path
        return None
