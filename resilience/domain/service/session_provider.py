"""Identity/session provider interface."""

from collections.abc import Awaitable, Callable

import logfire

from resilience.domain.model.session import Session, SessionEvent
from resilience.domain.value import SignInRequest

SessionListener = Callable[[SessionEvent], Awaitable[None]]


class Subscription:
    """Handle returned by ``subscribe``; call ``unsubscribe`` to release it."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        """Stop receiving notifications. Safe to call more than once."""
        if self._release is not None:
            self._release()
            self._release = None


class SessionProvider:
    """Generic interface to the hosted identity provider.

    Implementations push a ``SessionEvent`` to every subscriber after each
    sign-in, token refresh and sign-out they perform. Listeners are awaited
    one at a time, in subscription order.
    """

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Subscription:
        """Register a listener for session changes.

        Args:
            listener: Coroutine function called with each event

        Returns:
            Subscription handle
        """
        self._listeners.append(listener)

        def release() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(release)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def _notify(self, event: SessionEvent) -> None:
        """Deliver an event to every listener.

        A failing listener is logged and does not stop delivery; the session
        change itself has already happened.
        """
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logfire.exception(
                    "Session listener failed",
                    kind=event.kind.value,
                    subject_id=event.identity.subject_id,
                    error=str(e),
                )

    async def initiate_sign_in(self, provider: str, redirect_to: str) -> SignInRequest:
        """Start an OAuth sign-in.

        Args:
            provider: OAuth provider name (e.g. "google")
            redirect_to: Callback URL the provider returns to

        Returns:
            Authorization URL and the PKCE verifier to keep for the callback
        """
        raise NotImplementedError

    async def exchange_code_for_session(
        self, code: str, code_verifier: str | None
    ) -> Session:
        """Exchange an OAuth callback code for a session.

        Emits SIGNED_IN.

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier created by ``initiate_sign_in``

        Returns:
            The new session
        """
        raise NotImplementedError

    async def get_session(self, access_token: str | None) -> Session | None:
        """Get the session for an access token.

        Args:
            access_token: Access token from the request, if any

        Returns:
            The session if the token is valid, None otherwise
        """
        raise NotImplementedError

    async def refresh_session(self, refresh_token: str) -> Session:
        """Obtain a fresh session from a refresh token.

        Emits TOKEN_REFRESHED.

        Args:
            refresh_token: Refresh token from the request

        Returns:
            The refreshed session
        """
        raise NotImplementedError

    async def sign_out(self, access_token: str) -> None:
        """End the session for an access token.

        Emits SIGNED_OUT when the token identified a session.

        Args:
            access_token: Access token of the session to end
        """
        raise NotImplementedError
