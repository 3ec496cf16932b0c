"""Domain value objects for ResiliencePro."""

from datetime import datetime
from enum import Enum
from typing import Any

from resilience.domain.value.common import ValueObject


class SessionEventKind(str, Enum):
    """Session state transitions emitted by the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    SIGNED_OUT = "SIGNED_OUT"


class RouteDecision(str, Enum):
    """Outcome of the session-gated route check."""

    SERVE = "serve"
    REDIRECT_TO_LOGIN = "redirect_to_login"
    REDIRECT_TO_HOME = "redirect_to_home"


class ReconcileOutcome(str, Enum):
    """Boundary value describing how a profile reconciliation ended."""

    SUCCESS = "success"
    MISSING_IDENTITY = "missing_identity"
    STORE_UNAVAILABLE = "store_unavailable"
    CONSTRAINT_VIOLATION = "constraint_violation"


class ProfilePatch(ValueObject):
    """Targeted update for a profile row.

    Only the fields that are set are written, so concurrent edits to other
    columns are left alone.
    """

    last_authenticated_at: datetime
    display_name: str | None = None
    roles: frozenset[str] | None = None
    providers: frozenset[str] | None = None

    def changes(self) -> dict[str, Any]:
        """Return the columns this patch writes."""
        return {
            field: value
            for field, value in self.model_dump().items()
            if value is not None
        }


class SignInRequest(ValueObject):
    """Where to send the browser to start an OAuth sign-in."""

    authorization_url: str
    code_verifier: str
