"""Authentication session and session change events."""

from datetime import datetime
from typing import Optional

from resilience.domain.model.common import DomainModel
from resilience.domain.model.identity import Identity
from resilience.domain.value import SessionEventKind


class Session(DomainModel):
    """A valid session issued by the identity provider."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    identity: Identity


class SessionEvent(DomainModel):
    """Notification of a session state transition.

    ``identity`` is the identity the transition concerns; for SIGNED_OUT it
    is the identity that signed out.
    """

    kind: SessionEventKind
    identity: Identity

    @property
    def is_sign_out(self) -> bool:
        return self.kind == SessionEventKind.SIGNED_OUT
