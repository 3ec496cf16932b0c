"""Domain models."""

from resilience.domain.model.identity import Identity
from resilience.domain.model.profile import Profile
from resilience.domain.model.session import Session, SessionEvent

__all__ = ["Identity", "Profile", "Session", "SessionEvent"]
