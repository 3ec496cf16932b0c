"""Domain value objects for ResiliencePro."""

from resilience.domain.value.identifiers import ProfileId
from resilience.domain.value.types import (
    ProfilePatch,
    ReconcileOutcome,
    RouteDecision,
    SessionEventKind,
    SignInRequest,
)

__all__ = [
    # Identifiers
    "ProfileId",
    # Types
    "ProfilePatch",
    "ReconcileOutcome",
    "RouteDecision",
    "SessionEventKind",
    "SignInRequest",
]
