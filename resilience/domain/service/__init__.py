"""Domain services."""

from .base import Service
from .profile_reconciler import ProfileReconciler, survivor_order
from .profile_service import ProfileService
from .reconciliation_gate import ReconciliationGate, SubjectState
from .route_guard import RouteGuard
from .session_monitor import (
    CurrentIdentity,
    IdentityChange,
    IdentitySessionMonitor,
    ReconcileRunner,
)
from .session_provider import SessionListener, SessionProvider, Subscription

__all__ = [
    "CurrentIdentity",
    "IdentityChange",
    "IdentitySessionMonitor",
    "ProfileReconciler",
    "ProfileService",
    "ReconcileRunner",
    "ReconciliationGate",
    "RouteGuard",
    "Service",
    "SessionListener",
    "SessionProvider",
    "SubjectState",
    "Subscription",
    "survivor_order",
]
