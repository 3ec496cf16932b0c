"""Profile use cases."""

from .reconcile_profile import (
    ReconcileProfileRequest,
    ReconcileProfileResponse,
    ReconcileProfileUseCase,
)

__all__ = [
    "ReconcileProfileRequest",
    "ReconcileProfileResponse",
    "ReconcileProfileUseCase",
]
