"""Application layer DI providers."""

from dishka import Scope, provide

from resilience.application.usecase.auth import (
    CompleteSignInUseCase,
    GetCurrentUserUseCase,
    InitiateSignInUseCase,
    SignOutUseCase,
)
from resilience.application.usecase.profile import ReconcileProfileUseCase
from resilience.config import AuthSettings
from resilience.domain.service import (
    ProfileReconciler,
    ProfileService,
    SessionProvider,
)
from resilience.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_initiate_sign_in_use_case(
        self, session_provider: SessionProvider, auth_settings: AuthSettings
    ) -> InitiateSignInUseCase:
        """Provide initiate sign-in use case."""
        return InitiateSignInUseCase(
            session_provider=session_provider, auth_settings=auth_settings
        )

    @provide(scope=Scope.REQUEST)
    def get_complete_sign_in_use_case(
        self, session_provider: SessionProvider
    ) -> CompleteSignInUseCase:
        """Provide complete sign-in use case."""
        return CompleteSignInUseCase(session_provider=session_provider)

    @provide(scope=Scope.REQUEST)
    def get_sign_out_use_case(
        self, session_provider: SessionProvider
    ) -> SignOutUseCase:
        """Provide sign-out use case."""
        return SignOutUseCase(session_provider=session_provider)

    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self, session_provider: SessionProvider, profile_service: ProfileService
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(
            session_provider=session_provider, profile_service=profile_service
        )

    # Profile use cases
    @provide(scope=Scope.REQUEST)
    def get_reconcile_profile_use_case(
        self, profile_reconciler: ProfileReconciler
    ) -> ReconcileProfileUseCase:
        """Provide reconcile profile use case."""
        return ReconcileProfileUseCase(profile_reconciler=profile_reconciler)
