"""Domain layer DI providers."""

from dishka import Scope, provide

from resilience.config import AuthSettings, RouteSettings
from resilience.domain.repository import ProfileRepository
from resilience.domain.service import (
    ProfileReconciler,
    ProfileService,
    RouteGuard,
)
from resilience.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services that touch repositories are REQUEST-scoped to align with the
    database session lifecycle. The route guard is pure and APP-scoped.
    """

    scope = Scope.REQUEST

    @provide
    def get_profile_reconciler(
        self, profile_repository: ProfileRepository, auth_settings: AuthSettings
    ) -> ProfileReconciler:
        """Provide profile reconciliation domain service."""
        return ProfileReconciler(
            profile_repository=profile_repository, auth_settings=auth_settings
        )

    @provide
    def get_profile_service(
        self, profile_repository: ProfileRepository
    ) -> ProfileService:
        """Provide profile domain service."""
        return ProfileService(profile_repository=profile_repository)

    @provide(scope=Scope.APP)
    def get_route_guard(self, route_settings: RouteSettings) -> RouteGuard:
        """Provide session-gated route guard."""
        return RouteGuard(route_settings=route_settings)
