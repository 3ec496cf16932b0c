"""Supabase infrastructure providers."""

from dishka import Scope, provide

from resilience.adapter.supabase.auth import (
    RealSupabaseAuthClient,
    SupabaseAuthClient,
)
from resilience.config import Settings
from resilience.domain.service import SessionProvider
from resilience.util.di.base import ProviderBase
from resilience.util.error import ConfigurationError


class SupabaseProvider(ProviderBase):
    """Supabase component base."""

    __mock_component__ = "supabase"


class ProdSupabaseProvider(SupabaseProvider):
    """Production Supabase provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_supabase_auth_client(self, settings: Settings) -> SupabaseAuthClient:
        """Provide Supabase Auth client.

        Raises:
            ConfigurationError: If production runs with placeholder credentials
        """
        if settings.is_production:
            placeholders = [
                name
                for name, value in (
                    ("AUTH__JWT_SECRET", settings.auth.jwt_secret),
                    ("AUTH__SUPABASE_ANON_KEY", settings.auth.supabase_anon_key),
                )
                if value.startswith("CHANGE_ME")
            ]
            if placeholders:
                raise ConfigurationError(
                    "Supabase credentials must be configured", settings=placeholders
                )

        return RealSupabaseAuthClient(auth_settings=settings.auth)

    @provide(scope=Scope.APP)
    def get_session_provider(self, client: SupabaseAuthClient) -> SessionProvider:
        """Expose the Supabase client as the session provider."""
        return client
