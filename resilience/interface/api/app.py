"""FastAPI application."""

from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
import logfire

from resilience.application.usecase.profile import (
    ReconcileProfileRequest,
    ReconcileProfileUseCase,
)
from resilience.config import AuthSettings
from resilience.domain.error import StoreError
from resilience.domain.model import Identity
from resilience.domain.service import IdentitySessionMonitor, SessionProvider
from resilience.domain.value import ReconcileOutcome
from resilience.interface.api.middleware import SessionGuardMiddleware
from resilience.interface.api.routes import auth, health
from resilience.util.di.container import create_container, setup_di
from resilience.util.observability import instrument_fastapi, instrument_httpx


def _reconcile_runner(container: AsyncContainer):
    """Run each reconciliation in its own request scope (own DB session)."""

    async def run(identity: Identity) -> ReconcileOutcome:
        try:
            async with container() as request_container:
                use_case = await request_container.get(ReconcileProfileUseCase)
                response = await use_case.execute(
                    ReconcileProfileRequest(identity=identity)
                )
        except StoreError as e:
            # Raised by the session commit when the request scope closes
            logfire.error(
                "Profile reconciliation failed",
                subject_id=identity.subject_id,
                step="commit",
                error=str(e),
            )
            return ReconcileOutcome.STORE_UNAVAILABLE
        return response.outcome

    return run


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the identity session monitor for the lifetime of the app."""
    container: AsyncContainer = app.state.dishka_container
    auth_settings = await container.get(AuthSettings)
    session_provider = await container.get(SessionProvider)

    async with IdentitySessionMonitor(
        session_provider,
        _reconcile_runner(container),
        max_tracked_subjects=auth_settings.monitor_max_subjects,
    ) as monitor:
        app.state.identity_monitor = monitor
        yield

    await container.close()


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, conftest.py does.

    Args:
        container: DI container; the production container when omitted
    """
    # Instrument httpx for calls to Supabase Auth
    instrument_httpx()

    app_instance = FastAPI(
        title="ResiliencePro API",
        description="Backend for ResiliencePro - sign-in, profile bootstrap and route gating",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_fastapi(app_instance)

    app_instance.add_middleware(SessionGuardMiddleware)

    # Setup dependency injection
    setup_di(app_instance, container or create_container())

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(auth.api_router)

    return app_instance
