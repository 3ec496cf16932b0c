"""Health check route."""

from datetime import datetime, timezone

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request
from pydantic import BaseModel

from resilience.config import Settings

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    environment: str
    git_sha: str
    session_monitor: bool  # Whether sign-ins are being reconciled


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request, settings: FromDishka[Settings]
) -> HealthResponse:
    """Report liveness and whether the identity session monitor runs.

    A stopped monitor means sign-ins succeed but profiles are not
    bootstrapped, so it is reported as ``degraded``.
    """
    monitor = getattr(request.app.state, "identity_monitor", None)
    monitor_running = bool(monitor and monitor.is_running)

    return HealthResponse(
        status="healthy" if monitor_running else "degraded",
        timestamp=datetime.now(timezone.utc),
        environment=settings.environment,
        git_sha=settings.git_sha,
        session_monitor=monitor_running,
    )
