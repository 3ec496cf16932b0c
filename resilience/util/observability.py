"""Logfire setup.

Domain services and use cases open Logfire spans directly::

    with logfire.span("profile_reconciler.reconcile", subject_id=subject_id):
        ...

This module only configures the SDK and instruments the libraries the
service talks through: FastAPI, SQLAlchemy and httpx (Supabase Auth).
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from resilience.config import Settings

SERVICE_NAME = "resilience-backend"


def _should_send(settings: Settings) -> bool:
    # Explicit flag wins; otherwise send only when a token is configured
    if settings.observability.send_to_logfire is not None:
        return settings.observability.send_to_logfire
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure the Logfire SDK for this process.

    Set OBSERVABILITY__LOGFIRE_TOKEN to ship telemetry; without a token
    spans and logs go to the console only.
    """
    send_to_logfire = _should_send(settings)

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=settings.git_sha,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=settings.observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def _request_attributes(request, attributes):
    """Keep method and path on request spans, nothing from cookies."""
    result = {**attributes, "path": request.url.path}
    if hasattr(request, "method"):
        result["method"] = request.method
    return result


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request handled by the app."""
    logfire.instrument_fastapi(
        app,
        capture_headers=False,  # Session cookies must not end up in traces
        request_attributes_mapper=_request_attributes,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace profile store queries."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)


def instrument_httpx() -> None:
    """Trace calls to the Supabase Auth API."""
    logfire.instrument_httpx()
