#!/usr/bin/env python3
"""Serve the API with uvicorn.

Logfire is configured before the app is built so that container or
settings errors raised during startup are reported too.
"""

import sys
import logfire
import uvicorn

from resilience.config import Settings
from resilience.util.logging import setup_logging
from resilience.util.observability import configure_logfire

APP_FACTORY = "resilience.interface.api.app:create_app"


def main() -> int:
    settings = Settings()

    configure_logfire(settings)
    setup_logging(settings)

    logfire.info(
        "Starting API",
        base_url=settings.api.base_url,
        callback_url=settings.auth.callback_url,
    )

    try:
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host="0.0.0.0",
            port=settings.port,
            proxy_headers=not settings.api.base_url.startswith("http://localhost"),
            log_level="debug" if settings.debug else "info",
        )
    except Exception as e:
        logfire.error(
            "API startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise

    return 0


if __name__ == "__main__":
    sys.exit(main())
