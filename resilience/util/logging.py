"""Stdlib logging setup for the API process.

Routes and middleware log through ``logging``; domain code reports through
Logfire spans. Both end up on stdout.
"""

import logging
import sys

from resilience.config import Settings

# Libraries that log every request or query at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncpg", "sqlalchemy.engine")


def setup_logging(settings: Settings) -> None:
    """Route all stdlib loggers to stdout.

    ``resilience.*`` logs at DEBUG when ``DEBUG=true`` and at INFO
    otherwise; chatty client libraries are held at WARNING.
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("resilience").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured for %s at %s",
        settings.environment,
        logging.getLevelName(level),
    )
