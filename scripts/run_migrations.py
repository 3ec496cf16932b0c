#!/usr/bin/env python3
"""Apply the profiles schema migrations.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py 3c1f9a7d2e40
"""

import sys
import logfire
from alembic import command
from alembic.config import Config

from resilience.config import Settings
from resilience.util.observability import configure_logfire


def main(argv: list[str]) -> int:
    """Upgrade to the requested revision, reporting failures to Logfire."""
    settings = Settings()
    target = argv[0] if argv else "head"

    configure_logfire(settings)

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database.url)

    with logfire.span("run_migrations", target=target, environment=settings.environment):
        try:
            command.upgrade(alembic_cfg, target)
        except Exception as e:
            logfire.error(
                "Profiles schema migration failed",
                target=target,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # The app must not start against a half-migrated profiles table
            raise

    logfire.info("Profiles schema at revision", target=target)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
