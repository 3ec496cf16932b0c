"""Engine and session factory for the profiles database."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from resilience.config import Settings

APPLICATION_NAME = "resilience-backend"


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg engine.

    Connections are checked before use, since the pool outlives database
    restarts, and tagged with the application name for ``pg_stat_activity``.
    """
    return create_async_engine(
        settings.database.url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        connect_args={"server_settings": {"application_name": APPLICATION_NAME}},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used for one request or reconciliation run.

    Objects stay readable after commit; the repositories map rows to
    immutable models anyway.
    """
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
