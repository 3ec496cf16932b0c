"""PostgreSQL repository implementations."""

from resilience.persistence.repository.profile import PostgresProfileRepository

__all__ = ["PostgresProfileRepository"]
