"""PostgreSQL implementation of Profile repository."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import String, case, delete, func, literal, select, update
from sqlalchemy.dialects.postgresql import ARRAY, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resilience.domain.error import StoreConstraintError, StoreError
from resilience.domain.model import Profile
from resilience.domain.repository import ProfileRepository
from resilience.domain.value import ProfileId, ProfilePatch
from resilience.persistence.mappers import (
    patch_to_dict,
    profile_to_dict,
    row_to_profile,
)
from resilience.persistence.tables import profiles_table


def _append_missing(column, values: frozenset[str]):
    """Array expression adding each value the column does not contain yet."""
    expr = column
    for value in sorted(values):
        expr = case(
            (expr.contains([value]), expr),
            else_=func.array_append(
                expr, literal(value, String), type_=ARRAY(String)
            ),
        )
    return expr


class PostgresProfileRepository(ProfileRepository):
    """PostgreSQL implementation of ProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        """Roll back and raise store errors for database failures."""
        try:
            yield
        except IntegrityError as e:
            await self.session.rollback()
            raise StoreConstraintError(f"{operation} rejected: {e.orig}") from e
        except (SQLAlchemyError, OSError) as e:
            await self.session.rollback()
            raise StoreError(f"{operation} failed: {e}") from e

    async def find_by_subject(self, subject_id: str) -> Optional[Profile]:
        """Find the oldest profile for a subject id."""
        stmt = (
            select(profiles_table)
            .where(profiles_table.c.subject_id == subject_id)
            .order_by(
                profiles_table.c.created_at.asc().nulls_last(),
                profiles_table.c.id.asc(),
            )
            .limit(1)
        )
        async with self._translate_errors("find_by_subject"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_profile(dict(row)) if row else None

    async def find_all_by_subject(self, subject_id: str) -> list[Profile]:
        """Find every profile row for a subject id."""
        stmt = (
            select(profiles_table)
            .where(profiles_table.c.subject_id == subject_id)
            .order_by(profiles_table.c.id.asc())
        )
        async with self._translate_errors("find_all_by_subject"):
            result = await self.session.execute(stmt)
            rows = result.mappings().all()
        return [row_to_profile(dict(row)) for row in rows]

    async def insert(self, profile: Profile) -> Profile:
        """Insert a new profile row."""
        stmt = (
            insert(profiles_table)
            .values(**profile_to_dict(profile))
            .returning(profiles_table)
        )
        async with self._translate_errors("insert"):
            result = await self.session.execute(stmt)
            row = result.mappings().one()
        return row_to_profile(dict(row))

    async def update(
        self, profile_id: ProfileId, patch: ProfilePatch
    ) -> Optional[Profile]:
        """Write only the columns set on the patch."""
        stmt = (
            update(profiles_table)
            .where(profiles_table.c.id == profile_id)
            .values(**patch_to_dict(patch), updated_at=func.now())
            .returning(profiles_table)
        )
        async with self._translate_errors("update"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()
        return row_to_profile(dict(row)) if row else None

    async def upsert(self, profile: Profile) -> Profile:
        """Insert, or merge into the existing row on a subject id conflict."""
        table = profiles_table
        stmt = insert(table).values(**profile_to_dict(profile))
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.subject_id],
            set_={
                "display_name": case(
                    (
                        func.coalesce(func.btrim(table.c.display_name), "") == "",
                        stmt.excluded.display_name,
                    ),
                    else_=table.c.display_name,
                ),
                "roles": _append_missing(table.c.roles, profile.roles),
                "providers": _append_missing(table.c.providers, profile.providers),
                "last_authenticated_at": func.greatest(
                    table.c.last_authenticated_at,
                    stmt.excluded.last_authenticated_at,
                ),
                "updated_at": func.now(),
            },
        ).returning(table)

        async with self._translate_errors("upsert"):
            result = await self.session.execute(stmt)
            row = result.mappings().one()
        return row_to_profile(dict(row))

    async def delete(self, profile_id: ProfileId) -> None:
        """Delete a profile row."""
        stmt = delete(profiles_table).where(profiles_table.c.id == profile_id)
        async with self._translate_errors("delete"):
            await self.session.execute(stmt)

    async def commit(self) -> None:
        """Commit the session's transaction."""
        async with self._translate_errors("commit"):
            await self.session.commit()
