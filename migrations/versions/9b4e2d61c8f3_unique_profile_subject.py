"""unique profile per subject

Collapse duplicate profiles left by concurrent sign-ins, keeping the oldest
row per subject, then enforce one row per subject.

Revision ID: 9b4e2d61c8f3
Revises: 3c1f9a7d2e40
Create Date: 2026-10-06 16:40:02.771930

"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "9b4e2d61c8f3"
down_revision: Union[str, Sequence[str], None] = "3c1f9a7d2e40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # 1. Delete every duplicate except the oldest (lowest id breaks ties)
    op.execute("""
        DELETE FROM profiles
        WHERE id IN (
            SELECT id FROM (
                SELECT
                    id,
                    ROW_NUMBER() OVER (
                        PARTITION BY subject_id
                        ORDER BY created_at ASC NULLS LAST, id ASC
                    ) AS position
                FROM profiles
            ) ranked
            WHERE ranked.position > 1
        )
    """)

    # 2. The unique constraint replaces the plain index
    op.drop_index("idx_profiles_subject_id", table_name="profiles")
    op.create_unique_constraint("uq_profiles_subject_id", "profiles", ["subject_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint("uq_profiles_subject_id", "profiles", type_="unique")
    op.create_index("idx_profiles_subject_id", "profiles", ["subject_id"])
