"""SQLAlchemy table definitions for ResiliencePro.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    Identity,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# PROFILES TABLE (one row per identity subject)
# ============================================================================
profiles_table = Table(
    "profiles",
    metadata,
    Column("id", BigInteger, Identity(always=False), primary_key=True),
    Column("subject_id", String(255), nullable=False),  # Identity provider user id
    Column("email", String(255), nullable=True),
    Column("display_name", String(255), nullable=True),
    Column("avatar_url", Text, nullable=True),
    Column("phone", String(50), nullable=True),
    Column("roles", ARRAY(String(50)), nullable=False, server_default="{}"),
    Column("providers", ARRAY(String(50)), nullable=False, server_default="{}"),
    Column("provider_type", String(50), nullable=True),
    Column("last_authenticated_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("subject_id", name="uq_profiles_subject_id"),
)

Index("idx_profiles_email", profiles_table.c.email)
