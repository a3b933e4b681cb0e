"""Initial migration: canonical, fallback, and sync audit tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _official_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("office", sa.String(100), nullable=False),
        sa.Column("party", sa.String(50), nullable=True),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("state_abbreviation", sa.String(2), nullable=False),
        sa.Column("bioguide_id", sa.String(20), nullable=True),
        sa.Column("district", sa.String(20), nullable=True),
        sa.Column("congress_url", sa.Text, nullable=True),
        sa.Column("data_source", sa.String(50), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _county_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("state_abbreviation", sa.String(2), nullable=False),
        sa.Column("county_fips", sa.String(3), nullable=False),
        sa.Column("state_fips", sa.String(2), nullable=False),
        sa.Column("full_fips", sa.String(5), nullable=False),
        sa.Column("population", sa.BigInteger, nullable=False),
        sa.Column("data_source", sa.String(50), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Canonical officials
    op.create_table(
        "officials",
        *_official_columns(),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("name", "state", "office", name="uq_officials_name_state_office"),
    )
    op.create_index("ix_officials_state", "officials", ["state"])
    op.create_index("ix_officials_bioguide_id", "officials", ["bioguide_id"])
    op.create_index("ix_officials_state_office", "officials", ["state", "office"])

    # Fallback officials
    op.create_table(
        "fallback_officials",
        *_official_columns(),
        sa.Column("priority", sa.Integer, nullable=False, server_default="9"),
        sa.Column("last_verified", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name", "state", "office", name="uq_fallback_officials_name_state_office"),
    )
    op.create_index("ix_fallback_officials_state", "fallback_officials", ["state"])
    op.create_index("ix_fallback_officials_bioguide_id", "fallback_officials", ["bioguide_id"])

    # Canonical counties
    op.create_table(
        "counties",
        *_county_columns(),
        sa.UniqueConstraint("name", "state", name="uq_counties_name_state"),
    )
    op.create_index("ix_counties_state", "counties", ["state"])
    op.create_index("ix_counties_full_fips", "counties", ["full_fips"])

    # Fallback counties
    op.create_table(
        "fallback_counties",
        *_county_columns(),
        sa.Column("last_verified", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("name", "state", name="uq_fallback_counties_name_state"),
    )
    op.create_index("ix_fallback_counties_state", "fallback_counties", ["state"])

    # Sync audit log
    op.create_table(
        "sync_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("sync_date", sa.Date, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("sync_type", sa.String(30), nullable=False),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("records_processed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("records_updated", sa.Integer, nullable=False, server_default="0"),
        sa.Column("records_failed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("api_calls", sa.Integer, nullable=False, server_default="0"),
        sa.Column("api_errors", sa.Integer, nullable=False, server_default="0"),
        sa.Column("error_details", sa.JSON().with_variant(JSONB(), "postgresql"), nullable=True),
        sa.Column("execution_time_seconds", sa.Float, nullable=False, server_default="0"),
        sa.Column("data_source", sa.String(50), nullable=False, server_default="mixed"),
    )
    op.create_index("ix_sync_logs_sync_date", "sync_logs", ["sync_date"])
    op.create_index("ix_sync_logs_created_at", "sync_logs", ["created_at"])
    op.create_index("ix_sync_logs_sync_type", "sync_logs", ["sync_type"])
    op.create_index("ix_sync_logs_state", "sync_logs", ["state"])


def downgrade() -> None:
    op.drop_table("sync_logs")
    op.drop_table("fallback_counties")
    op.drop_table("counties")
    op.drop_table("fallback_officials")
    op.drop_table("officials")
