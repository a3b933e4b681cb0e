"""Official models: canonical and fallback elected-official rows.

``officials`` is what the read APIs serve.  ``fallback_officials`` is a
write-through shadow that is only ever written after the matching canonical
upsert succeeded, so it can never be ahead of the canonical table.

Both tables are keyed on (name, state, office), the natural key the sync
engine upserts on.  ``bioguide_id`` is indexed (not unique) so the optional
bioguide merge mode can find an existing row whose office label changed.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint, func, true
from sqlalchemy.orm import Mapped, mapped_column

from civic_sync.models.base import Base, UUIDMixin


class _OfficialColumns(UUIDMixin):
    """Columns shared by the canonical and fallback official tables."""

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    office: Mapped[str] = mapped_column(String(100), nullable=False)
    party: Mapped[str | None] = mapped_column(String(50), nullable=True)
    state: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    state_abbreviation: Mapped[str] = mapped_column(String(2), nullable=False)
    bioguide_id: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    district: Mapped[str | None] = mapped_column(String(20), nullable=True)
    congress_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Provenance
    data_source: Mapped[str] = mapped_column(String(50), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Official(Base, _OfficialColumns):
    """Canonical elected official record served by the read API."""

    __tablename__ = "officials"

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        UniqueConstraint("name", "state", "office", name="uq_officials_name_state_office"),
        Index("ix_officials_state_office", "state", "office"),
    )


class FallbackOfficial(Base, _OfficialColumns):
    """Last known-good copy of an official, used when the canonical table has no rows."""

    __tablename__ = "fallback_officials"

    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=9)
    last_verified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("name", "state", "office", name="uq_fallback_officials_name_state_office"),)
