"""County models: canonical and fallback county population rows.

FIPS column mapping (Census ACS response -> column):
    state  -> state_fips      (2 digits)
    county -> county_fips     (3 digits)
    state + county -> full_fips (5 digit GEOID)
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from civic_sync.models.base import Base, UUIDMixin


class _CountyColumns(UUIDMixin):
    """Columns shared by the canonical and fallback county tables."""

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    state_abbreviation: Mapped[str] = mapped_column(String(2), nullable=False)
    county_fips: Mapped[str] = mapped_column(String(3), nullable=False)
    state_fips: Mapped[str] = mapped_column(String(2), nullable=False)
    full_fips: Mapped[str] = mapped_column(String(5), nullable=False)
    population: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    data_source: Mapped[str] = mapped_column(String(50), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class County(Base, _CountyColumns):
    """Canonical county record served by the read API."""

    __tablename__ = "counties"

    __table_args__ = (
        UniqueConstraint("name", "state", name="uq_counties_name_state"),
        Index("ix_counties_full_fips", "full_fips"),
    )


class FallbackCounty(Base, _CountyColumns):
    """Last known-good copy of a county, used when the canonical table has no rows."""

    __tablename__ = "fallback_counties"

    last_verified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("name", "state", name="uq_fallback_counties_name_state"),)
