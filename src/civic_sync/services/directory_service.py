"""Read side for officials and counties, falling back to the shadow tables."""

from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from civic_sync.models.county import County, FallbackCounty
from civic_sync.models.official import FallbackOfficial, Official

Source = Literal["canonical", "fallback"]


async def get_officials_by_state(
    session: AsyncSession, state: str
) -> tuple[list[Official] | list[FallbackOfficial], Source]:
    """Return active canonical officials for a state, or its fallback rows.

    Args:
        session: The database session.
        state: Full state name.

    Returns:
        Tuple of (rows, source); fallback rows are ordered by priority.
    """
    result = await session.execute(
        select(Official)
        .where(Official.state == state, Official.is_active.is_(True))
        .order_by(Official.office, Official.name)
    )
    officials = list(result.scalars().all())
    if officials:
        return officials, "canonical"

    result = await session.execute(
        select(FallbackOfficial)
        .where(FallbackOfficial.state == state)
        .order_by(FallbackOfficial.priority.desc(), FallbackOfficial.office, FallbackOfficial.name)
    )
    return list(result.scalars().all()), "fallback"


async def get_counties_by_state(session: AsyncSession, state: str) -> tuple[list[County] | list[FallbackCounty], Source]:
    """Return canonical counties for a state, or its fallback rows when there are none."""
    result = await session.execute(select(County).where(County.state == state).order_by(County.name))
    counties = list(result.scalars().all())
    if counties:
        return counties, "canonical"

    result = await session.execute(
        select(FallbackCounty).where(FallbackCounty.state == state).order_by(FallbackCounty.name)
    )
    return list(result.scalars().all()), "fallback"
