"""Public read endpoints for officials and counties.

Rows come from the canonical store; when it holds nothing for the requested
state the fallback store is served instead and flagged as such.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from civic_sync.core.dependencies import get_async_session, get_roster
from civic_sync.lib.jurisdictions import Jurisdiction, JurisdictionRoster
from civic_sync.schemas.directory import CountyListResponse, CountyResponse, OfficialListResponse, OfficialResponse
from civic_sync.services.directory_service import get_counties_by_state, get_officials_by_state

directory_router = APIRouter(tags=["directory"])


def _resolve_state(roster: JurisdictionRoster, state: str) -> Jurisdiction:
    jurisdiction = roster.get(state)
    if jurisdiction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown state: {state}")
    return jurisdiction


@directory_router.get("/officials", response_model=OfficialListResponse)
async def list_officials(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    roster: Annotated[JurisdictionRoster, Depends(get_roster)],
    state: str = Query(..., min_length=2, description="State name or two-letter abbreviation"),
) -> OfficialListResponse:
    """List federal officials for a state. No authentication required."""
    jurisdiction = _resolve_state(roster, state)
    try:
        officials, source = await get_officials_by_state(session, jurisdiction.name)
    except Exception as e:
        logger.error(f"Unexpected error listing officials for {jurisdiction.name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch officials data",
        ) from e
    return OfficialListResponse(
        state=jurisdiction.name,
        source=source,
        officials=[OfficialResponse.model_validate(o) for o in officials],
    )


@directory_router.get("/counties", response_model=CountyListResponse)
async def list_counties(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    roster: Annotated[JurisdictionRoster, Depends(get_roster)],
    state: str = Query(..., min_length=2, description="State name or two-letter abbreviation"),
) -> CountyListResponse:
    """List counties with population for a state. No authentication required."""
    jurisdiction = _resolve_state(roster, state)
    try:
        counties, source = await get_counties_by_state(session, jurisdiction.name)
    except Exception as e:
        logger.error(f"Unexpected error listing counties for {jurisdiction.name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch counties data",
        ) from e
    return CountyListResponse(
        state=jurisdiction.name,
        source=source,
        counties=[CountyResponse.model_validate(c) for c in counties],
    )
