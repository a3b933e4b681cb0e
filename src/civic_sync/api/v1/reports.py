"""Data health report API endpoint."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from civic_sync.core.dependencies import get_async_session, get_roster
from civic_sync.lib.jurisdictions import JurisdictionRoster
from civic_sync.schemas.reports import DailyHealthReport
from civic_sync.services.health_report_service import build_daily_report

reports_router = APIRouter(prefix="/reports", tags=["reports"])


@reports_router.get("/daily", response_model=DailyHealthReport)
async def get_daily_report(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    roster: Annotated[JurisdictionRoster, Depends(get_roster)],
    report_date: date | None = Query(None, alias="date", description="Report date (defaults to today, UTC)"),
) -> DailyHealthReport:
    """Per-state data health built from the stores and the last seven days of sync logs."""
    try:
        return await build_daily_report(session, roster, report_date=report_date)
    except Exception as e:
        logger.error(f"Error generating daily report: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate report",
        ) from e
