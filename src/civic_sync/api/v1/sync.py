"""Sync trigger and audit log API endpoints.

Every route here requires the pre-shared sync secret.  Authentication runs as
a dependency, before any provider or store is touched, so a rejected request
produces no work and no audit entries.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from civic_sync.core.config import Settings, SyncConfigurationError, get_settings
from civic_sync.core.dependencies import (
    get_async_session,
    get_async_session_factory,
    get_roster,
    require_manual_trigger,
    require_sync_secret,
)
from civic_sync.lib.jurisdictions import JurisdictionRoster
from civic_sync.schemas.common import ErrorResponse, PaginationMeta
from civic_sync.schemas.sync import (
    ManualSyncRequest,
    PaginatedSyncLogResponse,
    SyncFailureResponse,
    SyncLogResponse,
    SyncTriggerResponse,
)
from civic_sync.services.sync_log_service import list_sync_logs
from civic_sync.services.sync_service import run_daily_sync

sync_router = APIRouter(prefix="/sync", tags=["sync"])

_TRIGGER_RESPONSES: dict[int | str, dict] = {
    401: {"model": ErrorResponse, "description": "Missing or invalid sync secret"},
    500: {"model": SyncFailureResponse, "description": "Sync not configured or failed"},
}


async def _execute_sync(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    roster: JurisdictionRoster,
    states: list[str] | None = None,
) -> SyncTriggerResponse | JSONResponse:
    try:
        report = await run_daily_sync(settings, session_factory, states=states, roster=roster)
    except SyncConfigurationError as exc:
        logger.error("Sync trigger rejected: {}", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=SyncFailureResponse(error="Sync is not configured", details=str(exc)).model_dump(),
        )
    except Exception as exc:
        logger.error("Daily sync failed: {}", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=SyncFailureResponse(details=str(exc)).model_dump(),
        )
    return SyncTriggerResponse(report=report)


@sync_router.post(
    "/daily",
    response_model=SyncTriggerResponse,
    responses=_TRIGGER_RESPONSES,
    dependencies=[Depends(require_sync_secret)],
)
async def trigger_daily_sync(
    settings: Annotated[Settings, Depends(get_settings)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_async_session_factory)],
    roster: Annotated[JurisdictionRoster, Depends(get_roster)],
) -> SyncTriggerResponse | JSONResponse:
    """Run a full sync over the roster and return the run report.

    Intended for the daily scheduler.  Requires ``Authorization: Bearer <SYNC_AUTH_KEY>``.
    """
    logger.info("Daily sync triggered")
    return await _execute_sync(settings, session_factory, roster)


@sync_router.post(
    "/manual",
    response_model=SyncTriggerResponse,
    responses={**_TRIGGER_RESPONSES, 404: {"model": ErrorResponse, "description": "Manual trigger disabled"}},
    dependencies=[Depends(require_manual_trigger), Depends(require_sync_secret)],
)
async def trigger_manual_sync(
    settings: Annotated[Settings, Depends(get_settings)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_async_session_factory)],
    roster: Annotated[JurisdictionRoster, Depends(get_roster)],
    body: ManualSyncRequest | None = None,
) -> SyncTriggerResponse | JSONResponse:
    """Run a sync over the full roster or a subset of it.

    Only served when ``SYNC_MANUAL_TRIGGER_ENABLED`` is set outside production.
    """
    states = body.states if body else None
    if states:
        try:
            roster.subset(states)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("Manual sync triggered for {}", ", ".join(states) if states else "all jurisdictions")
    return await _execute_sync(settings, session_factory, roster, states)


@sync_router.get(
    "/logs",
    response_model=PaginatedSyncLogResponse,
    dependencies=[Depends(require_sync_secret)],
)
async def get_sync_logs(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    sync_type: str | None = Query(None, description="Filter by sync type (state_sync, daily_full_sync)"),
    state: str | None = Query(None, description="Filter by state name"),
    log_status: str | None = Query(None, alias="status", description="Filter by status"),
    since: date | None = Query(None, description="Earliest sync date (inclusive)"),
    until: date | None = Query(None, description="Latest sync date (inclusive)"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaginatedSyncLogResponse:
    """List sync audit entries, newest first."""
    try:
        logs, total = await list_sync_logs(
            session,
            sync_type=sync_type,
            state=state,
            status=log_status,
            since=since,
            until=until,
            page=page,
            page_size=page_size,
        )
    except Exception as e:
        logger.error(f"Unexpected error listing sync logs: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error listing sync logs.",
        ) from e
    return PaginatedSyncLogResponse(
        items=[SyncLogResponse.model_validate(log) for log in logs],
        pagination=PaginationMeta(
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size if total > 0 else 0,
        ),
    )
