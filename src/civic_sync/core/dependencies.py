"""FastAPI dependency injection for database sessions, the roster, and sync trigger guards."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from civic_sync.core.config import Settings, get_settings
from civic_sync.core.database import get_session_factory
from civic_sync.core.security import SyncAuthenticationError, verify_sync_secret
from civic_sync.lib.jurisdictions import JurisdictionRoster, load_roster


def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory as an injectable dependency."""
    return get_session_factory()


async def get_async_session(
    factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_async_session_factory)],
) -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    async with factory() as session:
        yield session


async def require_sync_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless it carries the configured sync secret.

    Raises:
        HTTPException: 500 when no secret is configured server-side,
            401 when the presented secret is missing or wrong.
    """
    if not (settings.sync_auth_key or "").strip():
        logger.error("Sync trigger called but SYNC_AUTH_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Sync trigger is not configured",
        )
    try:
        verify_sync_secret(authorization, settings.sync_auth_key)
    except SyncAuthenticationError as exc:
        logger.warning("Rejected sync trigger with missing or invalid secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_roster(settings: Annotated[Settings, Depends(get_settings)]) -> JurisdictionRoster:
    """Load the jurisdiction roster configured for this process."""
    return load_roster(settings.jurisdiction_roster_path)


async def require_manual_trigger(settings: Annotated[Settings, Depends(get_settings)]) -> None:
    """Hide the manual trigger unless it is enabled outside production.

    Raises:
        HTTPException: 404 when the manual trigger is not allowed.
    """
    if not settings.manual_trigger_allowed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
