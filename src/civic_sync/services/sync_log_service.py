"""Sync audit log service.

Writes are fire-and-forget: a failure to record an audit entry is logged
and never interrupts the run that produced it.
"""

from datetime import UTC, date, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from civic_sync.models.sync_log import SyncLog

STATE_SYNC = "state_sync"
DAILY_FULL_SYNC = "daily_full_sync"


async def log_sync_operation(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    sync_type: str,
    status: str,
    state: str | None = None,
    records_processed: int = 0,
    records_updated: int = 0,
    records_failed: int = 0,
    api_calls: int = 0,
    api_errors: int = 0,
    error_details: dict | None = None,
    execution_time_seconds: float = 0.0,
    data_source: str = "mixed",
    sync_date: date | None = None,
) -> bool:
    """Record one audit entry in its own transaction.

    Args:
        session_factory: Factory for the audit session.
        sync_type: ``state_sync`` or ``daily_full_sync``.
        status: ``success``, ``partial`` or ``failed``.
        state: Jurisdiction name; None for run-level entries.
        records_processed: Records seen.
        records_updated: Records written.
        records_failed: Records that failed to write.
        api_calls: Upstream calls made.
        api_errors: Errors counted.
        error_details: JSON-serializable error context.
        execution_time_seconds: Elapsed time of the operation.
        data_source: Provenance label.
        sync_date: Date of the run (defaults to today, UTC).

    Returns:
        True if the entry was written, False if the write failed.
    """
    entry = SyncLog(
        sync_date=sync_date or datetime.now(UTC).date(),
        sync_type=sync_type,
        state=state,
        status=status,
        records_processed=records_processed,
        records_updated=records_updated,
        records_failed=records_failed,
        api_calls=api_calls,
        api_errors=api_errors,
        error_details=error_details,
        execution_time_seconds=execution_time_seconds,
        data_source=data_source,
    )
    try:
        async with session_factory() as session, session.begin():
            session.add(entry)
    except SQLAlchemyError as exc:
        logger.error("Failed to write {} audit entry for {}: {}", sync_type, state or "run", exc)
        return False
    except Exception:
        logger.exception("Unexpected error writing {} audit entry for {}", sync_type, state or "run")
        return False
    return True


async def list_sync_logs(
    session: AsyncSession,
    *,
    sync_type: str | None = None,
    state: str | None = None,
    status: str | None = None,
    since: date | None = None,
    until: date | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[SyncLog], int]:
    """Query audit entries newest first with optional filters.

    Args:
        session: The database session.
        sync_type: Filter by sync type.
        state: Filter by jurisdiction name.
        status: Filter by status.
        since: Earliest sync_date (inclusive).
        until: Latest sync_date (inclusive).
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (entries, total count).
    """
    query = select(SyncLog)
    count_query = select(func.count(SyncLog.id))

    filters = []
    if sync_type:
        filters.append(SyncLog.sync_type == sync_type)
    if state:
        filters.append(SyncLog.state == state)
    if status:
        filters.append(SyncLog.status == status)
    if since:
        filters.append(SyncLog.sync_date >= since)
    if until:
        filters.append(SyncLog.sync_date <= until)

    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = (await session.execute(count_query)).scalar_one()

    offset = (page - 1) * page_size
    query = query.order_by(SyncLog.created_at.desc(), SyncLog.sync_date.desc()).offset(offset).limit(page_size)
    result = await session.execute(query)
    return list(result.scalars().all()), total
