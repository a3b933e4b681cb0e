"""Unit tests for the sync audit log service."""

from datetime import UTC, date, datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from civic_sync.models.sync_log import SyncLog
from civic_sync.services.sync_log_service import (
    DAILY_FULL_SYNC,
    STATE_SYNC,
    list_sync_logs,
    log_sync_operation,
)


def _entry(created_at: datetime, **overrides: object) -> SyncLog:
    fields: dict[str, object] = {
        "sync_date": created_at.date(),
        "created_at": created_at,
        "sync_type": STATE_SYNC,
        "state": "Georgia",
        "status": "success",
    }
    fields.update(overrides)
    return SyncLog(**fields)


class TestLogSyncOperation:
    @pytest.mark.asyncio
    async def test_writes_entry(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        written = await log_sync_operation(
            session_factory,
            sync_type=STATE_SYNC,
            status="partial",
            state="Georgia",
            records_processed=4,
            records_updated=3,
            records_failed=1,
            api_calls=2,
            api_errors=1,
            error_details={"errors": ["County None: NOT NULL constraint failed: counties.name"]},
            execution_time_seconds=1.25,
            sync_date=date(2026, 10, 19),
        )

        assert written is True
        async with session_factory() as session:
            (log,) = (await session.execute(select(SyncLog))).scalars().all()
        assert log.sync_type == STATE_SYNC
        assert log.state == "Georgia"
        assert log.status == "partial"
        assert (log.records_processed, log.records_updated, log.records_failed) == (4, 3, 1)
        assert log.error_details == {"errors": ["County None: NOT NULL constraint failed: counties.name"]}
        assert log.execution_time_seconds == 1.25
        assert log.data_source == "mixed"
        assert log.sync_date == date(2026, 10, 19)
        assert log.created_at is not None

    @pytest.mark.asyncio
    async def test_sync_date_defaults_to_today(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        await log_sync_operation(session_factory, sync_type=DAILY_FULL_SYNC, status="success")

        async with session_factory() as session:
            (log,) = (await session.execute(select(SyncLog))).scalars().all()
        assert log.sync_date == datetime.now(UTC).date()
        assert log.state is None

    @pytest.mark.asyncio
    async def test_write_failure_returns_false(
        self, async_engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with async_engine.begin() as conn:
            await conn.run_sync(SyncLog.__table__.drop)

        written = await log_sync_operation(session_factory, sync_type=DAILY_FULL_SYNC, status="success")

        assert written is False

    @pytest.mark.asyncio
    async def test_connection_error_returns_false(self) -> None:
        session_factory = MagicMock(side_effect=OSError("connection refused"))

        written = await log_sync_operation(session_factory, sync_type=STATE_SYNC, status="success", state="Georgia")

        assert written is False
        session_factory.assert_called_once()


class TestListSyncLogs:
    @pytest.mark.asyncio
    async def test_newest_first_with_total(self, async_session: AsyncSession) -> None:
        async_session.add_all(
            [
                _entry(datetime(2026, 10, 17, 6, 0, tzinfo=UTC), state="Alabama"),
                _entry(datetime(2026, 10, 19, 6, 0, tzinfo=UTC), state="Wyoming"),
                _entry(datetime(2026, 10, 18, 6, 0, tzinfo=UTC), state="Georgia"),
            ]
        )
        await async_session.commit()

        entries, total = await list_sync_logs(async_session)

        assert total == 3
        assert [e.state for e in entries] == ["Wyoming", "Georgia", "Alabama"]

    @pytest.mark.asyncio
    async def test_filters(self, async_session: AsyncSession) -> None:
        async_session.add_all(
            [
                _entry(datetime(2026, 10, 17, 6, 0, tzinfo=UTC), state="Georgia", status="partial"),
                _entry(datetime(2026, 10, 18, 6, 0, tzinfo=UTC), state="Alabama"),
                _entry(datetime(2026, 10, 19, 6, 0, tzinfo=UTC), sync_type=DAILY_FULL_SYNC, state=None),
            ]
        )
        await async_session.commit()

        by_type, total = await list_sync_logs(async_session, sync_type=DAILY_FULL_SYNC)
        assert total == 1
        assert by_type[0].state is None

        by_state, _ = await list_sync_logs(async_session, state="Georgia")
        assert [e.status for e in by_state] == ["partial"]

        by_status, _ = await list_sync_logs(async_session, status="success")
        assert len(by_status) == 2

        windowed, total = await list_sync_logs(async_session, since=date(2026, 10, 18), until=date(2026, 10, 18))
        assert total == 1
        assert windowed[0].state == "Alabama"

    @pytest.mark.asyncio
    async def test_pagination(self, async_session: AsyncSession) -> None:
        async_session.add_all([_entry(datetime(2026, 10, day, 6, 0, tzinfo=UTC)) for day in range(1, 6)])
        await async_session.commit()

        page_two, total = await list_sync_logs(async_session, page=2, page_size=2)

        assert total == 5
        assert [e.sync_date.day for e in page_two] == [3, 2]
