"""Upsert gateway: idempotent writes of one record into the canonical store.

Every call runs in its own session and transaction, so one bad record never
affects another.  After a canonical write commits, a denormalized copy is
written to the matching fallback table with ``last_verified`` set to now;
fallback failures are logged and never turn a canonical success into a
failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import delete, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from civic_sync.models.county import County, FallbackCounty
from civic_sync.models.official import FallbackOfficial, Official

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from civic_sync.lib.providers import OfficialRecord, SubunitRecord

OFFICIAL_KEY = ("name", "state", "office")
COUNTY_KEY = ("name", "state")

MERGE_KEYS = ("natural", "bioguide")

GOVERNOR_OFFICE = "Governor"
GOVERNOR_PRIORITY = 10
DEFAULT_PRIORITY = 9


@dataclass(frozen=True)
class UpsertOutcome:
    """Result of one canonical upsert."""

    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> UpsertOutcome:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> UpsertOutcome:
        return cls(ok=False, error=error)


def fallback_priority(office: str) -> int:
    """Display priority of a fallback official: governors first."""
    return GOVERNOR_PRIORITY if office == GOVERNOR_OFFICE else DEFAULT_PRIORITY


def _describe(exc: SQLAlchemyError) -> str:
    """Short, driver-level description of a persistence error."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc).splitlines()[0]


def _insert(session: AsyncSession, table: Any) -> Any:
    """Dialect-native INSERT supporting ON CONFLICT for ``table``."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert(table)
    return pg_insert(table)


def _upsert_statement(
    session: AsyncSession, table: Any, values: dict[str, Any], key: tuple[str, ...]
) -> Any:
    stmt = _insert(session, table).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=list(key),
        set_={col: stmt.excluded[col] for col in values if col not in key},
    )


class UpsertGateway:
    """Writes officials and counties into the canonical and fallback stores.

    Args:
        session_factory: Factory producing one session per record.
        official_merge_key: ``"natural"`` merges officials on
            (name, state, office); ``"bioguide"`` first looks for an existing
            row with the same ``bioguide_id`` and updates it in place, so a
            member who changed chambers keeps a single row.  The fallback copy
            follows: rows for the same ``bioguide_id`` under another
            (name, state, office) are removed when the new copy is written.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        official_merge_key: str = "natural",
    ) -> None:
        if official_merge_key not in MERGE_KEYS:
            msg = f"official_merge_key must be one of {MERGE_KEYS}, got {official_merge_key!r}"
            raise ValueError(msg)
        self._session_factory = session_factory
        self.official_merge_key = official_merge_key

    async def upsert_official(self, record: OfficialRecord) -> UpsertOutcome:
        """Insert or update one official, then refresh its fallback copy.

        Args:
            record: The normalized official.

        Returns:
            A successful outcome, or a failed one carrying the database error.
        """
        now = datetime.now(UTC)
        values = {**record.to_row(), "is_active": True, "updated_at": now}
        try:
            async with self._session_factory() as session, session.begin():
                updated_in_place = False
                if self.official_merge_key == "bioguide" and record.bioguide_id:
                    updated_in_place = await self._update_by_bioguide(session, record.bioguide_id, values)
                if not updated_in_place:
                    await session.execute(_upsert_statement(session, Official, values, OFFICIAL_KEY))
        except SQLAlchemyError as exc:
            logger.warning("Upsert failed for official {} ({}): {}", record.name, record.state, _describe(exc))
            return UpsertOutcome.failure(_describe(exc))

        fallback_values = {
            **record.to_row(),
            "priority": fallback_priority(record.office),
            "last_verified": now,
            "updated_at": now,
        }
        stale = None
        if self.official_merge_key == "bioguide" and record.bioguide_id:
            stale = (FallbackOfficial.bioguide_id == record.bioguide_id) & or_(
                FallbackOfficial.name != record.name,
                FallbackOfficial.state != record.state,
                FallbackOfficial.office != record.office,
            )
        await self._write_fallback(FallbackOfficial, fallback_values, OFFICIAL_KEY, record.name, stale=stale)
        return UpsertOutcome.success()

    async def upsert_county(self, record: SubunitRecord) -> UpsertOutcome:
        """Insert or update one county on (name, state), then refresh its fallback copy.

        Args:
            record: The normalized county.

        Returns:
            A successful outcome, or a failed one carrying the database error.
        """
        now = datetime.now(UTC)
        values = {**record.to_row(), "updated_at": now}
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(_upsert_statement(session, County, values, COUNTY_KEY))
        except SQLAlchemyError as exc:
            logger.warning("Upsert failed for county {} ({}): {}", record.name, record.state, _describe(exc))
            return UpsertOutcome.failure(_describe(exc))

        await self._write_fallback(FallbackCounty, {**values, "last_verified": now}, COUNTY_KEY, record.name)
        return UpsertOutcome.success()

    async def _update_by_bioguide(self, session: AsyncSession, bioguide_id: str, values: dict[str, Any]) -> bool:
        """Update the newest official row carrying ``bioguide_id``; False if none exists."""
        existing_id = (
            await session.execute(
                select(Official.id)
                .where(Official.bioguide_id == bioguide_id)
                .order_by(Official.last_updated.desc())
                .limit(1)
            )
        ).scalar_one_or_none()
        if existing_id is None:
            return False
        await session.execute(update(Official).where(Official.id == existing_id).values(**values))
        return True

    async def _write_fallback(
        self, table: Any, values: dict[str, Any], key: tuple[str, ...], name: str, *, stale: Any = None
    ) -> None:
        """Upsert the fallback copy, first deleting rows matched by ``stale``."""
        try:
            async with self._session_factory() as session, session.begin():
                if stale is not None:
                    await session.execute(delete(table).where(stale))
                await session.execute(_upsert_statement(session, table, values, key))
        except SQLAlchemyError as exc:
            logger.warning("Fallback write failed for {} in {}: {}", name, table.__tablename__, _describe(exc))
