"""Sync orchestrator: runs every jurisdiction and aggregates the run report.

For each jurisdiction in roster order the orchestrator waits on the rate
limiter, runs the jurisdiction worker, folds the result into the report and
writes a ``state_sync`` audit entry.  After the roster it writes one
``daily_full_sync`` entry.  An unexpected exception writes a ``failed``
run entry and is re-raised to the caller.
"""

from __future__ import annotations

import asyncio
import functools
import time
import uuid
from collections import Counter
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from loguru import logger

from civic_sync.lib.jurisdictions import load_roster
from civic_sync.lib.pacing import build_rate_limiter
from civic_sync.lib.providers import build_counties_provider, build_officials_provider
from civic_sync.schemas.sync import JurisdictionSyncResult, RunReport, SyncSummary
from civic_sync.services.jurisdiction_sync_service import sync_jurisdiction
from civic_sync.services.sync_log_service import DAILY_FULL_SYNC, STATE_SYNC, log_sync_operation
from civic_sync.services.upsert_gateway import UpsertGateway

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from civic_sync.core.config import Settings
    from civic_sync.lib.jurisdictions import Jurisdiction, JurisdictionRoster
    from civic_sync.lib.pacing import BaseRateLimiter
    from civic_sync.lib.providers import BaseOfficialsProvider, BaseSubunitsProvider

    AuditSink = Callable[..., Awaitable[bool]]

# Upstream calls per jurisdiction: one officials roster, one county table
API_CALLS_PER_JURISDICTION = 2
ERRORS_PER_FAILED_STATE = 3
RUN_LOG_ERROR_LIMIT = 10


class RunReportBuilder:
    """Accumulates jurisdiction results into a :class:`RunReport`."""

    def __init__(self, sync_date: date, total_states: int) -> None:
        self.sync_date = sync_date
        self.total_states = total_states
        self.successful_states = 0
        self.failed_states = 0
        self.total_officials = 0
        self.total_counties = 0
        self.api_calls = 0
        self.api_errors = 0
        self.state_results: list[JurisdictionSyncResult] = []
        self.officials_sources: Counter[str] = Counter()
        self.counties_sources: Counter[str] = Counter()
        self.top_errors: list[str] = []

    def add(self, result: JurisdictionSyncResult) -> None:
        self.state_results.append(result)
        self.total_officials += result.officials.updated
        self.total_counties += result.counties.updated
        self.api_calls += API_CALLS_PER_JURISDICTION
        self.api_errors += len(result.errors)
        self.officials_sources[result.officials.source] += 1
        self.counties_sources[result.counties.source] += 1
        if result.successful:
            self.successful_states += 1
        else:
            self.failed_states += 1
            self.top_errors.extend(result.errors[:ERRORS_PER_FAILED_STATE])

    def build(self, execution_time_seconds: float) -> RunReport:
        return RunReport(
            sync_date=self.sync_date,
            total_states=self.total_states,
            successful_states=self.successful_states,
            failed_states=self.failed_states,
            total_officials=self.total_officials,
            total_counties=self.total_counties,
            api_calls=self.api_calls,
            api_errors=self.api_errors,
            execution_time_seconds=execution_time_seconds,
            state_results=list(self.state_results),
            summary=SyncSummary(
                officials_sources=dict(self.officials_sources),
                counties_sources=dict(self.counties_sources),
                top_errors=list(self.top_errors),
            ),
        )


class SyncOrchestrator:
    """Drives a full sync run over a jurisdiction roster.

    All collaborators are passed in; the orchestrator owns none of them.

    Args:
        roster: Jurisdictions to process, in order.
        officials_provider: Source of federal officials.
        counties_provider: Source of county population.
        gateway: Canonical/fallback writer.
        rate_limiter: Pacing gate awaited before each jurisdiction.
        audit_sink: Coroutine function recording audit entries; it must not raise.
        max_concurrency: Jurisdictions in flight at once (1 is strictly sequential).
    """

    def __init__(
        self,
        *,
        roster: JurisdictionRoster,
        officials_provider: BaseOfficialsProvider,
        counties_provider: BaseSubunitsProvider,
        gateway: UpsertGateway,
        rate_limiter: BaseRateLimiter,
        audit_sink: AuditSink,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            msg = "max_concurrency must be >= 1"
            raise ValueError(msg)
        self.roster = roster
        self.officials_provider = officials_provider
        self.counties_provider = counties_provider
        self.gateway = gateway
        self.rate_limiter = rate_limiter
        self.audit_sink = audit_sink
        self.max_concurrency = max_concurrency

    async def run(self, states: list[str] | None = None) -> RunReport:
        """Sync every jurisdiction (or the ``states`` subset) and return the report.

        Args:
            states: Optional jurisdiction names or abbreviations to restrict the run to.

        Returns:
            The frozen run report.

        Raises:
            ValueError: If ``states`` names a jurisdiction not on the roster.
        """
        roster = self.roster.subset(states) if states else self.roster
        sync_date = datetime.now(UTC).date()
        started = time.perf_counter()
        run_log = logger.bind(sync_run=uuid.uuid4().hex[:12])
        run_log.info("Starting sync of {} jurisdictions (roster {})", len(roster), roster.version)

        builder = RunReportBuilder(sync_date, total_states=len(roster))
        try:
            if self.max_concurrency == 1:
                for jurisdiction in roster:
                    builder.add(await self._process(jurisdiction, sync_date))
            else:
                for result in await self._process_concurrently(roster, sync_date):
                    builder.add(result)
        except Exception as exc:
            elapsed = _elapsed(started)
            run_log.bind(
                json_output=True,
                sync_date=sync_date.isoformat(),
                status="failed",
                execution_time_seconds=elapsed,
            ).exception("Sync run failed after {}s", elapsed)
            await self.audit_sink(
                sync_type=DAILY_FULL_SYNC,
                status="failed",
                records_failed=1,
                api_errors=1,
                error_details={"error": str(exc)},
                execution_time_seconds=elapsed,
                data_source="none",
                sync_date=sync_date,
            )
            raise

        report = builder.build(_elapsed(started))
        written = report.total_officials + report.total_counties
        await self.audit_sink(
            sync_type=DAILY_FULL_SYNC,
            status="success" if report.failed_states == 0 else "partial",
            records_processed=written,
            records_updated=written,
            records_failed=report.api_errors,
            api_calls=report.api_calls,
            api_errors=report.api_errors,
            error_details=(
                {"topErrors": report.summary.top_errors[:RUN_LOG_ERROR_LIMIT]} if report.summary.top_errors else None
            ),
            execution_time_seconds=report.execution_time_seconds,
            sync_date=sync_date,
        )
        run_log.bind(
            json_output=True,
            sync_date=sync_date.isoformat(),
            status="success" if report.failed_states == 0 else "partial",
            successful_states=report.successful_states,
            failed_states=report.failed_states,
            total_officials=report.total_officials,
            total_counties=report.total_counties,
            api_errors=report.api_errors,
            execution_time_seconds=report.execution_time_seconds,
        ).info(
            "Sync completed: {}/{} states, {} officials, {} counties in {}s",
            report.successful_states,
            report.total_states,
            report.total_officials,
            report.total_counties,
            report.execution_time_seconds,
        )
        return report

    async def _process_concurrently(
        self, roster: JurisdictionRoster, sync_date: date
    ) -> list[JurisdictionSyncResult]:
        """Run jurisdictions under the semaphore; results come back in roster order.

        If any jurisdiction raises, the others are cancelled and awaited before
        the error propagates, so no state entries are written after the run fails.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(jurisdiction: Jurisdiction) -> JurisdictionSyncResult:
            async with semaphore:
                return await self._process(jurisdiction, sync_date)

        tasks = [asyncio.create_task(bounded(j)) for j in roster]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _process(self, jurisdiction: Jurisdiction, sync_date: date) -> JurisdictionSyncResult:
        await self.rate_limiter.acquire()
        started = time.perf_counter()
        result = await sync_jurisdiction(
            jurisdiction,
            officials_provider=self.officials_provider,
            counties_provider=self.counties_provider,
            gateway=self.gateway,
        )
        await self.audit_sink(
            sync_type=STATE_SYNC,
            state=jurisdiction.name,
            status="success" if result.successful else "partial",
            records_processed=result.officials.processed + result.counties.processed,
            records_updated=result.officials.updated + result.counties.updated,
            records_failed=result.officials.failed + result.counties.failed,
            api_calls=API_CALLS_PER_JURISDICTION,
            api_errors=len(result.errors),
            error_details={"errors": result.errors} if result.errors else None,
            execution_time_seconds=_elapsed(started),
            sync_date=sync_date,
        )
        return result


def _elapsed(started: float) -> float:
    return round(time.perf_counter() - started, 3)


async def run_daily_sync(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    states: list[str] | None = None,
    **overrides: Any,
) -> RunReport:
    """Validate configuration, assemble the engine from settings, and run it.

    Providers built here are closed when the run ends.  ``overrides`` may
    replace any :class:`SyncOrchestrator` collaborator (``roster``,
    ``officials_provider``, ``counties_provider``, ``gateway``,
    ``rate_limiter``, ``audit_sink``); injected providers are left open.

    Args:
        settings: Application settings.
        session_factory: Factory for store and audit sessions.
        states: Optional roster subset.
        **overrides: Collaborator replacements.

    Returns:
        The run report.

    Raises:
        SyncConfigurationError: If a required credential is missing.
        ValueError: If ``states`` names an unknown jurisdiction.
    """
    settings.require_sync_credentials()

    roster = overrides.pop("roster", None)
    if roster is None:
        roster = load_roster(settings.jurisdiction_roster_path)
    if states:
        roster.subset(states)

    owned: list[BaseOfficialsProvider | BaseSubunitsProvider] = []
    if "officials_provider" not in overrides:
        overrides["officials_provider"] = build_officials_provider(settings)
        owned.append(overrides["officials_provider"])
    if "counties_provider" not in overrides:
        overrides["counties_provider"] = build_counties_provider(settings)
        owned.append(overrides["counties_provider"])

    overrides.setdefault(
        "gateway", UpsertGateway(session_factory, official_merge_key=settings.sync_official_merge_key)
    )
    overrides.setdefault("rate_limiter", build_rate_limiter(settings))
    overrides.setdefault("audit_sink", functools.partial(log_sync_operation, session_factory))

    orchestrator = SyncOrchestrator(roster=roster, max_concurrency=settings.sync_max_concurrency, **overrides)
    try:
        return await orchestrator.run(states)
    finally:
        for provider in owned:
            await provider.close()
