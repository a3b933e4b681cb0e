"""Daily data health report.

Summarizes, per jurisdiction, what the canonical and fallback stores hold
and how recent sync runs went, then rolls that up into an overall status
with operator recommendations.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import distinct, func, select

from civic_sync.lib.providers.census_counties import DATA_SOURCE as CENSUS_SOURCE
from civic_sync.lib.providers.congress_gov import DATA_SOURCE as CONGRESS_SOURCE
from civic_sync.models.county import County, FallbackCounty
from civic_sync.models.official import FallbackOfficial, Official
from civic_sync.models.sync_log import SyncLog
from civic_sync.schemas.reports import (
    DailyHealthReport,
    DataQuality,
    HealthSummary,
    LaneHealth,
    StateHealthReport,
)
from civic_sync.schemas.sync import SyncLogResponse
from civic_sync.services.sync_log_service import DAILY_FULL_SYNC

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from civic_sync.lib.jurisdictions import JurisdictionRoster

LOG_WINDOW_DAYS = 7
LOG_QUERY_LIMIT = 50
RECENT_LOGS_IN_REPORT = 10

# Overall status thresholds
CRITICAL_MISSING_DATA = 5
WARNING_STATES_WITH_ISSUES = 10
WARNING_FALLBACK_ONLY_STATES = 20
PROVIDER_FALLBACK_STATES = 25

FALLBACK = "fallback"
NONE = "none"


@dataclass
class _LaneSnapshot:
    count: int = 0
    sources: Counter[str] = field(default_factory=Counter)
    last_updated: datetime | None = None

    @property
    def primary_source(self) -> str | None:
        if not self.sources:
            return None
        return self.sources.most_common(1)[0][0]


async def _lane_snapshots(session: AsyncSession, model: Any, *extra_filters: Any) -> dict[str, _LaneSnapshot]:
    """Group canonical rows by state and data source."""
    result = await session.execute(
        select(model.state, model.data_source, func.count(), func.max(model.last_updated))
        .where(*extra_filters)
        .group_by(model.state, model.data_source)
    )
    snapshots: dict[str, _LaneSnapshot] = {}
    for state, source, count, last_updated in result.all():
        snapshot = snapshots.setdefault(state, _LaneSnapshot())
        snapshot.count += count
        snapshot.sources[source] += count
        if last_updated is not None and (snapshot.last_updated is None or last_updated > snapshot.last_updated):
            snapshot.last_updated = last_updated
    return snapshots


async def _fallback_states(session: AsyncSession, model: Any) -> set[str]:
    result = await session.execute(select(distinct(model.state)))
    return set(result.scalars().all())


def _lane_health(snapshot: _LaneSnapshot | None, has_fallback: bool) -> LaneHealth:
    if snapshot is not None and snapshot.count:
        return LaneHealth(
            count=snapshot.count,
            source=snapshot.primary_source or NONE,
            last_updated=snapshot.last_updated,
        )
    return LaneHealth(count=0, source=FALLBACK if has_fallback else NONE)


def _assess_lane(label: str, lane: LaneHealth, state: str, issues: list[str], missing: list[str]) -> str:
    """Append lane issues and return the lane's severity (good, warning or error)."""
    if lane.source == NONE:
        issues.append(f"No {label} data available")
        missing.append(f"{state} - {label.capitalize()}")
        return "error"
    if lane.source == FALLBACK:
        issues.append(f"Using fallback {label} data")
        return "warning"
    return "good"


_SEVERITY = {"good": 0, "warning": 1, "error": 2}


async def build_daily_report(
    session: AsyncSession,
    roster: JurisdictionRoster,
    *,
    report_date: date | None = None,
) -> DailyHealthReport:
    """Build the data health report for ``report_date``.

    Args:
        session: The database session.
        roster: Jurisdictions to report on.
        report_date: Report date; sync logs from the preceding seven days
            (inclusive) are considered.  Defaults to today (UTC).

    Returns:
        The assembled report.
    """
    report_date = report_date or datetime.now(UTC).date()
    window_start = report_date - timedelta(days=LOG_WINDOW_DAYS - 1)

    officials = await _lane_snapshots(session, Official, Official.is_active.is_(True))
    counties = await _lane_snapshots(session, County)
    fallback_official_states = await _fallback_states(session, FallbackOfficial)
    fallback_county_states = await _fallback_states(session, FallbackCounty)

    logs_result = await session.execute(
        select(SyncLog)
        .where(SyncLog.sync_date >= window_start, SyncLog.sync_date <= report_date)
        .order_by(SyncLog.created_at.desc())
        .limit(LOG_QUERY_LIMIT)
    )
    sync_logs = list(logs_result.scalars().all())

    officials_sources: Counter[str] = Counter()
    counties_sources: Counter[str] = Counter()
    states_with_issues: list[str] = []
    missing_data: list[str] = []
    breakdown: list[StateHealthReport] = []

    for jurisdiction in roster:
        state = jurisdiction.name
        officials_lane = _lane_health(officials.get(state), state in fallback_official_states)
        counties_lane = _lane_health(counties.get(state), state in fallback_county_states)

        issues: list[str] = []
        severities = (
            _assess_lane("officials", officials_lane, state, issues, missing_data),
            _assess_lane("counties", counties_lane, state, issues, missing_data),
        )
        status = max(severities, key=_SEVERITY.__getitem__)

        officials_sources.update(_state_sources(officials.get(state), officials_lane))
        counties_sources.update(_state_sources(counties.get(state), counties_lane))

        if issues:
            states_with_issues.append(state)
        breakdown.append(
            StateHealthReport(
                state=state,
                officials=officials_lane,
                counties=counties_lane,
                status=status,  # type: ignore[arg-type]
                issues=issues,
            )
        )

    live_states = sum(
        1 for s in breakdown if s.officials.source == CONGRESS_SOURCE or s.counties.source == CENSUS_SOURCE
    )
    fallback_only = sum(
        1 for s in breakdown if s.officials.source in (FALLBACK, NONE) and s.counties.source in (FALLBACK, NONE)
    )

    latest_run = next((log for log in sync_logs if log.sync_type == DAILY_FULL_SYNC), None)
    sync_success = latest_run is not None and latest_run.status == "success"

    if len(missing_data) > CRITICAL_MISSING_DATA or not sync_success:
        overall = "critical"
    elif len(states_with_issues) > WARNING_STATES_WITH_ISSUES or fallback_only > WARNING_FALLBACK_ONLY_STATES:
        overall = "warning"
    else:
        overall = "healthy"

    recommendations: list[str] = []
    if not sync_success:
        recommendations.append("Daily sync is failing - check API keys and rate limits")
    if missing_data:
        recommendations.append(f"{len(missing_data)} states missing critical data - review fallback data")
    if fallback_only > WARNING_FALLBACK_ONLY_STATES:
        recommendations.append("Too many states relying on fallback data - check API connectivity")
    if officials_sources[FALLBACK] > PROVIDER_FALLBACK_STATES:
        recommendations.append("Congress API may be having issues - many states using fallback officials")
    if counties_sources[FALLBACK] > PROVIDER_FALLBACK_STATES:
        recommendations.append("Census API may be having issues - many states using fallback counties")

    logger.info(
        "Daily health report for {}: {} ({} states with issues)", report_date, overall, len(states_with_issues)
    )
    return DailyHealthReport(
        report_date=report_date,
        overall_status=overall,  # type: ignore[arg-type]
        summary=HealthSummary(
            total_states=len(roster),
            states_with_live_data=live_states,
            states_with_fallback_only=fallback_only,
            total_officials=sum(s.count for s in officials.values()),
            total_counties=sum(s.count for s in counties.values()),
            last_sync_date=latest_run.sync_date if latest_run else None,
            sync_success=sync_success,
        ),
        data_quality=DataQuality(
            officials_data_sources=dict(officials_sources),
            counties_data_sources=dict(counties_sources),
            states_with_issues=states_with_issues,
            missing_data=missing_data,
        ),
        recent_sync_logs=[SyncLogResponse.model_validate(log) for log in sync_logs[:RECENT_LOGS_IN_REPORT]],
        state_breakdown=breakdown,
        recommendations=recommendations,
    )


def _state_sources(snapshot: _LaneSnapshot | None, lane: LaneHealth) -> set[str]:
    """Distinct data sources a state's lane is served from, for per-state tallies."""
    if snapshot is not None and snapshot.count:
        return set(snapshot.sources)
    return {FALLBACK} if lane.source == FALLBACK else set()
