"""CLI commands for running syncs and inspecting their outcome.

Provides ``run`` (full roster or a subset), ``report`` (daily data health)
and ``logs`` (recent audit entries).
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import TYPE_CHECKING, Annotated

import typer
from loguru import logger

if TYPE_CHECKING:
    from civic_sync.schemas.reports import DailyHealthReport
    from civic_sync.schemas.sync import RunReport

sync_app = typer.Typer()


@sync_app.command("run")
def run(
    states: Annotated[
        list[str] | None,
        typer.Option("--state", "-s", help="State name or abbreviation (repeatable); omit for all"),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full run report as JSON")] = False,
) -> None:
    """Sync officials and counties for every state (or the given states)."""
    asyncio.run(_run_impl(states or None, as_json))


async def _run_impl(states: list[str] | None, as_json: bool) -> None:
    """Async implementation of the run command."""
    from civic_sync.core.config import SyncConfigurationError, get_settings
    from civic_sync.core.database import dispose_engine, get_session_factory, init_engine
    from civic_sync.services.sync_service import run_daily_sync

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        report = await run_daily_sync(settings, get_session_factory(), states=states)
    except SyncConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        await dispose_engine()

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        typer.echo(_format_run_report(report))


def _format_run_report(report: RunReport) -> str:
    lines = [
        f"Sync date: {report.sync_date}",
        f"  States: {report.successful_states}/{report.total_states} successful, {report.failed_states} with errors",
        f"  Officials updated: {report.total_officials}",
        f"  Counties updated: {report.total_counties}",
        f"  API calls: {report.api_calls} | Errors: {report.api_errors}",
        f"  Elapsed: {report.execution_time_seconds}s",
    ]
    if report.summary.top_errors:
        lines.append("  Top errors:")
        lines.extend(f"    - {error}" for error in report.summary.top_errors[:10])
    return "\n".join(lines)


@sync_app.command("report")
def report(
    report_date: Annotated[
        datetime | None,
        typer.Option("--date", formats=["%Y-%m-%d"], help="Report date (defaults to today, UTC)"),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full report as JSON")] = False,
) -> None:
    """Show the daily data health report."""
    asyncio.run(_report_impl(report_date.date() if report_date else None, as_json))


async def _report_impl(report_date: date | None, as_json: bool) -> None:
    """Async implementation of the report command."""
    from civic_sync.core.config import get_settings
    from civic_sync.core.database import dispose_engine, get_session_factory, init_engine
    from civic_sync.lib.jurisdictions import load_roster
    from civic_sync.services.health_report_service import build_daily_report

    settings = get_settings()
    roster = load_roster(settings.jurisdiction_roster_path)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            health = await build_daily_report(session, roster, report_date=report_date)
    finally:
        await dispose_engine()

    if as_json:
        typer.echo(health.model_dump_json(indent=2))
    else:
        typer.echo(_format_health_report(health))


def _format_health_report(health: DailyHealthReport) -> str:
    summary = health.summary
    lines = [
        f"Report date: {health.report_date} | Overall: {health.overall_status.upper()}",
        f"  States with live data: {summary.states_with_live_data}/{summary.total_states}",
        f"  States on fallback only: {summary.states_with_fallback_only}",
        f"  Officials: {summary.total_officials} | Counties: {summary.total_counties}",
        f"  Last sync: {summary.last_sync_date or 'never'} ({'success' if summary.sync_success else 'not successful'})",
    ]
    flagged = [s for s in health.state_breakdown if s.issues]
    if flagged:
        lines.append("  States with issues:")
        lines.extend(f"    {s.state} [{s.status}]: {', '.join(s.issues)}" for s in flagged)
    if health.recommendations:
        lines.append("  Recommendations:")
        lines.extend(f"    - {rec}" for rec in health.recommendations)
    return "\n".join(lines)


@sync_app.command("logs")
def logs(
    sync_type: Annotated[str | None, typer.Option("--type", help="state_sync or daily_full_sync")] = None,
    state: Annotated[str | None, typer.Option("--state", help="Filter by state name")] = None,
    limit: Annotated[int, typer.Option("--limit", min=1, max=100, help="Entries to show")] = 20,
) -> None:
    """Show recent sync audit entries, newest first."""
    asyncio.run(_logs_impl(sync_type, state, limit))


async def _logs_impl(sync_type: str | None, state: str | None, limit: int) -> None:
    """Async implementation of the logs command."""
    from civic_sync.core.config import get_settings
    from civic_sync.core.database import dispose_engine, get_session_factory, init_engine
    from civic_sync.services.sync_log_service import list_sync_logs

    settings = get_settings()
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    try:
        factory = get_session_factory()
        async with factory() as session:
            entries, total = await list_sync_logs(session, sync_type=sync_type, state=state, page_size=limit)
    finally:
        await dispose_engine()

    logger.debug("Listed {} of {} sync log entries", len(entries), total)
    if not entries:
        typer.echo("No sync log entries found.")
        return
    for entry in entries:
        typer.echo(
            f"{entry.sync_date} {entry.sync_type:<16} {entry.state or 'All':<16} {entry.status:<8} "
            f"{entry.records_updated}/{entry.records_processed} updated, {entry.api_errors} errors"
        )
    typer.echo(f"Showing {len(entries)} of {total}")
