"""Jurisdiction worker: syncs one state through the officials and counties lanes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from civic_sync.schemas.sync import JurisdictionSyncResult, LaneResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from civic_sync.lib.jurisdictions import Jurisdiction
    from civic_sync.lib.providers import (
        BaseOfficialsProvider,
        BaseSubunitsProvider,
        FetchResult,
        OfficialRecord,
        SubunitRecord,
    )
    from civic_sync.services.upsert_gateway import UpsertGateway, UpsertOutcome


async def _run_lane(
    fetched: FetchResult,
    upsert: Callable[..., Awaitable[UpsertOutcome]],
    label: str,
    errors: list[str],
) -> LaneResult:
    """Upsert every fetched record, counting outcomes and collecting errors."""
    records: Sequence[OfficialRecord | SubunitRecord] = fetched.records
    if not records:
        return LaneResult(source="none", unavailable=not fetched.available)

    updated = failed = 0
    for record in records:
        outcome = await upsert(record)
        if outcome.ok:
            updated += 1
        else:
            failed += 1
            errors.append(f"{label} {record.name}: {outcome.error}")
    return LaneResult(processed=len(records), updated=updated, failed=failed, source="provider")


async def sync_jurisdiction(
    jurisdiction: Jurisdiction,
    *,
    officials_provider: BaseOfficialsProvider,
    counties_provider: BaseSubunitsProvider,
    gateway: UpsertGateway,
) -> JurisdictionSyncResult:
    """Fetch and upsert officials and counties for one jurisdiction.

    The two lanes are independent: the counties lane runs whatever the
    officials lane produced, and one failing record never stops the records
    after it.  Provider failures leave the lane with ``source="none"`` and
    zero counts; they are not record errors.

    Args:
        jurisdiction: The state to sync.
        officials_provider: Source of federal officials.
        counties_provider: Source of county population.
        gateway: Canonical/fallback writer.

    Returns:
        Per-lane counts and the per-record error strings.
    """
    errors: list[str] = []

    officials = await _run_lane(
        await officials_provider.fetch(jurisdiction), gateway.upsert_official, "Official", errors
    )
    counties = await _run_lane(await counties_provider.fetch(jurisdiction), gateway.upsert_county, "County", errors)

    logger.info(
        "{}: officials {}/{} ({}), counties {}/{} ({}), {} errors",
        jurisdiction.name,
        officials.updated,
        officials.processed,
        officials.source,
        counties.updated,
        counties.processed,
        counties.source,
        len(errors),
    )
    return JurisdictionSyncResult(state=jurisdiction.name, officials=officials, counties=counties, errors=errors)
