"""Unit tests for the per-jurisdiction worker."""

from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from civic_sync.lib.jurisdictions import Jurisdiction
from civic_sync.lib.providers import REPRESENTATIVE_OFFICE, SENATOR_OFFICE, OfficialRecord, SubunitRecord
from civic_sync.models.county import County
from civic_sync.models.official import Official
from civic_sync.services.jurisdiction_sync_service import sync_jurisdiction
from civic_sync.services.upsert_gateway import UpsertGateway


def _official(name: str | None, office: str = REPRESENTATIVE_OFFICE) -> OfficialRecord:
    return OfficialRecord(
        name=name,  # type: ignore[arg-type]
        office=office,
        state="Georgia",
        state_abbreviation="GA",
        data_source="congress_api",
    )


def _county(name: str | None, fips: str) -> SubunitRecord:
    return SubunitRecord(
        name=name,  # type: ignore[arg-type]
        state="Georgia",
        state_abbreviation="GA",
        county_fips=fips,
        state_fips="13",
        population=1000,
        data_source="census_api",
    )


async def _count(session_factory: async_sessionmaker[AsyncSession], model: Any) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestSyncJurisdiction:
    @pytest.mark.asyncio
    async def test_both_lanes_succeed(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        officials = make_officials_provider(
            {"Georgia": [_official("Jon Ossoff", SENATOR_OFFICE), _official("Nikema Williams")]}
        )
        counties = make_counties_provider({"Georgia": [_county("Fulton", "121"), _county("DeKalb", "089")]})

        result = await sync_jurisdiction(
            georgia, officials_provider=officials, counties_provider=counties, gateway=gateway
        )

        assert result.state == "Georgia"
        assert result.successful is True
        assert result.errors == []
        assert (result.officials.processed, result.officials.updated, result.officials.failed) == (2, 2, 0)
        assert result.officials.source == "provider"
        assert (result.counties.processed, result.counties.updated, result.counties.failed) == (2, 2, 0)
        assert result.counties.source == "provider"

    @pytest.mark.asyncio
    async def test_empty_counties_lane_has_source_none(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        officials = make_officials_provider({"Georgia": [_official("Jon Ossoff"), _official("Nikema Williams")]})
        counties = make_counties_provider({})

        result = await sync_jurisdiction(
            georgia, officials_provider=officials, counties_provider=counties, gateway=gateway
        )

        assert result.officials.updated == 2
        assert result.counties.processed == 0
        assert result.counties.updated == 0
        assert result.counties.source == "none"
        assert result.counties.unavailable is False
        assert result.successful is True

    @pytest.mark.asyncio
    async def test_unavailable_provider_is_not_a_record_error(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        session_factory: async_sessionmaker[AsyncSession],
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        officials = make_officials_provider(unavailable={"Georgia"})
        counties = make_counties_provider({"Georgia": [_county("Fulton", "121")]})

        result = await sync_jurisdiction(
            georgia, officials_provider=officials, counties_provider=counties, gateway=gateway
        )

        assert result.officials.source == "none"
        assert result.officials.unavailable is True
        assert result.officials.processed == 0
        assert result.counties.updated == 1
        assert result.errors == []
        assert await _count(session_factory, County) == 1

    @pytest.mark.asyncio
    async def test_failing_record_does_not_stop_the_lane(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        session_factory: async_sessionmaker[AsyncSession],
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        records = [
            _county("Appling", "001"),
            _county("Atkinson", "003"),
            _county(None, "005"),
            _county("Baker", "007"),
            _county("Baldwin", "009"),
        ]
        officials = make_officials_provider({})
        counties = make_counties_provider({"Georgia": records})

        result = await sync_jurisdiction(
            georgia, officials_provider=officials, counties_provider=counties, gateway=gateway
        )

        assert (result.counties.processed, result.counties.updated, result.counties.failed) == (5, 4, 1)
        assert result.counties.updated + result.counties.failed <= result.counties.processed
        assert len(result.errors) == 1
        assert result.errors[0].startswith("County None:")
        assert result.successful is False
        assert await _count(session_factory, County) == 4

    @pytest.mark.asyncio
    async def test_official_errors_are_labelled(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        session_factory: async_sessionmaker[AsyncSession],
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        officials = make_officials_provider({"Georgia": [_official("Jon Ossoff"), _official(None)]})
        counties = make_counties_provider({"Georgia": [_county("Fulton", "121")]})

        result = await sync_jurisdiction(
            georgia, officials_provider=officials, counties_provider=counties, gateway=gateway
        )

        assert result.officials.failed == 1
        assert result.errors[0].startswith("Official None:")
        assert result.counties.updated == 1
        assert await _count(session_factory, Official) == 1

    @pytest.mark.asyncio
    async def test_each_provider_called_once(
        self,
        georgia: Jurisdiction,
        gateway: UpsertGateway,
        make_officials_provider: Callable[..., Any],
        make_counties_provider: Callable[..., Any],
    ) -> None:
        officials = make_officials_provider()
        counties = make_counties_provider()

        await sync_jurisdiction(georgia, officials_provider=officials, counties_provider=counties, gateway=gateway)

        assert officials.calls == ["Georgia"]
        assert counties.calls == ["Georgia"]
