"""Unit tests for the public officials and counties endpoints."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from civic_sync.api.v1.directory import directory_router
from civic_sync.core.dependencies import get_async_session, get_roster
from civic_sync.lib.jurisdictions import JurisdictionRoster
from civic_sync.models.county import County, FallbackCounty
from civic_sync.models.official import FallbackOfficial, Official

_NOW = datetime(2026, 10, 19, 6, 0, tzinfo=UTC)


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession], small_roster: JurisdictionRoster) -> FastAPI:
    app = FastAPI()
    app.include_router(directory_router, prefix="/api/v1")

    async def _session_override():  # type: ignore[no-untyped-def]
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session_override
    app.dependency_overrides[get_roster] = lambda: small_roster
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        session.add_all(
            [
                Official(
                    name="Jon Ossoff",
                    office="U.S. Senator",
                    party="Democratic",
                    state="Georgia",
                    state_abbreviation="GA",
                    bioguide_id="O000174",
                    data_source="congress_api",
                    last_updated=_NOW,
                ),
                FallbackOfficial(
                    name="Katie Britt",
                    office="U.S. Senator",
                    state="Alabama",
                    state_abbreviation="AL",
                    data_source="congress_api",
                    last_updated=_NOW,
                    last_verified=_NOW,
                    priority=9,
                ),
                County(
                    name="Fulton",
                    state="Georgia",
                    state_abbreviation="GA",
                    county_fips="121",
                    state_fips="13",
                    full_fips="13121",
                    population=1066710,
                    data_source="census_api",
                    last_updated=_NOW,
                ),
                FallbackCounty(
                    name="Autauga",
                    state="Alabama",
                    state_abbreviation="AL",
                    county_fips="001",
                    state_fips="01",
                    full_fips="01001",
                    population=58761,
                    data_source="census_api",
                    last_updated=_NOW,
                    last_verified=_NOW,
                ),
            ]
        )
        await session.commit()


class TestListOfficials:
    @pytest.mark.asyncio
    @pytest.mark.usefixtures("seeded")
    async def test_canonical_by_abbreviation(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/officials", params={"state": "GA"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "Georgia"
        assert body["source"] == "canonical"
        assert len(body["officials"]) == 1
        official = body["officials"][0]
        assert official["name"] == "Jon Ossoff"
        assert official["party"] == "Democratic"
        assert official["bioguide_id"] == "O000174"

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("seeded")
    async def test_fallback_by_name(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/officials", params={"state": "alabama"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "Alabama"
        assert body["source"] == "fallback"
        assert [o["name"] for o in body["officials"]] == ["Katie Britt"]

    @pytest.mark.asyncio
    async def test_unknown_state_not_found(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/officials", params={"state": "Atlantis"})

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Unknown state: Atlantis"

    @pytest.mark.asyncio
    async def test_state_required(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/officials")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_service_error_is_server_error(self, client: AsyncClient) -> None:
        with patch(
            "civic_sync.api.v1.directory.get_officials_by_state",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            resp = await client.get("/api/v1/officials", params={"state": "GA"})

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to fetch officials data"


class TestListCounties:
    @pytest.mark.asyncio
    @pytest.mark.usefixtures("seeded")
    async def test_canonical(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/counties", params={"state": "GA"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["source"] == "canonical"
        assert body["counties"][0]["full_fips"] == "13121"
        assert body["counties"][0]["population"] == 1066710

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("seeded")
    async def test_fallback(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/counties", params={"state": "AL"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["source"] == "fallback"
        assert body["counties"][0]["name"] == "Autauga"

    @pytest.mark.asyncio
    async def test_empty_state(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/counties", params={"state": "WY"})

        assert resp.status_code == 200
        assert resp.json() == {"state": "Wyoming", "source": "fallback", "counties": []}
