"""Shared test fixtures for settings, the in-memory store, the roster, and fake providers."""

from collections.abc import AsyncGenerator, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from civic_sync.core.config import Settings
from civic_sync.lib.jurisdictions import Jurisdiction, JurisdictionRoster, parse_roster
from civic_sync.lib.providers import (
    BaseOfficialsProvider,
    BaseSubunitsProvider,
    FetchResult,
    OfficialRecord,
    SubunitRecord,
)
from civic_sync.models.base import Base
from civic_sync.services.upsert_gateway import UpsertGateway

TEST_SYNC_SECRET = "test-sync-secret"


@pytest.fixture
def settings() -> Settings:
    """Test application settings with every sync credential present."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        sync_auth_key=TEST_SYNC_SECRET,
        congress_gov_api_key="test-congress-key",
        census_api_key="test-census-key",
        sync_pacing_seconds=0,
        environment="test",
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the in-memory engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """A session for assertions against the in-memory store."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway(session_factory: async_sessionmaker[AsyncSession]) -> UpsertGateway:
    """Upsert gateway with the default natural merge key."""
    return UpsertGateway(session_factory)


@pytest.fixture
def small_roster() -> JurisdictionRoster:
    """Three-state roster in declared order."""
    return parse_roster(
        {
            "version": "test",
            "jurisdictions": [
                {"name": "Alabama", "abbreviation": "AL", "fips": "01"},
                {"name": "Georgia", "abbreviation": "GA", "fips": "13"},
                {"name": "Wyoming", "abbreviation": "WY", "fips": "56"},
            ],
        }
    )


@pytest.fixture
def georgia() -> Jurisdiction:
    return Jurisdiction(name="Georgia", abbreviation="GA", fips="13")


# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class FakeOfficialsProvider(BaseOfficialsProvider):
    """Returns canned records per state name; states in ``unavailable`` fail."""

    def __init__(
        self,
        by_state: dict[str, list[OfficialRecord]] | None = None,
        unavailable: set[str] | None = None,
    ) -> None:
        self.by_state = by_state or {}
        self.unavailable_states = unavailable or set()
        self.calls: list[str] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "fake_officials"

    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[OfficialRecord]:
        self.calls.append(jurisdiction.name)
        if jurisdiction.name in self.unavailable_states:
            return FetchResult.unavailable("fake_officials: HTTP 503: Service Unavailable")
        return FetchResult.ok(list(self.by_state.get(jurisdiction.name, [])))

    async def close(self) -> None:
        self.closed = True


class FakeSubunitsProvider(BaseSubunitsProvider):
    """Returns canned county records per state name; states in ``unavailable`` fail."""

    def __init__(
        self,
        by_state: dict[str, list[SubunitRecord]] | None = None,
        unavailable: set[str] | None = None,
    ) -> None:
        self.by_state = by_state or {}
        self.unavailable_states = unavailable or set()
        self.calls: list[str] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "fake_counties"

    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[SubunitRecord]:
        self.calls.append(jurisdiction.name)
        if jurisdiction.name in self.unavailable_states:
            return FetchResult.unavailable("fake_counties: Request failed: timed out")
        return FetchResult.ok(list(self.by_state.get(jurisdiction.name, [])))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_officials_provider() -> Callable[..., FakeOfficialsProvider]:
    return FakeOfficialsProvider


@pytest.fixture
def make_counties_provider() -> Callable[..., FakeSubunitsProvider]:
    return FakeSubunitsProvider
