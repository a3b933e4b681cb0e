"""Abstract provider interfaces and normalized record shapes.

Providers translate one jurisdiction into normalized records by calling a
single upstream API.  They never raise past their public ``fetch`` method:
every failure is reported as an unavailable :class:`FetchResult` so the
caller can still run the other lane.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from civic_sync.lib.jurisdictions import Jurisdiction

RecordT = TypeVar("RecordT")

SENATOR_OFFICE = "U.S. Senator"
REPRESENTATIVE_OFFICE = "U.S. Representative"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class OfficialRecord:
    """Normalized elected official as produced by an officials provider.

    The natural key is (name, state, office).
    """

    name: str
    office: str
    state: str
    state_abbreviation: str
    data_source: str
    party: str | None = None
    bioguide_id: str | None = None
    district: str | None = None
    congress_url: str | None = None
    last_updated: datetime = field(default_factory=_utcnow)

    @property
    def natural_key(self) -> tuple[str, str, str]:
        return (self.name, self.state, self.office)

    def to_row(self) -> dict[str, Any]:
        """Column values for the ``officials`` table."""
        return {
            "name": self.name,
            "office": self.office,
            "party": self.party,
            "state": self.state,
            "state_abbreviation": self.state_abbreviation,
            "bioguide_id": self.bioguide_id,
            "district": self.district,
            "congress_url": self.congress_url,
            "data_source": self.data_source,
            "last_updated": self.last_updated,
        }


@dataclass
class SubunitRecord:
    """Normalized county (jurisdiction subunit) with its population estimate.

    The natural key is (name, state).
    """

    name: str
    state: str
    state_abbreviation: str
    county_fips: str
    state_fips: str
    population: int
    data_source: str
    last_updated: datetime = field(default_factory=_utcnow)

    @property
    def full_fips(self) -> str:
        return f"{self.state_fips}{self.county_fips}"

    @property
    def natural_key(self) -> tuple[str, str]:
        return (self.name, self.state)

    def to_row(self) -> dict[str, Any]:
        """Column values for the ``counties`` table."""
        return {
            "name": self.name,
            "state": self.state,
            "state_abbreviation": self.state_abbreviation,
            "county_fips": self.county_fips,
            "state_fips": self.state_fips,
            "full_fips": self.full_fips,
            "population": self.population,
            "data_source": self.data_source,
            "last_updated": self.last_updated,
        }


@dataclass(frozen=True)
class FetchResult(Generic[RecordT]):
    """Outcome of one provider call for one jurisdiction.

    ``available`` is False when the call failed (transport, HTTP status,
    malformed body); ``records`` is then empty and ``error`` says why.  An
    available result with no records means the upstream legitimately had
    nothing for the jurisdiction.
    """

    records: tuple[RecordT, ...] = ()
    available: bool = True
    error: str | None = None

    @classmethod
    def ok(cls, records: list[RecordT]) -> FetchResult[RecordT]:
        return cls(records=tuple(records))

    @classmethod
    def unavailable(cls, error: str) -> FetchResult[RecordT]:
        return cls(records=(), available=False, error=error)

    def __len__(self) -> int:
        return len(self.records)


class ProviderError(Exception):
    """Raised inside a provider on a transport, service, or response-shape error.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class BaseOfficialsProvider(ABC):
    """Abstract interface for providers of federal elected officials."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique short name for this provider (e.g. 'congress_gov')."""

    @abstractmethod
    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[OfficialRecord]:
        """Fetch the current officials for a jurisdiction.

        Must not raise; failures are returned as ``FetchResult.unavailable``.
        """

    async def close(self) -> None:  # noqa: B027
        """Release any network resources held by the provider."""


class BaseSubunitsProvider(ABC):
    """Abstract interface for providers of jurisdiction subunits (counties)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique short name for this provider (e.g. 'census_counties')."""

    @abstractmethod
    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[SubunitRecord]:
        """Fetch the subunits of a jurisdiction.

        Must not raise; failures are returned as ``FetchResult.unavailable``.
        """

    async def close(self) -> None:  # noqa: B027
        """Release any network resources held by the provider."""
