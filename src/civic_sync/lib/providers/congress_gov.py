"""Congress.gov API v3 provider for current US senators and representatives."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from civic_sync.lib.providers.base import (
    REPRESENTATIVE_OFFICE,
    SENATOR_OFFICE,
    BaseOfficialsProvider,
    FetchResult,
    OfficialRecord,
    ProviderError,
)

if TYPE_CHECKING:
    from civic_sync.lib.jurisdictions import Jurisdiction

_BASE_URL = "https://api.congress.gov/v3"

# Largest page Congress.gov serves for /member
_DEFAULT_PAGE_SIZE = 250

DATA_SOURCE = "congress_api"


class CongressGovProvider(BaseOfficialsProvider):
    """Fetches the current member roster from Congress.gov and filters it per state.

    Each :meth:`fetch` issues exactly one roster request; members are matched
    to the jurisdiction by full state name or USPS abbreviation.

    Args:
        api_key: Congress.gov API key.
        base_url: API base URL.
        timeout: Request timeout in seconds.
        page_size: ``limit`` sent with the roster request.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = _BASE_URL,
        timeout: float = 30.0,
        page_size: int = _DEFAULT_PAGE_SIZE,
    ) -> None:
        self._page_size = page_size
        self._client = httpx.AsyncClient(
            base_url=base_url,
            params={"api_key": api_key, "format": "json"},
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "congress_gov"

    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[OfficialRecord]:
        """Fetch current members of Congress for one state.

        Args:
            jurisdiction: The state to fetch members for.

        Returns:
            Records for the state's members, or an unavailable result when
            the roster request or its parsing fails.
        """
        try:
            members = await self._fetch_current_members()
        except ProviderError as exc:
            logger.warning("Officials unavailable for {}: {}", jurisdiction.name, exc)
            return FetchResult.unavailable(str(exc))

        records: list[OfficialRecord] = []
        for member in members:
            if member.get("state") not in (jurisdiction.name, jurisdiction.abbreviation):
                continue
            record = self._map_member(member, jurisdiction)
            if record is not None:
                records.append(record)

        logger.debug("Congress.gov returned {} members for {}", len(records), jurisdiction.name)
        return FetchResult.ok(records)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch_current_members(self) -> list[dict[str, Any]]:
        """Fetch the current-member roster (one page of ``page_size``)."""
        data = await self._request("/member", {"currentMember": "true", "limit": self._page_size})
        members = data.get("members")
        if not isinstance(members, list):
            raise ProviderError(self.provider_name, "Response is missing the 'members' list")
        return [m for m in members if isinstance(m, dict)]

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make an authenticated GET request to the Congress.gov API."""
        try:
            response = await self._client.get(path, params=params or {})
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Congress.gov API error: {} {} for {}",
                exc.response.status_code,
                exc.response.reason_phrase,
                path,
            )
            raise ProviderError(
                self.provider_name,
                f"HTTP {exc.response.status_code}: {exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Congress.gov request failed: {}", exc)
            raise ProviderError(self.provider_name, f"Request failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Congress.gov returned non-JSON response for {}", path)
            raise ProviderError(self.provider_name, f"Invalid JSON response for {path}") from exc

        if not isinstance(result, dict):
            raise ProviderError(self.provider_name, f"Unexpected response type for {path}")
        return result

    def _map_member(self, member: dict[str, Any], jurisdiction: Jurisdiction) -> OfficialRecord | None:
        """Map a Congress.gov roster entry to an OfficialRecord.

        Returns None and logs a warning if the member has no usable name.
        Non-string optional fields are dropped rather than passed through.
        """
        name = _text(member.get("name"))
        if name is None:
            logger.warning(
                "Skipping Congress.gov member with missing or malformed name (bioguideId={!r})",
                member.get("bioguideId"),
            )
            return None

        district = member.get("district")
        return OfficialRecord(
            name=name,
            office=self.office_for_chamber(self._latest_chamber(member.get("terms"))),
            party=_text(member.get("partyName")),
            state=jurisdiction.name,
            state_abbreviation=jurisdiction.abbreviation,
            bioguide_id=_text(member.get("bioguideId")),
            district=str(district) if isinstance(district, (int, str)) and str(district).strip() else None,
            congress_url=_text(member.get("url")),
            data_source=DATA_SOURCE,
        )

    @staticmethod
    def office_for_chamber(chamber: str | None) -> str:
        """Senate chamber maps to "U.S. Senator"; everything else to "U.S. Representative"."""
        if chamber and chamber.strip().lower() == "senate":
            return SENATOR_OFFICE
        return REPRESENTATIVE_OFFICE

    @staticmethod
    def _latest_chamber(terms: Any) -> str | None:
        """Read the chamber from a member's terms.

        The roster endpoint nests terms as ``{"item": [...]}``; the first item
        is used, matching the order Congress.gov lists them.  A bare list is
        accepted too, in which case its last entry is the current term.
        """
        if isinstance(terms, dict):
            items = terms.get("item") or []
            first = items[0] if isinstance(items, list) and items else None
        elif isinstance(terms, list) and terms:
            first = terms[-1]
        else:
            first = None
        if not isinstance(first, dict):
            return None
        chamber = first.get("chamber")
        return chamber if isinstance(chamber, str) else None


def _text(value: Any) -> str | None:
    """Stripped string, or None for blanks and non-string values."""
    if not isinstance(value, str):
        return None
    return value.strip() or None
