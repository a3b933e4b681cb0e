"""US Census Bureau ACS 5-year provider for county population.

Uses the Census data API (https://api.census.gov/data/) table
``B01003_001E`` (total population) at county geography.  The API answers
with a JSON array of arrays whose first row is the header::

    [["NAME", "B01003_001E", "state", "county"],
     ["Autauga County, Alabama", "58761", "01", "001"], ...]
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from civic_sync.lib.providers.base import BaseSubunitsProvider, FetchResult, ProviderError, SubunitRecord

if TYPE_CHECKING:
    from civic_sync.lib.jurisdictions import Jurisdiction

_BASE_URL = "https://api.census.gov/data"

POPULATION_VARIABLE = "B01003_001E"

DATA_SOURCE = "census_api"

# Positional layout used when the header row does not name a column
_DEFAULT_COLUMNS = {"NAME": 0, POPULATION_VARIABLE: 1, "state": 2, "county": 3}

# County-equivalent suffixes, longest first so "City and Borough" wins over "Borough"
_COUNTY_SUFFIXES = (
    " City and Borough",
    " Census Area",
    " Municipality",
    " Borough",
    " Parish",
    " County",
)


def strip_county_name(raw_name: str, state_name: str) -> str:
    """Reduce a Census geography name to the bare county name.

    ``"Autauga County, Alabama"`` becomes ``"Autauga"`` and
    ``"Acadia Parish, Louisiana"`` becomes ``"Acadia"``.  Independent cities
    (``"Baltimore city, Maryland"``) keep their lowercase ``city`` so they
    stay distinct from the county of the same name.
    """
    name = raw_name.strip()
    state_suffix = f", {state_name}"
    if name.endswith(state_suffix):
        name = name[: -len(state_suffix)]
    for suffix in _COUNTY_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)].strip()
    return name


class CensusCountiesProvider(BaseSubunitsProvider):
    """Fetches county population estimates for one state from the ACS 5-year API.

    Args:
        api_key: Census Bureau API key.
        year: ACS dataset vintage.
        base_url: Data API base URL.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        *,
        year: int = 2023,
        base_url: str = _BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._year = year
        self._client = httpx.AsyncClient(
            base_url=base_url,
            params={"key": api_key},
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "census_counties"

    async def fetch(self, jurisdiction: Jurisdiction) -> FetchResult[SubunitRecord]:
        """Fetch every county of a state with its population.

        Args:
            jurisdiction: The state whose counties to fetch.

        Returns:
            County records, or an unavailable result when the request fails
            or the response is not a header plus at least one data row.
        """
        try:
            rows = await self._request(
                f"/{self._year}/acs/acs5",
                {
                    "get": f"NAME,{POPULATION_VARIABLE}",
                    "for": "county:*",
                    "in": f"state:{jurisdiction.fips}",
                },
            )
            records = self._parse_rows(rows, jurisdiction)
        except ProviderError as exc:
            logger.warning("Counties unavailable for {}: {}", jurisdiction.name, exc)
            return FetchResult.unavailable(str(exc))

        logger.debug("Census returned {} counties for {}", len(records), jurisdiction.name)
        return FetchResult.ok(records)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, path: str, params: dict[str, Any]) -> list[Any]:
        """GET a Census data endpoint and return the decoded row array."""
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Census API error: {} {} for {}",
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
            logger.error("Census request failed: {}", exc)
            raise ProviderError(self.provider_name, f"Request failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            # The data API answers an empty 204 for unknown geographies
            logger.error("Census returned non-JSON response for {}", path)
            raise ProviderError(self.provider_name, f"Invalid JSON response for {path}") from exc

        if not isinstance(result, list):
            raise ProviderError(self.provider_name, f"Unexpected response type for {path}")
        return result

    def _parse_rows(self, rows: list[Any], jurisdiction: Jurisdiction) -> list[SubunitRecord]:
        if len(rows) < 2:
            raise ProviderError(self.provider_name, "Response has no county rows")
        header = rows[0]
        if not isinstance(header, list):
            raise ProviderError(self.provider_name, "Response header row is not a list")

        columns = self._resolve_columns(header)
        width = max(columns.values()) + 1

        records: list[SubunitRecord] = []
        for row in rows[1:]:
            if not isinstance(row, list) or len(row) < width:
                logger.warning("Skipping malformed Census row for {}: {!r}", jurisdiction.name, row)
                continue
            raw_name = row[columns["NAME"]]
            if not raw_name:
                continue
            records.append(
                SubunitRecord(
                    name=strip_county_name(str(raw_name), jurisdiction.name),
                    state=jurisdiction.name,
                    state_abbreviation=jurisdiction.abbreviation,
                    county_fips=str(row[columns["county"]]),
                    state_fips=str(row[columns["state"]]),
                    population=_parse_population(row[columns[POPULATION_VARIABLE]]),
                    data_source=DATA_SOURCE,
                )
            )
        return records

    @staticmethod
    def _resolve_columns(header: list[Any]) -> dict[str, int]:
        """Map required column names to indexes, falling back to the default layout."""
        return {
            column: header.index(column) if column in header else position
            for column, position in _DEFAULT_COLUMNS.items()
        }


def _parse_population(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
