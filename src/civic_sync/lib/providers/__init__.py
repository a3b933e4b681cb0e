"""Providers library: upstream adapters for officials and county data.

Public API:
    - OfficialRecord / SubunitRecord: Normalized record dataclasses
    - FetchResult: Per-jurisdiction adapter outcome
    - BaseOfficialsProvider / BaseSubunitsProvider: Abstract provider interfaces
    - ProviderError: Provider-level error
    - CongressGovProvider: Congress.gov member roster
    - CensusCountiesProvider: Census ACS5 county population
    - get_provider / register_provider: Provider factory/registry
    - build_officials_provider / build_counties_provider: Construct providers from settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from civic_sync.lib.providers.base import (
    REPRESENTATIVE_OFFICE,
    SENATOR_OFFICE,
    BaseOfficialsProvider,
    BaseSubunitsProvider,
    FetchResult,
    OfficialRecord,
    ProviderError,
    SubunitRecord,
)
from civic_sync.lib.providers.census_counties import CensusCountiesProvider
from civic_sync.lib.providers.congress_gov import CongressGovProvider

if TYPE_CHECKING:
    from civic_sync.core.config import Settings

_PROVIDERS: dict[str, type[BaseOfficialsProvider] | type[BaseSubunitsProvider]] = {}


def get_provider(name: str, **kwargs: Any) -> BaseOfficialsProvider | BaseSubunitsProvider:
    """Get a provider instance by name.

    Args:
        name: Provider name (e.g., "congress_gov", "census_counties").
        **kwargs: Additional arguments forwarded to the provider constructor.

    Returns:
        An instance of the requested provider.

    Raises:
        ValueError: If the provider is not registered.
    """
    cls = _PROVIDERS.get(name)
    if cls is None:
        msg = f"Unknown provider: {name!r}. Available: {sorted(_PROVIDERS)}"
        raise ValueError(msg)
    return cls(**kwargs)


def register_provider(name: str, cls: type[BaseOfficialsProvider] | type[BaseSubunitsProvider]) -> None:
    """Register a provider class in the global registry.

    Args:
        name: Short name for the provider.
        cls: Provider class.
    """
    if name in _PROVIDERS:
        logger.warning("Overwriting existing provider {!r}", name)
    _PROVIDERS[name] = cls


def build_officials_provider(settings: Settings) -> CongressGovProvider:
    """Construct the Congress.gov provider from settings. The caller must ``close()`` it."""
    return CongressGovProvider(
        settings.congress_gov_api_key or "",
        base_url=settings.congress_gov_base_url,
        timeout=settings.provider_timeout,
    )


def build_counties_provider(settings: Settings) -> CensusCountiesProvider:
    """Construct the Census counties provider from settings. The caller must ``close()`` it."""
    return CensusCountiesProvider(
        settings.census_api_key or "",
        year=settings.census_acs_year,
        base_url=settings.census_base_url,
        timeout=settings.provider_timeout,
    )


register_provider("congress_gov", CongressGovProvider)
register_provider("census_counties", CensusCountiesProvider)

__all__ = [
    "REPRESENTATIVE_OFFICE",
    "SENATOR_OFFICE",
    "BaseOfficialsProvider",
    "BaseSubunitsProvider",
    "CensusCountiesProvider",
    "CongressGovProvider",
    "FetchResult",
    "OfficialRecord",
    "ProviderError",
    "SubunitRecord",
    "build_counties_provider",
    "build_officials_provider",
    "get_provider",
    "register_provider",
]
