"""Unit tests for the provider registry and settings-driven builders."""

import pytest

from civic_sync.core.config import Settings
from civic_sync.lib.providers import (
    CensusCountiesProvider,
    CongressGovProvider,
    build_counties_provider,
    build_officials_provider,
    get_provider,
)


class TestGetProvider:
    def test_congress_gov_registered(self) -> None:
        provider = get_provider("congress_gov", api_key="test-key")
        assert isinstance(provider, CongressGovProvider)

    def test_census_counties_registered(self) -> None:
        provider = get_provider("census_counties", api_key="test-key", year=2021)
        assert isinstance(provider, CensusCountiesProvider)
        assert provider._year == 2021

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown provider"):
            get_provider("nonexistent")


class TestBuilders:
    def test_build_officials_provider_uses_settings(self, settings: Settings) -> None:
        settings.congress_gov_base_url = "https://congress.example.test/v3"
        provider = build_officials_provider(settings)

        assert isinstance(provider, CongressGovProvider)
        assert str(provider._client.base_url).startswith("https://congress.example.test/v3")
        assert provider._client.params["api_key"] == "test-congress-key"

    def test_build_counties_provider_uses_settings(self, settings: Settings) -> None:
        settings.census_acs_year = 2022
        provider = build_counties_provider(settings)

        assert isinstance(provider, CensusCountiesProvider)
        assert provider._year == 2022
        assert provider._client.params["key"] == "test-census-key"
