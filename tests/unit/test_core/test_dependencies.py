"""Tests for FastAPI dependency injection module."""

import pytest
from fastapi import HTTPException

from civic_sync.core.config import Settings
from civic_sync.core.dependencies import get_roster, require_manual_trigger, require_sync_secret


class TestRequireSyncSecret:
    """Tests for the sync secret guard."""

    @pytest.mark.asyncio
    async def test_valid_secret_passes(self, settings: Settings) -> None:
        await require_sync_secret(settings=settings, authorization="Bearer test-sync-secret")

    @pytest.mark.asyncio
    async def test_wrong_secret_raises_401(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_sync_secret(settings=settings, authorization="Bearer nope")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Unauthorized"
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_unconfigured_secret_raises_500(self, settings: Settings) -> None:
        settings.sync_auth_key = "   "
        with pytest.raises(HTTPException) as exc_info:
            await require_sync_secret(settings=settings, authorization="Bearer    ")
        assert exc_info.value.status_code == 500


class TestRequireManualTrigger:
    @pytest.mark.asyncio
    async def test_disabled_raises_404(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_manual_trigger(settings=settings)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_enabled_outside_production_passes(self, settings: Settings) -> None:
        settings.sync_manual_trigger_enabled = True
        await require_manual_trigger(settings=settings)


class TestGetRoster:
    def test_bundled_roster(self, settings: Settings) -> None:
        assert len(get_roster(settings=settings)) == 50
