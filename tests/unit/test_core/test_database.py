"""Tests for the database engine and session management module."""

from unittest.mock import MagicMock, patch

import pytest

import civic_sync.core.database as db_module
from civic_sync.core.database import create_engine_and_factory, dispose_engine, get_session_factory, init_engine


class TestGetSessionFactory:
    """Tests for get_session_factory."""

    def test_raises_when_not_initialized(self) -> None:
        original_factory = db_module._session_factory
        db_module._session_factory = None
        try:
            with pytest.raises(RuntimeError, match="Session factory not initialized"):
                get_session_factory()
        finally:
            db_module._session_factory = original_factory


class TestInitEngine:
    """Tests for init_engine."""

    @pytest.mark.asyncio
    async def test_creates_engine_and_factory(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert engine is not None
            assert get_session_factory() is not None
        finally:
            await dispose_engine()

    def test_pool_defaults_for_postgres(self) -> None:
        with patch("civic_sync.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            create_engine_and_factory("postgresql+asyncpg://localhost/db", echo=False)
            mock_create.assert_called_once_with(
                "postgresql+asyncpg://localhost/db", echo=False, pool_size=10, max_overflow=5
            )

    def test_schema_sets_search_path(self) -> None:
        with patch("civic_sync.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            create_engine_and_factory("postgresql+asyncpg://localhost/db", schema="pr_42")
            kwargs = mock_create.call_args.kwargs
            assert kwargs["connect_args"] == {"server_settings": {"search_path": "pr_42,public"}}

    def test_sqlite_skips_pool_sizing(self) -> None:
        with patch("civic_sync.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            create_engine_and_factory("sqlite+aiosqlite:///:memory:")
            mock_create.assert_called_once_with("sqlite+aiosqlite:///:memory:")


class TestDisposeEngine:
    """Tests for dispose_engine."""

    @pytest.mark.asyncio
    async def test_disposes_engine(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:")
        await dispose_engine()
        assert db_module._engine is None
        assert db_module._session_factory is None

    @pytest.mark.asyncio
    async def test_dispose_when_no_engine(self) -> None:
        original = db_module._engine
        db_module._engine = None
        try:
            await dispose_engine()
        finally:
            db_module._engine = original
