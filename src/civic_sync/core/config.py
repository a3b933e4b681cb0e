"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncConfigurationError(Exception):
    """Raised when the sync engine is missing credentials or endpoint configuration.

    Args:
        missing: Names of the settings that are missing or empty.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Sync is not configured; missing settings: {', '.join(missing)}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string for the canonical and fallback stores",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # Sync trigger
    sync_auth_key: str | None = Field(
        default=None,
        description="Pre-shared secret expected in the Authorization: Bearer header of the sync trigger",
    )
    sync_manual_trigger_enabled: bool = Field(
        default=False,
        description="Expose the manual sync trigger (never honoured when environment is production)",
    )

    # Upstream providers
    congress_gov_api_key: str | None = Field(
        default=None,
        description="Congress.gov API key for the federal member roster",
    )
    congress_gov_base_url: str = Field(
        default="https://api.congress.gov/v3",
        description="Congress.gov API base URL",
    )
    census_api_key: str | None = Field(
        default=None,
        description="US Census Bureau API key for county population data",
    )
    census_base_url: str = Field(
        default="https://api.census.gov/data",
        description="US Census Bureau data API base URL",
    )
    census_acs_year: int = Field(
        default=2023,
        description="ACS 5-year dataset vintage used for county population",
        ge=2009,
    )
    provider_timeout: float = Field(
        default=30.0,
        description="Per-request timeout for upstream provider calls in seconds",
        gt=0,
    )

    # Sync engine
    sync_pacing_seconds: float = Field(
        default=0.1,
        description="Minimum delay between successive jurisdictions",
        ge=0,
    )
    sync_rate_limiter: str = Field(
        default="fixed",
        description="Pacing strategy between jurisdictions: fixed or token_bucket",
    )
    sync_token_bucket_capacity: int = Field(
        default=1,
        description="Burst capacity when sync_rate_limiter is token_bucket",
        gt=0,
    )
    sync_max_concurrency: int = Field(
        default=1,
        description="Jurisdictions processed concurrently (1 keeps the run strictly sequential)",
        gt=0,
        le=10,
    )
    sync_official_merge_key: str = Field(
        default="natural",
        description="Officials upsert key: natural (name, state, office) or bioguide (bioguide_id)",
    )
    jurisdiction_roster_path: str | None = Field(
        default=None,
        description="Path to a roster JSON file overriding the bundled US states roster",
    )

    @field_validator("sync_rate_limiter")
    @classmethod
    def validate_sync_rate_limiter(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("fixed", "token_bucket"):
            msg = "sync_rate_limiter must be 'fixed' or 'token_bucket'"
            raise ValueError(msg)
        return v

    @field_validator("sync_official_merge_key")
    @classmethod
    def validate_sync_official_merge_key(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("natural", "bioguide"):
            msg = "sync_official_merge_key must be 'natural' or 'bioguide'"
            raise ValueError(msg)
        return v

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, dev, staging)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )
    rate_limit_per_minute: int = Field(
        default=200,
        description="Maximum API requests per minute per IP address",
        gt=0,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def manual_trigger_allowed(self) -> bool:
        """Whether the manual sync trigger may be served in this environment."""
        return self.sync_manual_trigger_enabled and self.environment.strip().lower() != "production"

    def require_sync_credentials(self) -> None:
        """Ensure every credential the sync engine needs is present.

        Raises:
            SyncConfigurationError: If any provider key or the trigger secret is missing.
        """
        missing = [
            name
            for name in ("sync_auth_key", "congress_gov_api_key", "census_api_key")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise SyncConfigurationError(missing)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
