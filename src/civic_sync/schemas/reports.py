"""Pydantic v2 schemas for the daily data health report."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from civic_sync.schemas.sync import SyncLogResponse

StateHealth = Literal["good", "warning", "error"]
OverallHealth = Literal["healthy", "warning", "critical"]


class LaneHealth(BaseModel):
    """Stored-data snapshot of one lane for one state."""

    count: int = Field(description="Canonical rows for the state")
    source: str = Field(description="Data source of the canonical rows, 'fallback', or 'none'")
    last_updated: datetime | None = Field(default=None, description="Most recent canonical update")


class StateHealthReport(BaseModel):
    """Health of one state's stored data."""

    state: str
    officials: LaneHealth
    counties: LaneHealth
    status: StateHealth
    issues: list[str] = Field(default_factory=list)


class HealthSummary(BaseModel):
    total_states: int
    states_with_live_data: int
    states_with_fallback_only: int
    total_officials: int
    total_counties: int
    last_sync_date: date | None = None
    sync_success: bool


class DataQuality(BaseModel):
    officials_data_sources: dict[str, int] = Field(default_factory=dict)
    counties_data_sources: dict[str, int] = Field(default_factory=dict)
    states_with_issues: list[str] = Field(default_factory=list)
    missing_data: list[str] = Field(default_factory=list)


class DailyHealthReport(BaseModel):
    """Daily data health report built from the stores and recent audit entries."""

    report_date: date
    overall_status: OverallHealth
    summary: HealthSummary
    data_quality: DataQuality
    recent_sync_logs: list[SyncLogResponse] = Field(default_factory=list)
    state_breakdown: list[StateHealthReport] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
