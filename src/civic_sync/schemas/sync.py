"""Pydantic v2 schemas for sync runs, per-jurisdiction results, and audit logs."""

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from civic_sync.schemas.common import PaginationMeta

LaneSource = Literal["provider", "none"]
SyncStatus = Literal["success", "partial", "failed"]

# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------


class LaneResult(BaseModel):
    """Outcome of one lane (officials or counties) for one jurisdiction.

    ``updated + failed <= processed`` always holds.  ``source`` is ``"none"``
    when the provider returned zero records; ``unavailable`` additionally marks
    that the provider call itself failed.
    """

    model_config = ConfigDict(frozen=True)

    processed: int = Field(default=0, ge=0, description="Records returned by the provider")
    updated: int = Field(default=0, ge=0, description="Records upserted successfully")
    failed: int = Field(default=0, ge=0, description="Records whose upsert failed")
    source: LaneSource = Field(default="none", description="Where the lane's records came from")
    unavailable: bool = Field(default=False, description="Provider call failed")


class JurisdictionSyncResult(BaseModel):
    """Result of syncing one jurisdiction through both lanes."""

    model_config = ConfigDict(frozen=True)

    state: str
    officials: LaneResult = Field(default_factory=LaneResult)
    counties: LaneResult = Field(default_factory=LaneResult)
    errors: list[str] = Field(default_factory=list)

    @property
    def successful(self) -> bool:
        """A jurisdiction succeeds when neither lane reported a record error."""
        return not self.errors


class SyncSummary(BaseModel):
    """Source distribution and the leading errors of a run."""

    model_config = ConfigDict(frozen=True)

    officials_sources: dict[str, int] = Field(default_factory=dict)
    counties_sources: dict[str, int] = Field(default_factory=dict)
    top_errors: list[str] = Field(default_factory=list)


class RunReport(BaseModel):
    """Immutable report returned by a completed sync run."""

    model_config = ConfigDict(frozen=True)

    sync_date: date
    total_states: int
    successful_states: int
    failed_states: int
    total_officials: int
    total_counties: int
    api_calls: int
    api_errors: int
    execution_time_seconds: float
    state_results: list[JurisdictionSyncResult]
    summary: SyncSummary


# ---------------------------------------------------------------------------
# Trigger request/response bodies
# ---------------------------------------------------------------------------


class SyncTriggerResponse(BaseModel):
    """Body returned by a successful sync trigger."""

    success: bool = True
    message: str = "Daily sync completed"
    report: RunReport


class SyncFailureResponse(BaseModel):
    """Body returned when a sync run fails unexpectedly."""

    success: bool = False
    error: str = "Daily sync failed"
    details: str


class ManualSyncRequest(BaseModel):
    """Optional roster subset for a manual run."""

    states: list[str] | None = Field(
        default=None,
        description="State names or abbreviations; omit to sync the full roster",
        min_length=1,
    )


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


class SyncLogResponse(BaseModel):
    """One audit entry."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sync_date: date
    created_at: datetime
    sync_type: str
    state: str | None = None
    status: str
    records_processed: int
    records_updated: int
    records_failed: int
    api_calls: int
    api_errors: int
    error_details: dict | None = None
    execution_time_seconds: float
    data_source: str


class PaginatedSyncLogResponse(BaseModel):
    """Paginated list of audit entries, newest first."""

    items: list[SyncLogResponse]
    pagination: PaginationMeta
