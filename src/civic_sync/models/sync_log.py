"""SyncLog model for the write-only sync audit trail."""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from civic_sync.models.base import Base, JSONType, UUIDMixin


class SyncLog(Base, UUIDMixin):
    """Immutable record of one sync operation. The engine never updates or deletes rows.

    ``state`` is NULL for run-level (``daily_full_sync``) entries.
    """

    __tablename__ = "sync_logs"

    sync_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    sync_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    records_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    api_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    api_errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_details: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    execution_time_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    data_source: Mapped[str] = mapped_column(String(50), nullable=False, default="mixed")
