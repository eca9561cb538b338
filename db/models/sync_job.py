"""
db/models/sync_job.py

Sync job ledger: one row per triggered spreadsheet import run.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class SyncSource:
    GOOGLE_SHEETS = "google_sheets"
    CSV_UPLOAD = "csv_upload"
    MANUAL_ENTRY = "manual_entry"


class SyncMode:
    INSERT_ONLY = "insert_only"


class SyncJobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"

    TERMINAL = frozenset({COMPLETED, PARTIAL, FAILED})


class SyncJob(Base, TimestampMixin):
    __tablename__ = "sync_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=SyncSource.GOOGLE_SHEETS,
        comment="google_sheets, csv_upload, manual_entry",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=SyncJobStatus.PENDING,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    records_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_inserted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    customers_inserted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orders_inserted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    batches_inserted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    error_summary: Mapped[dict[str, int] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Error counts keyed customer_errors, order_errors, batch_errors",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    triggered_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    job_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",
        JSONB,
        nullable=True,
        comment="sheet_id, sheets_to_sync, sheet_ranges, mode",
    )
    lock_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Sheet id held while the job is running",
    )

    __table_args__ = (
        Index("ix_sync_jobs_status", "status"),
        Index("ix_sync_jobs_source", "source"),
        Index("ix_sync_jobs_triggered_by", "triggered_by"),
        Index("ix_sync_jobs_started_at", "started_at"),
        Index(
            "uq_sync_jobs_running_lock_key",
            "lock_key",
            unique=True,
            postgresql_where=text("status = 'running'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<SyncJob id={self.id} status={self.status!r} source={self.source!r}>"
