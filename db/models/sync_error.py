"""
db/models/sync_error.py

Row-level error records flushed at the end of a sync run.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class SyncEntityType:
    CUSTOMER = "customer"
    ORDER = "order"
    BROODSTOCK_BATCH = "broodstock_batch"


class SyncErrorType:
    VALIDATION_ERROR = "validation_error"
    TYPE_ERROR = "type_error"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    DUPLICATE = "duplicate"
    MISSING_REFERENCE = "missing_reference"
    DATABASE_ERROR = "database_error"


class SyncError(Base, CreatedAtMixin):
    __tablename__ = "sync_errors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    sync_job_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sync_jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    row_number: Mapped[int] = mapped_column(Integer, nullable=False)
    sheet_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entity_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="customer, order, broodstock_batch",
    )
    error_type: Mapped[str] = mapped_column(String(32), nullable=False)
    error_message: Mapped[str] = mapped_column(Text, nullable=False)
    field_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    invalid_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    data_snapshot: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        comment="Raw spreadsheet row as parsed",
    )

    __table_args__ = (
        Index("ix_sync_errors_sync_job_id", "sync_job_id"),
        Index("ix_sync_errors_job_entity_type", "sync_job_id", "entity_type"),
        Index("ix_sync_errors_job_error_type", "sync_job_id", "error_type"),
    )
