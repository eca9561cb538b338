"""
db/models/sync_audit_log.py

Traceability from an inserted record back to its spreadsheet row.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class SyncAuditAction:
    INSERT = "insert"


class SyncAuditLog(Base, CreatedAtMixin):
    __tablename__ = "sync_audit_log"

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
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    action: Mapped[str] = mapped_column(String(16), nullable=False, default=SyncAuditAction.INSERT)
    row_number: Mapped[int] = mapped_column(Integer, nullable=False)
    data_snapshot: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    __table_args__ = (
        Index("ix_sync_audit_log_sync_job_id", "sync_job_id"),
        Index("ix_sync_audit_log_entity", "entity_type", "entity_id"),
    )
