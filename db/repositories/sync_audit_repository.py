"""
Repository for per-insert audit entries.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.orm import Session

from db.models.sync_audit_log import SyncAuditAction, SyncAuditLog


class SyncAuditRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def record_insert(
        self,
        *,
        sync_job_id: uuid.UUID,
        entity_type: str,
        entity_id: uuid.UUID,
        row_number: int,
        data_snapshot: dict[str, Any] | None = None,
    ) -> SyncAuditLog:
        entry = SyncAuditLog(
            sync_job_id=sync_job_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=SyncAuditAction.INSERT,
            row_number=row_number,
            data_snapshot=data_snapshot,
        )
        self._session.add(entry)
        return entry
