"""
Repository for row-level sync errors.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from db.models.sync_error import SyncError
from db.repositories.types import RowErrorRecord, SyncErrorQuery

ERRORS_MAX_LIMIT = 500


class SyncErrorRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add_errors(self, *, sync_job_id: uuid.UUID, errors: Sequence[RowErrorRecord]) -> int:
        if not errors:
            return 0
        self._session.add_all(
            [
                SyncError(
                    sync_job_id=sync_job_id,
                    row_number=error.row_number,
                    sheet_name=error.sheet_name,
                    entity_type=error.entity_type,
                    error_type=error.error_type,
                    error_message=error.message,
                    field_name=error.field_name,
                    invalid_value=error.invalid_value,
                    data_snapshot=dict(error.data_snapshot or {}),
                )
                for error in errors
            ]
        )
        return len(errors)

    def list_errors(self, query: SyncErrorQuery) -> tuple[list[SyncError], int]:
        conditions = [SyncError.sync_job_id == query.sync_job_id]
        if query.entity_type:
            conditions.append(SyncError.entity_type == query.entity_type)
        if query.error_type:
            conditions.append(SyncError.error_type == query.error_type)
        if query.sheet_name:
            conditions.append(SyncError.sheet_name == query.sheet_name)

        total = self._session.scalar(select(func.count(SyncError.id)).where(*conditions)) or 0
        stmt: Select[tuple[SyncError]] = (
            select(SyncError)
            .where(*conditions)
            .order_by(SyncError.row_number.asc(), SyncError.created_at.asc())
            .limit(min(max(1, query.limit), ERRORS_MAX_LIMIT))
            .offset(max(0, query.offset))
        )
        return list(self._session.scalars(stmt).all()), int(total)

    def list_all_errors(self, sync_job_id: uuid.UUID) -> list[SyncError]:
        stmt: Select[tuple[SyncError]] = (
            select(SyncError)
            .where(SyncError.sync_job_id == sync_job_id)
            .order_by(SyncError.sheet_name.asc(), SyncError.row_number.asc())
        )
        return list(self._session.scalars(stmt).all())
