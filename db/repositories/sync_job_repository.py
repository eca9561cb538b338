"""
Repository for sync job lifecycle persistence, history queries and the run lock.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.models.sync_job import SyncJob, SyncJobStatus, SyncSource
from db.repositories.errors import (
    InvalidSyncJobTransitionError,
    SyncJobLockError,
    SyncJobNotFoundError,
)
from db.repositories.types import SyncJobQuery, SyncJobTotals

HISTORY_MAX_LIMIT = 100

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    SyncJobStatus.PENDING: frozenset({SyncJobStatus.RUNNING, SyncJobStatus.FAILED}),
    SyncJobStatus.RUNNING: frozenset(
        {SyncJobStatus.COMPLETED, SyncJobStatus.PARTIAL, SyncJobStatus.FAILED}
    ),
}

_SORT_COLUMNS = {
    "started_at": SyncJob.started_at,
    "completed_at": SyncJob.completed_at,
    "status": SyncJob.status,
}


def ensure_transition(current: str, target: str) -> None:
    """
    Reject any status change outside pending -> running -> terminal.
    """

    if target not in _ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidSyncJobTransitionError(
            f"Sync job cannot move from '{current}' to '{target}'."
        )


class SyncJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(
        self,
        *,
        source: str = SyncSource.GOOGLE_SHEETS,
        triggered_by: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SyncJob:
        job = SyncJob(
            source=source,
            status=SyncJobStatus.PENDING,
            triggered_by=triggered_by,
            job_metadata=metadata,
            records_processed=0,
            records_inserted=0,
            records_skipped=0,
            records_failed=0,
            customers_inserted=0,
            orders_inserted=0,
            batches_inserted=0,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> SyncJob | None:
        return self._session.get(SyncJob, job_id)

    def require_job(self, job_id: uuid.UUID) -> SyncJob:
        job = self.get_job(job_id)
        if job is None:
            raise SyncJobNotFoundError(f"Sync job not found: {job_id}")
        return job

    def list_jobs(self, query: SyncJobQuery) -> tuple[list[SyncJob], int]:
        conditions = []
        if query.status:
            conditions.append(SyncJob.status == query.status)
        if query.source:
            conditions.append(SyncJob.source == query.source)
        if query.triggered_by:
            conditions.append(SyncJob.triggered_by == query.triggered_by)
        if query.date_from is not None:
            conditions.append(SyncJob.started_at >= query.date_from)
        if query.date_to is not None:
            conditions.append(SyncJob.started_at <= query.date_to)

        total = self._session.scalar(
            select(func.count(SyncJob.id)).where(*conditions)
        ) or 0

        sort_column = _SORT_COLUMNS.get(query.sort_by, SyncJob.started_at)
        ordering = sort_column.asc() if query.sort_order == "asc" else sort_column.desc()
        limit = min(max(1, query.limit), HISTORY_MAX_LIMIT)

        stmt: Select[tuple[SyncJob]] = (
            select(SyncJob)
            .where(*conditions)
            .order_by(ordering.nulls_last(), SyncJob.created_at.desc())
            .limit(limit)
            .offset(max(0, query.offset))
        )
        return list(self._session.scalars(stmt).all()), int(total)

    def mark_running(self, *, job_id: uuid.UUID, lock_key: str) -> SyncJob:
        """
        Move a pending job to running while taking the sheet lock.

        The partial unique index on ``lock_key`` for running jobs rejects a
        second holder; that surfaces here as ``SyncJobLockError``. The caller
        owns the transaction and must roll back on error.
        """

        job = self.require_job(job_id)
        ensure_transition(job.status, SyncJobStatus.RUNNING)
        job.status = SyncJobStatus.RUNNING
        job.started_at = datetime.now(timezone.utc)
        job.completed_at = None
        job.error_message = None
        job.lock_key = lock_key
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise SyncJobLockError(
                f"Another sync run is already in progress for sheet {lock_key}."
            ) from exc
        return job

    def mark_finished(
        self,
        *,
        job_id: uuid.UUID,
        status: str,
        totals: SyncJobTotals,
        error_summary: dict[str, int] | None = None,
        error_message: str | None = None,
    ) -> SyncJob:
        job = self.require_job(job_id)
        ensure_transition(job.status, status)
        job.status = status
        job.completed_at = datetime.now(timezone.utc)
        job.records_processed = totals.records_processed
        job.records_inserted = totals.records_inserted
        job.records_skipped = totals.records_skipped
        job.records_failed = totals.records_failed
        job.customers_inserted = totals.customers_inserted
        job.orders_inserted = totals.orders_inserted
        job.batches_inserted = totals.batches_inserted
        job.error_summary = error_summary
        job.error_message = error_message
        job.lock_key = None
        return job

    def mark_failed(self, *, job_id: uuid.UUID, error_message: str) -> SyncJob:
        job = self.require_job(job_id)
        ensure_transition(job.status, SyncJobStatus.FAILED)
        job.status = SyncJobStatus.FAILED
        job.completed_at = datetime.now(timezone.utc)
        job.error_message = error_message
        job.lock_key = None
        return job

    def fail_stale_runs(self, *, lock_key: str, started_before: datetime) -> int:
        """
        Fail running jobs on ``lock_key`` that started before the cutoff.

        A worker that died mid-run leaves its job in ``running`` and keeps
        the lock; this releases it.
        """

        stmt = select(SyncJob).where(
            SyncJob.lock_key == lock_key,
            SyncJob.status == SyncJobStatus.RUNNING,
            SyncJob.started_at < started_before,
        )
        stale_jobs = list(self._session.scalars(stmt).all())
        for job in stale_jobs:
            self.mark_failed(
                job_id=job.id,
                error_message="Sync run exceeded the run timeout and was marked failed.",
            )
        return len(stale_jobs)
