"""
tests/fakes.py

In-memory stand-ins for the session, repositories, config store and sheet
transport. Pure Python, no database, no network.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from typing import Any

from app.connectors.google_sheets_connector import SheetTransportError
from app.domain.sheet_sync import BatchDraft, CustomerDraft, OrderDraft, compute_order_total
from app.repositories.sync_repositories import SyncRepositories
from db.models.sync_config import SyncConfigEntry
from db.models.sync_error import SyncError
from db.models.sync_job import SyncJob, SyncJobStatus
from db.repositories.errors import SyncConfigKeyNotFoundError, SyncJobLockError
from db.repositories.sync_job_repository import SyncJobRepository
from db.repositories.types import RowErrorRecord, SyncErrorQuery, SyncJobQuery

TODAY = date(2026, 10, 18)
SHEET_ID = "sheet-abc"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class FakeTransaction:
    def __init__(self, session: "FakeSession") -> None:
        self._session = session

    def commit(self) -> None:
        self._session.commits += 1

    def rollback(self) -> None:
        self._session.rollbacks += 1

    def __enter__(self) -> "FakeTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False


class FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def begin(self) -> FakeTransaction:
        return FakeTransaction(self)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def flush(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class FakeSyncJobRepository(SyncJobRepository):
    """
    Keeps jobs in a dict; status transitions run through the real repository.
    """

    def __init__(self, session: FakeSession, jobs: dict[uuid.UUID, SyncJob]) -> None:
        super().__init__(session)  # type: ignore[arg-type]
        self._jobs = jobs

    def create_job(
        self,
        *,
        source: str = "google_sheets",
        triggered_by: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SyncJob:
        now = datetime.now(timezone.utc)
        job = SyncJob(
            id=uuid.uuid4(),
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
            created_at=now,
            updated_at=now,
        )
        self._jobs[job.id] = job
        return job

    def get_job(self, job_id: uuid.UUID) -> SyncJob | None:
        return self._jobs.get(job_id)

    def list_jobs(self, query: SyncJobQuery) -> tuple[list[SyncJob], int]:
        jobs = [job for job in self._jobs.values() if not query.status or job.status == query.status]
        return jobs[query.offset : query.offset + query.limit], len(jobs)

    def mark_running(self, *, job_id: uuid.UUID, lock_key: str) -> SyncJob:
        for other in self._jobs.values():
            if other.id != job_id and other.status == SyncJobStatus.RUNNING and other.lock_key == lock_key:
                raise SyncJobLockError(f"Another sync run is already in progress for sheet {lock_key}.")
        return super().mark_running(job_id=job_id, lock_key=lock_key)

    def fail_stale_runs(self, *, lock_key: str, started_before: datetime) -> int:
        stale = [
            job
            for job in self._jobs.values()
            if job.lock_key == lock_key
            and job.status == SyncJobStatus.RUNNING
            and job.started_at is not None
            and job.started_at < started_before
        ]
        for job in stale:
            self.mark_failed(job_id=job.id, error_message="stale")
        return len(stale)


class FakeSyncErrorRepository:
    def __init__(self, errors: dict[uuid.UUID, list[SyncError]]) -> None:
        self._errors = errors

    def add_errors(self, *, sync_job_id: uuid.UUID, errors: Iterable[RowErrorRecord]) -> int:
        rows = [
            SyncError(
                id=uuid.uuid4(),
                sync_job_id=sync_job_id,
                row_number=error.row_number,
                sheet_name=error.sheet_name,
                entity_type=error.entity_type,
                error_type=error.error_type,
                error_message=error.message,
                field_name=error.field_name,
                invalid_value=error.invalid_value,
                data_snapshot=dict(error.data_snapshot or {}),
                created_at=datetime.now(timezone.utc),
            )
            for error in errors
        ]
        self._errors.setdefault(sync_job_id, []).extend(rows)
        return len(rows)

    def list_errors(self, query: SyncErrorQuery) -> tuple[list[SyncError], int]:
        errors = [
            error
            for error in self._errors.get(query.sync_job_id, [])
            if not query.error_type or error.error_type == query.error_type
        ]
        return errors[query.offset : query.offset + query.limit], len(errors)

    def list_all_errors(self, sync_job_id: uuid.UUID) -> list[SyncError]:
        return sorted(
            self._errors.get(sync_job_id, []),
            key=lambda error: (error.sheet_name or "", error.row_number),
        )


class FakeSyncAuditRepository:
    def __init__(self, entries: list[dict[str, Any]]) -> None:
        self._entries = entries

    def record_insert(self, **kwargs: Any) -> None:
        self._entries.append(kwargs)


class FakeCustomerRepository:
    def __init__(self, customers: dict[str, uuid.UUID], fail_on_names: set[str]) -> None:
        self._customers = customers
        self._fail_on_names = fail_on_names

    def find_id_by_email(self, email: str) -> uuid.UUID | None:
        return self._customers.get(email.strip().lower())

    def insert(self, draft: CustomerDraft, *, created_by: str | None = None) -> uuid.UUID:
        if draft.name in self._fail_on_names:
            raise RuntimeError(f"insert failed for {draft.name}")
        customer_id = uuid.uuid4()
        self._customers[(draft.email or f"row-{draft.row_number}").lower()] = customer_id
        return customer_id


class FakeBatchRepository:
    def __init__(self, batches: dict[str, uuid.UUID]) -> None:
        self._batches = batches

    def find_id_by_code(self, batch_code: str) -> uuid.UUID | None:
        return self._batches.get(batch_code)

    def insert(self, draft: BatchDraft) -> uuid.UUID:
        batch_id = uuid.uuid4()
        self._batches[draft.batch_code] = batch_id
        return batch_id


class FakeOrderRepository:
    def __init__(self, orders: list[dict[str, Any]]) -> None:
        self._orders = orders

    def find_duplicate(self, **key: Any) -> uuid.UUID | None:
        for order in self._orders:
            if all(order[name] == value for name, value in key.items()):
                return order["id"]
        return None

    def insert(
        self,
        draft: OrderDraft,
        *,
        customer_id: uuid.UUID,
        broodstock_batch_id: uuid.UUID | None,
    ) -> uuid.UUID:
        order_id = uuid.uuid4()
        self._orders.append(
            {
                "id": order_id,
                "customer_id": customer_id,
                "broodstock_batch_id": broodstock_batch_id,
                "order_date": draft.order_date,
                "species": draft.species,
                "quantity": draft.quantity,
                "unit_price": draft.unit_price,
                "total_value": compute_order_total(draft.quantity, draft.unit_price),
            }
        )
        return order_id


class FakeSyncStore:
    """
    Shared state behind every fake repository bundle, across sessions.
    """

    def __init__(self) -> None:
        self.jobs: dict[uuid.UUID, SyncJob] = {}
        self.errors: dict[uuid.UUID, list[SyncError]] = {}
        self.audit: list[dict[str, Any]] = []
        self.customers: dict[str, uuid.UUID] = {}
        self.batches: dict[str, uuid.UUID] = {}
        self.orders: list[dict[str, Any]] = []
        self.fail_on_customer_names: set[str] = set()
        self.sessions: list[FakeSession] = []

    def repositories(self, session: FakeSession) -> SyncRepositories:
        return SyncRepositories(
            jobs=FakeSyncJobRepository(session, self.jobs),  # type: ignore[arg-type]
            errors=FakeSyncErrorRepository(self.errors),  # type: ignore[arg-type]
            audit=FakeSyncAuditRepository(self.audit),  # type: ignore[arg-type]
            customers=FakeCustomerRepository(self.customers, self.fail_on_customer_names),  # type: ignore[arg-type]
            batches=FakeBatchRepository(self.batches),  # type: ignore[arg-type]
            orders=FakeOrderRepository(self.orders),  # type: ignore[arg-type]
        )

    def session_factory(self) -> FakeSession:
        session = FakeSession()
        self.sessions.append(session)
        return session


class FakeSyncConfigRepository:
    def __init__(self, entries: dict[str, SyncConfigEntry]) -> None:
        self._entries = entries

    def get_values(self, keys: Iterable[str]) -> dict[str, str]:
        return {key: self._entries[key].config_value for key in keys if key in self._entries}

    def list_entries(self) -> list[SyncConfigEntry]:
        return [self._entries[key] for key in sorted(self._entries)]

    def update_value(self, *, config_key: str, config_value: str, updated_by: str | None = None) -> SyncConfigEntry:
        entry = self._entries.get(config_key)
        if entry is None:
            raise SyncConfigKeyNotFoundError(f"Sync config key not found: {config_key}")
        entry.config_value = config_value
        entry.updated_by = updated_by
        return entry


# ---------------------------------------------------------------------------
# Transport and executors
# ---------------------------------------------------------------------------


class FakeSheetTransport:
    def __init__(self, grids: dict[str, list[list[Any]]] | None = None, error: Exception | None = None) -> None:
        self._grids = grids or {}
        self._error = error
        self.calls: list[tuple[str, str]] = []

    def read_range(self, sheet_id: str, cell_range: str) -> list[list[Any]]:
        self.calls.append((sheet_id, cell_range))
        if self._error is not None:
            raise self._error
        if cell_range not in self._grids:
            raise SheetTransportError(f"Invalid range: {cell_range}")
        return self._grids[cell_range]


class ImmediateExecutor:
    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self.submitted += 1
        task(*args, **kwargs)


class FailingExecutor:
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        raise RuntimeError("queue unavailable")


class SteppingClock:
    """
    Returns the given readings in order, then repeats the last one.
    """

    def __init__(self, *readings: float) -> None:
        self._readings = list(readings) or [0.0]

    def __call__(self) -> float:
        if len(self._readings) > 1:
            return self._readings.pop(0)
        return self._readings[0]


