"""
Orchestrator for Google Sheets imports: job creation, background runs and
row-scoped persistence.

A run reads every requested range up front, then syncs customers, batches
and orders in that order so order rows can resolve the customers and
batches inserted earlier in the same run. Each row gets its own
transaction; a failing row is recorded and the run moves on.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Protocol

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session, sessionmaker

from app.config import SyncRunSettings, get_sync_run_settings
from app.connectors.google_sheets_connector import (
    SheetTransportFactory,
    build_google_sheets_connector,
)
from app.domain.sheet_sync import (
    SHEET_NAMES,
    BatchDraft,
    CustomerDraft,
    EntityDraft,
    EntitySyncResult,
    OrderDraft,
    ParsedRow,
    RowOutcome,
    RowOutcomeStatus,
    RowValidationError,
    SheetKey,
    SyncRunSummary,
    ValidationOutcome,
    compute_order_total,
    draft_snapshot,
    summarize_errors,
)
from app.repositories.sync_repositories import SyncRepositories, build_sync_repositories
from app.schemas.sheet_sync import SheetSyncTriggerRequest
from app.services.sync_config_service import SyncConfigService, get_sync_config_service
from app.sheets.row_parser import parse_rows
from app.validators.entity_validator import EntityRowValidator
from db.models.sync_error import SyncError, SyncErrorType
from db.models.sync_job import SyncJob, SyncJobStatus, SyncMode, SyncSource
from db.repositories.types import SyncErrorQuery, SyncJobQuery, SyncJobTotals
from db.session import apply_statement_timeout

logger = logging.getLogger(__name__)

# Extra age, beyond the run timeout, before a running job is treated as abandoned.
STALE_RUN_GRACE_SECONDS = 300.0


class SheetSyncDisabledError(RuntimeError):
    """
    Raised when a sync is triggered while the sheet sync is switched off.
    """


class SheetSyncConfigurationError(ValueError):
    """
    Raised when a sync cannot start because required configuration is missing.
    """


class SyncTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


def resolve_terminal_status(*, error_count: int, inserted: int, timed_out: bool) -> str:
    """
    completed: no errors and the run finished. partial: something was
    inserted despite errors or a timeout. failed: nothing was inserted.
    """

    if error_count == 0 and not timed_out:
        return SyncJobStatus.COMPLETED
    if inserted > 0:
        return SyncJobStatus.PARTIAL
    return SyncJobStatus.FAILED


def ordered_sheet_keys(requested: Sequence[str] | None) -> list[str]:
    """
    Requested subset in dependency order. ``None`` means all sheets.
    """

    if requested is None:
        return list(SheetKey.ORDERED)
    wanted = set(requested)
    return [key for key in SheetKey.ORDERED if key in wanted]


def build_run_summary(
    results: Sequence[EntitySyncResult],
    *,
    timed_out: bool,
    run_timeout_seconds: float,
) -> SyncRunSummary:
    errors = [error for result in results for error in result.errors]
    inserted_by_sheet = {result.sheet_key: result.inserted for result in results}
    inserted = sum(result.inserted for result in results)

    error_message = None
    if timed_out:
        error_message = (
            f"Sync run exceeded the run timeout of {run_timeout_seconds:g}s; "
            "remaining rows were not processed."
        )

    return SyncRunSummary(
        status=resolve_terminal_status(error_count=len(errors), inserted=inserted, timed_out=timed_out),
        processed=sum(result.processed for result in results),
        inserted=inserted,
        skipped=sum(result.skipped for result in results),
        failed=sum(result.failed for result in results),
        customers_inserted=inserted_by_sheet.get(SheetKey.CUSTOMERS, 0),
        orders_inserted=inserted_by_sheet.get(SheetKey.ORDERS, 0),
        batches_inserted=inserted_by_sheet.get(SheetKey.BATCHES, 0),
        errors=errors,
        error_summary=summarize_errors(errors),
        error_message=error_message,
    )


class SheetSyncService:
    """
    Coordinates sync job creation, background execution and status persistence.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | Callable[[], Session] | None = None,
        repositories_factory: Callable[[Session], SyncRepositories] = build_sync_repositories,
        transport_factory: SheetTransportFactory = build_google_sheets_connector,
        validator: EntityRowValidator | None = None,
        config_service: SyncConfigService | None = None,
        run_settings: SyncRunSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

        self._repositories_factory = repositories_factory
        self._transport_factory = transport_factory
        self._validator = validator or EntityRowValidator()
        self._config_service = config_service or get_sync_config_service()
        self._run_settings = run_settings or get_sync_run_settings()
        self._clock = clock

    # ------------------------------------------------------------------
    # Trigger and queries
    # ------------------------------------------------------------------

    def trigger_sync(
        self,
        *,
        db: Session,
        executor: SyncTaskExecutor,
        request: SheetSyncTriggerRequest,
        triggered_by: str | None = None,
    ) -> SyncJob:
        repositories = self._repositories_factory(db)
        with db.begin():
            config = self._config_service.resolve(db)
            if not config.enabled:
                raise SheetSyncDisabledError("Google Sheets sync is disabled.")

            sheet_id = request.sheet_id or config.master_sheet_id
            if not sheet_id:
                raise SheetSyncConfigurationError(
                    "No sheet id provided and no master sheet id is configured."
                )

            sheet_keys = ordered_sheet_keys(request.sheets_to_sync)
            job = repositories.jobs.create_job(
                source=SyncSource.GOOGLE_SHEETS,
                triggered_by=triggered_by,
                metadata={
                    "sheet_id": sheet_id,
                    "sheets_to_sync": sheet_keys,
                    "sheet_ranges": {key: config.range_for(key) for key in sheet_keys},
                    "mode": request.mode or SyncMode.INSERT_ONLY,
                },
            )

        logger.info(
            "Sheet sync job created id=%s sheet_id=%s sheets=%s triggered_by=%s",
            job.id,
            sheet_id,
            ",".join(sheet_keys),
            triggered_by,
        )

        try:
            executor.submit(self._run_sync_job, job.id)
        except Exception:
            with db.begin():
                repositories.jobs.mark_failed(
                    job_id=job.id,
                    error_message="Failed to schedule sheet sync job.",
                )
            raise

        return job

    def get_job(self, *, db: Session, job_id: uuid.UUID) -> SyncJob | None:
        return self._repositories_factory(db).jobs.get_job(job_id)

    def list_jobs(self, *, db: Session, query: SyncJobQuery) -> tuple[list[SyncJob], int]:
        return self._repositories_factory(db).jobs.list_jobs(query)

    def list_errors(self, *, db: Session, query: SyncErrorQuery) -> tuple[list[SyncError], int]:
        return self._repositories_factory(db).errors.list_errors(query)

    # ------------------------------------------------------------------
    # Background run
    # ------------------------------------------------------------------

    def _run_sync_job(self, job_id: uuid.UUID) -> None:
        with self._session_factory() as db:
            repositories = self._repositories_factory(db)
            try:
                job = repositories.jobs.require_job(job_id)
                metadata = dict(job.job_metadata or {})
                sheet_id = str(metadata.get("sheet_id") or "")
                if not sheet_id:
                    raise SheetSyncConfigurationError(f"Sync job has no sheet id: {job_id}")
                sheet_keys = ordered_sheet_keys(metadata.get("sheets_to_sync"))
                sheet_ranges: dict[str, str] = dict(metadata.get("sheet_ranges") or {})
                triggered_by = job.triggered_by

                run_timeout = self._run_settings.run_timeout_seconds
                stale_before = datetime.now(timezone.utc) - timedelta(seconds=run_timeout + STALE_RUN_GRACE_SECONDS)
                released = repositories.jobs.fail_stale_runs(lock_key=sheet_id, started_before=stale_before)
                if released:
                    logger.warning("Released stale sync runs sheet_id=%s count=%s", sheet_id, released)
                repositories.jobs.mark_running(job_id=job_id, lock_key=sheet_id)
                db.commit()
                deadline = self._clock() + run_timeout
                logger.info("Sheet sync job running id=%s sheet_id=%s", job_id, sheet_id)

                config = self._config_service.resolve(db)
                db.commit()

                transport = self._transport_factory(config.credentials_path)
                grids = {
                    key: transport.read_range(sheet_id, sheet_ranges.get(key) or config.range_for(key))
                    for key in sheet_keys
                }

                results: list[EntitySyncResult] = []
                timed_out = False
                for sheet_key in sheet_keys:
                    result = self._sync_sheet(
                        db=db,
                        repositories=repositories,
                        job_id=job_id,
                        sheet_key=sheet_key,
                        grid=grids[sheet_key],
                        deadline=deadline,
                        triggered_by=triggered_by,
                    )
                    results.append(result)
                    if result.timed_out:
                        timed_out = True
                        break

                summary = build_run_summary(results, timed_out=timed_out, run_timeout_seconds=run_timeout)
                repositories.errors.add_errors(sync_job_id=job_id, errors=summary.errors)
                repositories.jobs.mark_finished(
                    job_id=job_id,
                    status=summary.status,
                    totals=SyncJobTotals(
                        records_processed=summary.processed,
                        records_inserted=summary.inserted,
                        records_skipped=summary.skipped,
                        records_failed=summary.failed,
                        customers_inserted=summary.customers_inserted,
                        orders_inserted=summary.orders_inserted,
                        batches_inserted=summary.batches_inserted,
                    ),
                    error_summary=summary.error_summary,
                    error_message=summary.error_message,
                )
                db.commit()
                logger.info(
                    "Sheet sync job finished id=%s status=%s processed=%s inserted=%s skipped=%s failed=%s errors=%s",
                    job_id,
                    summary.status,
                    summary.processed,
                    summary.inserted,
                    summary.skipped,
                    summary.failed,
                    len(summary.errors),
                )
            except Exception as exc:
                self._mark_job_failed(db=db, job_id=job_id, exc=exc)

    def _sync_sheet(
        self,
        *,
        db: Session,
        repositories: SyncRepositories,
        job_id: uuid.UUID,
        sheet_key: str,
        grid: list[list[Any]],
        deadline: float,
        triggered_by: str | None,
    ) -> EntitySyncResult:
        sheet_name = SHEET_NAMES[sheet_key]
        rows = parse_rows(grid)
        result = EntitySyncResult(sheet_key=sheet_key, processed=len(rows))

        outcome = self._validate(sheet_key, rows, sheet_name=sheet_name)
        result.add_validation_errors(outcome.errors)
        if self._run_settings.log_validation_errors:
            for error in outcome.errors:
                logger.warning(
                    "Sheet row rejected job_id=%s sheet=%s row=%s type=%s field=%s message=%s",
                    job_id,
                    sheet_name,
                    error.row_number,
                    error.error_type,
                    error.field_name,
                    error.message,
                )

        raw_rows = {row.row_number: row.data for row in rows}
        drafts = outcome.valid_rows
        for index, draft in enumerate(drafts):
            if self._clock() >= deadline:
                result.timed_out = True
                result.processed -= len(drafts) - index
                logger.warning(
                    "Sheet sync run deadline reached job_id=%s sheet=%s unprocessed_rows=%s",
                    job_id,
                    sheet_name,
                    len(drafts) - index,
                )
                break

            row_outcome = self._process_row(
                db=db,
                repositories=repositories,
                job_id=job_id,
                draft=draft,
                sheet_name=sheet_name,
                raw_data=raw_rows.get(draft.row_number, {}),
                triggered_by=triggered_by,
            )
            result.apply(row_outcome)

        logger.info(
            "Sheet synced job_id=%s sheet=%s processed=%s inserted=%s skipped=%s failed=%s",
            job_id,
            sheet_name,
            result.processed,
            result.inserted,
            result.skipped,
            result.failed,
        )
        return result

    def _validate(self, sheet_key: str, rows: list[ParsedRow], *, sheet_name: str) -> ValidationOutcome:
        if sheet_key == SheetKey.CUSTOMERS:
            return self._validator.validate_customer_rows(rows, sheet_name=sheet_name)
        if sheet_key == SheetKey.BATCHES:
            return self._validator.validate_batch_rows(rows, sheet_name=sheet_name)
        return self._validator.validate_order_rows(rows, sheet_name=sheet_name)

    def _process_row(
        self,
        *,
        db: Session,
        repositories: SyncRepositories,
        job_id: uuid.UUID,
        draft: EntityDraft,
        sheet_name: str,
        raw_data: dict[str, Any],
        triggered_by: str | None,
    ) -> RowOutcome:
        """
        Check and insert one draft inside its own transaction.

        Only a successful insert commits; skips, missing references and
        errors roll back.
        """

        transaction = db.begin()
        try:
            apply_statement_timeout(db, self._run_settings.row_timeout_ms)
            if isinstance(draft, CustomerDraft):
                outcome = self._insert_customer(repositories, job_id, draft, sheet_name, raw_data, triggered_by)
            elif isinstance(draft, BatchDraft):
                outcome = self._insert_batch(repositories, job_id, draft, sheet_name, raw_data)
            else:
                outcome = self._insert_order(repositories, job_id, draft, sheet_name, raw_data)

            if outcome.inserted:
                transaction.commit()
            else:
                transaction.rollback()
            return outcome
        except Exception as exc:
            transaction.rollback()
            logger.warning(
                "Sheet row insert failed job_id=%s sheet=%s row=%s error=%s",
                job_id,
                sheet_name,
                draft.row_number,
                exc,
            )
            return RowOutcome(
                status=RowOutcomeStatus.FAILED,
                error=_row_error(
                    draft,
                    sheet_name=sheet_name,
                    raw_data=raw_data,
                    error_type=SyncErrorType.DATABASE_ERROR,
                    message=str(exc) or type(exc).__name__,
                ),
            )

    def _insert_customer(
        self,
        repositories: SyncRepositories,
        job_id: uuid.UUID,
        draft: CustomerDraft,
        sheet_name: str,
        raw_data: dict[str, Any],
        triggered_by: str | None,
    ) -> RowOutcome:
        if draft.email and repositories.customers.find_id_by_email(draft.email) is not None:
            return RowOutcome(
                status=RowOutcomeStatus.SKIPPED,
                error=_row_error(
                    draft,
                    sheet_name=sheet_name,
                    raw_data=raw_data,
                    error_type=SyncErrorType.DUPLICATE,
                    message=f"Customer with email {draft.email} already exists",
                    field_name="email",
                    invalid_value=draft.email,
                ),
            )

        customer_id = repositories.customers.insert(draft, created_by=triggered_by)
        repositories.audit.record_insert(
            sync_job_id=job_id,
            entity_type=draft.entity_type,
            entity_id=customer_id,
            row_number=draft.row_number,
            data_snapshot=draft_snapshot(draft),
        )
        return RowOutcome(status=RowOutcomeStatus.INSERTED)

    def _insert_batch(
        self,
        repositories: SyncRepositories,
        job_id: uuid.UUID,
        draft: BatchDraft,
        sheet_name: str,
        raw_data: dict[str, Any],
    ) -> RowOutcome:
        if repositories.batches.find_id_by_code(draft.batch_code) is not None:
            return RowOutcome(
                status=RowOutcomeStatus.SKIPPED,
                error=_row_error(
                    draft,
                    sheet_name=sheet_name,
                    raw_data=raw_data,
                    error_type=SyncErrorType.DUPLICATE,
                    message=f"Batch with code {draft.batch_code} already exists",
                    field_name="batch_code",
                    invalid_value=draft.batch_code,
                ),
            )

        batch_id = repositories.batches.insert(draft)
        repositories.audit.record_insert(
            sync_job_id=job_id,
            entity_type=draft.entity_type,
            entity_id=batch_id,
            row_number=draft.row_number,
            data_snapshot=draft_snapshot(draft),
        )
        return RowOutcome(status=RowOutcomeStatus.INSERTED)

    def _insert_order(
        self,
        repositories: SyncRepositories,
        job_id: uuid.UUID,
        draft: OrderDraft,
        sheet_name: str,
        raw_data: dict[str, Any],
    ) -> RowOutcome:
        customer_id = repositories.customers.find_id_by_email(draft.customer_email)
        if customer_id is None:
            return RowOutcome(
                status=RowOutcomeStatus.FAILED,
                error=_row_error(
                    draft,
                    sheet_name=sheet_name,
                    raw_data=raw_data,
                    error_type=SyncErrorType.MISSING_REFERENCE,
                    message=f"Customer with email {draft.customer_email} not found",
                    field_name="customer_email",
                    invalid_value=draft.customer_email,
                ),
            )

        batch_id = None
        if draft.broodstock_batch_code:
            batch_id = repositories.batches.find_id_by_code(draft.broodstock_batch_code)
            if batch_id is None:
                return RowOutcome(
                    status=RowOutcomeStatus.FAILED,
                    error=_row_error(
                        draft,
                        sheet_name=sheet_name,
                        raw_data=raw_data,
                        error_type=SyncErrorType.MISSING_REFERENCE,
                        message=f"Batch with code {draft.broodstock_batch_code} not found",
                        field_name="broodstock_batch_code",
                        invalid_value=draft.broodstock_batch_code,
                    ),
                )

        duplicate_id = repositories.orders.find_duplicate(
            customer_id=customer_id,
            order_date=draft.order_date,
            species=draft.species,
            quantity=draft.quantity,
            unit_price=draft.unit_price,
        )
        if duplicate_id is not None:
            return RowOutcome(status=RowOutcomeStatus.SKIPPED)

        order_id = repositories.orders.insert(
            draft,
            customer_id=customer_id,
            broodstock_batch_id=batch_id,
        )
        snapshot = draft_snapshot(draft)
        snapshot["total_value"] = str(compute_order_total(draft.quantity, draft.unit_price))
        repositories.audit.record_insert(
            sync_job_id=job_id,
            entity_type=draft.entity_type,
            entity_id=order_id,
            row_number=draft.row_number,
            data_snapshot=snapshot,
        )
        return RowOutcome(status=RowOutcomeStatus.INSERTED)

    def _mark_job_failed(self, *, db: Session, job_id: uuid.UUID, exc: Exception) -> None:
        repositories = self._repositories_factory(db)
        error_message = str(exc) or type(exc).__name__
        logger.exception("Sheet sync job failed id=%s error=%s", job_id, error_message)
        try:
            db.rollback()
            repositories.jobs.mark_failed(job_id=job_id, error_message=error_message[:2000])
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to persist failed sheet sync job state id=%s", job_id)


def _row_error(
    draft: EntityDraft,
    *,
    sheet_name: str,
    raw_data: dict[str, Any],
    error_type: str,
    message: str,
    field_name: str | None = None,
    invalid_value: str | None = None,
) -> RowValidationError:
    return RowValidationError(
        row_number=draft.row_number,
        sheet_name=sheet_name,
        entity_type=draft.entity_type,
        error_type=error_type,
        message=message,
        field_name=field_name,
        invalid_value=invalid_value,
        data_snapshot=dict(raw_data),
    )


@lru_cache(maxsize=1)
def get_sheet_sync_service() -> SheetSyncService:
    return SheetSyncService()
