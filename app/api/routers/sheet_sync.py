"""
Google Sheets sync endpoints: trigger, status, history, row errors and config.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse, StreamingResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_triggering_user
from app.schemas.sheet_sync import (
    SheetSyncTriggerRequest,
    SyncConfigEntryResponse,
    SyncConfigListResponse,
    SyncConfigUpdateRequest,
    SyncErrorListResponse,
    SyncErrorResponse,
    SyncJobAcceptedResponse,
    SyncJobHistoryResponse,
    SyncJobResponse,
)
from app.services.sheet_sync_service import (
    FastAPIBackgroundTaskExecutor,
    SheetSyncConfigurationError,
    SheetSyncDisabledError,
    SheetSyncService,
    get_sheet_sync_service,
)
from app.services.sync_config_service import (
    SyncConfigEntryView,
    SyncConfigService,
    get_sync_config_service,
)
from app.services.sync_error_export_service import (
    ErrorExport,
    SyncErrorExportService,
    get_sync_error_export_service,
)
from app.sheets.template import TEMPLATE_FILENAME, build_sheet_template
from db.models.sync_error import SyncError
from db.models.sync_job import SyncJob
from db.repositories.errors import SyncConfigKeyNotFoundError, SyncJobNotFoundError
from db.repositories.sync_error_repository import ERRORS_MAX_LIMIT
from db.repositories.sync_job_repository import HISTORY_MAX_LIMIT
from db.repositories.types import SyncErrorQuery, SyncJobQuery
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync/google-sheets", tags=["sheet-sync"])


@router.post(
    "/trigger",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SyncJobAcceptedResponse,
)
def trigger_sheet_sync(
    background_tasks: BackgroundTasks,
    request: SheetSyncTriggerRequest | None = None,
    triggered_by: str | None = Depends(get_triggering_user),
    db: Session = Depends(get_db),
    service: SheetSyncService = Depends(get_sheet_sync_service),
) -> SyncJobAcceptedResponse:
    try:
        job = service.trigger_sync(
            db=db,
            executor=FastAPIBackgroundTaskExecutor(background_tasks),
            request=request or SheetSyncTriggerRequest(),
            triggered_by=triggered_by,
        )
    except SheetSyncDisabledError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SheetSyncConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return SyncJobAcceptedResponse(
        job_id=job.id,
        status=job.status,
        source=job.source,
        created_at=job.created_at,
    )


@router.get("/status/{job_id}", response_model=SyncJobResponse)
def get_sync_status(
    job_id: UUID,
    db: Session = Depends(get_db),
    service: SheetSyncService = Depends(get_sheet_sync_service),
) -> SyncJobResponse:
    job = service.get_job(db=db, job_id=job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sync job not found: {job_id}",
        )
    return _to_job_response(job)


@router.get("/history", response_model=SyncJobHistoryResponse)
def get_sync_history(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    source: str | None = Query(default=None, description="Optional source filter"),
    triggered_by: str | None = Query(default=None, description="Optional triggering user filter"),
    date_from: datetime | None = Query(default=None, description="Runs started at or after this time"),
    date_to: datetime | None = Query(default=None, description="Runs started at or before this time"),
    sort_by: Literal["started_at", "completed_at", "status"] = Query(default="started_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    limit: int = Query(default=20, ge=1, le=HISTORY_MAX_LIMIT),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    service: SheetSyncService = Depends(get_sheet_sync_service),
) -> SyncJobHistoryResponse:
    if date_from and date_to and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be later than date_to.",
        )

    jobs, total = service.list_jobs(
        db=db,
        query=SyncJobQuery(
            status=status_filter,
            source=source,
            triggered_by=triggered_by,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=offset,
        ),
    )
    return SyncJobHistoryResponse(
        jobs=[_to_job_response(job) for job in jobs],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/errors/{job_id}", response_model=SyncErrorListResponse)
def get_sync_errors(
    job_id: UUID,
    entity_type: str | None = Query(default=None, description="customer, order or broodstock_batch"),
    error_type: str | None = Query(default=None, description="Optional error type filter"),
    sheet_name: str | None = Query(default=None, description="Optional sheet name filter"),
    limit: int = Query(default=100, ge=1, le=ERRORS_MAX_LIMIT),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    service: SheetSyncService = Depends(get_sheet_sync_service),
) -> SyncErrorListResponse:
    if service.get_job(db=db, job_id=job_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sync job not found: {job_id}",
        )

    errors, total = service.list_errors(
        db=db,
        query=SyncErrorQuery(
            sync_job_id=job_id,
            entity_type=entity_type,
            error_type=error_type,
            sheet_name=sheet_name,
            limit=limit,
            offset=offset,
        ),
    )
    return SyncErrorListResponse(
        errors=[_to_error_response(error) for error in errors],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/errors/{job_id}/export", summary="Download a sync job's row errors as CSV")
def export_sync_errors(
    job_id: UUID,
    db: Session = Depends(get_db),
    service: SyncErrorExportService = Depends(get_sync_error_export_service),
) -> StreamingResponse:
    try:
        export = service.export(db, job_id=job_id)
    except SyncJobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    logger.info("Sync error export job_id=%s rows=%d", job_id, len(export.rows))
    return _to_csv_streaming(export)


@router.get("/template", response_class=PlainTextResponse, summary="Download the spreadsheet layout guide")
def download_sheet_template() -> PlainTextResponse:
    return PlainTextResponse(
        content=build_sheet_template(),
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.get("/config", response_model=SyncConfigListResponse)
def get_sync_config(
    db: Session = Depends(get_db),
    service: SyncConfigService = Depends(get_sync_config_service),
) -> SyncConfigListResponse:
    return SyncConfigListResponse(entries=[_to_config_response(entry) for entry in service.list_entries(db)])


@router.put("/config/{config_key}", response_model=SyncConfigEntryResponse)
def update_sync_config(
    config_key: str,
    payload: SyncConfigUpdateRequest,
    updated_by: str | None = Depends(get_triggering_user),
    db: Session = Depends(get_db),
    service: SyncConfigService = Depends(get_sync_config_service),
) -> SyncConfigEntryResponse:
    try:
        entry = service.update_value(
            db=db,
            config_key=config_key,
            config_value=payload.config_value,
            updated_by=updated_by,
        )
    except SyncConfigKeyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_config_response(entry)


def _to_csv_streaming(export: ErrorExport) -> StreamingResponse:
    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=export.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in export.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow(row)
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename}"',
            "X-Row-Count": str(len(export.rows)),
        },
    )


def _to_job_response(job: SyncJob) -> SyncJobResponse:
    return SyncJobResponse(
        job_id=job.id,
        source=job.source,
        status=job.status,
        started_at=job.started_at,
        completed_at=job.completed_at,
        records_processed=job.records_processed or 0,
        records_inserted=job.records_inserted or 0,
        records_skipped=job.records_skipped or 0,
        records_failed=job.records_failed or 0,
        customers_inserted=job.customers_inserted or 0,
        orders_inserted=job.orders_inserted or 0,
        batches_inserted=job.batches_inserted or 0,
        error_summary=job.error_summary,
        error_message=job.error_message,
        triggered_by=job.triggered_by,
        metadata=job.job_metadata,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def _to_error_response(error: SyncError) -> SyncErrorResponse:
    return SyncErrorResponse(
        id=error.id,
        sync_job_id=error.sync_job_id,
        row_number=error.row_number,
        sheet_name=error.sheet_name,
        entity_type=error.entity_type,
        error_type=error.error_type,
        error_message=error.error_message,
        field_name=error.field_name,
        invalid_value=error.invalid_value,
        data_snapshot=error.data_snapshot,
        created_at=error.created_at,
    )


def _to_config_response(entry: SyncConfigEntryView) -> SyncConfigEntryResponse:
    return SyncConfigEntryResponse(
        config_key=entry.config_key,
        config_value=entry.config_value,
        description=entry.description,
        is_sensitive=entry.is_sensitive,
        updated_by=entry.updated_by,
        updated_at=entry.updated_at,
    )
