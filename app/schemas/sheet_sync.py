"""
Schemas for the Google Sheets sync trigger, status, history, errors and config endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

SheetKeyValue = Literal["customers", "orders", "batches"]


class SheetSyncTriggerRequest(BaseModel):
    sheet_id: str | None = Field(default=None, description="Defaults to the configured master sheet")
    sheets_to_sync: list[SheetKeyValue] | None = Field(
        default=None,
        min_length=1,
        description="Subset of customers, orders, batches. Defaults to all three.",
    )
    mode: Literal["insert_only"] = "insert_only"

    @field_validator("sheet_id")
    @classmethod
    def _blank_sheet_id_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @field_validator("sheets_to_sync")
    @classmethod
    def _dedupe_sheets(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return list(dict.fromkeys(value))


class SyncJobAcceptedResponse(BaseModel):
    job_id: UUID
    status: str
    source: str
    created_at: datetime


class SyncJobResponse(BaseModel):
    job_id: UUID
    source: str
    status: str
    started_at: datetime | None = None
    completed_at: datetime | None = None
    records_processed: int = 0
    records_inserted: int = 0
    records_skipped: int = 0
    records_failed: int = 0
    customers_inserted: int = 0
    orders_inserted: int = 0
    batches_inserted: int = 0
    error_summary: dict[str, int] | None = None
    error_message: str | None = None
    triggered_by: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class SyncJobHistoryResponse(BaseModel):
    jobs: list[SyncJobResponse] = Field(default_factory=list)
    total: int
    limit: int
    offset: int


class SyncErrorResponse(BaseModel):
    id: UUID
    sync_job_id: UUID
    row_number: int
    sheet_name: str | None = None
    entity_type: str
    error_type: str
    error_message: str
    field_name: str | None = None
    invalid_value: str | None = None
    data_snapshot: dict[str, Any] | None = None
    created_at: datetime


class SyncErrorListResponse(BaseModel):
    errors: list[SyncErrorResponse] = Field(default_factory=list)
    total: int
    limit: int
    offset: int


class SyncConfigEntryResponse(BaseModel):
    config_key: str
    config_value: str
    description: str | None = None
    is_sensitive: bool = False
    updated_by: str | None = None
    updated_at: datetime | None = None


class SyncConfigListResponse(BaseModel):
    entries: list[SyncConfigEntryResponse] = Field(default_factory=list)


class SyncConfigUpdateRequest(BaseModel):
    config_value: str = Field(min_length=1)
