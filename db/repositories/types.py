"""
Typed query objects and record shapes used by the sync ledger repositories.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol


class RowErrorRecord(Protocol):
    """
    Shape of an in-memory row error that can be flushed as a SyncError.
    """

    row_number: int
    sheet_name: str
    entity_type: str
    error_type: str
    message: str
    field_name: str | None
    invalid_value: str | None
    data_snapshot: dict[str, Any]


@dataclass(frozen=True)
class SyncJobQuery:
    """
    History filters, sort and page window for sync jobs.
    """

    status: str | None = None
    source: str | None = None
    triggered_by: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    sort_by: str = "started_at"
    sort_order: str = "desc"
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class SyncErrorQuery:
    """
    Filters and page window for one job's row errors.
    """

    sync_job_id: uuid.UUID
    entity_type: str | None = None
    error_type: str | None = None
    sheet_name: str | None = None
    limit: int = 100
    offset: int = 0


@dataclass(frozen=True)
class SyncJobTotals:
    """
    Final counters written when a run reaches completed or partial.
    """

    records_processed: int = 0
    records_inserted: int = 0
    records_skipped: int = 0
    records_failed: int = 0
    customers_inserted: int = 0
    orders_inserted: int = 0
    batches_inserted: int = 0
