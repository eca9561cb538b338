"""
app/services/sync_error_export_service.py

Flattens a sync job's row errors into a spreadsheet-friendly table.

Columns are fixed and ordered so operators can open the file next to the
source sheet and fix rows by number. Rows are ordered by sheet, then row
number. No transformation logic lives in the router.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from db.models.sync_error import SyncError
from db.repositories.errors import SyncJobNotFoundError
from db.repositories.sync_error_repository import SyncErrorRepository
from db.repositories.sync_job_repository import SyncJobRepository

ERROR_EXPORT_FIELDS: list[str] = [
    "Row Number",
    "Sheet Name",
    "Entity Type",
    "Error Type",
    "Error Message",
    "Field Name",
    "Invalid Value",
]


@dataclass
class ErrorExport:
    """
    Flat tabular error rows plus the download filename.
    """

    filename: str
    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=lambda: list(ERROR_EXPORT_FIELDS))


def export_filename(job_id: uuid.UUID) -> str:
    return f"sync-errors-{job_id}.csv"


def error_to_row(error: SyncError) -> dict[str, Any]:
    return {
        "Row Number": error.row_number,
        "Sheet Name": error.sheet_name or "",
        "Entity Type": error.entity_type,
        "Error Type": error.error_type,
        "Error Message": error.error_message,
        "Field Name": error.field_name or "",
        "Invalid Value": "" if error.invalid_value is None else error.invalid_value,
    }


class SyncErrorExportService:
    def __init__(
        self,
        *,
        job_repository_factory: Callable[[Session], SyncJobRepository] = SyncJobRepository,
        error_repository_factory: Callable[[Session], SyncErrorRepository] = SyncErrorRepository,
    ) -> None:
        self._job_repository_factory = job_repository_factory
        self._error_repository_factory = error_repository_factory

    def export(self, db: Session, *, job_id: uuid.UUID) -> ErrorExport:
        if self._job_repository_factory(db).get_job(job_id) is None:
            raise SyncJobNotFoundError(f"Sync job not found: {job_id}")

        errors = self._error_repository_factory(db).list_all_errors(job_id)
        return ErrorExport(
            filename=export_filename(job_id),
            rows=[error_to_row(error) for error in errors],
        )


@lru_cache(maxsize=1)
def get_sync_error_export_service() -> SyncErrorExportService:
    return SyncErrorExportService()
